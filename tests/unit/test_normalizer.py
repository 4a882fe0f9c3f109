"""
Unit tests for the response normalizer.
"""

from unittest.mock import patch

from relay.core.models import ErrorKind
from relay.services.ai.normalizer import NO_RESPONSE, normalize


class TestPlainBodies:
    """Bodies that are already text."""

    def test_string_is_stripped(self):
        assert normalize("  hello world \n") == "hello world"

    def test_empty_string_stays_empty(self):
        assert normalize("") == ""

    def test_bytes_are_decoded(self):
        assert normalize(b"hi there") == "hi there"

    def test_null_like_bodies(self):
        """None and the literal strings null/undefined mean no reply."""
        assert normalize(None) == NO_RESPONSE
        assert normalize("null") == NO_RESPONSE
        assert normalize(" undefined ") == NO_RESPONSE


class TestExtractionOrder:
    """First matching rule wins."""

    def test_result_list_wins_over_direct_fields(self):
        body = {"result": [{"response": "from result"}], "response": "direct"}
        assert normalize(body) == "from result"

    def test_result_list_message(self):
        assert normalize({"result": [{"message": "msg"}]}) == "msg"

    def test_direct_field_priority(self):
        body = {"content": "c", "message": "m", "text": "t"}
        assert normalize(body) == "t"

    def test_response_field(self):
        assert normalize({"response": "  Hello  "}) == "Hello"

    def test_empty_direct_field_is_skipped(self):
        assert normalize({"response": "", "text": "fallthrough"}) == "fallthrough"

    def test_scalar_result_string(self):
        assert normalize({"status": "ok", "result": "plain"}) == "plain"

    def test_choices_text(self):
        assert normalize({"choices": [{"text": "completion"}]}) == "completion"

    def test_choices_message_content(self):
        body = {"choices": [{"message": {"role": "assistant", "content": "chat"}}]}
        assert normalize(body) == "chat"

    def test_nested_extracted_value(self):
        assert normalize({"response": {"text": "inner"}}) == "inner"

    def test_non_string_extracted_value(self):
        assert normalize({"response": 42}) == "42"


class TestFallbackRendering:
    def test_unknown_shape_is_pretty_json(self):
        body = {"foo": "bar", "n": 1}
        assert normalize(body) == '{\n  "foo": "bar",\n  "n": 1\n}'

    def test_list_body(self):
        assert normalize(["a", "b"]) == '[\n  "a",\n  "b"\n]'

    def test_unicode_kept(self):
        assert normalize({"grüße": "ä"}) == '{\n  "grüße": "ä"\n}'

    def test_empty_result_list_falls_through(self):
        assert normalize({"result": [], "message": "m"}) == "m"

    def test_never_raises(self):
        """Bodies that cannot be inspected yield the sentinel."""

        class Hostile(dict):
            def get(self, key, default=None):
                raise RuntimeError("boom")

        assert normalize(Hostile(a=1)) == NO_RESPONSE

    def test_failure_is_logged_with_error_kind(self):
        class Hostile(dict):
            def get(self, key, default=None):
                raise RuntimeError("boom")

        with patch("relay.services.ai.normalizer.logger") as logger:
            normalize(Hostile(a=1))

        logger.warning.assert_called_once()
        event, kwargs = logger.warning.call_args.args[0], logger.warning.call_args.kwargs
        assert event == "normalize_failed"
        assert kwargs["error_kind"] == ErrorKind.NORMALIZATION_FAILURE.value

    def test_always_returns_str(self):
        for body in (None, 0, 1.5, True, [], {}, "x", {"choices": []}):
            assert isinstance(normalize(body), str)
