"""
Unit tests for the AI gateway fallback controller.
"""

import asyncio

import pytest

from relay.core.exceptions import ProviderChainError
from relay.core.models import ErrorKind, ProviderClass
from relay.services.ai import AIGateway
from relay.services.ai.models_registry import resolve
from relay.services.ai.providers import DefaultProvider, PooledProvider
from relay.services.ai.types import ProviderOutcome, RequestContext
from tests.fakes import DEFAULT_HOST, IMAGE_HOST, POOLED_HOST, FakeUpstream, status, timeout

pytestmark = pytest.mark.asyncio


def _ctx(prompt: str, model_id: str) -> RequestContext:
    return RequestContext(prompt=prompt, model_id=model_id)


async def _dispatch(gateway: AIGateway, model_id: str, prompt: str = "hello"):
    return await gateway.dispatch(_ctx(prompt, model_id), resolve(model_id))


class SlowProvider(DefaultProvider):
    """Never answers within a test's budget."""

    async def generate(self, ctx: RequestContext) -> ProviderOutcome:
        await asyncio.sleep(5)
        return ProviderOutcome.success("too late")


class TestPrimarySuccess:
    async def test_default_model(self, gateway: AIGateway, upstream: FakeUpstream):
        result = await _dispatch(gateway, "dtempire")
        assert result.text == "echo: hello"
        assert result.model == "dtempire"
        assert result.source_provider == "dtempire_api"
        assert result.used_fallback is False
        assert result.fallback_from is None

    async def test_pooled_model(self, gateway: AIGateway, upstream: FakeUpstream):
        result = await _dispatch(gateway, "claude")
        assert result.model == "claude"
        assert result.source_provider == "raqkid_api"
        assert upstream.calls_to(DEFAULT_HOST) == []

    async def test_image_model(self, gateway: AIGateway, upstream: FakeUpstream):
        result = await _dispatch(gateway, "img_turbo")
        assert result.source_provider == "image_api"
        assert len(upstream.calls_to(IMAGE_HOST)) == 1


class TestFallback:
    async def test_pooled_failure_calls_default_once(
        self, gateway: AIGateway, upstream: FakeUpstream
    ):
        upstream.responders[POOLED_HOST] = timeout

        result = await _dispatch(gateway, "nemotron", prompt="same prompt")

        assert result.used_fallback is True
        assert result.fallback_from == "nemotron"
        assert result.model == "dtempire"
        assert result.source_provider == "dtempire_fallback"
        (fallback_call,) = upstream.calls_to(DEFAULT_HOST)
        assert fallback_call.url.params["prompt"] == "same prompt"
        assert len(upstream.calls) == 2

    async def test_both_fail(self, gateway: AIGateway, upstream: FakeUpstream):
        upstream.responders[POOLED_HOST] = status(500)
        upstream.responders[DEFAULT_HOST] = status(503)

        with pytest.raises(ProviderChainError) as exc_info:
            await _dispatch(gateway, "popcat")

        err = exc_info.value
        assert err.message.startswith("All APIs failed: ")
        assert err.details == "raqkid: External API error: 500 | dtempire: External API error: 503"
        assert err.code is ErrorKind.UPSTREAM_ERROR
        assert len(upstream.calls) == 2

    async def test_both_timeout(self, gateway: AIGateway, upstream: FakeUpstream):
        upstream.responders[POOLED_HOST] = timeout
        upstream.responders[DEFAULT_HOST] = timeout

        with pytest.raises(ProviderChainError) as exc_info:
            await _dispatch(gateway, "gemma")
        assert exc_info.value.code is ErrorKind.UPSTREAM_TIMEOUT

    async def test_default_failure_has_no_second_attempt(
        self, gateway: AIGateway, upstream: FakeUpstream
    ):
        upstream.responders[DEFAULT_HOST] = status(500)

        with pytest.raises(ProviderChainError) as exc_info:
            await _dispatch(gateway, "dtempire")

        assert exc_info.value.message == "DTempire API failed: External API error: 500"
        assert len(upstream.calls) == 1

    async def test_image_failure_has_no_second_attempt(
        self, gateway: AIGateway, upstream: FakeUpstream
    ):
        upstream.responders[IMAGE_HOST] = timeout

        with pytest.raises(ProviderChainError) as exc_info:
            await _dispatch(gateway, "img_gpt")

        assert exc_info.value.message == "Image generation failed: Request timeout after 10s"
        assert exc_info.value.code is ErrorKind.UPSTREAM_TIMEOUT
        assert upstream.calls_to(DEFAULT_HOST) == []
        assert len(upstream.calls) == 1


class TestBudget:
    async def test_whole_dispatch_times_out(self, test_settings, upstream: FakeUpstream):
        settings = test_settings.model_copy(update={"request_timeout": 0.05})
        gateway = AIGateway(
            settings,
            providers={
                ProviderClass.DEFAULT: SlowProvider(settings),
                ProviderClass.POOLED: PooledProvider(settings, client_factory=upstream.client_factory),
            },
        )

        with pytest.raises(ProviderChainError) as exc_info:
            await _dispatch(gateway, "dtempire")

        assert exc_info.value.message == "Request timeout"
        assert exc_info.value.code is ErrorKind.UPSTREAM_TIMEOUT

    async def test_missing_provider_class(self, test_settings):
        gateway = AIGateway(test_settings, providers={ProviderClass.DEFAULT: DefaultProvider(test_settings)})
        with pytest.raises(ProviderChainError, match="No provider configured"):
            await _dispatch(gateway, "deepseek")


class TestImageEndpoint:
    async def test_generate_image(self, gateway: AIGateway, upstream: FakeUpstream):
        result = await gateway.generate_image(_ctx("a fox", "image"))
        assert result.text == "echo: a fox"
        assert result.source_provider == "image_api"

    async def test_generate_image_failure(self, gateway: AIGateway, upstream: FakeUpstream):
        upstream.responders[IMAGE_HOST] = status(500)
        with pytest.raises(ProviderChainError, match="^Image generation failed"):
            await gateway.generate_image(_ctx("a fox", "image"))
        assert len(upstream.calls) == 1


class TestConcurrency:
    async def test_independent_requests(self, gateway: AIGateway, upstream: FakeUpstream):
        upstream.responders[POOLED_HOST] = status(500)

        results = await asyncio.gather(
            _dispatch(gateway, "dtempire", prompt="one"),
            _dispatch(gateway, "grok", prompt="two"),
        )

        assert results[0].used_fallback is False
        assert results[0].text == "echo: one"
        assert results[1].used_fallback is True
        assert results[1].text == "echo: two"


class TestUnencodablePrompt:
    async def test_pooled_chain_fails_without_raising(
        self, gateway: AIGateway, upstream: FakeUpstream
    ):
        with pytest.raises(ProviderChainError) as exc_info:
            await _dispatch(gateway, "deepseek", prompt="x\ud800")

        assert exc_info.value.message.startswith("All APIs failed")
        assert "UnicodeEncodeError" in exc_info.value.details
        assert upstream.calls == []
