"""
Response Normalizer

Turns a provider reply body of unknown shape into one plain-text result.

Extraction order (first match wins):
1. Plain string -> stripped as-is
2. ``result`` list whose first item has ``response`` / ``message``
3. Direct ``response``, ``text``, ``message``, ``content`` (then scalar ``result``)
4. ``choices[0].text`` or ``choices[0].message.content``
5. Pretty-printed JSON of the whole structure

``normalize`` is total: it never raises and always returns a ``str``.
Null-like bodies become ``NO_RESPONSE``.
"""

import json
from collections.abc import Mapping, Sequence
from typing import Any

import structlog

from relay.core.models import ErrorKind

logger = structlog.get_logger()

NO_RESPONSE = "No response received"

DIRECT_FIELDS = ("response", "text", "message", "content")
RESULT_ITEM_FIELDS = ("response", "message")

# Extracted values are normalized again; this bounds pathological nesting
MAX_DEPTH = 8

_NULL_LITERALS = {"null", "undefined"}


def _present(value: Any) -> bool:
    return value is not None and not (isinstance(value, str) and value == "")


def _first_item(value: Any) -> Any:
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)) and value:
        return value[0]
    return None


def _from_result_list(body: Mapping) -> Any:
    item = _first_item(body.get("result"))
    if isinstance(item, Mapping):
        for key in RESULT_ITEM_FIELDS:
            if _present(item.get(key)):
                return item[key]
    return None


def _from_direct_fields(body: Mapping) -> Any:
    for key in DIRECT_FIELDS:
        if _present(body.get(key)):
            return body[key]
    result = body.get("result")
    if isinstance(result, str) and result:
        return result
    return None


def _from_choices(body: Mapping) -> Any:
    choice = _first_item(body.get("choices"))
    if not isinstance(choice, Mapping):
        return None
    if _present(choice.get("text")):
        return choice["text"]
    message = choice.get("message")
    if isinstance(message, Mapping) and _present(message.get("content")):
        return message["content"]
    return None


EXTRACTORS = (_from_result_list, _from_direct_fields, _from_choices)


def _render(body: Any) -> str:
    """Pretty-print anything that no extractor understood."""
    try:
        rendered = json.dumps(body, indent=2, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        try:
            rendered = str(body)
        except Exception:
            logger.warning(
                "normalize_unrenderable_body",
                error_kind=ErrorKind.NORMALIZATION_FAILURE.value,
                body_type=type(body).__name__,
            )
            return NO_RESPONSE

    if rendered.strip() in _NULL_LITERALS:
        return NO_RESPONSE
    return rendered


def _normalize(body: Any, depth: int) -> str:
    if body is None:
        return NO_RESPONSE

    if isinstance(body, (bytes, bytearray)):
        body = bytes(body).decode("utf-8", errors="replace")

    if isinstance(body, str):
        text = body.strip()
        return NO_RESPONSE if text in _NULL_LITERALS else text

    if isinstance(body, Mapping) and depth < MAX_DEPTH:
        for extractor in EXTRACTORS:
            value = extractor(body)
            if value is not None:
                return _normalize(value, depth + 1)

    return _render(body)


def normalize(raw_body: Any) -> str:
    """Normalize a raw provider body into plain text. Never raises."""
    try:
        return _normalize(raw_body, 0)
    except Exception as e:
        # Exotic objects (broken __getitem__, etc.) end up here
        logger.warning(
            "normalize_failed",
            error_kind=ErrorKind.NORMALIZATION_FAILURE.value,
            error=str(e),
            body_type=type(raw_body).__name__,
        )
        return NO_RESPONSE
