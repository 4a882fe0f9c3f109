"""
JSON response envelopes.

Every AI-layer outcome is reported with a ``success`` flag and an ISO
timestamp. HTTP status codes only signal request validation problems.
"""

from datetime import UTC, datetime
from typing import Any

from relay.services.ai.types import NormalizedResult


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with milliseconds, e.g. ``2024-01-01T12:00:00.000Z``."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def success_envelope(result: NormalizedResult) -> dict[str, Any]:
    body: dict[str, Any] = {
        "success": True,
        "model": result.model,
        "source": result.source_provider,
        "response": result.text,
    }
    if result.used_fallback:
        body["fallback_from"] = result.fallback_from
    body["timestamp"] = utc_timestamp()
    return body


def failure_envelope(error: str, details: Any = None) -> dict[str, Any]:
    body: dict[str, Any] = {"success": False, "error": error}
    if details is not None:
        body["details"] = details
    body["timestamp"] = utc_timestamp()
    return body
