"""
Structured logging for the relay.

Each request builds a single wide event (a canonical log line) that
handlers enrich as the dispatch progresses. It is emitted once when the
response is ready. Routine successes are sampled; anything an operator
would want to look at is always kept.

See Stripe's "canonical log lines" for the pattern.
"""

import logging
import os
import random
import sys
import time
import uuid
from collections.abc import Callable
from contextvars import ContextVar
from typing import Any

import structlog
from structlog.types import EventDict, Processor

SERVICE_NAME = "ai-relay"

SLOW_REQUEST_MS = 2000
SAMPLE_RATE = 0.10

_event: ContextVar[dict[str, Any]] = ContextVar("wide_event")
_started_at: ContextVar[float] = ContextVar("wide_event_started_at", default=0.0)


def get_request_event() -> dict[str, Any]:
    """The wide event of the current request, or an empty dict outside one."""
    return _event.get({})


def _set_path(target: dict[str, Any], dotted_key: str, value: Any) -> None:
    *parents, leaf = dotted_key.split(".")
    for part in parents:
        target = target.setdefault(part, {})
    target[leaf] = value


def enrich_event(**fields: Any) -> None:
    """
    Attach fields to the current wide event.

        enrich_event(outcome="error")
        enrich_event(**{"dispatch.model": "grok", "dispatch.used_fallback": True})

    Dotted keys are stored as nested objects.
    """
    event = get_request_event()
    for key, value in fields.items():
        _set_path(event, key, value)


def init_request_event(
    request_id: str | None = None,
    method: str = "",
    path: str = "",
    client_ip: str = "",
    user_agent: str = "",
) -> dict[str, Any]:
    """Start a new wide event for the incoming request."""
    event: dict[str, Any] = {
        "request_id": request_id or uuid.uuid4().hex[:8],
        "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "service": {
            "name": SERVICE_NAME,
            "version": os.environ.get("APP_VERSION", "dev"),
        },
        "http": {
            "method": method,
            "path": path,
            "client_ip": client_ip,
            "user_agent": user_agent[:200] or None,
        },
    }
    _event.set(event)
    _started_at.set(time.perf_counter())
    return event


def finalize_request_event(
    status_code: int,
    error: Exception | None = None,
) -> dict[str, Any]:
    """Stamp status, duration and outcome onto the event and return it.

    An ``outcome`` set by a handler (a failed dispatch answered with 200)
    is kept; otherwise it follows the status code.
    """
    event = get_request_event()
    event.setdefault("http", {})["status_code"] = status_code
    event["duration_ms"] = int((time.perf_counter() - _started_at.get()) * 1000)
    event.setdefault("outcome", "success" if status_code < 400 else "error")

    if error is not None:
        event["error"] = {"type": type(error).__name__, "message": str(error)[:500]}
        code = getattr(error, "code", None)
        if code is not None:
            event["error"]["code"] = str(getattr(code, "value", code))

    return event


# Tail sampling: an event matching any rule is always emitted
_KEEP_RULES: tuple[Callable[[dict[str, Any]], bool], ...] = (
    lambda e: e.get("http", {}).get("status_code", 200) >= 400,
    lambda e: e.get("outcome") == "error",
    lambda e: e.get("duration_ms", 0) > SLOW_REQUEST_MS,
    lambda e: bool(e.get("dispatch", {}).get("used_fallback")),
    lambda e: e.get("http", {}).get("path") == "/batch",
)


def should_sample(event: dict[str, Any]) -> bool:
    """Keep errors, failed dispatches, slow requests, fallbacks and batches.

    Everything else is sampled at ``SAMPLE_RATE``.
    """
    if any(rule(event) for rule in _KEEP_RULES):
        return True
    return random.random() < SAMPLE_RATE


def add_request_id(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Processor tagging every log line emitted during a request with its id."""
    request_id = get_request_event().get("request_id")
    if request_id:
        event_dict.setdefault("request_id", request_id)
    return event_dict


def configure_logging(json_logs: bool = True, log_level: str = "INFO") -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        json_logs: JSON lines when True, coloured console output otherwise.
        log_level: Minimum level name (DEBUG, INFO, WARNING, ERROR).
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        add_request_id,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if json_logs:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)


def emit_wide_event(event: dict[str, Any]) -> None:
    """Emit the canonical ``request_completed`` line if sampling keeps it."""
    if not should_sample(event):
        return

    logger = structlog.get_logger("wide_event")
    status_code = event.get("http", {}).get("status_code", 200)
    if status_code >= 500:
        logger.error("request_completed", **event)
    elif status_code >= 400 or event.get("outcome") == "error":
        logger.warning("request_completed", **event)
    else:
        logger.info("request_completed", **event)
