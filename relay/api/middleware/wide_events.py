"""
Wide event middleware.

Opens a wide event when a request arrives and emits it once the response
status is known. Route handlers add the dispatch outcome through the
helpers below:

    add_dispatch_to_wide_event(model="grok", source="dtempire_fallback",
                               used_fallback=True, fallback_from="grok")
"""

from collections.abc import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from relay.core.logging import (
    emit_wide_event,
    enrich_event,
    finalize_request_event,
    init_request_event,
)


def client_ip(request: Request) -> str:
    """First hop of X-Forwarded-For, then X-Real-IP, then the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    return request.client.host if request.client else "unknown"


class WideEventMiddleware(BaseHTTPMiddleware):
    """One canonical log line per request."""

    # Liveness probes would drown everything else
    SKIP_PATHS = frozenset({"/health", "/favicon.ico"})

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        if request.url.path in self.SKIP_PATHS:
            return await call_next(request)

        init_request_event(
            request_id=request.headers.get("x-request-id"),
            method=request.method,
            path=request.url.path,
            client_ip=client_ip(request),
            user_agent=request.headers.get("user-agent", ""),
        )
        # Query values carry prompts; only the parameter names are recorded
        if request.query_params:
            enrich_event(**{"http.query_keys": sorted(request.query_params.keys())})

        status_code = 500
        error: Exception | None = None
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        except Exception as e:
            error = e
            raise
        finally:
            emit_wide_event(finalize_request_event(status_code, error))


def add_dispatch_to_wide_event(
    model: str | None = None,
    source: str | None = None,
    used_fallback: bool = False,
    fallback_from: str | None = None,
    success: bool = True,
    error_kind: str | None = None,
) -> None:
    """Record which model and provider answered, or why none did."""
    enrich_event(
        dispatch={
            "model": model,
            "source": source,
            "used_fallback": used_fallback,
            "fallback_from": fallback_from,
            "success": success,
            "error_kind": error_kind,
        }
    )
    if not success:
        enrich_event(outcome="error")


def add_batch_to_wide_event(total: int, processed: int, failed: int) -> None:
    enrich_event(batch={"total": total, "processed": processed, "failed": failed})
