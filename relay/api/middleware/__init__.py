"""
API Middleware package.

Contains middleware components for request processing:
- Wide Events: Canonical log line pattern for comprehensive request logging
"""

from relay.api.middleware.wide_events import (
    WideEventMiddleware,
    add_batch_to_wide_event,
    add_dispatch_to_wide_event,
)

__all__ = [
    "WideEventMiddleware",
    "add_batch_to_wide_event",
    "add_dispatch_to_wide_event",
]
