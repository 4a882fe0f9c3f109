"""
Health check endpoint.
"""

import time

from fastapi import APIRouter

from relay.api.envelope import utc_timestamp
from relay.core.config import get_settings
from relay.services.ai.models_registry import registry

router = APIRouter()

_STARTED_AT = time.monotonic()


@router.get("/health")
async def health_check() -> dict:
    """Liveness check with model count and process uptime in seconds."""
    return {
        "status": "online",
        "service": get_settings().app_name,
        "models": len(registry),
        "uptime": round(time.monotonic() - _STARTED_AT, 3),
        "timestamp": utc_timestamp(),
    }
