"""
Model catalog endpoint.
"""

from fastapi import APIRouter

from relay.api.envelope import utc_timestamp
from relay.core.config import get_settings
from relay.services.ai.models_registry import DEFAULT_MODEL_ID, registry

router = APIRouter()


@router.get("/api/models")
async def list_models() -> dict:
    """List every accepted model id with its display name, in registry order."""
    return {
        "success": True,
        "models": registry.list_models(),
        "default_model": DEFAULT_MODEL_ID,
        "image_api": get_settings().image_api_url,
        "timestamp": utc_timestamp(),
    }
