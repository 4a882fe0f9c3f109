"""
AI Service Package

Provides the provider dispatch layer with:
- Static model registry (model id -> provider class)
- One adapter per provider class (default, pooled, image)
- Ordered response normalization into plain text
- One fallback hop from pooled providers to the default provider
"""

from relay.services.ai.gateway import AIGateway, get_ai_gateway
from relay.services.ai.interface import AIProviderInterface
from relay.services.ai.models_registry import DEFAULT_MODEL_ID, ModelsRegistry, registry, resolve
from relay.services.ai.normalizer import NO_RESPONSE, normalize
from relay.services.ai.types import (
    ModelDescriptor,
    NormalizedResult,
    ProviderOutcome,
    ProviderRequest,
    RequestContext,
)

__all__ = [
    "AIGateway",
    "AIProviderInterface",
    "DEFAULT_MODEL_ID",
    "ModelDescriptor",
    "ModelsRegistry",
    "NO_RESPONSE",
    "NormalizedResult",
    "ProviderOutcome",
    "ProviderRequest",
    "RequestContext",
    "get_ai_gateway",
    "normalize",
    "registry",
    "resolve",
]
