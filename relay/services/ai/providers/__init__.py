"""
Provider Adapters Package

Contains one adapter per provider class.
To add a new provider:
1. Create a new file (e.g., myprovider.py) implementing BaseProvider
2. Add a ProviderClass member and map it in PROVIDER_REGISTRY

The registry is the single source of truth for which adapter serves a class.
"""

from relay.core.models import ProviderClass
from relay.services.ai.providers.base import BaseProvider
from relay.services.ai.providers.default import DefaultProvider
from relay.services.ai.providers.image import ImageProvider
from relay.services.ai.providers.pooled import PooledProvider

# Registry mapping provider class -> adapter class
PROVIDER_REGISTRY: dict[ProviderClass, type[BaseProvider]] = {
    ProviderClass.DEFAULT: DefaultProvider,
    ProviderClass.POOLED: PooledProvider,
    ProviderClass.IMAGE_GEN: ImageProvider,
}

__all__ = [
    "PROVIDER_REGISTRY",
    "BaseProvider",
    "DefaultProvider",
    "ImageProvider",
    "PooledProvider",
]
