"""
AI Provider Interface

Abstract base class defining the contract that all provider adapters must implement.
"""

from abc import ABC, abstractmethod

from relay.services.ai.types import ProviderOutcome, ProviderRequest, RequestContext


class AIProviderInterface(ABC):
    """Abstract interface for upstream providers.

    One implementation exists per provider class (default, pooled, image).
    """

    @abstractmethod
    def build_request(self, ctx: RequestContext) -> ProviderRequest:
        """Build the upstream request for a call.

        Must be deterministic for a given context and configuration.
        """
        pass

    @abstractmethod
    async def invoke(self, request: ProviderRequest) -> ProviderOutcome:
        """Perform exactly one upstream call.

        Returns:
            ProviderOutcome; transport failures, non-2xx statuses and
            timeouts are reported as ``ok=False`` instead of raised.
        """
        pass

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Get the provider name for logging."""
        pass

    @property
    @abstractmethod
    def source(self) -> str:
        """Label reported as ``source`` in response envelopes."""
        pass
