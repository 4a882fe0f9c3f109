"""
AI Gateway

Main entry point for dispatching a prompt with:
- Provider selection by the model's provider class
- One fallback hop from pooled providers to the default provider
- A timeout budget covering the whole dispatch
"""

import asyncio
from collections.abc import Mapping

import structlog

from relay.core.config import Settings, get_settings
from relay.core.exceptions import ProviderChainError
from relay.core.models import ErrorKind, ProviderClass
from relay.services.ai.models_registry import DEFAULT_MODEL_ID
from relay.services.ai.normalizer import normalize
from relay.services.ai.providers import PROVIDER_REGISTRY, BaseProvider, ImageProvider
from relay.services.ai.types import (
    ModelDescriptor,
    NormalizedResult,
    ProviderOutcome,
    RequestContext,
)

logger = structlog.get_logger()


class AIGateway:
    """Provider dispatch with fallback.

    State machine per call:
        Idle -> Attempting(primary) -> Success
                                    -> Attempting(fallback) -> Success | Failed
                                    -> Failed

    Only pooled models get the fallback hop. Default and image models fail
    after their single attempt. The gateway keeps no per-request state, so
    one instance can serve concurrent requests.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        providers: Mapping[ProviderClass, BaseProvider] | None = None,
        image_endpoint_provider: BaseProvider | None = None,
    ):
        """Initialize gateway.

        Args:
            settings: Application settings (defaults to the cached instance)
            providers: Adapter per provider class; built from PROVIDER_REGISTRY if omitted
            image_endpoint_provider: Adapter for the standalone image endpoint
        """
        self.settings = settings or get_settings()
        self.providers: dict[ProviderClass, BaseProvider] = dict(
            providers or self._default_providers()
        )
        self.image_endpoint_provider = image_endpoint_provider or ImageProvider(
            self.settings, timeout=ImageProvider.ENDPOINT_TIMEOUT
        )

    def _default_providers(self) -> dict[ProviderClass, BaseProvider]:
        return {
            provider_class: provider_cls(self.settings)
            for provider_class, provider_cls in PROVIDER_REGISTRY.items()
        }

    def _provider_for(self, provider_class: ProviderClass) -> BaseProvider:
        provider = self.providers.get(provider_class)
        if provider is None:
            raise ProviderChainError(
                f"No provider configured for {provider_class.value} models",
                error_kind=ErrorKind.UPSTREAM_ERROR,
            )
        return provider

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    async def dispatch(
        self,
        ctx: RequestContext,
        descriptor: ModelDescriptor,
    ) -> NormalizedResult:
        """Run a resolved request through its provider, falling back if allowed.

        Args:
            ctx: Validated request context (non-blank prompt)
            descriptor: Registry entry for ``ctx.model_id``

        Returns:
            NormalizedResult from the provider that succeeded

        Raises:
            ProviderChainError: If every attempt failed or the budget ran out
        """
        try:
            return await asyncio.wait_for(
                self._attempt(ctx, descriptor),
                timeout=self.settings.request_timeout,
            )
        except asyncio.TimeoutError:
            logger.error(
                "provider_chain_timeout",
                model=ctx.model_id,
                budget=self.settings.request_timeout,
            )
            raise ProviderChainError(
                "Request timeout",
                details=f"No result within {self.settings.request_timeout:g}s",
                error_kind=ErrorKind.UPSTREAM_TIMEOUT,
            )

    async def generate_image(self, ctx: RequestContext) -> NormalizedResult:
        """Single image-endpoint attempt; failures are terminal."""
        provider = self.image_endpoint_provider
        outcome = await provider.generate(ctx)
        if not outcome.ok:
            raise self._chain_error("Image generation failed", [(provider, outcome)])
        return NormalizedResult(
            text=normalize(outcome.raw_body),
            model=ctx.model_id,
            source_provider=provider.source,
        )

    # -------------------------------------------------------------------------
    # State machine
    # -------------------------------------------------------------------------

    async def _attempt(
        self,
        ctx: RequestContext,
        descriptor: ModelDescriptor,
    ) -> NormalizedResult:
        primary = self._provider_for(descriptor.provider_class)
        log = logger.bind(model=ctx.model_id, provider=primary.provider_name)

        outcome = await primary.generate(ctx)
        if outcome.ok:
            return NormalizedResult(
                text=normalize(outcome.raw_body),
                model=descriptor.id,
                source_provider=primary.source,
            )

        if descriptor.provider_class is ProviderClass.IMAGE_GEN:
            log.warning("provider_chain_failed", reason=outcome.error_detail)
            raise self._chain_error("Image generation failed", [(primary, outcome)])

        if descriptor.provider_class is ProviderClass.DEFAULT:
            log.warning("provider_chain_failed", reason=outcome.error_detail)
            raise self._chain_error("DTempire API failed", [(primary, outcome)])

        # Pooled: one hop to the default provider with the same prompt/options
        log.warning("provider_fallback", reason=outcome.error_detail, fallback_to=DEFAULT_MODEL_ID)
        fallback = self._provider_for(ProviderClass.DEFAULT)
        fallback_outcome = await fallback.generate(ctx)

        if fallback_outcome.ok:
            return NormalizedResult(
                text=normalize(fallback_outcome.raw_body),
                model=DEFAULT_MODEL_ID,
                source_provider=fallback.fallback_source,
                used_fallback=True,
                fallback_from=descriptor.id,
            )

        log.error(
            "provider_chain_failed",
            reason=outcome.error_detail,
            fallback_reason=fallback_outcome.error_detail,
        )
        raise self._chain_error(
            "All APIs failed",
            [(primary, outcome), (fallback, fallback_outcome)],
        )

    @staticmethod
    def _chain_error(
        prefix: str,
        attempts: list[tuple[BaseProvider, ProviderOutcome]],
    ) -> ProviderChainError:
        """Aggregate up to two failed attempts into one terminal error."""
        if len(attempts) == 1:
            details = attempts[0][1].error_detail or "unknown error"
        else:
            details = " | ".join(
                f"{provider.provider_name}: {outcome.error_detail or 'unknown error'}"
                for provider, outcome in attempts
            )
        kinds = {outcome.error_kind for _, outcome in attempts}
        # Timeout only when every attempt timed out
        kind = (
            ErrorKind.UPSTREAM_TIMEOUT
            if kinds == {ErrorKind.UPSTREAM_TIMEOUT}
            else ErrorKind.UPSTREAM_ERROR
        )
        return ProviderChainError(f"{prefix}: {details}", details=details, error_kind=kind)


def get_ai_gateway() -> AIGateway:
    """FastAPI dependency returning a gateway for the current settings."""
    return AIGateway(get_settings())
