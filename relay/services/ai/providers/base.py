"""
Base Provider Implementation

Common functionality shared across all provider adapters: query building,
the single HTTP GET, and mapping every transport failure to a ProviderOutcome.
"""

from collections.abc import Callable
from typing import Any

import httpx
import structlog

from relay.core.config import Settings, get_settings
from relay.core.models import ErrorKind
from relay.services.ai.interface import AIProviderInterface
from relay.services.ai.types import ProviderOutcome, ProviderRequest, RequestContext

logger = structlog.get_logger()

ClientFactory = Callable[[], httpx.AsyncClient]


class BaseProvider(AIProviderInterface):
    """Base class for GET-style text/image providers.

    Every upstream the relay talks to takes the prompt as a query parameter,
    so subclasses only supply the endpoint and their credential parameter.
    """

    DEFAULT_TIMEOUT = 10.0
    SOURCE = "unknown"
    FALLBACK_SOURCE: str | None = None

    HEADERS = {
        "User-Agent": "DTempire-AI-Service/2.0",
        "Accept": "application/json",
    }

    def __init__(
        self,
        settings: Settings | None = None,
        timeout: float | None = None,
        client_factory: ClientFactory | None = None,
    ):
        """Initialize provider.

        Args:
            settings: Application settings (defaults to the cached instance)
            timeout: Explicit timeout in seconds; ``API_TIMEOUT`` still wins
            client_factory: Builds the httpx client (tests pass a MockTransport)
        """
        self.settings = settings or get_settings()
        self._timeout = timeout
        self._client_factory = client_factory or httpx.AsyncClient

    @property
    def provider_name(self) -> str:
        return self.SOURCE

    @property
    def source(self) -> str:
        return self.SOURCE

    @property
    def fallback_source(self) -> str:
        """Label used when this provider answered on behalf of another."""
        return self.FALLBACK_SOURCE or self.SOURCE

    @property
    def timeout(self) -> float:
        override = self.settings.upstream_timeout_override
        if override is not None:
            return override
        return self._timeout if self._timeout is not None else self.DEFAULT_TIMEOUT

    # -------------------------------------------------------------------------
    # Request building
    # -------------------------------------------------------------------------

    def _endpoint(self, ctx: RequestContext) -> str:
        raise NotImplementedError

    def _credential_params(self) -> dict[str, str]:
        """Adapter-specific credential query parameters."""
        return {}

    def _query_params(self, ctx: RequestContext) -> dict[str, Any]:
        params: dict[str, Any] = {"prompt": ctx.prompt}
        params.update(self._credential_params())
        if ctx.temperature is not None:
            params["temperature"] = ctx.temperature
        if ctx.max_tokens is not None:
            params["max_tokens"] = ctx.max_tokens
        return params

    def build_request(self, ctx: RequestContext) -> ProviderRequest:
        url = httpx.URL(self._endpoint(ctx), params=self._query_params(ctx))
        return ProviderRequest(
            url=str(url),
            headers=dict(self.HEADERS),
            timeout=self.timeout,
        )

    # -------------------------------------------------------------------------
    # Invocation
    # -------------------------------------------------------------------------

    @staticmethod
    def _decode_body(response: httpx.Response) -> Any:
        """Decode JSON bodies; keep anything else as text."""
        try:
            return response.json()
        except ValueError:
            return response.text

    async def invoke(self, request: ProviderRequest) -> ProviderOutcome:
        # Query strings may carry credentials; log the bare endpoint only
        endpoint = request.url.split("?", 1)[0]
        log = logger.bind(provider=self.provider_name, endpoint=endpoint)
        log.info("provider_request_start", timeout=request.timeout)

        try:
            async with self._client_factory() as client:
                response = await client.get(
                    request.url,
                    headers=request.headers,
                    timeout=request.timeout,
                    follow_redirects=True,
                )
                response.raise_for_status()
                body = self._decode_body(response)

        except httpx.TimeoutException as e:
            log.warning("provider_request_failed", error_kind="timeout", error=str(e))
            return ProviderOutcome.failure(
                ErrorKind.UPSTREAM_TIMEOUT,
                f"Request timeout after {request.timeout:g}s",
            )

        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            log.warning("provider_request_failed", error_kind="http_status", status=status)
            return ProviderOutcome.failure(
                ErrorKind.UPSTREAM_ERROR,
                f"External API error: {status}",
                status_code=status,
            )

        except httpx.HTTPError as e:
            log.warning("provider_request_failed", error_kind="transport", error=str(e))
            return ProviderOutcome.failure(
                ErrorKind.UPSTREAM_ERROR,
                f"No response from AI service: {type(e).__name__}",
            )

        except Exception as e:
            log.error("provider_request_error", error=str(e), exc_info=True)
            return ProviderOutcome.failure(
                ErrorKind.UPSTREAM_ERROR,
                f"Failed to get AI response: {type(e).__name__}",
            )

        log.info("provider_request_success", status=response.status_code)
        return ProviderOutcome.success(body, status_code=response.status_code)

    async def generate(self, ctx: RequestContext) -> ProviderOutcome:
        """Build and invoke the request for a context.

        A context that cannot be encoded into a URL is reported as a failed
        outcome without any upstream call.
        """
        try:
            request = self.build_request(ctx)
        except (ValueError, httpx.InvalidURL) as e:
            logger.warning(
                "provider_request_invalid",
                provider=self.provider_name,
                error=type(e).__name__,
            )
            return ProviderOutcome.failure(
                ErrorKind.UPSTREAM_ERROR,
                f"Could not build request: {type(e).__name__}",
            )
        return await self.invoke(request)
