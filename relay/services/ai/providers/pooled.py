"""
Pooled Provider

Shared multi-model gateway. The model id is a path segment and a fixed
gateway key travels as a query parameter. Failures are handed back to the
gateway, which falls back to the default provider.
"""

from urllib.parse import quote

from relay.services.ai.providers.base import BaseProvider
from relay.services.ai.types import RequestContext


class PooledProvider(BaseProvider):
    """RaqKid gateway: ``GET {base}/{model}?prompt=...&key=...``."""

    DEFAULT_TIMEOUT = 10.0
    SOURCE = "raqkid_api"

    @property
    def provider_name(self) -> str:
        return "raqkid"

    def _endpoint(self, ctx: RequestContext) -> str:
        base = self.settings.pooled_api_base.rstrip("/")
        return f"{base}/{quote(ctx.model_id, safe='')}"

    def _credential_params(self) -> dict[str, str]:
        return {"key": self.settings.pooled_api_key}
