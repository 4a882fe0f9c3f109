"""
Default Provider

The one guaranteed-available text backend. Serves the default model directly
and is the fallback target for every pooled-provider failure.
"""

from relay.services.ai.providers.base import BaseProvider
from relay.services.ai.types import RequestContext


class DefaultProvider(BaseProvider):
    """DTempire text endpoint: ``GET {url}?prompt=...[&token=...]``."""

    DEFAULT_TIMEOUT = 8.0
    SOURCE = "dtempire_api"
    FALLBACK_SOURCE = "dtempire_fallback"

    @property
    def provider_name(self) -> str:
        return "dtempire"

    def _endpoint(self, ctx: RequestContext) -> str:
        return self.settings.default_api_url

    def _credential_params(self) -> dict[str, str]:
        token = self.settings.external_api_token
        return {"token": token} if token else {}
