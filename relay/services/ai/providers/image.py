"""
Image Provider

Single external image-text endpoint. Image failures are terminal; no
fallback exists for this provider class.
"""

from relay.services.ai.providers.base import BaseProvider
from relay.services.ai.types import RequestContext


class ImageProvider(BaseProvider):
    """Image generation endpoint: ``GET {image_api_url}?prompt=...``."""

    DEFAULT_TIMEOUT = 10.0
    # The standalone /api/image endpoint gives the upstream longer
    ENDPOINT_TIMEOUT = 15.0
    SOURCE = "image_api"

    @property
    def provider_name(self) -> str:
        return "image"

    def _endpoint(self, ctx: RequestContext) -> str:
        return self.settings.image_api_url
