"""
Pytest configuration and fixtures for AI relay tests.

Upstream providers are replaced by an in-process ``httpx.MockTransport``
so every outbound call is recorded and no network is touched.
"""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from relay.api.main import app
from relay.core.config import Settings
from relay.core.models import ProviderClass
from relay.services.ai import AIGateway, get_ai_gateway
from relay.services.ai.providers import DefaultProvider, ImageProvider, PooledProvider
from tests.fakes import DEFAULT_HOST, IMAGE_HOST, POOLED_HOST, FakeUpstream


@pytest.fixture
def test_settings() -> Settings:
    """Settings pointing every provider at a fake host."""
    return Settings(
        _env_file=None,
        default_api_url=f"http://{DEFAULT_HOST}/dtempire-ai",
        external_api_token=None,
        pooled_api_base=f"http://{POOLED_HOST}",
        pooled_api_key="test-key",
        image_api_url=f"http://{IMAGE_HOST}/api/ai-text/",
        api_timeout_ms=None,
        request_timeout=5.0,
        batch_concurrency=2,
    )


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def gateway(test_settings: Settings, upstream: FakeUpstream) -> AIGateway:
    """Gateway whose providers all talk to the fake upstream."""
    factory = upstream.client_factory
    return AIGateway(
        test_settings,
        providers={
            ProviderClass.DEFAULT: DefaultProvider(test_settings, client_factory=factory),
            ProviderClass.POOLED: PooledProvider(test_settings, client_factory=factory),
            ProviderClass.IMAGE_GEN: ImageProvider(test_settings, client_factory=factory),
        },
        image_endpoint_provider=ImageProvider(
            test_settings,
            timeout=ImageProvider.ENDPOINT_TIMEOUT,
            client_factory=factory,
        ),
    )


@pytest_asyncio.fixture(scope="function")
async def client(gateway: AIGateway) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client against the app with the fake gateway."""
    app.dependency_overrides[get_ai_gateway] = lambda: gateway

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.pop(get_ai_gateway, None)
