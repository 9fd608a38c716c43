"""Pytest configuration and fixtures for CMS gateway tests.

This module provides reusable fixtures for:
- Settings overrides
- A scripted CMS (``httpx.MockTransport``) for REST and GraphQL calls
- A CMS client and service bundle wired to that transport
- Async test client for the FastAPI app
"""

from collections.abc import AsyncGenerator

import httpx
import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from cms_gateway.config import Settings
from cms_gateway.main import create_app
from cms_gateway.services.cms import CMSClient, CMSServices
from tests.mocks.cache import InMemoryCache
from tests.mocks.cms import CMS_API_URL, CMS_GRAPHQL_URL, CMS_MEDIA_URL, CMSStub


# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Create test-specific settings.

    Caching is disabled so the app never reaches for Redis; tests that
    exercise caching inject an in-memory cache instead.
    """
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        app_env="development",  # type: ignore[arg-type]
        debug=True,
        log_level="DEBUG",  # type: ignore[arg-type]
        log_format="console",  # type: ignore[arg-type]
        cache_enabled=False,
        cache_secret_key="test-secret",  # type: ignore[arg-type]
        cms_api_url=CMS_API_URL,
        cms_graphql_url=CMS_GRAPHQL_URL,
        cms_media_base_url=CMS_MEDIA_URL,
        cms_service_token="test-token",  # type: ignore[arg-type]
    )


# =============================================================================
# CMS Fixtures
# =============================================================================


@pytest.fixture
def cms_stub() -> CMSStub:
    return CMSStub()


@pytest.fixture
def memory_cache() -> InMemoryCache:
    return InMemoryCache()


@pytest.fixture
async def cms_client(
    cms_stub: CMSStub, memory_cache: InMemoryCache
) -> AsyncGenerator[CMSClient, None]:
    """CMS client talking to the scripted CMS through an in-memory cache.

    Usage:
        async def test_fetch(cms_client: CMSClient, cms_stub: CMSStub):
            cms_stub.graphql["GetBrands"] = BRANDS_DATA
            body = await cms_client.execute_graphql(GET_BRANDS_QUERY)
    """
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(cms_stub.handler))
    client = CMSClient(
        api_url=CMS_API_URL,
        graphql_url=CMS_GRAPHQL_URL,
        media_base_url=CMS_MEDIA_URL,
        token="test-token",
        cache=memory_cache,
        default_ttl=3600,
        http_client=http_client,
    )
    yield client
    await http_client.aclose()


@pytest.fixture
def cms_services(cms_client: CMSClient) -> CMSServices:
    return CMSServices.from_client(cms_client)


# =============================================================================
# Application Fixtures
# =============================================================================


@pytest.fixture
def app(test_settings: Settings, cms_services: CMSServices) -> FastAPI:
    """Create a test FastAPI application wired to the scripted CMS.

    ``ASGITransport`` does not run the lifespan, so the state it would set
    is assigned here.
    """
    application = create_app(settings=test_settings)
    application.state.cms = cms_services
    application.state.redis = None
    return application


@pytest.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for testing.

    Usage:
        async def test_endpoint(async_client: AsyncClient):
            response = await async_client.get("/health/live")
            assert response.status_code == 200
    """
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
