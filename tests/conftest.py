"""Pytest configuration and fixtures for MovieFinder tests.

This module provides reusable fixtures for:
- Settings and discovery configuration overrides
- Async test client for the HTTP app
- Mocked catalog, analytics and Redis collaborators
"""

from collections.abc import AsyncGenerator, Iterator
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from pydantic import SecretStr

from moviefinder.config import DiscoveryConfig, Settings
from moviefinder.main import create_app
from moviefinder.services.analytics import set_redis_client

# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Create test-specific settings.

    Overrides production settings with test-appropriate values.
    """
    return Settings(
        app_env="development",  # type: ignore[arg-type]
        debug=True,
        log_level="DEBUG",  # type: ignore[arg-type]
        log_format="console",  # type: ignore[arg-type]
        redis_url="redis://localhost:6379/15",  # Use DB 15 for tests
        tmdb_base_url="https://api.themoviedb.org/3",
        tmdb_token="test-token",  # type: ignore[arg-type]
    )


@pytest.fixture
def discovery_config() -> DiscoveryConfig:
    """Session configuration with short timings and no analytics endpoint."""
    return DiscoveryConfig(
        catalog_base_url="http://proxy.test/api/catalog",
        upstream_base_url="https://api.themoviedb.org/3",
        cors_relay_url="https://relay.test/?",
        credential=SecretStr("test-token"),
        request_timeout=1.0,
        debounce_window=0.01,
    )


# =============================================================================
# Application Fixtures
# =============================================================================


@pytest.fixture
def app(test_settings: Settings) -> FastAPI:
    """Create a test FastAPI application with test settings."""
    return create_app(settings=test_settings)


@pytest.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for testing.

    This client makes requests to the test app without starting a server.

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


# =============================================================================
# Mock Service Fixtures
# =============================================================================


@pytest.fixture
def mock_catalog() -> MagicMock:
    """Create a mock CatalogClient.

    Usage:
        async def test_fetch(mock_catalog: MagicMock):
            mock_catalog.list_movies.return_value = make_page(["Heat"])
    """
    catalog = MagicMock()
    catalog.list_movies = AsyncMock()
    catalog.get_movie_details = AsyncMock()
    catalog.close = AsyncMock()
    return catalog


@pytest.fixture
def mock_analytics() -> MagicMock:
    """Create a mock analytics reporter."""
    analytics = MagicMock()
    analytics.update_search_count = AsyncMock(return_value=None)
    analytics.get_trending_movies = AsyncMock(return_value=[])
    return analytics


@pytest.fixture
def mock_redis() -> Iterator[MagicMock]:
    """Create a mock Redis client and install it as the global client."""
    redis = MagicMock()
    redis.ping = AsyncMock(return_value=True)
    redis.exists = AsyncMock(return_value=0)
    redis.hset = AsyncMock(return_value=4)
    redis.hgetall = AsyncMock(return_value={})
    redis.zincrby = AsyncMock(return_value=1.0)
    redis.zrevrange = AsyncMock(return_value=[])
    set_redis_client(redis)
    yield redis
    set_redis_client(None)
