"""Tests for health check endpoints."""

from unittest.mock import MagicMock

import pytest
from httpx import ASGITransport, AsyncClient
from pydantic import SecretStr

from moviefinder.config import Settings
from moviefinder.main import create_app

pytestmark = pytest.mark.integration


@pytest.mark.asyncio
async def test_liveness_probe(async_client: AsyncClient) -> None:
    """Test that liveness probe returns OK."""
    response = await async_client.get("/health/live")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"


@pytest.mark.asyncio
async def test_readiness_probe(async_client: AsyncClient, mock_redis: MagicMock) -> None:
    """Test that readiness probe returns OK with checks."""
    response = await async_client.get("/health/ready")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["checks"] == {"redis": "ok", "tmdb_token": "ok"}


@pytest.mark.asyncio
async def test_readiness_degraded_without_redis(async_client: AsyncClient) -> None:
    """Test that the proxy is still ready when only analytics is down."""
    response = await async_client.get("/health/ready")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "degraded"
    assert data["checks"]["redis"] == "error"


@pytest.mark.asyncio
async def test_readiness_error_without_token(
    test_settings: Settings, mock_redis: MagicMock
) -> None:
    settings = test_settings.model_copy(update={"tmdb_token": SecretStr("")})
    app = create_app(settings=settings)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/health/ready")

    data = response.json()
    assert data["status"] == "error"
    assert data["checks"]["tmdb_token"] == "error"


@pytest.mark.asyncio
async def test_root_endpoint(async_client: AsyncClient) -> None:
    """Test that root endpoint returns service info."""
    response = await async_client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert data["service"] == "MovieFinder"
    assert "version" in data
    assert data["docs"] == "/docs"
    assert data["health"] == "/health/live"
    assert data["catalog"] == "/api/catalog"


@pytest.mark.asyncio
async def test_request_id_header(async_client: AsyncClient) -> None:
    """Test that response includes X-Request-ID header."""
    response = await async_client.get("/health/live")

    assert response.status_code == 200
    assert "X-Request-ID" in response.headers


@pytest.mark.asyncio
async def test_custom_request_id(async_client: AsyncClient) -> None:
    """Test that custom X-Request-ID is echoed back."""
    custom_id = "test-request-id-12345"
    response = await async_client.get(
        "/health/live", headers={"X-Request-ID": custom_id}
    )

    assert response.status_code == 200
    assert response.headers["X-Request-ID"] == custom_id
