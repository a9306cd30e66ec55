"""FastAPI dependency injection container.

This module provides dependency injection functions for use with FastAPI's
Depends() pattern. Dependencies are organized by functionality and can be
easily overridden for testing.
"""

from typing import Annotated

import httpx
from fastapi import Depends, Request

from moviefinder.config import Settings
from moviefinder.services.analytics import (
    SearchAnalyticsService,
    get_analytics_service,
)


# ========================================
# Settings Dependencies
# ========================================
def get_settings_from_request(request: Request) -> Settings:
    """Get settings from app state (set by the application factory).

    Args:
        request: The current request

    Returns:
        Settings: Application settings
    """
    return request.app.state.settings


# ========================================
# Upstream HTTP Dependencies
# ========================================
def get_upstream_client(request: Request) -> httpx.AsyncClient:
    """Get the shared HTTP client used to call TMDB.

    Created on first use and closed by the application lifespan.
    """
    client: httpx.AsyncClient | None = request.app.state.upstream_client
    if client is None or client.is_closed:
        settings = get_settings_from_request(request)
        client = httpx.AsyncClient(timeout=settings.request_timeout)
        request.app.state.upstream_client = client
    return client


SettingsDep = Annotated[Settings, Depends(get_settings_from_request)]
UpstreamClientDep = Annotated[httpx.AsyncClient, Depends(get_upstream_client)]
AnalyticsDep = Annotated[SearchAnalyticsService, Depends(get_analytics_service)]
