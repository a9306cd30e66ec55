"""Services package for MovieFinder.

This module exports the discovery core and its collaborators.
"""

from moviefinder.services.analytics import (
    AnalyticsClient,
    SearchAnalyticsService,
    TrendingMovie,
    get_analytics_service,
    set_redis_client,
)
from moviefinder.services.cache import ResultCache
from moviefinder.services.catalog import (
    CatalogClient,
    MovieDetail,
    MoviePage,
    MovieSummary,
)
from moviefinder.services.debounce import Debouncer
from moviefinder.services.details import DetailFetcher
from moviefinder.services.discovery import DiscoverySession
from moviefinder.services.orchestrator import FetchOrchestrator, RequestSlot
from moviefinder.services.pagination import PaginationController

__all__ = [
    # Analytics
    "AnalyticsClient",
    "SearchAnalyticsService",
    "TrendingMovie",
    "get_analytics_service",
    "set_redis_client",
    # Catalog
    "CatalogClient",
    "MovieDetail",
    "MoviePage",
    "MovieSummary",
    # Discovery core
    "Debouncer",
    "DetailFetcher",
    "DiscoverySession",
    "FetchOrchestrator",
    "PaginationController",
    "RequestSlot",
    "ResultCache",
]
