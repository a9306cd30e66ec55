"""Tests for SearchAnalyticsService.

Tests the Redis-backed search counter with a mocked Redis client.
"""

from unittest.mock import MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from moviefinder.core.exceptions import AnalyticsUnavailableError
from moviefinder.services.analytics import (
    SearchAnalyticsService,
    TrendingMovie,
    check_redis_connection,
    get_analytics_service,
    normalize_search_term,
    set_redis_client,
)
from moviefinder.services.catalog import MovieSummary

BATMAN = MovieSummary(id=268, title="Batman", poster_path="/cij4dd21v2Rk2YtUQbV5kW69WB2.jpg")


@pytest.fixture
def analytics_service(mock_redis: MagicMock) -> SearchAnalyticsService:
    return SearchAnalyticsService(mock_redis)


class TestNormalization:
    def test_trims_and_lowercases(self) -> None:
        assert normalize_search_term("  Batman ") == "batman"

    def test_entry_key(self) -> None:
        assert SearchAnalyticsService.entry_key("batman") == "search:batman"


class TestUpdateSearchCount:
    """Tests for recording searches."""

    @pytest.mark.asyncio
    async def test_first_search_stores_top_result(
        self, analytics_service: SearchAnalyticsService, mock_redis: MagicMock
    ) -> None:
        count = await analytics_service.update_search_count("  Batman ", BATMAN)

        assert count == 1
        mock_redis.hset.assert_awaited_once()
        key = mock_redis.hset.await_args.args[0]
        mapping = mock_redis.hset.await_args.kwargs["mapping"]
        assert key == "search:batman"
        assert mapping["search_term"] == "Batman"
        assert mapping["movie_id"] == 268
        assert mapping["title"] == "Batman"
        assert mapping["poster_url"].endswith("/w500/cij4dd21v2Rk2YtUQbV5kW69WB2.jpg")
        mock_redis.zincrby.assert_awaited_once_with("search_counts", 1, "batman")

    @pytest.mark.asyncio
    async def test_repeat_search_only_counts(
        self, analytics_service: SearchAnalyticsService, mock_redis: MagicMock
    ) -> None:
        mock_redis.exists.return_value = 1
        mock_redis.zincrby.return_value = 5.0

        count = await analytics_service.update_search_count("batman", BATMAN)

        assert count == 5
        mock_redis.hset.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_poster_stored_as_empty(
        self, analytics_service: SearchAnalyticsService, mock_redis: MagicMock
    ) -> None:
        await analytics_service.update_search_count("heat", MovieSummary(id=949, title="Heat"))

        assert mock_redis.hset.await_args.kwargs["mapping"]["poster_url"] == ""

    @pytest.mark.asyncio
    async def test_blank_term_rejected(
        self, analytics_service: SearchAnalyticsService, mock_redis: MagicMock
    ) -> None:
        with pytest.raises(ValueError):
            await analytics_service.update_search_count("   ", BATMAN)

        mock_redis.zincrby.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_redis_error(
        self, analytics_service: SearchAnalyticsService, mock_redis: MagicMock
    ) -> None:
        mock_redis.zincrby.side_effect = RedisConnectionError("Connection refused")

        with pytest.raises(AnalyticsUnavailableError):
            await analytics_service.update_search_count("batman", BATMAN)


class TestGetTrendingMovies:
    """Tests for the trending query."""

    @pytest.mark.asyncio
    async def test_ranked_results(
        self, analytics_service: SearchAnalyticsService, mock_redis: MagicMock
    ) -> None:
        mock_redis.zrevrange.return_value = [("batman", 12.0), ("heat", 3.0)]
        entries = {
            "search:batman": {
                "search_term": "Batman",
                "movie_id": "268",
                "title": "Batman",
                "poster_url": "https://image.tmdb.org/t/p/w500/cij.jpg",
            },
            "search:heat": {
                "search_term": "heat",
                "movie_id": "949",
                "title": "Heat",
                "poster_url": "",
            },
        }
        mock_redis.hgetall.side_effect = lambda key: entries[key]

        trending = await analytics_service.get_trending_movies(limit=2)

        mock_redis.zrevrange.assert_awaited_once_with(
            "search_counts", 0, 1, withscores=True
        )
        assert trending == [
            TrendingMovie(
                search_term="Batman",
                count=12,
                movie_id=268,
                title="Batman",
                poster_url="https://image.tmdb.org/t/p/w500/cij.jpg",
            ),
            TrendingMovie(search_term="heat", count=3, movie_id=949, title="Heat"),
        ]

    @pytest.mark.asyncio
    async def test_skips_terms_without_entry(
        self, analytics_service: SearchAnalyticsService, mock_redis: MagicMock
    ) -> None:
        mock_redis.zrevrange.return_value = [("ghost", 2.0)]
        mock_redis.hgetall.return_value = {}

        assert await analytics_service.get_trending_movies() == []

    @pytest.mark.asyncio
    async def test_redis_error(
        self, analytics_service: SearchAnalyticsService, mock_redis: MagicMock
    ) -> None:
        mock_redis.zrevrange.side_effect = RedisConnectionError("Connection refused")

        with pytest.raises(AnalyticsUnavailableError):
            await analytics_service.get_trending_movies()


class TestGlobalClient:
    """Tests for the FastAPI dependency and readiness check."""

    def test_dependency_without_client(self) -> None:
        set_redis_client(None)

        with pytest.raises(AnalyticsUnavailableError):
            get_analytics_service()

    def test_dependency_with_client(self, mock_redis: MagicMock) -> None:
        service = get_analytics_service()

        assert isinstance(service, SearchAnalyticsService)
        assert service.redis is mock_redis

    @pytest.mark.asyncio
    async def test_connection_check(self, mock_redis: MagicMock) -> None:
        assert await check_redis_connection() is True

    @pytest.mark.asyncio
    async def test_connection_check_failure(self, mock_redis: MagicMock) -> None:
        mock_redis.ping.side_effect = RedisConnectionError("Connection refused")

        assert await check_redis_connection() is False

    @pytest.mark.asyncio
    async def test_connection_check_without_client(self) -> None:
        set_redis_client(None)

        assert await check_redis_connection() is False
