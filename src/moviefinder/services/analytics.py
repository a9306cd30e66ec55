"""Search analytics: counting searches and reporting trending ones.

Two halves live here:
- ``SearchAnalyticsService``: server-side store backed by Redis
- ``AnalyticsClient``: HTTP client the discovery core reports through

Redis layout:
    - search_counts - sorted set, member = normalized search term, score = count
    - search:{normalized} - hash with the display term and the top result
"""

from dataclasses import dataclass
from typing import Any, Protocol

import httpx
import structlog
from redis.asyncio import Redis
from redis.exceptions import RedisError

from moviefinder.core.exceptions import AnalyticsUnavailableError
from moviefinder.services.catalog import MovieSummary

logger = structlog.get_logger(__name__)


def normalize_search_term(search_term: str) -> str:
    """Key used to group searches: trimmed and lowercased."""
    return search_term.strip().lower()


@dataclass
class TrendingMovie:
    """A frequently searched term and the top result it produced."""

    search_term: str
    count: int
    movie_id: int
    title: str = ""
    poster_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "search_term": self.search_term,
            "count": self.count,
            "movie_id": self.movie_id,
            "title": self.title,
            "poster_url": self.poster_url,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TrendingMovie":
        return cls(
            search_term=data["search_term"],
            count=int(data.get("count", 0)),
            movie_id=int(data["movie_id"]),
            title=data.get("title", ""),
            poster_url=data.get("poster_url") or None,
        )


class AnalyticsReporter(Protocol):
    """Anything that counts searches and reports the trending ones."""

    async def update_search_count(
        self, search_term: str, movie: MovieSummary
    ) -> Any: ...

    async def get_trending_movies(self, limit: int = 5) -> list[TrendingMovie]: ...


# -----------------------------------------------------------------------------
# Server side (Redis)
# -----------------------------------------------------------------------------


class SearchAnalyticsService:
    """Redis-backed search counter.

    The first search for a term records its top result; later searches only
    bump the count.

    Usage:
        ```python
        analytics = SearchAnalyticsService(redis)
        await analytics.update_search_count("batman", movie)
        trending = await analytics.get_trending_movies(limit=5)
        ```
    """

    COUNTS_KEY = "search_counts"

    def __init__(self, redis: Redis) -> None:
        """Initialize the service.

        Args:
            redis: Async Redis client (created with ``decode_responses=True``)
        """
        self.redis = redis

    @staticmethod
    def entry_key(normalized_term: str) -> str:
        return f"search:{normalized_term}"

    async def update_search_count(self, search_term: str, movie: MovieSummary) -> int:
        """Increment the count for a search term.

        Returns:
            The new count

        Raises:
            ValueError: If the term is blank
            AnalyticsUnavailableError: If Redis cannot be reached
        """
        normalized = normalize_search_term(search_term)
        if not normalized:
            raise ValueError("search_term must not be blank")

        entry_key = self.entry_key(normalized)
        try:
            if not await self.redis.exists(entry_key):
                await self.redis.hset(
                    entry_key,
                    mapping={
                        "search_term": search_term.strip(),
                        "movie_id": movie.id,
                        "title": movie.title,
                        "poster_url": movie.poster_url or "",
                    },
                )
            count = await self.redis.zincrby(self.COUNTS_KEY, 1, normalized)
        except RedisError as e:
            logger.warning("analytics_update_failed", search_term=normalized, error=str(e))
            raise AnalyticsUnavailableError() from e

        logger.debug("analytics_search_counted", search_term=normalized, count=count)
        return int(count)

    async def get_trending_movies(self, limit: int = 5) -> list[TrendingMovie]:
        """Most searched terms, highest count first.

        Raises:
            AnalyticsUnavailableError: If Redis cannot be reached
        """
        try:
            ranked = await self.redis.zrevrange(
                self.COUNTS_KEY, 0, limit - 1, withscores=True
            )
            trending = []
            for normalized, score in ranked:
                data = await self.redis.hgetall(self.entry_key(normalized))
                if not data:
                    continue
                trending.append(TrendingMovie.from_dict({**data, "count": score}))
        except RedisError as e:
            logger.warning("analytics_trending_failed", error=str(e))
            raise AnalyticsUnavailableError() from e
        return trending


# Global Redis client (set during app startup)
_redis_client: Redis | None = None


def set_redis_client(redis: Redis | None) -> None:
    """Set the global Redis client during app startup."""
    global _redis_client
    _redis_client = redis


def get_analytics_service() -> SearchAnalyticsService:
    """FastAPI dependency for SearchAnalyticsService."""
    if _redis_client is None:
        raise AnalyticsUnavailableError("Redis client not initialized")
    return SearchAnalyticsService(_redis_client)


async def check_redis_connection() -> bool:
    """Readiness check for the analytics store."""
    if _redis_client is None:
        return False
    try:
        return bool(await _redis_client.ping())
    except RedisError as e:
        logger.warning("redis_ping_failed", error=str(e))
        return False


# -----------------------------------------------------------------------------
# Client side (HTTP)
# -----------------------------------------------------------------------------


class AnalyticsClient:
    """Async client for the search analytics API."""

    def __init__(
        self,
        base_url: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self._timeout)
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def update_search_count(self, search_term: str, movie: MovieSummary) -> None:
        """Report a search and its top result."""
        client = await self._get_client()
        try:
            response = await client.post(
                f"{self._base_url}/searches",
                json={"search_term": search_term, "movie": movie.to_dict()},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise AnalyticsUnavailableError(f"Analytics report failed: {e}") from e

    async def get_trending_movies(self, limit: int = 5) -> list[TrendingMovie]:
        client = await self._get_client()
        try:
            response = await client.get(
                f"{self._base_url}/trending", params={"limit": limit}
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise AnalyticsUnavailableError(f"Trending fetch failed: {e}") from e

        try:
            return [TrendingMovie.from_dict(item) for item in response.json()["results"]]
        except (ValueError, KeyError, TypeError) as e:
            raise AnalyticsUnavailableError(f"Malformed trending response: {e}") from e
