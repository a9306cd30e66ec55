"""TMDB catalog client.

This service provides async access to the TMDB movie catalog for list
fetches (search / discover) and movie details. Uses canonical internal DTOs
for all responses and classifies every failure into the catalog error
taxonomy in ``moviefinder.core.exceptions``.

See: https://developer.themoviedb.org/reference/search-movie
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any

import httpx
import structlog

from moviefinder.config import DiscoveryConfig
from moviefinder.core.exceptions import (
    CatalogAuthError,
    CatalogCancelledError,
    CatalogError,
    CatalogHTTPError,
    CatalogNetworkError,
    CatalogUnknownError,
)
from moviefinder.services.transports import (
    CatalogTransport,
    detail_transports,
    list_transports,
)

logger = structlog.get_logger(__name__)

IMAGE_BASE_URL = "https://image.tmdb.org/t/p"
YOUTUBE_EMBED_URL = "https://www.youtube.com/embed"

# Body the catalog proxy sends when its own credential is missing
PROXY_AUTH_NOT_CONFIGURED = "API key not configured"


def image_url(path: str | None, size: str) -> str | None:
    """Build an image CDN URL for a TMDB file path."""
    if not path:
        return None
    return f"{IMAGE_BASE_URL}/{size}{path}"


# -----------------------------------------------------------------------------
# DTOs (Canonical Internal Models - Anti-Corruption Layer)
# -----------------------------------------------------------------------------


@dataclass
class MovieSummary:
    """One movie as it appears in list results."""

    id: int
    title: str
    vote_average: float | None = None
    poster_path: str | None = None
    release_date: str | None = None
    original_language: str = ""

    @property
    def poster_url(self) -> str | None:
        return image_url(self.poster_path, "w500")

    @property
    def release_year(self) -> str | None:
        """Year part of ``release_date`` ("YYYY-MM-DD")."""
        if not self.release_date:
            return None
        return self.release_date.split("-")[0]

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "id": self.id,
            "title": self.title,
            "vote_average": self.vote_average,
            "poster_path": self.poster_path,
            "release_date": self.release_date,
            "original_language": self.original_language,
        }

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "MovieSummary":
        """Create from a TMDB list result item."""
        return cls(**_summary_fields(data))


@dataclass
class Genre:
    id: int
    name: str


@dataclass
class CastMember:
    id: int
    name: str
    character: str = ""
    profile_path: str | None = None

    @property
    def profile_url(self) -> str | None:
        return image_url(self.profile_path, "w185")


@dataclass
class Trailer:
    key: str
    name: str = ""
    site: str = "YouTube"

    @property
    def embed_url(self) -> str:
        return f"{YOUTUBE_EMBED_URL}/{self.key}"


@dataclass
class MovieDetail(MovieSummary):
    """Extended movie details, including cast and at most one trailer."""

    runtime: int | None = None
    genres: list[Genre] = field(default_factory=list)
    overview: str = ""
    backdrop_path: str | None = None
    cast: list[CastMember] = field(default_factory=list)
    trailer: Trailer | None = None

    @property
    def backdrop_url(self) -> str | None:
        return image_url(self.backdrop_path, "w1280")

    @property
    def runtime_label(self) -> str | None:
        """Runtime formatted as "2h 28m"."""
        if not self.runtime:
            return None
        return f"{self.runtime // 60}h {self.runtime % 60}m"

    def top_cast(self, limit: int = 10) -> list[CastMember]:
        return self.cast[:limit]

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "MovieDetail":
        """Create from a ``/movie/{id}?append_to_response=credits,videos`` body."""
        cast = [
            CastMember(
                id=person["id"],
                name=person.get("name", ""),
                character=person.get("character") or "",
                profile_path=person.get("profile_path"),
            )
            for person in (data.get("credits") or {}).get("cast", [])
        ]
        genres = [
            Genre(id=genre["id"], name=genre.get("name", ""))
            for genre in data.get("genres") or []
        ]
        return cls(
            **_summary_fields(data),
            runtime=data.get("runtime"),
            genres=genres,
            overview=data.get("overview") or "",
            backdrop_path=data.get("backdrop_path"),
            cast=cast,
            trailer=_pick_trailer((data.get("videos") or {}).get("results", [])),
        )


@dataclass
class MoviePage:
    """One page of list results, exactly as cached."""

    results: list[MovieSummary]
    page: int
    total_pages: int
    total_results: int = 0

    @property
    def has_more(self) -> bool:
        """Check if there are more pages to fetch."""
        return self.page < self.total_pages


def _summary_fields(data: dict[str, Any]) -> dict[str, Any]:
    vote_average = data.get("vote_average")
    return {
        "id": data["id"],
        "title": data.get("title") or data.get("original_title") or "Untitled",
        "vote_average": float(vote_average) if vote_average is not None else None,
        "poster_path": data.get("poster_path"),
        "release_date": data.get("release_date") or None,
        "original_language": data.get("original_language") or "",
    }


def _pick_trailer(videos: list[dict[str, Any]]) -> Trailer | None:
    """Prefer a YouTube trailer, else the first video with a key."""
    candidates = [v for v in videos if v.get("key")]
    if not candidates:
        return None
    for video in candidates:
        if video.get("site") == "YouTube" and video.get("type") == "Trailer":
            chosen = video
            break
    else:
        chosen = candidates[0]
    return Trailer(
        key=chosen["key"],
        name=chosen.get("name", ""),
        site=chosen.get("site", "YouTube"),
    )


# Shown when live data cannot be obtained within the timeout
FALLBACK_MOVIES: tuple[MovieSummary, ...] = (
    MovieSummary(
        id=278,
        title="The Shawshank Redemption",
        vote_average=8.7,
        poster_path="/q6y0Go1tsGEsmtFryDOJo3dEmqu.jpg",
        release_date="1994-09-23",
        original_language="en",
    ),
    MovieSummary(
        id=238,
        title="The Godfather",
        vote_average=8.7,
        poster_path="/3bhkrj58Vtu7enYsRolD1fZdja1.jpg",
        release_date="1972-03-14",
        original_language="en",
    ),
    MovieSummary(
        id=155,
        title="The Dark Knight",
        vote_average=8.5,
        poster_path="/qJ2tW6WMUDux911r6m7haRef0WH.jpg",
        release_date="2008-07-16",
        original_language="en",
    ),
)


def fallback_movies() -> list[MovieSummary]:
    """Fresh copy of the fallback dataset."""
    return list(FALLBACK_MOVIES)


# -----------------------------------------------------------------------------
# Catalog Client
# -----------------------------------------------------------------------------


class CatalogClient:
    """Async client for the TMDB catalog.

    List fetches go through the catalog proxy; detail fetches try a direct
    call first and fall back to the CORS relay. Every request is bounded by
    ``config.request_timeout`` and aborted when it runs over.

    Usage:
        ```python
        catalog = CatalogClient(DiscoveryConfig.from_settings(settings))
        page = await catalog.list_movies("batman", page=1)
        ```
    """

    def __init__(
        self,
        config: DiscoveryConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Session configuration
            client: Optional pre-built HTTP client (tests inject a mock transport)
        """
        self._config = config
        self._client = client
        self._owns_client = client is None
        self._list_transports = list_transports(config)
        self._detail_transports = detail_transports(config)

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self._config.request_timeout,
                follow_redirects=True,
            )
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    @staticmethod
    def list_request(query: str, page: int) -> tuple[str, dict[str, str | int]]:
        """Pick the endpoint and parameters for a list fetch.

        An empty query browses popular titles; no ``query`` param is sent.
        """
        query = query.strip()
        if query:
            return "/search/movie", {"query": query, "page": page}
        return "/discover/movie", {"sort_by": "popularity.desc", "page": page}

    async def list_movies(self, query: str, page: int = 1) -> MoviePage:
        """Fetch one page of search or discover results.

        Raises:
            CatalogError: Classified failure
        """
        path, params = self.list_request(query, page)
        data = await self._request_json(self._list_transports, path, params)
        return self._parse_page(data, page)

    async def get_movie_details(self, movie_id: int) -> MovieDetail:
        """Fetch extended details with cast and videos in one call.

        Raises:
            CatalogError: Classified failure
        """
        data = await self._request_json(
            self._detail_transports,
            f"/movie/{movie_id}",
            {"append_to_response": "credits,videos"},
        )
        try:
            return MovieDetail.from_api(data)
        except (KeyError, TypeError, ValueError) as e:
            raise CatalogUnknownError(f"Malformed movie details: {e}") from e

    # -------------------------------------------------------------------------
    # Private Methods - Transport
    # -------------------------------------------------------------------------

    async def _request_json(
        self,
        transports: list[CatalogTransport],
        path: str,
        params: dict[str, str | int],
    ) -> dict[str, Any]:
        """Try each transport in order until one returns a response.

        Only transport failures (network error, timeout) move on to the next
        strategy. An HTTP error status is an answer and ends the attempt.
        """
        last_error: CatalogError | None = None
        for transport in transports:
            try:
                return await self._get_json(transport, path, params)
            except (CatalogNetworkError, CatalogCancelledError) as e:
                logger.warning(
                    "catalog_transport_failed",
                    transport=transport.name,
                    path=path,
                    error=str(e),
                )
                last_error = e
        if last_error is None:
            raise CatalogUnknownError("No catalog transport configured")
        raise last_error

    async def _get_json(
        self,
        transport: CatalogTransport,
        path: str,
        params: dict[str, str | int],
    ) -> dict[str, Any]:
        client = await self._get_client()
        url = transport.url_for(path, params)
        headers = transport.headers()

        try:
            async with asyncio.timeout(self._config.request_timeout):
                response = await client.get(url, headers=headers)
            response.raise_for_status()
        except (TimeoutError, httpx.TimeoutException) as e:
            logger.warning(
                "catalog_request_timeout",
                transport=transport.name,
                path=path,
                timeout=self._config.request_timeout,
            )
            raise CatalogCancelledError(timed_out=True) from e
        except httpx.HTTPStatusError as e:
            raise self._classify_status(e.response, path) from e
        except httpx.RequestError as e:
            logger.error(
                "catalog_request_error",
                transport=transport.name,
                path=path,
                error=str(e),
            )
            raise CatalogNetworkError(f"Request failed: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise CatalogUnknownError("Catalog returned a non-JSON body") from e
        if not isinstance(data, dict):
            raise CatalogUnknownError("Catalog returned an unexpected payload")
        return data

    def _classify_status(self, response: httpx.Response, path: str) -> CatalogError:
        status_code = response.status_code
        if status_code == 500 and _error_body(response) == PROXY_AUTH_NOT_CONFIGURED:
            logger.error("catalog_credential_not_configured", path=path)
            return CatalogAuthError()
        logger.error(
            "catalog_request_failed",
            status_code=status_code,
            path=path,
        )
        return CatalogHTTPError(status_code, path=path)

    # -------------------------------------------------------------------------
    # Private Methods - Response Parsing (Anti-Corruption Layer)
    # -------------------------------------------------------------------------

    def _parse_page(self, data: dict[str, Any], requested_page: int) -> MoviePage:
        try:
            results = [MovieSummary.from_api(item) for item in data.get("results") or []]
            page = int(data.get("page") or requested_page)
            total_pages = _count(data, "total_pages", page)
            total_results = _count(data, "total_results", len(results))
        except (KeyError, TypeError, ValueError) as e:
            raise CatalogUnknownError(f"Malformed list response: {e}") from e

        return MoviePage(
            results=results,
            page=page,
            total_pages=total_pages,
            total_results=total_results,
        )


def _count(data: dict[str, Any], key: str, default: int) -> int:
    value = data.get(key)
    return default if value is None else int(value)


def _error_body(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("error")
    return None
