"""ResultCache - in-memory list result cache.

Session-lifetime key/value store for list pages:
- No TTL: an entry lives as long as the session
- No capacity bound: the cache grows with every distinct (query, page)
- Only replace-mode fetches read from it; append fetches always hit the network

Cache Key Types:
    - discover:{page} - Popular titles (empty query)
    - search:{page}:{query} - Search results for a trimmed query

The page is a colon-free integer placed before the free-form query, so two
distinct (query, page) pairs never share a key.

Note: unbounded growth is a known limitation for very long sessions.
"""

import structlog

from moviefinder.services.catalog import MoviePage

logger = structlog.get_logger(__name__)


class ResultCache:
    """Process-lifetime cache of list pages keyed by (query, page).

    Usage:
        ```python
        cache = ResultCache()
        key = ResultCache.list_key("batman", 1)
        if (entry := cache.get(key)) is None:
            entry = await catalog.list_movies("batman", 1)
            cache.put(key, entry)
        ```
    """

    def __init__(self) -> None:
        self._entries: dict[str, MoviePage] = {}

    def get(self, cache_key: str) -> MoviePage | None:
        """Return the cached page, or None on a miss."""
        return self._entries.get(cache_key)

    def put(self, cache_key: str, entry: MoviePage) -> None:
        """Store a page, replacing any previous entry for the key."""
        self._entries[cache_key] = entry
        logger.debug("cache_set", cache_key=cache_key, size=len(self._entries))

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, cache_key: object) -> bool:
        return cache_key in self._entries

    # -------------------------------------------------------------------------
    # Cache Key Generators
    # -------------------------------------------------------------------------

    @staticmethod
    def list_key(query: str, page: int) -> str:
        """Generate a deterministic cache key for a list fetch.

        Same trimmed query and page = same key = cache hit. Queries are not
        case-normalized: "Batman" and "batman" are different searches.

        Args:
            query: Search text (empty for discover)
            page: Page number (>= 1)

        Returns:
            Cache key (e.g., "search:2:batman" or "discover:1")
        """
        query = query.strip()
        if not query:
            return f"discover:{page}"
        return f"search:{page}:{query}"
