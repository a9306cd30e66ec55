"""Discovery session: the client-side core wired together.

Keystrokes go through the debouncer into the pagination controller; scroll
sentinel visibility triggers appends; selecting a movie drives the detail
fetcher. Front ends read ``session.view`` and ``session.detail`` and call
the methods below.

Usage:
    ```python
    config = DiscoveryConfig.from_settings(get_settings())
    async with DiscoverySession(config) as session:
        await session.start()
        session.set_search_term("batman")
        await session.settle()
        print([m.title for m in session.view.movies])
    ```
"""

from types import TracebackType

import structlog

from moviefinder.config import DiscoveryConfig
from moviefinder.core.exceptions import AnalyticsUnavailableError
from moviefinder.services.analytics import AnalyticsClient, AnalyticsReporter
from moviefinder.services.cache import ResultCache
from moviefinder.services.catalog import CatalogClient, MovieSummary
from moviefinder.services.debounce import Debouncer
from moviefinder.services.details import DetailFetcher
from moviefinder.services.orchestrator import FetchOrchestrator
from moviefinder.services.pagination import PaginationController
from moviefinder.state import DetailState, ScrollPhase, ViewState

logger = structlog.get_logger(__name__)


class DiscoverySession:
    """One user's browsing session over the movie catalog.

    Args:
        config: Immutable session configuration
        catalog: Optional catalog client (built from ``config`` if omitted)
        analytics: Optional analytics reporter; defaults to an HTTP client for
            ``config.analytics_url`` when that is set
    """

    def __init__(
        self,
        config: DiscoveryConfig,
        catalog: CatalogClient | None = None,
        analytics: AnalyticsReporter | None = None,
    ) -> None:
        self.config = config
        self.catalog = catalog or CatalogClient(config)
        if analytics is None and config.analytics_url:
            analytics = AnalyticsClient(
                config.analytics_url, timeout=config.request_timeout
            )
        self.analytics = analytics

        self.cache = ResultCache()
        self.view = ViewState()
        self.orchestrator = FetchOrchestrator(
            self.catalog, self.cache, self.view, self.analytics
        )
        self.pagination = PaginationController(self.orchestrator)
        self.details = DetailFetcher(self.catalog)
        self.debouncer = Debouncer(
            config.debounce_window, self.pagination.on_query_change
        )
        self.search_term = ""

    async def __aenter__(self) -> "DiscoverySession":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    @property
    def detail(self) -> DetailState:
        return self.details.state

    @property
    def phase(self) -> ScrollPhase:
        return self.pagination.phase

    async def start(self) -> None:
        """Initial load: popular titles plus the trending searches."""
        await self.pagination.on_query_change("")
        await self.load_trending()

    def set_search_term(self, text: str) -> None:
        """Record raw input; the search runs after the debounce window."""
        self.search_term = text
        self.debouncer.push(text)

    async def settle(self) -> None:
        """Wait for any debounced search to fire and finish."""
        await self.debouncer.join()

    async def on_sentinel_visible(self) -> bool:
        return await self.pagination.on_sentinel_visible()

    async def load_trending(self) -> None:
        """Refresh ``view.trending``; failures are logged and ignored."""
        if self.analytics is None:
            return
        try:
            self.view.trending = await self.analytics.get_trending_movies(
                self.config.trending_limit
            )
        except AnalyticsUnavailableError as e:
            logger.warning("trending_fetch_failed", error=str(e))

    async def select_movie(self, movie: MovieSummary) -> None:
        await self.details.open(movie)

    def close_modal(self) -> None:
        self.details.close()

    async def aclose(self) -> None:
        """Stop timers, let analytics reports finish and close HTTP clients."""
        self.debouncer.cancel()
        await self.debouncer.join()
        await self.orchestrator.drain()
        await self.catalog.close()
        if isinstance(self.analytics, AnalyticsClient):
            await self.analytics.close()
