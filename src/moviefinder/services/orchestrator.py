"""Fetch orchestration for the movie list.

``FetchOrchestrator.fetch`` decides, for one (query, page, mode) request,
whether to serve from the result cache or the network, and is the only code
that commits list results to ``ViewState``.

Supersession is tracked with a ``RequestSlot``: every new list request takes
a fresh token, and a response is committed only if its token is still the
slot's current one when it arrives. Superseded requests are left to finish
on their own; their results are dropped.
"""

import asyncio
from typing import Any

import structlog

from moviefinder.core.exceptions import (
    CatalogCancelledError,
    CatalogError,
    CatalogUnknownError,
    user_message,
)
from moviefinder.services.analytics import AnalyticsReporter
from moviefinder.services.cache import ResultCache
from moviefinder.services.catalog import CatalogClient, MoviePage, fallback_movies
from moviefinder.state import FetchMode, ViewState

logger = structlog.get_logger(__name__)


class RequestSlot:
    """Generation counter for one logical request slot."""

    def __init__(self) -> None:
        self._generation = 0

    @property
    def current(self) -> int:
        return self._generation

    def next_token(self) -> int:
        """Supersede whatever is in flight and return the new token."""
        self._generation += 1
        return self._generation

    def is_current(self, token: int) -> bool:
        return token == self._generation


class FetchOrchestrator:
    """Serves list fetches from cache or network and commits the results.

    Args:
        catalog: Catalog client used for network fetches
        cache: Result cache shared for the session
        state: View state this orchestrator owns the list fields of
        analytics: Optional reporter told about successful first-page searches
    """

    def __init__(
        self,
        catalog: CatalogClient,
        cache: ResultCache,
        state: ViewState | None = None,
        analytics: AnalyticsReporter | None = None,
    ) -> None:
        self.catalog = catalog
        self.cache = cache
        self.state = state if state is not None else ViewState()
        self.analytics = analytics
        self.slot = RequestSlot()
        self._background: set[asyncio.Task[Any]] = set()

    async def fetch(self, query: str, page: int = 1, mode: FetchMode = FetchMode.REPLACE) -> None:
        """Fetch one page and apply it to the view state.

        Never raises for catalog failures: they end up in
        ``state.error_message``.

        Raises:
            ValueError: On an invalid page or an append that does not continue
                the current query
        """
        query = query.strip()
        self._validate(query, page, mode)
        cache_key = ResultCache.list_key(query, page)

        if mode is FetchMode.REPLACE:
            cached = self.cache.get(cache_key)
            if cached is not None:
                logger.debug("list_fetch_cache_hit", cache_key=cache_key)
                # Supersede anything in flight so it cannot overwrite this
                self.slot.next_token()
                self.state.is_loading = False
                self.state.is_loading_more = False
                self._commit(query, page, mode, cached)
                return

        token = self.slot.next_token()
        if mode is FetchMode.APPEND:
            self.state.is_loading_more = True
        else:
            self.state.is_loading = True
        self.state.error_message = None
        logger.debug("list_fetch_started", query=query, page=page, mode=mode.value, token=token)

        try:
            result = await self.catalog.list_movies(query, page)
            if not self.slot.is_current(token):
                logger.debug("list_fetch_superseded", query=query, page=page, token=token)
                return
            self._commit(query, page, mode, result)
            self.cache.put(cache_key, result)
        except CatalogError as e:
            self._fail(token, query, page, mode, e)
        except Exception as e:
            logger.exception("list_fetch_unexpected_error", query=query, page=page)
            self._fail(token, query, page, mode, CatalogUnknownError(str(e)))
        else:
            if mode is FetchMode.REPLACE and page == 1 and query and result.results:
                self._report_search(query, result)
        finally:
            if self.slot.is_current(token):
                self.state.is_loading = False
                self.state.is_loading_more = False

    async def drain(self) -> None:
        """Wait for pending analytics reports (shutdown and tests)."""
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

    # -------------------------------------------------------------------------
    # Private Methods
    # -------------------------------------------------------------------------

    def _validate(self, query: str, page: int, mode: FetchMode) -> None:
        if page < 1:
            raise ValueError(f"page must be >= 1, got {page}")
        if mode is FetchMode.APPEND:
            if page <= 1:
                raise ValueError("append mode requires page > 1")
            if query != self.state.query:
                raise ValueError(
                    f"append must continue the current query {self.state.query!r}"
                )

    def _commit(self, query: str, page: int, mode: FetchMode, result: MoviePage) -> None:
        state = self.state
        has_more = page < result.total_pages
        if mode is FetchMode.APPEND:
            state.movies = [*state.movies, *result.results]
        else:
            state.movies = list(result.results)
        state.query = query
        state.page = page
        state.total_pages = result.total_pages
        state.has_more = has_more
        state.error_message = None
        state.is_degraded = False
        logger.info(
            "list_fetch_committed",
            query=query,
            page=page,
            mode=mode.value,
            count=len(result.results),
            total_pages=result.total_pages,
        )

    def _fail(
        self, token: int, query: str, page: int, mode: FetchMode, error: CatalogError
    ) -> None:
        if not self.slot.is_current(token):
            logger.debug("list_fetch_superseded", query=query, page=page, token=token)
            return

        state = self.state
        state.error_message = user_message(error)
        if isinstance(error, CatalogCancelledError) and error.timed_out:
            state.movies = fallback_movies()
            state.has_more = False
            state.is_degraded = True
            state.query = query
        elif mode is FetchMode.REPLACE:
            # The list stays visible but no longer belongs to a pageable query
            state.query = query
            state.page = 0
            state.total_pages = 0
            state.has_more = False
        logger.warning(
            "list_fetch_failed",
            query=query,
            page=page,
            error_code=error.code,
            error=str(error),
        )

    def _report_search(self, query: str, result: MoviePage) -> None:
        """Tell analytics about the search without waiting for it."""
        if self.analytics is None:
            return
        task = asyncio.create_task(
            self.analytics.update_search_count(query, result.results[0])
        )
        self._background.add(task)
        task.add_done_callback(self._on_report_done)

    def _on_report_done(self, task: asyncio.Task[Any]) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.warning("analytics_report_failed", error=str(error))
