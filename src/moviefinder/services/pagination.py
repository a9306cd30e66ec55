"""Pagination / infinite-scroll controller.

The phase is derived from ``ViewState`` on every read rather than stored,
so it cannot drift from the flags the orchestrator maintains:

    IDLE ──query change──▶ LOADING ──done──▶ IDLE | EXHAUSTED
    IDLE ──sentinel visible, has_more──▶ LOADING_MORE ──done──▶ IDLE | EXHAUSTED
    EXHAUSTED ──query change──▶ LOADING

Sentinel visibility is level-triggered: every call to
``on_sentinel_visible`` re-checks the guard, so a sentinel that stays in
view after a page lands triggers the next page on the following call.
"""

import structlog

from moviefinder.services.orchestrator import FetchOrchestrator
from moviefinder.state import FetchMode, ScrollPhase

logger = structlog.get_logger(__name__)


class PaginationController:
    """Turns query changes and sentinel visibility into list fetches."""

    def __init__(self, orchestrator: FetchOrchestrator) -> None:
        self.orchestrator = orchestrator

    @property
    def phase(self) -> ScrollPhase:
        state = self.orchestrator.state
        if state.is_loading:
            return ScrollPhase.LOADING
        if state.is_loading_more:
            return ScrollPhase.LOADING_MORE
        if (state.page >= 1 or state.is_degraded) and not state.has_more:
            return ScrollPhase.EXHAUSTED
        return ScrollPhase.IDLE

    async def on_query_change(self, query: str) -> None:
        """Start a fresh result set for ``query`` at page 1."""
        logger.debug("pagination_reset", query=query.strip())
        await self.orchestrator.fetch(query, 1, FetchMode.REPLACE)

    async def on_sentinel_visible(self) -> bool:
        """Load the next page if one exists and nothing is loading.

        The guard and the orchestrator's loading flag are set with no
        suspension point in between, so concurrent triggers cannot both
        start a fetch.

        Returns:
            True if a page load was started
        """
        state = self.orchestrator.state
        if self.phase is not ScrollPhase.IDLE or state.page < 1 or not state.has_more:
            return False

        next_page = state.page + 1
        logger.debug("pagination_load_more", query=state.query, page=next_page)
        await self.orchestrator.fetch(state.query, next_page, FetchMode.APPEND)
        return True
