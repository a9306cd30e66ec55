"""Detail fetcher for the movie modal.

Each open issues one fresh request for the movie's extended details with
credits and videos appended. Nothing is cached between opens, so reopening
the same movie costs another request (known inefficiency).
"""

import structlog

from moviefinder.core.exceptions import CatalogError
from moviefinder.core.logging import log_context
from moviefinder.services.catalog import CatalogClient, MovieSummary
from moviefinder.services.orchestrator import RequestSlot
from moviefinder.state import DetailState

logger = structlog.get_logger(__name__)

DETAIL_ERROR_MESSAGE = "Failed to load movie details"


class DetailFetcher:
    """Loads ``MovieDetail`` into a ``DetailState`` scoped to one modal."""

    def __init__(self, catalog: CatalogClient, state: DetailState | None = None) -> None:
        self.catalog = catalog
        self.state = state if state is not None else DetailState()
        self.slot = RequestSlot()

    async def open(self, movie: MovieSummary) -> None:
        """Open the modal for ``movie`` and load its details.

        Errors are kept in ``state.error``; nothing is raised.
        """
        token = self.slot.next_token()
        self.state.is_open = True
        self.state.selected = movie
        self.state.details = None
        self.state.error = None
        self.state.is_loading = True

        with log_context(movie_id=movie.id):
            try:
                details = await self.catalog.get_movie_details(movie.id)
            except CatalogError as e:
                if self.slot.is_current(token):
                    logger.warning("detail_fetch_failed", error_code=e.code, error=str(e))
                    self.state.error = DETAIL_ERROR_MESSAGE
            else:
                if self.slot.is_current(token):
                    self.state.details = details
                    logger.debug("detail_fetch_committed", title=details.title)
            finally:
                if self.slot.is_current(token):
                    self.state.is_loading = False

    def close(self) -> None:
        """Close the modal and drop any in-flight detail response."""
        self.slot.next_token()
        self.state.is_open = False
        self.state.selected = None
        self.state.details = None
        self.state.error = None
        self.state.is_loading = False
