"""Observable state read by front ends.

The discovery core mutates these objects; renderers only read them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from moviefinder.services.analytics import TrendingMovie
    from moviefinder.services.catalog import MovieDetail, MovieSummary


class FetchMode(str, Enum):
    """How a list fetch result is applied to the visible list."""

    REPLACE = "replace"
    APPEND = "append"


class ScrollPhase(str, Enum):
    """Infinite-scroll controller phase."""

    IDLE = "idle"
    LOADING = "loading"
    LOADING_MORE = "loading_more"
    EXHAUSTED = "exhausted"


@dataclass
class ViewState:
    """Everything the movie list view renders.

    ``page`` is the last committed page number (0 before the first commit).
    ``is_degraded`` is set while the fallback dataset is shown.
    """

    query: str = ""
    movies: list[MovieSummary] = field(default_factory=list)
    is_loading: bool = False
    is_loading_more: bool = False
    error_message: str | None = None
    trending: list[TrendingMovie] = field(default_factory=list)
    page: int = 0
    total_pages: int = 0
    has_more: bool = False
    is_degraded: bool = False


@dataclass
class DetailState:
    """Modal state for the selected movie."""

    is_open: bool = False
    selected: MovieSummary | None = None
    details: MovieDetail | None = None
    is_loading: bool = False
    error: str | None = None
