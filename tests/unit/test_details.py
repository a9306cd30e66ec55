"""Tests for DetailFetcher."""

import asyncio
from unittest.mock import MagicMock

import pytest

from moviefinder.core.exceptions import CatalogHTTPError, CatalogNetworkError
from moviefinder.services.catalog import MovieDetail, MovieSummary
from moviefinder.services.details import DETAIL_ERROR_MESSAGE, DetailFetcher
from tests.mocks.tmdb_responses import SHAWSHANK_DETAIL_RESPONSE

SHAWSHANK = MovieSummary(id=278, title="The Shawshank Redemption")


@pytest.fixture
def detail() -> MovieDetail:
    return MovieDetail.from_api(SHAWSHANK_DETAIL_RESPONSE)


class TestDetailFetcher:
    @pytest.mark.asyncio
    async def test_open_loads_details(
        self, mock_catalog: MagicMock, detail: MovieDetail
    ) -> None:
        mock_catalog.get_movie_details.return_value = detail
        fetcher = DetailFetcher(mock_catalog)

        await fetcher.open(SHAWSHANK)

        state = fetcher.state
        assert state.is_open is True
        assert state.selected is SHAWSHANK
        assert state.details is detail
        assert state.is_loading is False
        assert state.error is None
        mock_catalog.get_movie_details.assert_awaited_once_with(278)

    @pytest.mark.asyncio
    async def test_loading_while_in_flight(
        self, mock_catalog: MagicMock, detail: MovieDetail
    ) -> None:
        release = asyncio.Event()

        async def slow(movie_id: int) -> MovieDetail:
            await release.wait()
            return detail

        mock_catalog.get_movie_details.side_effect = slow
        fetcher = DetailFetcher(mock_catalog)

        task = asyncio.create_task(fetcher.open(SHAWSHANK))
        await asyncio.sleep(0)

        assert fetcher.state.is_open is True
        assert fetcher.state.is_loading is True
        assert fetcher.state.details is None

        release.set()
        await task

        assert fetcher.state.is_loading is False

    @pytest.mark.asyncio
    async def test_failure_sets_error(self, mock_catalog: MagicMock) -> None:
        mock_catalog.get_movie_details.side_effect = CatalogNetworkError()
        fetcher = DetailFetcher(mock_catalog)

        await fetcher.open(SHAWSHANK)

        assert fetcher.state.error == DETAIL_ERROR_MESSAGE
        assert fetcher.state.details is None
        assert fetcher.state.is_loading is False
        assert fetcher.state.is_open is True

    @pytest.mark.asyncio
    async def test_http_error_sets_same_message(self, mock_catalog: MagicMock) -> None:
        mock_catalog.get_movie_details.side_effect = CatalogHTTPError(404)
        fetcher = DetailFetcher(mock_catalog)

        await fetcher.open(SHAWSHANK)

        assert fetcher.state.error == "Failed to load movie details"

    @pytest.mark.asyncio
    async def test_reopen_fetches_again(
        self, mock_catalog: MagicMock, detail: MovieDetail
    ) -> None:
        """Test that details are not cached between opens."""
        mock_catalog.get_movie_details.return_value = detail
        fetcher = DetailFetcher(mock_catalog)

        await fetcher.open(SHAWSHANK)
        fetcher.close()
        await fetcher.open(SHAWSHANK)

        assert mock_catalog.get_movie_details.await_count == 2

    @pytest.mark.asyncio
    async def test_close_resets_state(
        self, mock_catalog: MagicMock, detail: MovieDetail
    ) -> None:
        mock_catalog.get_movie_details.return_value = detail
        fetcher = DetailFetcher(mock_catalog)
        await fetcher.open(SHAWSHANK)

        fetcher.close()

        assert fetcher.state.is_open is False
        assert fetcher.state.selected is None
        assert fetcher.state.details is None

    @pytest.mark.asyncio
    async def test_close_drops_in_flight_response(
        self, mock_catalog: MagicMock, detail: MovieDetail
    ) -> None:
        release = asyncio.Event()

        async def slow(movie_id: int) -> MovieDetail:
            await release.wait()
            return detail

        mock_catalog.get_movie_details.side_effect = slow
        fetcher = DetailFetcher(mock_catalog)

        task = asyncio.create_task(fetcher.open(SHAWSHANK))
        await asyncio.sleep(0)
        fetcher.close()
        release.set()
        await task

        assert fetcher.state.is_open is False
        assert fetcher.state.details is None
        assert fetcher.state.is_loading is False

    @pytest.mark.asyncio
    async def test_latest_selection_wins(
        self, mock_catalog: MagicMock, detail: MovieDetail
    ) -> None:
        """Test that switching movies mid-load never shows the first movie's details."""
        first_release = asyncio.Event()
        godfather = MovieDetail(id=238, title="The Godfather")

        async def fetch(movie_id: int) -> MovieDetail:
            if movie_id == 278:
                await first_release.wait()
                return detail
            return godfather

        mock_catalog.get_movie_details.side_effect = fetch
        fetcher = DetailFetcher(mock_catalog)

        first = asyncio.create_task(fetcher.open(SHAWSHANK))
        await asyncio.sleep(0)
        await fetcher.open(MovieSummary(id=238, title="The Godfather"))
        first_release.set()
        await first

        assert fetcher.state.details is godfather
        assert fetcher.state.selected.id == 238
