"""Search analytics endpoints.

Records searches reported by discovery clients and serves the trending
list built from them.
"""

from typing import Annotated

from fastapi import APIRouter, Query, status

from moviefinder.core.logging import get_logger
from moviefinder.dependencies import AnalyticsDep
from moviefinder.schemas.analytics import (
    SearchRecordRequest,
    SearchRecordResponse,
    TrendingMovieItem,
    TrendingResponse,
)
from moviefinder.schemas.common import ErrorResponse

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "/searches",
    response_model=SearchRecordResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Record a search",
    description="Increment the count for a search term and remember its top result.",
    responses={
        202: {"description": "Search recorded"},
        503: {"model": ErrorResponse, "description": "Analytics store unavailable"},
    },
)
async def record_search(
    request: SearchRecordRequest,
    analytics: AnalyticsDep,
) -> SearchRecordResponse:
    count = await analytics.update_search_count(
        request.search_term, request.movie.to_summary()
    )
    logger.info("search_recorded", search_term=request.search_term, count=count)
    return SearchRecordResponse(search_term=request.search_term, count=count)


@router.get(
    "/trending",
    response_model=TrendingResponse,
    status_code=status.HTTP_200_OK,
    summary="Trending searches",
    description="Most searched terms with their top result, most searched first.",
    responses={
        200: {"description": "Trending searches"},
        503: {"model": ErrorResponse, "description": "Analytics store unavailable"},
    },
)
async def get_trending(
    analytics: AnalyticsDep,
    limit: Annotated[int, Query(ge=1, le=50, description="Number of entries")] = 5,
) -> TrendingResponse:
    trending = await analytics.get_trending_movies(limit=limit)
    return TrendingResponse(
        results=[TrendingMovieItem.model_validate(item) for item in trending]
    )
