"""Search analytics API schemas."""

from pydantic import BaseModel, ConfigDict, Field

from moviefinder.schemas.common import BaseSchema
from moviefinder.services.catalog import MovieSummary


class SearchMovie(BaseSchema):
    """Top search result as reported by the client."""

    id: int = Field(..., ge=1, description="TMDB movie ID")
    title: str = Field(..., min_length=1, max_length=500, description="Movie title")
    vote_average: float | None = Field(None, ge=0, le=10, description="Average rating")
    poster_path: str | None = Field(None, description="TMDB poster file path")
    release_date: str | None = Field(None, description="Release date (YYYY-MM-DD)")
    original_language: str = Field("", max_length=10, description="Language code")

    def to_summary(self) -> MovieSummary:
        return MovieSummary(**self.model_dump())


class SearchRecordRequest(BaseSchema):
    """Request body for recording a search."""

    search_term: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Search text as typed",
        json_schema_extra={"example": "batman"},
    )
    movie: SearchMovie


class SearchRecordResponse(BaseModel):
    """Count after recording a search."""

    search_term: str
    count: int = Field(..., ge=1)


class TrendingMovieItem(BaseModel):
    """One trending search with its top result."""

    model_config = ConfigDict(from_attributes=True)

    search_term: str = Field(..., description="Search text as first typed")
    count: int = Field(..., ge=0, description="Number of searches")
    movie_id: int = Field(..., description="TMDB ID of the top result")
    title: str = Field("", description="Title of the top result")
    poster_url: str | None = Field(None, description="Poster image URL")


class TrendingResponse(BaseModel):
    """Trending searches, most searched first."""

    results: list[TrendingMovieItem]

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "results": [
                    {
                        "search_term": "batman",
                        "count": 42,
                        "movie_id": 268,
                        "title": "Batman",
                        "poster_url": "https://image.tmdb.org/t/p/w500/cij4dd21v2Rk2YtUQbV5kW69WB2.jpg",
                    }
                ]
            }
        }
    )
