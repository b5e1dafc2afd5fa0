"""
Rating Schemas - Pydantic models for rating request/response validation
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List
from uuid import UUID


class MovieRatingRecord(BaseModel):
    """A rating a user submitted, with the movie slug for display"""
    movie_id: UUID
    slug: str
    rating: int

    model_config = ConfigDict(from_attributes=True)


class RateMovieRequest(BaseModel):
    """
    Schema for rating a movie. The 1-5 range is checked by the rating service
    so that an out-of-range value comes back as a field-level failure.
    """
    rating: int = Field(..., description="Rating value (1-5)")


class MovieRatingResponse(BaseModel):
    movie_id: UUID
    slug: str
    rating: int

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "movie_id": "7ea232b8-c82c-4a54-abe3-fd61786e4193",
                "slug": "the-matrix-1999",
                "rating": 5,
            }
        },
    )


class MovieRatingsResponse(BaseModel):
    items: List[MovieRatingResponse]
