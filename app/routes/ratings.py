"""
Rating Routes - API endpoints for the movie rating system
"""

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from app.database import get_db
from app.schemas.rating import MovieRatingResponse, MovieRatingsResponse, RateMovieRequest
from app.schemas.validation import ValidationFailureResponse
from app.services.rating_service import RatingService
from app.utils.cache import evict_movies
from app.utils.dependencies import get_current_user_id

router = APIRouter(prefix="/api/movies", tags=["Ratings"])
user_ratings_router = APIRouter(prefix="/api/ratings", tags=["Ratings"])


@router.put(
    "/{movie_id}/ratings",
    status_code=status.HTTP_200_OK,
    responses={400: {"model": ValidationFailureResponse}, 404: {"description": "Movie not found"}},
)
async def rate_movie(
    movie_id: UUID,
    rating_data: RateMovieRequest,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Rate a movie from 1 to 5

    If the user has already rated this movie, the rating is replaced.
    """
    if not await RatingService.rate_movie(db, movie_id, rating_data.rating, user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Movie not found")

    evict_movies()
    return Response(status_code=status.HTTP_200_OK)


@router.delete("/{movie_id}/ratings", status_code=status.HTTP_200_OK)
async def delete_rating(
    movie_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Remove the current user's rating for a movie

    Returns 404 if the user had not rated it.
    """
    if not await RatingService.delete_rating(db, movie_id, user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Rating not found")

    evict_movies()
    return Response(status_code=status.HTTP_200_OK)


@user_ratings_router.get("/me", response_model=MovieRatingsResponse)
async def get_my_ratings(
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Get every rating the current user has submitted"""
    ratings = await RatingService.get_ratings_for_user(db, user_id)
    return MovieRatingsResponse(
        items=[MovieRatingResponse.model_validate(rating, from_attributes=True) for rating in ratings]
    )
