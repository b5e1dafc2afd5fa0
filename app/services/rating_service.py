"""
Rating Service - Handle all rating-related business logic
"""

from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from uuid import UUID
import logging

from app.repositories.movie_repository import MovieRepository
from app.repositories.rating_repository import RatingRepository
from app.schemas.rating import MovieRatingRecord
from app.schemas.validation import ValidationException, validate_rating_value

logger = logging.getLogger(__name__)


class RatingService:
    """Service for movie rating operations"""

    @staticmethod
    async def rate_movie(db: AsyncSession, movie_id: UUID, rating: int, user_id: UUID) -> bool:
        """
        Add a new rating or replace the user's existing one

        Returns:
            False if the movie does not exist

        Raises:
            ValidationException: If rating is outside 1-5 (checked before any query)
        """
        failures = validate_rating_value(rating)
        if failures:
            raise ValidationException(failures)

        if not await MovieRepository.exists_by_id(db, movie_id):
            return False

        rated = await RatingRepository.rate_movie(db, movie_id, rating, user_id)
        logger.info(f"User {user_id} rated movie {movie_id}: {rating}")
        return rated

    @staticmethod
    async def delete_rating(db: AsyncSession, movie_id: UUID, user_id: UUID) -> bool:
        deleted = await RatingRepository.delete_rating(db, movie_id, user_id)
        if deleted:
            logger.info(f"User {user_id} removed rating for movie {movie_id}")
        return deleted

    @staticmethod
    async def get_ratings_for_user(db: AsyncSession, user_id: UUID) -> List[MovieRatingRecord]:
        return await RatingRepository.get_ratings_for_user(db, user_id)
