"""
Movie Service - validation, existence checks and repository calls for the
movie endpoints
"""

from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from uuid import UUID
import logging

from app.repositories.movie_repository import MovieRepository
from app.repositories.rating_repository import RatingRepository
from app.schemas.movie import GetAllMoviesOptions, MovieRecord
from app.schemas.validation import (
    ValidationException,
    ValidationFailure,
    validate_get_all_movies_options,
    validate_movie,
)

logger = logging.getLogger(__name__)


class MovieService:
    """Service for movie operations"""

    @staticmethod
    async def _validate(db: AsyncSession, movie: MovieRecord) -> None:
        """
        Run the movie rules, then make sure no other movie owns the slug.

        Raises:
            ValidationException: with every failing field
        """
        failures = validate_movie(movie)
        if not failures:
            existing = await MovieRepository.get_by_slug(db, movie.slug)
            if existing is not None and existing.id != movie.id:
                failures.append(ValidationFailure(
                    property_name="slug",
                    message="This movie already exists in the system",
                ))

        if failures:
            raise ValidationException(failures)

    @staticmethod
    async def create(db: AsyncSession, movie: MovieRecord) -> bool:
        await MovieService._validate(db, movie)
        created = await MovieRepository.create(db, movie)
        logger.info(f"Created movie {movie.id} ({movie.slug})")
        return created

    @staticmethod
    async def get_by_id(db: AsyncSession, movie_id: UUID, user_id: Optional[UUID] = None) -> Optional[MovieRecord]:
        return await MovieRepository.get_by_id(db, movie_id, user_id)

    @staticmethod
    async def get_by_slug(db: AsyncSession, slug: str, user_id: Optional[UUID] = None) -> Optional[MovieRecord]:
        return await MovieRepository.get_by_slug(db, slug, user_id)

    @staticmethod
    async def get_all(db: AsyncSession, options: GetAllMoviesOptions) -> List[MovieRecord]:
        """Options that fail validation never reach the database"""
        failures = validate_get_all_movies_options(options)
        if failures:
            raise ValidationException(failures)
        return await MovieRepository.get_all(db, options)

    @staticmethod
    async def get_count(db: AsyncSession, title: Optional[str] = None, year_of_release: Optional[int] = None) -> int:
        return await MovieRepository.get_count(db, title, year_of_release)

    @staticmethod
    async def update(db: AsyncSession, movie: MovieRecord, user_id: Optional[UUID] = None) -> Optional[MovieRecord]:
        """
        Update a movie and return it with fresh rating data.

        The returned movie is a copy of the caller's movie, not a re-read:
        title, year and genres are exactly what was written, while the ratings
        are read again after the write and may include concurrent rating
        changes. user_rating is only set when user_id is given.

        Returns:
            The updated movie, or None if no movie has that id
        """
        await MovieService._validate(db, movie)

        if not await MovieRepository.exists_by_id(db, movie.id):
            return None

        await MovieRepository.update(db, movie)
        logger.info(f"Updated movie {movie.id} ({movie.slug})")

        if user_id is None:
            rating = await RatingRepository.get_rating(db, movie.id)
            return movie.model_copy(update={"rating": rating, "user_rating": None})

        rating, user_rating = await RatingRepository.get_rating_for_user(db, movie.id, user_id)
        return movie.model_copy(update={"rating": rating, "user_rating": user_rating})

    @staticmethod
    async def delete_by_id(db: AsyncSession, movie_id: UUID) -> bool:
        deleted = await MovieRepository.delete_by_id(db, movie_id)
        if deleted:
            logger.info(f"Deleted movie {movie_id}")
        return deleted
