"""
Rating Repository - per-user ratings and rating aggregates

The repository does not check that the movie exists; the rating service must
do that first. The foreign key on ratings.movieid rejects an orphan as an
IntegrityError if that check is skipped.
"""

from sqlalchemy import select, delete, func
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased
from typing import List, Optional, Tuple
from uuid import UUID
import logging

from app.models.movie import Movie
from app.models.rating import Rating
from app.schemas.rating import MovieRatingRecord

logger = logging.getLogger(__name__)

# One entry per app.database.SUPPORTED_DIALECTS
UPSERT_INSERTS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


def _average(value) -> Optional[float]:
    return float(value) if value is not None else None


class RatingRepository:
    """Rating Store"""

    @staticmethod
    async def rate_movie(db: AsyncSession, movie_id: UUID, rating: int, user_id: UUID) -> bool:
        """Insert or replace the (user, movie) rating in a single statement"""
        statement = UPSERT_INSERTS[db.get_bind().dialect.name](Rating).values(
            user_id=user_id, movie_id=movie_id, rating=rating
        )
        statement = statement.on_conflict_do_update(
            index_elements=[Rating.user_id, Rating.movie_id],
            set_={"rating": statement.excluded.rating},
        )

        try:
            result = await db.execute(statement)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        return result.rowcount > 0

    @staticmethod
    async def delete_rating(db: AsyncSession, movie_id: UUID, user_id: UUID) -> bool:
        try:
            result = await db.execute(
                delete(Rating).where(Rating.movie_id == movie_id, Rating.user_id == user_id)
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        return result.rowcount > 0

    @staticmethod
    async def get_rating(db: AsyncSession, movie_id: UUID) -> Optional[float]:
        """Average of every user's rating, rounded to one decimal; None when unrated"""
        result = await db.execute(
            select(func.round(func.avg(Rating.rating), 1)).where(Rating.movie_id == movie_id)
        )
        return _average(result.scalar())

    @staticmethod
    async def get_rating_for_user(
        db: AsyncSession, movie_id: UUID, user_id: UUID
    ) -> Tuple[Optional[float], Optional[int]]:
        """The average rating plus the given user's own value, if any"""
        mine = aliased(Rating, name="mine")
        user_rating = (
            select(mine.rating)
            .where(mine.movie_id == movie_id, mine.user_id == user_id)
            .limit(1)
            .scalar_subquery()
        )
        result = await db.execute(
            select(func.round(func.avg(Rating.rating), 1), user_rating)
            .where(Rating.movie_id == movie_id)
        )
        row = result.one()
        return _average(row[0]), row[1]

    @staticmethod
    async def get_ratings_for_user(db: AsyncSession, user_id: UUID) -> List[MovieRatingRecord]:
        result = await db.execute(
            select(
                Rating.movie_id.label("movie_id"),
                Movie.slug.label("slug"),
                Rating.rating.label("rating"),
            )
            .join(Movie, Movie.id == Rating.movie_id)
            .where(Rating.user_id == user_id)
        )
        return [MovieRatingRecord.model_validate(row) for row in result]
