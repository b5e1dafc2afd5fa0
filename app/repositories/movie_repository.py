"""
Movie Repository - persistence for movies and their genre rows

Every method takes the request-scoped AsyncSession. Writes that touch both
the movie row and its genre rows run in one transaction: committed together
or rolled back together.
"""

from sqlalchemy import select, insert, update, delete, func, and_, null, exists
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased
from typing import Dict, Iterable, List, Optional
from uuid import UUID
import logging

from app.models.movie import Movie, Genre
from app.models.rating import Rating
from app.schemas.movie import GetAllMoviesOptions, MovieRecord, SortField, SortOrder

logger = logging.getLogger(__name__)

# Caller text never reaches the ORDER BY clause, only these columns do
SORT_COLUMNS = {
    SortField.TITLE: Movie.title,
    SortField.YEAR_OF_RELEASE: Movie.year_of_release,
}


def _movie_query(user_id: Optional[UUID] = None):
    """
    One row per movie with its aggregate rating and, when user_id is given,
    that user's own rating. Ratings are aggregated in a subquery so the outer
    query never multiplies movie rows.
    """
    aggregate = (
        select(
            Rating.movie_id.label("movie_id"),
            func.round(func.avg(Rating.rating), 1).label("rating"),
        )
        .group_by(Rating.movie_id)
        .subquery("aggregate")
    )
    columns = [
        Movie.id.label("id"),
        Movie.title.label("title"),
        Movie.year_of_release.label("year_of_release"),
        aggregate.c.rating,
    ]

    if user_id is None:
        query = select(*columns, null().label("user_rating")).select_from(Movie)
    else:
        mine = aliased(Rating, name="mine")
        query = (
            select(*columns, mine.rating.label("user_rating"))
            .select_from(Movie)
            .outerjoin(mine, and_(mine.movie_id == Movie.id, mine.user_id == user_id))
        )

    return query.outerjoin(aggregate, aggregate.c.movie_id == Movie.id)


def _filters(title: Optional[str], year_of_release: Optional[int]) -> list:
    """WHERE clauses shared by get_all and get_count"""
    clauses = []
    if title:
        clauses.append(Movie.title.icontains(title, autoescape=True))
    if year_of_release is not None:
        clauses.append(Movie.year_of_release == year_of_release)
    return clauses


def _to_record(row, genres: Iterable[str]) -> MovieRecord:
    return MovieRecord(
        id=row.id,
        title=row.title,
        year_of_release=row.year_of_release,
        genres=list(genres),
        rating=float(row.rating) if row.rating is not None else None,
        user_rating=row.user_rating,
    )


class MovieRepository:
    """Movie Store: CRUD, filtered listing, existence check and count"""

    @staticmethod
    async def _genres_for(db: AsyncSession, movie_ids: List[UUID]) -> Dict[UUID, List[str]]:
        """Hydrate genre sets with a separate query instead of a row-multiplying join"""
        genres: Dict[UUID, List[str]] = {movie_id: [] for movie_id in movie_ids}
        if not movie_ids:
            return genres

        result = await db.execute(
            select(Genre.movie_id.label("movie_id"), Genre.name.label("name"))
            .where(Genre.movie_id.in_(movie_ids))
        )
        for row in result:
            genres[row.movie_id].append(row.name)
        return genres

    @staticmethod
    async def create(db: AsyncSession, movie: MovieRecord) -> bool:
        """
        Insert the movie row and, if exactly one row went in, its genre rows.
        A duplicate slug surfaces as IntegrityError after the rollback.
        """
        try:
            result = await db.execute(
                insert(Movie).values(
                    id=movie.id,
                    slug=movie.slug,
                    title=movie.title,
                    year_of_release=movie.year_of_release,
                )
            )
            if result.rowcount == 1 and movie.genres:
                await db.execute(
                    insert(Genre),
                    [{"movie_id": movie.id, "name": genre} for genre in movie.genres],
                )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        return result.rowcount == 1

    @staticmethod
    async def _get_one(db: AsyncSession, condition, user_id: Optional[UUID]) -> Optional[MovieRecord]:
        result = await db.execute(_movie_query(user_id).where(condition))
        row = result.first()
        if row is None:
            return None

        genres = await MovieRepository._genres_for(db, [row.id])
        return _to_record(row, genres[row.id])

    @staticmethod
    async def get_by_id(db: AsyncSession, movie_id: UUID, user_id: Optional[UUID] = None) -> Optional[MovieRecord]:
        logger.debug(f"Fetching movie {movie_id}")
        return await MovieRepository._get_one(db, Movie.id == movie_id, user_id)

    @staticmethod
    async def get_by_slug(db: AsyncSession, slug: str, user_id: Optional[UUID] = None) -> Optional[MovieRecord]:
        logger.debug(f"Fetching movie by slug {slug}")
        return await MovieRepository._get_one(db, Movie.slug == slug, user_id)

    @staticmethod
    async def get_all(db: AsyncSession, options: GetAllMoviesOptions) -> List[MovieRecord]:
        """
        One page of movies matching the options. Without a sort field no
        ORDER BY is emitted and the order is whatever the database returns.
        """
        query = _movie_query(options.user_id).where(*_filters(options.title, options.year_of_release))

        if options.sort_field is not None:
            column = SORT_COLUMNS[SortField(options.sort_field.lower())]
            query = query.order_by(column.desc() if options.sort_order == SortOrder.DESCENDING else column.asc())

        query = query.offset(options.offset).limit(options.page_size)

        rows = (await db.execute(query)).all()
        genres = await MovieRepository._genres_for(db, [row.id for row in rows])
        return [_to_record(row, genres[row.id]) for row in rows]

    @staticmethod
    async def update(db: AsyncSession, movie: MovieRecord) -> bool:
        """Replace the genre set and the scalar fields in one transaction"""
        try:
            await db.execute(delete(Genre).where(Genre.movie_id == movie.id))
            if movie.genres:
                await db.execute(
                    insert(Genre),
                    [{"movie_id": movie.id, "name": genre} for genre in movie.genres],
                )
            result = await db.execute(
                update(Movie)
                .where(Movie.id == movie.id)
                .values(slug=movie.slug, title=movie.title, year_of_release=movie.year_of_release)
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        return result.rowcount > 0

    @staticmethod
    async def delete_by_id(db: AsyncSession, movie_id: UUID) -> bool:
        """Delete genre rows then the movie row; ratings go with it via ON DELETE CASCADE"""
        try:
            await db.execute(delete(Genre).where(Genre.movie_id == movie_id))
            result = await db.execute(delete(Movie).where(Movie.id == movie_id))
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        return result.rowcount > 0

    @staticmethod
    async def exists_by_id(db: AsyncSession, movie_id: UUID) -> bool:
        result = await db.execute(select(exists().where(Movie.id == movie_id)))
        return bool(result.scalar())

    @staticmethod
    async def get_count(db: AsyncSession, title: Optional[str] = None, year_of_release: Optional[int] = None) -> int:
        """Count with the same filters get_all applies, so page totals agree"""
        result = await db.execute(
            select(func.count(Movie.id)).where(*_filters(title, year_of_release))
        )
        return result.scalar_one()
