import uuid

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from app.models.rating import Rating
from app.repositories.movie_repository import MovieRepository
from app.repositories.rating_repository import RatingRepository

from conftest import make_movie

pytestmark = pytest.mark.anyio


@pytest.fixture
async def movie(db_session):
    movie = make_movie()
    await MovieRepository.create(db_session, movie)
    return movie


async def test_rating_twice_keeps_latest_value(db_session, movie):
    user_id = uuid.uuid4()

    assert await RatingRepository.rate_movie(db_session, movie.id, 2, user_id) is True
    assert await RatingRepository.rate_movie(db_session, movie.id, 5, user_id) is True

    rows = await db_session.execute(select(func.count()).select_from(Rating))
    assert rows.scalar_one() == 1
    assert await RatingRepository.get_rating_for_user(db_session, movie.id, user_id) == (5.0, 5)


async def test_average_is_rounded_to_one_decimal(db_session, movie):
    for value in (5, 4, 4):
        await RatingRepository.rate_movie(db_session, movie.id, value, uuid.uuid4())

    assert await RatingRepository.get_rating(db_session, movie.id) == 4.3


async def test_unrated_movie_has_no_average(db_session, movie):
    assert await RatingRepository.get_rating(db_session, movie.id) is None
    assert await RatingRepository.get_rating_for_user(db_session, movie.id, uuid.uuid4()) == (None, None)


async def test_user_without_rating_still_sees_average(db_session, movie):
    await RatingRepository.rate_movie(db_session, movie.id, 3, uuid.uuid4())

    assert await RatingRepository.get_rating_for_user(db_session, movie.id, uuid.uuid4()) == (3.0, None)


async def test_delete_rating(db_session, movie):
    user_id = uuid.uuid4()
    await RatingRepository.rate_movie(db_session, movie.id, 4, user_id)

    assert await RatingRepository.delete_rating(db_session, movie.id, user_id) is True
    assert await RatingRepository.delete_rating(db_session, movie.id, user_id) is False
    assert await RatingRepository.get_rating(db_session, movie.id) is None


async def test_ratings_for_user_include_slug(db_session, movie):
    user_id = uuid.uuid4()
    other = make_movie(title="Heat", year_of_release=1995)
    await MovieRepository.create(db_session, other)
    await RatingRepository.rate_movie(db_session, movie.id, 5, user_id)
    await RatingRepository.rate_movie(db_session, other.id, 3, user_id)
    await RatingRepository.rate_movie(db_session, other.id, 1, uuid.uuid4())

    ratings = await RatingRepository.get_ratings_for_user(db_session, user_id)

    assert {(r.movie_id, r.slug, r.rating) for r in ratings} == {
        (movie.id, "the-matrix-1999", 5),
        (other.id, "heat-1995", 3),
    }


async def test_orphan_rating_is_rejected_by_foreign_key(db_session):
    with pytest.raises(IntegrityError):
        await RatingRepository.rate_movie(db_session, uuid.uuid4(), 3, uuid.uuid4())
