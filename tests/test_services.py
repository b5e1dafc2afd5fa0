import uuid

import pytest

from app.repositories.movie_repository import MovieRepository
from app.repositories.rating_repository import RatingRepository
from app.schemas.movie import GetAllMoviesOptions
from app.schemas.validation import ValidationException, current_year
from app.services.movie_service import MovieService
from app.services.rating_service import RatingService

from conftest import make_movie

pytestmark = pytest.mark.anyio


async def _fail(*args, **kwargs):
    raise AssertionError("storage must not be touched")


async def test_create_rejects_invalid_movie_before_writing(db_session, monkeypatch):
    monkeypatch.setattr(MovieRepository, "create", staticmethod(_fail))

    with pytest.raises(ValidationException) as exc_info:
        await MovieService.create(db_session, make_movie(year_of_release=current_year() + 1))

    assert [e.property_name for e in exc_info.value.errors] == ["year_of_release"]


async def test_create_rejects_taken_slug(db_session):
    first = make_movie()
    await MovieService.create(db_session, first)

    with pytest.raises(ValidationException) as exc_info:
        await MovieService.create(db_session, make_movie(genres=["Romance"]))

    assert exc_info.value.errors[0].message == "This movie already exists in the system"
    kept = await MovieService.get_by_id(db_session, first.id)
    assert set(kept.genres) == {"Action", "Sci-Fi"}
    assert await MovieService.get_count(db_session) == 1


async def test_update_may_keep_its_own_slug(db_session):
    movie = make_movie()
    await MovieService.create(db_session, movie)

    updated = await MovieService.update(db_session, movie.model_copy(update={"genres": ["Drama"]}))

    assert updated.genres == ["Drama"]


async def test_update_unknown_movie_returns_none_without_writing(db_session, monkeypatch):
    existing = make_movie(title="Heat", year_of_release=1995)
    await MovieService.create(db_session, existing)
    monkeypatch.setattr(MovieRepository, "update", staticmethod(_fail))

    assert await MovieService.update(db_session, make_movie()) is None
    assert await MovieService.get_count(db_session) == 1


async def test_update_refreshes_rating_fields(db_session):
    movie = make_movie()
    user_id = uuid.uuid4()
    await MovieService.create(db_session, movie)
    await RatingService.rate_movie(db_session, movie.id, 4, user_id)
    await RatingService.rate_movie(db_session, movie.id, 5, uuid.uuid4())

    changed = movie.model_copy(update={"title": "The Matrix (Remastered)"})
    personal = await MovieService.update(db_session, changed.model_copy(), user_id)
    anonymous = await MovieService.update(db_session, changed.model_copy())

    assert personal.rating == 4.5
    assert personal.user_rating == 4
    assert personal.title == "The Matrix (Remastered)"
    assert anonymous.rating == 4.5
    assert anonymous.user_rating is None
    assert anonymous is not personal


async def test_update_returns_a_copy_without_stale_user_rating(db_session):
    movie = make_movie()
    await MovieService.create(db_session, movie)
    await RatingService.rate_movie(db_session, movie.id, 2, uuid.uuid4())

    incoming = movie.model_copy(update={"user_rating": 3, "rating": 1.0})
    result = await MovieService.update(db_session, incoming)

    assert result is not incoming
    assert result.rating == 2.0
    assert result.user_rating is None
    assert (incoming.rating, incoming.user_rating) == (1.0, 3)


async def test_get_all_rejects_invalid_options_before_query(db_session, monkeypatch):
    monkeypatch.setattr(MovieRepository, "get_all", staticmethod(_fail))

    with pytest.raises(ValidationException) as exc_info:
        await MovieService.get_all(db_session, GetAllMoviesOptions(page_size=50, sort_field="rating"))

    assert {e.property_name for e in exc_info.value.errors} == {"page_size", "sort_field"}


async def test_delete_reports_missing_movie_as_false(db_session):
    movie = make_movie()
    await MovieService.create(db_session, movie)

    assert await MovieService.delete_by_id(db_session, movie.id) is True
    assert await MovieService.delete_by_id(db_session, movie.id) is False


@pytest.mark.parametrize("value", [0, 6])
async def test_rating_out_of_range_fails_before_storage(db_session, monkeypatch, value):
    monkeypatch.setattr(MovieRepository, "exists_by_id", staticmethod(_fail))
    monkeypatch.setattr(RatingRepository, "rate_movie", staticmethod(_fail))

    with pytest.raises(ValidationException) as exc_info:
        await RatingService.rate_movie(db_session, uuid.uuid4(), value, uuid.uuid4())

    assert exc_info.value.errors[0].property_name == "rating"


async def test_rating_unknown_movie_is_not_found(db_session, monkeypatch):
    monkeypatch.setattr(RatingRepository, "rate_movie", staticmethod(_fail))

    assert await RatingService.rate_movie(db_session, uuid.uuid4(), 3, uuid.uuid4()) is False


async def test_rate_list_and_remove(db_session):
    movie = make_movie()
    user_id = uuid.uuid4()
    await MovieService.create(db_session, movie)

    assert await RatingService.rate_movie(db_session, movie.id, 3, user_id) is True
    assert await RatingService.rate_movie(db_session, movie.id, 1, user_id) is True

    ratings = await RatingService.get_ratings_for_user(db_session, user_id)
    assert [(r.slug, r.rating) for r in ratings] == [("the-matrix-1999", 1)]

    assert await RatingService.delete_rating(db_session, movie.id, user_id) is True
    assert await RatingService.get_ratings_for_user(db_session, user_id) == []


async def test_last_writer_wins_on_concurrent_updates(db_session):
    """No version check: the second update overwrites the first without error"""
    movie = make_movie()
    await MovieService.create(db_session, movie)

    await MovieService.update(db_session, movie.model_copy(update={"genres": ["Drama"]}))
    await MovieService.update(db_session, movie.model_copy(update={"genres": ["Comedy"]}))

    assert (await MovieService.get_by_id(db_session, movie.id)).genres == ["Comedy"]
