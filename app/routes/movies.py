"""
Movie Routes - create, fetch, list, update and delete movies
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from uuid import UUID

from app.database import get_db
from app.schemas.movie import (
    CreateMovieRequest,
    GetAllMoviesOptions,
    MovieResponse,
    MoviesResponse,
    UpdateMovieRequest,
)
from app.schemas.validation import ValidationFailureResponse
from app.services.movie_service import MovieService
from app.utils.cache import MOVIES_TAG, OUTPUT_CACHE_TTL, evict_movies, output_cache
from app.utils.dependencies import get_optional_user_id, require_admin, require_trusted_member

router = APIRouter(prefix="/api/movies", tags=["Movies"])


def _cache_key(request: Request) -> str:
    return output_cache.make_key(request.url.path, str(request.query_params))


def _store(cache_key: str, result, version: int) -> None:
    """
    Cache an anonymous response unless a write evicted the tag while it was
    being read; version is the tag version taken before the database read.
    """
    output_cache.set(
        cache_key,
        result,
        ttl=OUTPUT_CACHE_TTL,
        tags=[MOVIES_TAG],
        versions={MOVIES_TAG: version},
    )


def _parse_uuid(value: str) -> Optional[UUID]:
    try:
        return UUID(value)
    except ValueError:
        return None


@router.post(
    "",
    response_model=MovieResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ValidationFailureResponse}},
)
async def create_movie(
    movie_data: CreateMovieRequest,
    request: Request,
    response: Response,
    _: UUID = Depends(require_trusted_member),
    db: AsyncSession = Depends(get_db),
):
    """
    Create a movie

    - **title**: required
    - **year_of_release**: not later than the current year
    - **genres**: at least one label

    Requires the trusted member capability.
    """
    movie = movie_data.to_record()
    await MovieService.create(db, movie)
    evict_movies()

    response.headers["Location"] = str(request.url_for("get_movie", id_or_slug=str(movie.id)))
    return MovieResponse.from_record(movie)


@router.get("/{id_or_slug}", response_model=MovieResponse, name="get_movie")
async def get_movie(
    id_or_slug: str,
    request: Request,
    user_id: Optional[UUID] = Depends(get_optional_user_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Get a movie by id or by slug

    A value that parses as a UUID is treated as an id, anything else as a slug.
    Authenticated callers also get their own rating in user_rating.
    """
    cache_key = _cache_key(request)
    version = output_cache.tag_version(MOVIES_TAG)
    if user_id is None:
        cached = output_cache.get(cache_key)
        if cached is not None:
            return cached

    movie_id = _parse_uuid(id_or_slug)
    if movie_id is not None:
        movie = await MovieService.get_by_id(db, movie_id, user_id)
    else:
        movie = await MovieService.get_by_slug(db, id_or_slug, user_id)

    if movie is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Movie not found")

    result = MovieResponse.from_record(movie)
    if user_id is None:
        _store(cache_key, result, version)
    return result


@router.get("", response_model=MoviesResponse, responses={400: {"model": ValidationFailureResponse}})
async def get_movies(
    request: Request,
    title: Optional[str] = Query(None, description="Case-insensitive title substring"),
    year: Optional[int] = Query(None, description="Exact release year"),
    sort_by: Optional[str] = Query(None, alias="sortBy", description="'title' or 'yearofrelease', prefix '-' for descending"),
    page: int = Query(1, description="Page number (1-based)"),
    page_size: int = Query(10, alias="pageSize", description="Movies per page (1-25)"),
    user_id: Optional[UUID] = Depends(get_optional_user_id),
    db: AsyncSession = Depends(get_db),
):
    """
    List movies with optional title/year filters, sorting and paging

    total counts every movie matching the filters, not just this page.
    """
    cache_key = _cache_key(request)
    version = output_cache.tag_version(MOVIES_TAG)
    if user_id is None:
        cached = output_cache.get(cache_key)
        if cached is not None:
            return cached

    options = GetAllMoviesOptions.from_sort_by(
        sort_by,
        title=title,
        year_of_release=year,
        page=page,
        page_size=page_size,
        user_id=user_id,
    )
    movies = await MovieService.get_all(db, options)
    total = await MovieService.get_count(db, options.title, options.year_of_release)

    result = MoviesResponse.from_records(movies, options.page, options.page_size, total)
    if user_id is None:
        _store(cache_key, result, version)
    return result


@router.put(
    "/{movie_id}",
    response_model=MovieResponse,
    responses={400: {"model": ValidationFailureResponse}},
)
async def update_movie(
    movie_id: UUID,
    movie_data: UpdateMovieRequest,
    user_id: UUID = Depends(require_trusted_member),
    db: AsyncSession = Depends(get_db),
):
    """
    Replace a movie's title, year and genres

    Requires the trusted member capability. Returns 404 if the movie does not exist.
    """
    updated = await MovieService.update(db, movie_data.to_record(movie_id), user_id)
    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Movie not found")

    evict_movies()
    return MovieResponse.from_record(updated)


@router.delete("/{movie_id}", status_code=status.HTTP_200_OK)
async def delete_movie(
    movie_id: UUID,
    _: UUID = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    Delete a movie with its genres and ratings

    Requires the admin capability. Returns 404 if the movie does not exist.
    """
    if not await MovieService.delete_by_id(db, movie_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Movie not found")

    evict_movies()
    return Response(status_code=status.HTTP_200_OK)
