"""
Movie schemas - domain records passed between routes, services and
repositories, plus the request/response bodies of the movie endpoints
"""
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from uuid import UUID, uuid4
from enum import Enum
import re

SLUG_STRIP_PATTERN = re.compile(r"[^0-9A-Za-z _-]")


def make_slug(title: str, year_of_release: int) -> str:
    """URL-safe alternate key: 'The Matrix', 1999 -> 'the-matrix-1999'"""
    slugged = SLUG_STRIP_PATTERN.sub("", title).lower().replace(" ", "-")
    return f"{slugged}-{year_of_release}"


def normalize_genres(genres: List[str]) -> List[str]:
    """Trim labels and drop repeats, keeping first-seen order"""
    return list(dict.fromkeys(genre.strip() for genre in genres))


# ============================================
# Domain records
# ============================================

class MovieRecord(BaseModel):
    """A movie as the catalog sees it, with rating data folded in on reads"""
    id: UUID
    title: str
    year_of_release: int
    genres: List[str] = Field(default_factory=list)
    rating: Optional[float] = None
    user_rating: Optional[int] = None

    @field_validator("genres")
    @classmethod
    def dedupe_genres(cls, v):
        return normalize_genres(v)

    @property
    def slug(self) -> str:
        return make_slug(self.title, self.year_of_release)


class SortField(str, Enum):
    """Columns a listing may be ordered by"""
    TITLE = "title"
    YEAR_OF_RELEASE = "yearofrelease"


class SortOrder(str, Enum):
    UNSORTED = "unsorted"
    ASCENDING = "ascending"
    DESCENDING = "descending"


class GetAllMoviesOptions(BaseModel):
    """
    Filter, sort and paging parameters for a movie listing.
    user_id only populates user_rating in the results, it never filters them.
    """
    title: Optional[str] = None
    year_of_release: Optional[int] = None
    sort_field: Optional[str] = None
    sort_order: SortOrder = SortOrder.UNSORTED
    page: int = 1
    page_size: int = 10
    user_id: Optional[UUID] = None

    @classmethod
    def from_sort_by(cls, sort_by: Optional[str], **kwargs) -> "GetAllMoviesOptions":
        """
        Build options from a signed sort expression such as 'title' or
        '-yearofrelease' ('-' means descending).
        """
        if sort_by is None:
            return cls(sort_field=None, sort_order=SortOrder.UNSORTED, **kwargs)
        order = SortOrder.DESCENDING if sort_by.startswith("-") else SortOrder.ASCENDING
        return cls(sort_field=sort_by.strip("+-"), sort_order=order, **kwargs)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


# ============================================
# Request / response bodies
# ============================================

class CreateMovieRequest(BaseModel):
    """Schema for creating a movie"""
    title: str = Field(..., description="Movie title")
    year_of_release: int = Field(..., description="Release year")
    genres: List[str] = Field(default_factory=list, description="Genre labels")

    def to_record(self, movie_id: Optional[UUID] = None) -> MovieRecord:
        return MovieRecord(
            id=movie_id or uuid4(),
            title=self.title,
            year_of_release=self.year_of_release,
            genres=self.genres,
        )


class UpdateMovieRequest(CreateMovieRequest):
    """Schema for replacing a movie's title, year and genre set"""


class MovieResponse(BaseModel):
    id: UUID
    title: str
    slug: str
    rating: Optional[float] = None
    user_rating: Optional[int] = None
    year_of_release: int
    genres: List[str]

    @classmethod
    def from_record(cls, movie: MovieRecord) -> "MovieResponse":
        return cls(
            id=movie.id,
            title=movie.title,
            slug=movie.slug,
            rating=movie.rating,
            user_rating=movie.user_rating,
            year_of_release=movie.year_of_release,
            genres=movie.genres,
        )


class MoviesResponse(BaseModel):
    """One page of a movie listing"""
    items: List[MovieResponse]
    page: int
    page_size: int
    total: int
    has_next_page: bool

    @classmethod
    def from_records(cls, movies: List[MovieRecord], page: int, page_size: int, total: int) -> "MoviesResponse":
        return cls(
            items=[MovieResponse.from_record(movie) for movie in movies],
            page=page,
            page_size=page_size,
            total=total,
            has_next_page=total > page * page_size,
        )
