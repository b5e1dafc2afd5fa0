"""Business-rule validation for movies, listing options and ratings"""

from pydantic import BaseModel
from datetime import datetime, timezone
from typing import List, Optional
import re

from app.schemas.movie import GetAllMoviesOptions, MovieRecord, SortField

MIN_PAGE_SIZE = 1
MAX_PAGE_SIZE = 25
MIN_RATING = 1
MAX_RATING = 5

# Integer columns and paging values are bound as 32-bit integers
MIN_INT32 = -2**31
MAX_INT32 = 2**31 - 1

DANGEROUS_PATTERNS = [
    r'<script[^>]*>',
    r'javascript:',
    r'on\w+\s*=',
    r'<iframe',
]


class ValidationFailure(BaseModel):
    property_name: str
    message: str


class ValidationFailureResponse(BaseModel):
    """Body of a 400 response"""
    errors: List[ValidationFailure]


class ValidationException(Exception):
    """Raised by the services when a value fails its business rules"""

    def __init__(self, errors: List[ValidationFailure]):
        self.errors = errors
        super().__init__("; ".join(f"{e.property_name}: {e.message}" for e in errors))


def current_year() -> int:
    return datetime.now(timezone.utc).year


def contains_script(value: str) -> bool:
    """Detect common XSS patterns"""
    return any(re.search(pattern, value, re.IGNORECASE) for pattern in DANGEROUS_PATTERNS)


def validate_movie(movie: MovieRecord) -> List[ValidationFailure]:
    """
    Check a movie against the rules that need no storage access.
    Slug uniqueness is checked by the movie service, which can look it up.
    """
    failures = []

    if movie.id.int == 0:
        failures.append(ValidationFailure(property_name="id", message="Id must not be empty"))

    if not movie.title or not movie.title.strip():
        failures.append(ValidationFailure(property_name="title", message="Title must not be empty"))
    elif contains_script(movie.title):
        failures.append(ValidationFailure(property_name="title", message="Invalid characters detected"))

    if movie.year_of_release > current_year():
        failures.append(ValidationFailure(
            property_name="year_of_release",
            message=f"Year of release must be less than or equal to {current_year()}",
        ))
    elif movie.year_of_release < MIN_INT32:
        failures.append(ValidationFailure(property_name="year_of_release", message="Year of release is out of range"))

    if not movie.genres:
        failures.append(ValidationFailure(property_name="genres", message="At least one genre is required"))
    elif any(not genre for genre in movie.genres):
        failures.append(ValidationFailure(property_name="genres", message="Genre names must not be empty"))

    return failures


def validate_sort_field(field: Optional[str]) -> bool:
    """Validate sort field against the whitelist"""
    if field is None:
        return True
    return field.lower() in {f.value for f in SortField}


def validate_get_all_movies_options(options: GetAllMoviesOptions) -> List[ValidationFailure]:
    failures = []

    if options.year_of_release is not None:
        if options.year_of_release > current_year():
            failures.append(ValidationFailure(
                property_name="year_of_release",
                message=f"Year of release must be less than or equal to {current_year()}",
            ))
        elif options.year_of_release < MIN_INT32:
            failures.append(ValidationFailure(
                property_name="year_of_release",
                message="Year of release is out of range",
            ))

    if not validate_sort_field(options.sort_field):
        failures.append(ValidationFailure(
            property_name="sort_field",
            message="You can only sort by 'title' or 'yearofrelease'",
        ))

    if options.page < 1:
        failures.append(ValidationFailure(property_name="page", message="Page must be greater than or equal to 1"))
    elif options.page > MAX_INT32:
        failures.append(ValidationFailure(property_name="page", message=f"Page must be less than or equal to {MAX_INT32}"))

    if not MIN_PAGE_SIZE <= options.page_size <= MAX_PAGE_SIZE:
        failures.append(ValidationFailure(
            property_name="page_size",
            message=f"Page size must be between {MIN_PAGE_SIZE} and {MAX_PAGE_SIZE} movies per page",
        ))

    return failures


def validate_rating_value(rating: int) -> List[ValidationFailure]:
    if rating < MIN_RATING or rating > MAX_RATING:
        return [ValidationFailure(
            property_name="rating",
            message=f"Rating must be between {MIN_RATING} and {MAX_RATING}",
        )]
    return []
