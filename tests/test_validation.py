import uuid

from app.schemas.movie import GetAllMoviesOptions, MovieRecord, SortOrder, make_slug
from app.schemas.validation import (
    current_year,
    validate_get_all_movies_options,
    validate_movie,
    validate_rating_value,
)

from conftest import make_movie


def failed_properties(failures):
    return {failure.property_name for failure in failures}


def test_valid_movie_passes():
    assert validate_movie(make_movie()) == []


def test_movie_rules_report_every_failing_field():
    movie = MovieRecord(id=uuid.UUID(int=0), title="   ", year_of_release=current_year() + 1, genres=[])

    assert failed_properties(validate_movie(movie)) == {"id", "title", "year_of_release", "genres"}


def test_movie_from_current_year_is_allowed():
    assert validate_movie(make_movie(year_of_release=current_year())) == []


def test_blank_genre_label_is_rejected():
    movie = make_movie(genres=["Drama", "  "])

    assert failed_properties(validate_movie(movie)) == {"genres"}


def test_title_with_script_is_rejected():
    movie = make_movie(title="<script>alert(1)</script>")

    assert failed_properties(validate_movie(movie)) == {"title"}


def test_genres_are_trimmed_and_deduplicated():
    movie = make_movie(genres=["Drama", " Drama ", "Comedy"])

    assert movie.genres == ["Drama", "Comedy"]


def test_slug_is_derived_from_title_and_year():
    assert make_slug("The Lord of the Rings: Return!", 2003) == "the-lord-of-the-rings-return-2003"
    assert make_movie(title="Nick the Greek", year_of_release=2023).slug == "nick-the-greek-2023"


def test_default_options_are_valid():
    assert validate_get_all_movies_options(GetAllMoviesOptions()) == []


def test_sort_field_is_case_insensitive_whitelist():
    assert validate_get_all_movies_options(GetAllMoviesOptions(sort_field="YearOfRelease")) == []

    failures = validate_get_all_movies_options(GetAllMoviesOptions(sort_field="slug; DROP TABLE movies"))
    assert failed_properties(failures) == {"sort_field"}
    assert failures[0].message == "You can only sort by 'title' or 'yearofrelease'"


def test_paging_bounds():
    assert failed_properties(validate_get_all_movies_options(GetAllMoviesOptions(page=0))) == {"page"}
    assert failed_properties(validate_get_all_movies_options(GetAllMoviesOptions(page_size=0))) == {"page_size"}
    assert failed_properties(validate_get_all_movies_options(GetAllMoviesOptions(page_size=26))) == {"page_size"}
    assert validate_get_all_movies_options(GetAllMoviesOptions(page_size=25)) == []


def test_future_year_filter_is_rejected():
    options = GetAllMoviesOptions(year_of_release=current_year() + 1)

    assert failed_properties(validate_get_all_movies_options(options)) == {"year_of_release"}


def test_signed_sort_expression():
    descending = GetAllMoviesOptions.from_sort_by("-yearofrelease")
    ascending = GetAllMoviesOptions.from_sort_by("title")
    unsorted = GetAllMoviesOptions.from_sort_by(None)

    assert (descending.sort_field, descending.sort_order) == ("yearofrelease", SortOrder.DESCENDING)
    assert (ascending.sort_field, ascending.sort_order) == ("title", SortOrder.ASCENDING)
    assert (unsorted.sort_field, unsorted.sort_order) == (None, SortOrder.UNSORTED)


def test_offset_is_zero_based():
    assert GetAllMoviesOptions(page=2, page_size=3).offset == 3


def test_rating_range():
    assert validate_rating_value(1) == []
    assert validate_rating_value(5) == []
    assert failed_properties(validate_rating_value(0)) == {"rating"}
    assert validate_rating_value(6)[0].message == "Rating must be between 1 and 5"


def test_values_outside_storage_integer_range_are_rejected():
    movie = make_movie(year_of_release=-10**19)
    options = GetAllMoviesOptions(page=10**19, year_of_release=-10**19)

    assert [f.message for f in validate_movie(movie)] == ["Year of release is out of range"]
    assert failed_properties(validate_get_all_movies_options(options)) == {"page", "year_of_release"}
    assert validate_get_all_movies_options(GetAllMoviesOptions(page=2**31 - 1)) == []
    assert failed_properties(validate_rating_value(10**19)) == {"rating"}
