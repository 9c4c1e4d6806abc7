"""
Field rules for movie records.

Pydantic already rejects most bad payloads at the HTTP edge; these checks
run again in the services so every caller (startup import included) gets
the same rules and a ValidationError instead of a store error.
"""

from __future__ import annotations

from dataclasses import dataclass

from core import errors

MIN_YEAR = 1900
MAX_YEAR = 2100
MAX_TITLE_LENGTH = 500
MAX_STUDIOS_LENGTH = 500
MAX_PRODUCERS_LENGTH = 1000
DEFAULT_DELIMITER = ";"
LINE_BREAKS = ("\r", "\n")
# Single-line text; the delimiter is checked in validate_text.
SINGLE_LINE_PATTERN = r"^[^\r\n]*$"


@dataclass(frozen=True)
class MovieFields:
    year: int
    title: str
    studios: str
    producers: str
    winner: bool


def validate_id(movie_id: int | None) -> int:
    if movie_id is None or isinstance(movie_id, bool) or not isinstance(movie_id, int):
        raise errors.ValidationError("ID must be an integer.")
    if movie_id <= 0:
        raise errors.ValidationError(f"ID must be positive, but was: {movie_id}")
    return movie_id


def validate_year(year: int | None) -> int:
    if year is None or isinstance(year, bool) or not isinstance(year, int):
        raise errors.ValidationError("Year is required and must be an integer.")
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise errors.ValidationError(f"Year must be between {MIN_YEAR} and {MAX_YEAR}, but was: {year}")
    return year


def validate_text(value: str | None, *, field: str, max_length: int, delimiter: str = DEFAULT_DELIMITER) -> str:
    if value is None:
        raise errors.ValidationError(f"{field} cannot be null")
    trimmed = str(value).strip()
    if not trimmed:
        raise errors.ValidationError(f"{field} cannot be blank")
    if len(trimmed) > max_length:
        raise errors.ValidationError(
            f"{field} must be between 1 and {max_length} characters, but was: {len(trimmed)}"
        )
    # Each record is one mirror line split on the delimiter.
    if any(ch in trimmed for ch in LINE_BREAKS):
        raise errors.ValidationError(f"{field} cannot contain line breaks")
    if delimiter and delimiter[0] in trimmed:
        raise errors.ValidationError(f"{field} cannot contain the mirror delimiter {delimiter[0]!r}")
    return trimmed


def validate_winner(winner: bool | None) -> bool:
    if not isinstance(winner, bool):
        raise errors.ValidationError("Winner is required and must be a boolean.")
    return winner


def clean_movie_fields(
    *,
    year: int | None,
    title: str | None,
    studios: str | None,
    producers: str | None,
    winner: bool | None,
    delimiter: str = DEFAULT_DELIMITER,
) -> MovieFields:
    return MovieFields(
        year=validate_year(year),
        title=validate_text(title, field="Title", max_length=MAX_TITLE_LENGTH, delimiter=delimiter),
        studios=validate_text(studios, field="Studios", max_length=MAX_STUDIOS_LENGTH, delimiter=delimiter),
        producers=validate_text(
            producers, field="Producers", max_length=MAX_PRODUCERS_LENGTH, delimiter=delimiter
        ),
        winner=validate_winner(winner),
    )
