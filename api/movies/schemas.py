"""
Pydantic schemas for movie endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from . import validation


class MovieRequest(BaseModel):
    year: int = Field(..., ge=validation.MIN_YEAR, le=validation.MAX_YEAR)
    title: str = Field(
        ..., min_length=1, max_length=validation.MAX_TITLE_LENGTH, pattern=validation.SINGLE_LINE_PATTERN
    )
    studios: str = Field(
        ..., min_length=1, max_length=validation.MAX_STUDIOS_LENGTH, pattern=validation.SINGLE_LINE_PATTERN
    )
    producers: str = Field(
        ..., min_length=1, max_length=validation.MAX_PRODUCERS_LENGTH, pattern=validation.SINGLE_LINE_PATTERN
    )
    winner: bool


class MovieResponse(BaseModel):
    id: int
    year: int
    title: str
    studios: str
    producers: str
    winner: bool


class MoviePageResponse(BaseModel):
    movies: list[MovieResponse]
    page: int
    size: int
    total_elements: int
    total_pages: int
    sort_by: str
    direction: str
    filter_type: str | None = None
    filter_value: str | None = None
