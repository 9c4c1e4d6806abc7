"""
Movie use cases.

Each write runs in a fixed order so the only partial failure possible is
"mirror lags store":

- create: allocate id -> insert into store -> append to mirror
- update: check existence -> update store -> replace mirror line
- delete: check existence -> delete from store -> drop mirror line

There is no rollback. A store write followed by a failed mirror write is
logged as a divergence and re-raised so the caller sees the failure. The id
allocated for a create stays consumed even when the insert fails.

The allocator and mirror do blocking file I/O under their own locks, so they
are called through `asyncio.to_thread`.
"""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import Any, Callable

from core import errors
from core.id_allocator import IdAllocator
from core.mirror import MirrorSynchronizer

from . import repository, validation
from .models import Movie

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MoviePage:
    movies: list[Movie]
    page: int
    size: int
    total_elements: int
    total_pages: int
    sort_by: str
    direction: str
    filter_type: str | None
    filter_value: str | None


async def _sync_mirror(action: str, movie_id: int, call: Callable[..., None], *args: Any) -> None:
    try:
        await asyncio.to_thread(call, *args)
    except errors.AwardsError:
        logger.exception("mirror_divergence action=%s id=%s store_written=true", action, movie_id)
        raise


async def create_movie(
    *,
    year: int,
    title: str,
    studios: str,
    producers: str,
    winner: bool,
    allocator: IdAllocator,
    mirror: MirrorSynchronizer,
) -> Movie:
    fields = validation.clean_movie_fields(
        year=year,
        title=title,
        studios=studios,
        producers=producers,
        winner=winner,
        delimiter=mirror.delimiter,
    )

    movie_id = await asyncio.to_thread(allocator.allocate_next)

    with errors.storage_errors(f"Failed to insert movie {movie_id}."):
        row = await repository.insert_movie(
            movie_id=movie_id,
            year=fields.year,
            title=fields.title,
            studios=fields.studios,
            producers=fields.producers,
            winner=fields.winner,
        )
    movie = Movie.from_row(row)

    await _sync_mirror("create", movie.id, mirror.append, movie)
    logger.info("movie_created id=%s year=%s winner=%s", movie.id, movie.year, movie.winner)
    return movie


async def update_movie(
    movie_id: int,
    *,
    year: int,
    title: str,
    studios: str,
    producers: str,
    winner: bool,
    mirror: MirrorSynchronizer,
) -> Movie:
    validation.validate_id(movie_id)
    fields = validation.clean_movie_fields(
        year=year,
        title=title,
        studios=studios,
        producers=producers,
        winner=winner,
        delimiter=mirror.delimiter,
    )

    await _require_movie(movie_id)

    with errors.storage_errors(f"Failed to update movie {movie_id}."):
        row = await repository.update_movie(
            movie_id,
            year=fields.year,
            title=fields.title,
            studios=fields.studios,
            producers=fields.producers,
            winner=fields.winner,
        )
    if row is None:
        # Deleted between the existence check and the update.
        raise errors.NotFoundError(f"Movie with ID {movie_id} not found.")
    movie = Movie.from_row(row)

    await _sync_mirror("update", movie.id, mirror.update, movie)
    logger.info("movie_updated id=%s", movie.id)
    return movie


async def delete_movie(movie_id: int, *, mirror: MirrorSynchronizer) -> None:
    validation.validate_id(movie_id)
    await _require_movie(movie_id)

    with errors.storage_errors(f"Failed to delete movie {movie_id}."):
        deleted = await repository.delete_movie(movie_id)
    if not deleted:
        raise errors.NotFoundError(f"Movie with ID {movie_id} not found.")

    await _sync_mirror("delete", movie_id, mirror.remove, movie_id)
    logger.info("movie_deleted id=%s", movie_id)


async def get_movie(movie_id: int) -> Movie:
    validation.validate_id(movie_id)
    return await _require_movie(movie_id)


async def list_movies(
    *,
    page: int = 0,
    size: int = DEFAULT_PAGE_SIZE,
    sort_by: str | None = None,
    direction: str | None = None,
    filter_type: str | None = None,
    filter_value: str | None = None,
) -> MoviePage:
    page = max(0, page)
    size = max(1, min(size, MAX_PAGE_SIZE))

    with errors.storage_errors("Failed to list movies."):
        total = await repository.count_movies(filter_type=filter_type, filter_value=filter_value)
        rows = await repository.list_movies(
            filter_type=filter_type,
            filter_value=filter_value,
            sort_by=sort_by,
            direction=direction,
            limit=size,
            offset=page * size,
        )

    return MoviePage(
        movies=[Movie.from_row(r) for r in rows],
        page=page,
        size=size,
        total_elements=total,
        total_pages=max(1, math.ceil(total / size)),
        sort_by=repository.sort_field(sort_by),
        direction=repository.sort_direction(direction).lower(),
        filter_type=filter_type,
        filter_value=filter_value,
    )


async def _require_movie(movie_id: int) -> Movie:
    with errors.storage_errors(f"Failed to load movie {movie_id}."):
        row = await repository.get_movie(movie_id)
    if row is None:
        raise errors.NotFoundError(f"Movie with ID {movie_id} not found.")
    return Movie.from_row(row)
