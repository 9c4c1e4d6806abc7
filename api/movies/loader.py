"""
Startup data import.

Runs once per process, after the schema exists:

1. optionally overwrite the writable mirror with the bundled original
2. optionally upsert every importable mirror line into the store
3. reconcile the id counter with the store's max id (the "authority") and
   the highest id still present in the mirror

Step 3 always runs. A stale counter (fresh import) is moved up; a counter
that is ahead (ids issued for rows since deleted) is left alone. After a
reset to the original data the counter is forced to that maximum. Mirror
lines skipped by the import keep their id, so the counter never issues it.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from core import errors
from core.id_allocator import IdAllocator
from core.mirror import HEADER_FIELDS, MirrorSynchronizer

from . import repository, validation
from .models import Movie

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StartupReport:
    imported: int
    skipped: int
    authority: int
    mirror_max_id: int
    counter: int


def parse_row(
    row: list[str], *, winner_literal: str, min_columns: int, delimiter: str = validation.DEFAULT_DELIMITER
) -> Movie | None:
    """
    Turn one mirror line into a Movie, or None (with a warning) if it is
    not importable. Warnings name the raw id field of the line.
    """
    raw_id = row[0].strip() if row else ""
    if len(row) < min_columns:
        logger.warning("mirror_line_skipped id=%r reason=too_few_columns columns=%s", raw_id, len(row))
        return None

    row = [*row, *([""] * (len(HEADER_FIELDS) - len(row)))]
    try:
        movie_id = validation.validate_id(_parse_int(row[0], "ID"))
        fields = validation.clean_movie_fields(
            year=_parse_int(row[1], "Year"),
            title=row[2],
            studios=row[3],
            producers=row[4],
            winner=row[5].strip().lower() == winner_literal.lower() if row[5].strip() else False,
            delimiter=delimiter,
        )
    except errors.ValidationError as exc:
        logger.warning("mirror_line_skipped id=%r reason=%s", raw_id, exc)
        return None

    return Movie(
        id=movie_id,
        year=fields.year,
        title=fields.title,
        studios=fields.studios,
        producers=fields.producers,
        winner=fields.winner,
    )


def _parse_int(value: str, field: str) -> int:
    raw = (value or "").strip()
    if not raw:
        raise errors.ValidationError(f"{field} cannot be empty")
    try:
        return int(raw)
    except ValueError as exc:
        raise errors.ValidationError(f"Invalid {field} format: {raw}") from exc


def max_mirror_id(rows: list[list[str]]) -> int:
    """
    Highest positive integer id among mirror lines, importable or not.
    Lines left behind by a skipped import still hold their id.
    """
    highest = 0
    for row in rows:
        try:
            highest = max(highest, int(row[0].strip()))
        except (IndexError, ValueError):
            continue
    return highest


def movies_from_mirror(mirror: MirrorSynchronizer, *, min_columns: int) -> tuple[list[Movie], int]:
    """
    Returns (importable movies, skipped line count).
    """
    movies: list[Movie] = []
    skipped = 0
    for row in mirror.snapshot().rows:
        movie = parse_row(
            row, winner_literal=mirror.winner_literal, min_columns=min_columns, delimiter=mirror.delimiter
        )
        if movie is None:
            skipped += 1
            continue
        movies.append(movie)
    return movies, skipped


async def bootstrap_store(
    *,
    allocator: IdAllocator,
    mirror: MirrorSynchronizer,
    import_mirror: bool = True,
    reset_to_original: bool = False,
    min_columns: int = 6,
) -> StartupReport:
    if reset_to_original:
        await asyncio.to_thread(mirror.reset_to_bundled)

    imported = 0
    skipped = 0
    if import_mirror or reset_to_original:
        movies, skipped = await asyncio.to_thread(movies_from_mirror, mirror, min_columns=min_columns)
        with errors.storage_errors("Failed to import mirror rows into the store."):
            imported = await repository.upsert_movies(
                (m.id, m.year, m.title, m.studios, m.producers, m.winner) for m in movies
            )

    with errors.storage_errors("Failed to read max movie id."):
        authority = await repository.find_max_id() or 0
    snapshot = await asyncio.to_thread(mirror.snapshot)
    mirror_max = max_mirror_id(snapshot.rows)
    floor = max(authority, mirror_max)

    if reset_to_original:
        await asyncio.to_thread(allocator.reset, floor)
        counter = floor
    else:
        counter = await asyncio.to_thread(allocator.synchronize_with_authority, floor)

    logger.info(
        "store_bootstrapped imported=%s skipped=%s authority=%s mirror_max_id=%s counter=%s",
        imported,
        skipped,
        authority,
        mirror_max,
        counter,
    )
    return StartupReport(
        imported=imported,
        skipped=skipped,
        authority=authority,
        mirror_max_id=mirror_max,
        counter=counter,
    )
