"""
Movie persistence (raw SQL).

Ids are never generated by the database; the id allocator hands them out and
they are inserted explicitly.
"""

from __future__ import annotations

from typing import Any, Iterable

from core import db

MOVIE_COLUMNS = "id, year, title, studios, producers, winner"

SORT_FIELDS = {"id", "year", "title", "studios", "producers", "winner"}
DEFAULT_SORT_FIELD = "id"

# Filter type -> WHERE fragment; $1 is the lowered search term.
_FILTER_CLAUSES = {
    "title": "lower(title) LIKE '%' || $1::text || '%'",
    "year": "CAST(year AS text) LIKE '%' || $1::text || '%'",
    "studios": "lower(studios) LIKE '%' || $1::text || '%'",
    "producers": "lower(producers) LIKE '%' || $1::text || '%'",
    "id": "CAST(id AS text) LIKE '%' || $1::text || '%'",
}
_ALL_FIELDS_CLAUSE = "(" + " OR ".join(_FILTER_CLAUSES.values()) + ")"


def sort_field(sort_by: str | None) -> str:
    candidate = (sort_by or "").strip().lower()
    return candidate if candidate in SORT_FIELDS else DEFAULT_SORT_FIELD


def sort_direction(direction: str | None) -> str:
    return "DESC" if (direction or "").strip().lower() == "desc" else "ASC"


def _filter_clause(filter_type: str | None, filter_value: str | None) -> tuple[str, list[Any]]:
    value = (filter_value or "").strip().lower()
    if not (filter_type or "").strip() or not value:
        return "", []
    clause = _FILTER_CLAUSES.get(filter_type.strip().lower(), _ALL_FIELDS_CLAUSE)
    return f"WHERE {clause}", [value]


async def find_max_id() -> int | None:
    value = await db.fetch_value("SELECT max(id) FROM movies")
    return int(value) if value is not None else None


async def get_movie(movie_id: int) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"""
        SELECT {MOVIE_COLUMNS}
        FROM movies
        WHERE id = $1
        """,
        movie_id,
    )


async def insert_movie(
    *,
    movie_id: int,
    year: int,
    title: str,
    studios: str,
    producers: str,
    winner: bool,
) -> dict[str, Any]:
    row = await db.fetch_one(
        f"""
        INSERT INTO movies (id, year, title, studios, producers, winner)
        VALUES ($1, $2, $3, $4, $5, $6)
        RETURNING {MOVIE_COLUMNS}
        """,
        movie_id,
        year,
        title,
        studios,
        producers,
        winner,
    )
    if row is None:
        raise RuntimeError(f"Failed to insert movie {movie_id}.")
    return row


async def update_movie(
    movie_id: int,
    *,
    year: int,
    title: str,
    studios: str,
    producers: str,
    winner: bool,
) -> dict[str, Any] | None:
    """
    Returns the updated row, or None when the id no longer exists.
    """
    return await db.fetch_one(
        f"""
        UPDATE movies
        SET year = $2,
            title = $3,
            studios = $4,
            producers = $5,
            winner = $6
        WHERE id = $1
        RETURNING {MOVIE_COLUMNS}
        """,
        movie_id,
        year,
        title,
        studios,
        producers,
        winner,
    )


async def delete_movie(movie_id: int) -> bool:
    row = await db.fetch_one(
        """
        DELETE FROM movies
        WHERE id = $1
        RETURNING id
        """,
        movie_id,
    )
    return row is not None


async def list_movies(
    *,
    filter_type: str | None = None,
    filter_value: str | None = None,
    sort_by: str | None = None,
    direction: str | None = None,
    limit: int = 10,
    offset: int = 0,
) -> list[dict[str, Any]]:
    where, args = _filter_clause(filter_type, filter_value)
    order_field = sort_field(sort_by)
    order_direction = sort_direction(direction)
    limit_pos = len(args) + 1
    offset_pos = len(args) + 2
    # Sort column and direction come from whitelists, never from raw input.
    return await db.fetch_all(
        f"""
        SELECT {MOVIE_COLUMNS}
        FROM movies
        {where}
        ORDER BY {order_field} {order_direction}, id ASC
        LIMIT ${limit_pos}
        OFFSET ${offset_pos}
        """,
        *args,
        limit,
        offset,
    )


async def count_movies(*, filter_type: str | None = None, filter_value: str | None = None) -> int:
    where, args = _filter_clause(filter_type, filter_value)
    value = await db.fetch_value(f"SELECT count(*) FROM movies {where}", *args)
    return int(value or 0)


async def list_winners() -> list[dict[str, Any]]:
    return await db.fetch_all(
        f"""
        SELECT {MOVIE_COLUMNS}
        FROM movies
        WHERE winner = true
        ORDER BY year, id
        """
    )


async def upsert_movies(rows: Iterable[tuple[int, int, str, str, str, bool]]) -> int:
    """
    Insert or overwrite movies by id in one transaction.

    `rows` is [(id, year, title, studios, producers, winner), ...]
    """
    records = list(rows)
    if not records:
        return 0
    await db.execute_many(
        """
        INSERT INTO movies (id, year, title, studios, producers, winner)
        VALUES ($1, $2, $3, $4, $5, $6)
        ON CONFLICT (id) DO UPDATE
        SET year = EXCLUDED.year,
            title = EXCLUDED.title,
            studios = EXCLUDED.studios,
            producers = EXCLUDED.producers,
            winner = EXCLUDED.winner
        """,
        records,
    )
    return len(records)
