from __future__ import annotations

from typing import Any

import pytest

from core.id_allocator import IdAllocator
from core.mirror import MirrorSynchronizer
from movies import repository


class FakeMovieStore:
    """In-memory stand-in for movies.repository."""

    def __init__(self) -> None:
        self.rows: dict[int, dict[str, Any]] = {}
        self.fail_writes = False

    def _check_writable(self) -> None:
        if self.fail_writes:
            raise ConnectionRefusedError("store unreachable")

    def add(self, movie_id, year, title, studios, producers, winner) -> None:
        self.rows[movie_id] = {
            "id": movie_id,
            "year": year,
            "title": title,
            "studios": studios,
            "producers": producers,
            "winner": winner,
        }

    async def find_max_id(self):
        return max(self.rows) if self.rows else None

    async def get_movie(self, movie_id):
        row = self.rows.get(movie_id)
        return dict(row) if row is not None else None

    async def insert_movie(self, *, movie_id, year, title, studios, producers, winner):
        self._check_writable()
        if movie_id in self.rows:
            raise RuntimeError(f"duplicate id {movie_id}")
        self.add(movie_id, year, title, studios, producers, winner)
        return dict(self.rows[movie_id])

    async def update_movie(self, movie_id, *, year, title, studios, producers, winner):
        self._check_writable()
        if movie_id not in self.rows:
            return None
        self.add(movie_id, year, title, studios, producers, winner)
        return dict(self.rows[movie_id])

    async def delete_movie(self, movie_id):
        self._check_writable()
        return self.rows.pop(movie_id, None) is not None

    def _filtered(self, filter_type, filter_value):
        value = (filter_value or "").strip().lower()
        rows = list(self.rows.values())
        if not (filter_type or "").strip() or not value:
            return rows
        fields = [filter_type] if filter_type in repository.SORT_FIELDS else ["title", "year", "studios", "producers", "id"]
        return [r for r in rows if any(value in str(r[f]).lower() for f in fields)]

    async def list_movies(self, *, filter_type=None, filter_value=None, sort_by=None, direction=None, limit=10, offset=0):
        field = repository.sort_field(sort_by)
        reverse = repository.sort_direction(direction) == "DESC"
        rows = sorted(self._filtered(filter_type, filter_value), key=lambda r: (r[field], r["id"]), reverse=reverse)
        return [dict(r) for r in rows[offset : offset + limit]]

    async def count_movies(self, *, filter_type=None, filter_value=None):
        return len(self._filtered(filter_type, filter_value))

    async def list_winners(self):
        return [dict(r) for r in sorted(self.rows.values(), key=lambda r: (r["year"], r["id"])) if r["winner"]]

    async def upsert_movies(self, rows):
        count = 0
        for movie_id, year, title, studios, producers, winner in rows:
            self.add(movie_id, year, title, studios, producers, winner)
            count += 1
        return count


@pytest.fixture
def store(monkeypatch):
    fake = FakeMovieStore()
    for name in (
        "find_max_id",
        "get_movie",
        "insert_movie",
        "update_movie",
        "delete_movie",
        "list_movies",
        "count_movies",
        "list_winners",
        "upsert_movies",
    ):
        monkeypatch.setattr(repository, name, getattr(fake, name))
    return fake


@pytest.fixture
def allocator(tmp_path):
    return IdAllocator(tmp_path / "primary-key" / "key.xml", indent=4)


@pytest.fixture
def mirror(tmp_path):
    return MirrorSynchronizer(tmp_path / "data" / "movielist.csv")
