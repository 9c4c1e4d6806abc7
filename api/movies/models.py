"""
Movie record as used by the services.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class Movie:
    id: int
    year: int
    title: str
    studios: str
    producers: str
    winner: bool

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Movie":
        return cls(
            id=int(row["id"]),
            year=int(row["year"]),
            title=str(row["title"]),
            studios=str(row["studios"]),
            producers=str(row["producers"]),
            winner=bool(row["winner"]),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
