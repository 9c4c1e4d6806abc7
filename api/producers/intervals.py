"""
Producer win intervals.

Pure functions over in-memory movie records; no I/O.

    movies -> {producer: sorted distinct win years} -> consecutive gaps
           -> all gaps equal to the global min, all equal to the global max

Producer names come from splitting the free-text `producers` field on ","
and " and ". A name that itself contains " and " (e.g. "Above and Beyond
Productions") is split too.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Protocol

_PRODUCER_SEPARATOR = re.compile(r",| and ")


class WinningRecord(Protocol):
    year: int
    producers: str
    winner: bool


@dataclass(frozen=True)
class ProducerInterval:
    producer: str
    interval: int
    previous_win: int
    following_win: int


@dataclass(frozen=True)
class IntervalSummary:
    min: list[ProducerInterval] = field(default_factory=list)
    max: list[ProducerInterval] = field(default_factory=list)


def split_producers(producers: str | None) -> list[str]:
    if not producers or not producers.strip():
        return []
    names = (part.strip() for part in _PRODUCER_SEPARATOR.split(producers))
    return [name for name in names if name]


def group_wins_by_producer(movies: Iterable[WinningRecord]) -> dict[str, list[int]]:
    """
    Map each producer to the sorted, de-duplicated years they won.

    Non-winning records are ignored. Names compare case-sensitively.
    """
    wins: dict[str, set[int]] = {}
    for movie in movies:
        if not movie.winner:
            continue
        for name in split_producers(movie.producers):
            wins.setdefault(name, set()).add(int(movie.year))
    return {name: sorted(years) for name, years in wins.items()}


def calculate_intervals(wins: dict[str, list[int]]) -> list[ProducerInterval]:
    intervals: list[ProducerInterval] = []
    for producer in sorted(wins):
        years = wins[producer]
        for previous_win, following_win in zip(years, years[1:]):
            intervals.append(
                ProducerInterval(
                    producer=producer,
                    interval=following_win - previous_win,
                    previous_win=previous_win,
                    following_win=following_win,
                )
            )
    return intervals


def min_max_intervals(movies: Iterable[WinningRecord]) -> IntervalSummary:
    intervals = calculate_intervals(group_wins_by_producer(movies))
    if not intervals:
        return IntervalSummary()

    shortest = min(i.interval for i in intervals)
    longest = max(i.interval for i in intervals)
    return IntervalSummary(
        min=[i for i in intervals if i.interval == shortest],
        max=[i for i in intervals if i.interval == longest],
    )
