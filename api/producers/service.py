"""
Producer interval queries against the current store contents.
"""

from __future__ import annotations

import logging

from core import errors
from movies import repository as movie_repository
from movies.models import Movie

from . import intervals

logger = logging.getLogger(__name__)


async def producer_intervals() -> intervals.IntervalSummary:
    with errors.storage_errors("Failed to load winning movies."):
        rows = await movie_repository.list_winners()

    summary = intervals.min_max_intervals(Movie.from_row(r) for r in rows)
    logger.debug(
        "producer_intervals winners=%s min=%s max=%s",
        len(rows),
        len(summary.min),
        len(summary.max),
    )
    return summary
