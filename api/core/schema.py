"""
Make sure the `movies` table exists before anything else touches the store.

Flow: probe -> ready, or probe fails with "relation does not exist" ->
create-if-absent -> wait -> probe again, with a doubling delay up to a cap and
a bounded number of attempts. Any other probe failure stops immediately.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from typing import Awaitable, Callable

import asyncpg

from . import db, errors, settings

MISSING_TABLE_SQLSTATE = "42P01"

PROBE_SQL = "SELECT 1 AS ok FROM movies LIMIT 1"

CREATE_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS movies (
    id BIGINT NOT NULL PRIMARY KEY,
    year INTEGER NOT NULL,
    title VARCHAR(500) NOT NULL,
    studios VARCHAR(500) NOT NULL,
    producers VARCHAR(1000) NOT NULL,
    winner BOOLEAN NOT NULL DEFAULT false
)
"""

logger = logging.getLogger(__name__)


class SchemaState(enum.Enum):
    UNCHECKED = "unchecked"
    PROBING = "probing"
    CREATING = "creating"
    READY = "ready"
    FAILED = "failed"


def is_missing_table_error(exc: BaseException) -> bool:
    if isinstance(exc, asyncpg.exceptions.UndefinedTableError):
        return True
    return getattr(exc, "sqlstate", None) == MISSING_TABLE_SQLSTATE


class SchemaBootstrapper:
    def __init__(
        self,
        *,
        max_attempts: int | None = None,
        initial_delay_s: float | None = None,
        max_delay_s: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.max_attempts = max_attempts if max_attempts is not None else settings.schema_max_attempts()
        self.initial_delay_s = initial_delay_s if initial_delay_s is not None else settings.schema_initial_delay_s()
        self.max_delay_s = max_delay_s if max_delay_s is not None else settings.schema_max_delay_s()
        self._sleep = sleep
        self.state = SchemaState.UNCHECKED

    async def ensure_schema(self) -> None:
        if self.state is SchemaState.READY:
            return None

        if await self._probe():
            return None

        delay = self.initial_delay_s
        for attempt in range(1, self.max_attempts + 1):
            self.state = SchemaState.CREATING
            logger.info("schema_create attempt=%s max_attempts=%s", attempt, self.max_attempts)
            try:
                await db.execute(CREATE_SCHEMA_SQL)
            except (asyncpg.PostgresError, OSError) as exc:
                self.state = SchemaState.FAILED
                raise errors.StorageError(f"Failed to create movies schema: {exc}") from exc

            await self._sleep(delay)
            if await self._probe():
                return None
            delay = min(delay * 2, self.max_delay_s)

        self.state = SchemaState.FAILED
        raise errors.StorageError(f"movies table still missing after {self.max_attempts} attempts.")

    async def _probe(self) -> bool:
        """
        True when the table answers; False when it is missing.
        """
        self.state = SchemaState.PROBING
        try:
            await db.fetch_one(PROBE_SQL)
        except Exception as exc:
            if is_missing_table_error(exc):
                logger.warning("schema_missing_table")
                return False
            self.state = SchemaState.FAILED
            raise errors.StorageError(f"Unexpected database error while probing schema: {exc}") from exc

        self.state = SchemaState.READY
        logger.info("schema_ready")
        return True
