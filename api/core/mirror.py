"""
Delimited text mirror of the `movies` table.

The file is human-readable and kept equal to the live record set after every
successful create/update/delete:

    id;year;title;studios;producers;winner;;
    1;1980;Can't Stop the Music;Associated Film Distribution;Allan Carr;yes;;

Every mutation is one snapshot -> transform -> persist cycle over the whole
file, under the instance lock, written to a temp file and swapped in with
`os.replace`.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Protocol

from . import errors

HEADER_FIELDS = ("id", "year", "title", "studios", "producers", "winner", "", "")
ID_COLUMN = 0

logger = logging.getLogger(__name__)


class MirrorRecord(Protocol):
    id: int
    year: int
    title: str
    studios: str
    producers: str
    winner: bool


@dataclass(frozen=True)
class MirrorSnapshot:
    header: list[str]
    rows: list[list[str]]


class MirrorSynchronizer:
    def __init__(
        self,
        path: Path | str,
        *,
        bundled_path: Path | str | None = None,
        delimiter: str = ";",
        winner_literal: str = "yes",
    ) -> None:
        if not delimiter:
            raise ValueError("Mirror delimiter cannot be empty.")
        self.path = Path(path)
        self.bundled_path = Path(bundled_path) if bundled_path is not None else None
        self.delimiter = delimiter[0]
        self.winner_literal = winner_literal
        self._lock = threading.Lock()

    def append(self, movie: MirrorRecord) -> None:
        movie_id = str(movie.id)

        def add_line(rows: list[list[str]]) -> list[list[str]]:
            if any(_row_id(row) == movie_id for row in rows):
                raise errors.ConsistencyError(f"Movie with ID {movie_id} already exists in mirror.")
            return [*rows, self.to_row(movie)]

        self._mutate(add_line)
        logger.info("mirror_appended id=%s", movie_id)

    def update(self, movie: MirrorRecord) -> None:
        movie_id = str(movie.id)

        def replace_line(rows: list[list[str]]) -> list[list[str]]:
            if not any(_row_id(row) == movie_id for row in rows):
                raise errors.NotFoundError(f"Movie with ID {movie_id} not found in mirror for update.")
            updated = [self.to_row(movie) if _row_id(row) == movie_id else row for row in rows]
            if not any(_row_id(row) == movie_id for row in updated):
                raise errors.ConsistencyError(f"Movie with ID {movie_id} was not updated correctly in mirror.")
            return updated

        self._mutate(replace_line)
        logger.info("mirror_updated id=%s", movie_id)

    def remove(self, movie_id: int) -> None:
        target = str(movie_id)

        def drop_lines(rows: list[list[str]]) -> list[list[str]]:
            if not any(_row_id(row) == target for row in rows):
                raise errors.NotFoundError(f"Movie with ID {target} not found in mirror for removal.")
            remaining = [row for row in rows if _row_id(row) != target]
            if any(_row_id(row) == target for row in remaining):
                raise errors.ConsistencyError(f"Movie with ID {target} still exists in mirror after removal.")
            return remaining

        self._mutate(drop_lines)
        logger.info("mirror_removed id=%s", target)

    def snapshot(self) -> MirrorSnapshot:
        with self._lock:
            return self._load()

    def reset_to_bundled(self) -> None:
        """
        Overwrite the writable copy with the bundled original.
        """
        if self.bundled_path is None or not self.bundled_path.is_file():
            raise errors.StorageError(f"Original mirror file not found: {self.bundled_path}")
        with self._lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                shutil.copyfile(self.bundled_path, self.path)
            except OSError as exc:
                raise errors.StorageError(f"Failed to reset mirror {self.path}: {exc}") from exc
        logger.warning("mirror_reset_to_original source=%s target=%s", self.bundled_path, self.path)

    def to_row(self, movie: MirrorRecord) -> list[str]:
        for name, value in (("title", movie.title), ("studios", movie.studios), ("producers", movie.producers)):
            if self.delimiter in value or "\n" in value or "\r" in value:
                raise errors.ValidationError(
                    f"Movie {movie.id} {name} cannot be written to the mirror: it contains a line break "
                    f"or the delimiter {self.delimiter!r}."
                )
        return [
            str(movie.id),
            str(movie.year),
            movie.title,
            movie.studios,
            movie.producers,
            self.winner_literal if movie.winner else "",
            "",
            "",
        ]

    def _mutate(self, transform: Callable[[list[list[str]]], list[list[str]]]) -> None:
        with self._lock:
            current = self._load()
            rows = transform(current.rows)
            self._persist(MirrorSnapshot(header=current.header, rows=rows))

    def _source_path(self) -> Path | None:
        if self.path.is_file():
            return self.path
        if self.bundled_path is not None and self.bundled_path.is_file():
            return self.bundled_path
        return None

    def _load(self) -> MirrorSnapshot:
        source = self._source_path()
        if source is None:
            return MirrorSnapshot(header=list(HEADER_FIELDS), rows=[])

        try:
            lines = source.read_text(encoding="utf-8").splitlines()
        except (OSError, UnicodeDecodeError) as exc:
            raise errors.StorageError(f"Failed to read mirror file {source}: {exc}") from exc

        if not lines:
            return MirrorSnapshot(header=list(HEADER_FIELDS), rows=[])

        header = lines[0].split(self.delimiter)
        rows = [line.split(self.delimiter) for line in lines[1:]]
        valid = [row for row in rows if _row_id(row)]
        dropped = len(rows) - len(valid)
        if dropped:
            logger.debug("mirror_dropped_malformed_lines count=%s path=%s", dropped, source)
        return MirrorSnapshot(header=header, rows=valid)

    def _persist(self, snapshot: MirrorSnapshot) -> None:
        content = "".join(self.delimiter.join(fields) + "\n" for fields in [snapshot.header, *snapshot.rows])
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
                    fh.write(content)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise errors.StorageError(f"Failed to write mirror file {self.path}: {exc}") from exc


def _row_id(row: list[str]) -> str:
    if len(row) <= ID_COLUMN:
        return ""
    return row[ID_COLUMN].strip()
