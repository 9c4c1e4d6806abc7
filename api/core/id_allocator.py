"""
Durable movie id counter backed by a small XML file.

File layout:

    <keys>
        <lastId>42</lastId>
    </keys>

`lastId` is the highest id ever issued. It only moves forward; deleting a
movie never gives its id back.
"""

from __future__ import annotations

import logging
import os
import tempfile
import threading
import xml.etree.ElementTree as ET
from pathlib import Path

from . import errors

ROOT_ELEMENT = "keys"
LAST_ID_ELEMENT = "lastId"

logger = logging.getLogger(__name__)


class IdAllocator:
    """
    Issues movie ids that are never reused.

    One instance should front all access to a given counter file; every
    read-modify-write runs under the instance lock.
    """

    def __init__(self, path: Path | str, *, indent: int = 4) -> None:
        self.path = Path(path)
        self.indent = max(0, int(indent))
        self._lock = threading.Lock()

    def current(self) -> int | None:
        """
        Return the persisted counter, or None when the file is missing or
        does not hold a non-negative integer.
        """
        with self._lock:
            return self._read()

    def allocate_next(self) -> int:
        with self._lock:
            next_id = (self._read() or 0) + 1
            self._write(next_id)
        logger.info("id_allocated id=%s", next_id)
        return next_id

    def synchronize_with_authority(self, max_observed_id: int) -> int:
        """
        Move the counter up to `max_observed_id` if the store has seen a
        higher id than the file remembers. Never moves it down.
        """
        _require_non_negative(max_observed_id, "max_observed_id")
        with self._lock:
            stored = self._read()
            current = stored or 0
            result = max(current, int(max_observed_id))
            if result != current:
                self._write(result)
                logger.info("id_counter_synchronized previous=%s current=%s", stored, result)
        return result

    def reset(self, value: int) -> None:
        _require_non_negative(value, "value")
        with self._lock:
            self._write(int(value))
        logger.warning("id_counter_reset value=%s", value)

    def _read(self) -> int | None:
        if not self.path.is_file():
            return None
        try:
            tree = ET.parse(self.path)
        except (ET.ParseError, OSError):
            logger.warning("id_counter_unreadable path=%s", self.path)
            return None

        node = tree.getroot().find(LAST_ID_ELEMENT)
        text = (node.text or "").strip() if node is not None else ""
        if not text:
            return None
        try:
            value = int(text)
        except ValueError:
            logger.warning("id_counter_not_integer path=%s value=%r", self.path, text)
            return None
        if value < 0:
            logger.warning("id_counter_negative path=%s value=%s", self.path, value)
            return None
        return value

    def _write(self, value: int) -> None:
        root = ET.Element(ROOT_ELEMENT)
        ET.SubElement(root, LAST_ID_ELEMENT).text = str(value)
        tree = ET.ElementTree(root)
        if self.indent:
            ET.indent(tree, space=" " * self.indent)

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "wb") as fh:
                    tree.write(fh, encoding="utf-8", xml_declaration=True)
                    fh.write(b"\n")
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise errors.StorageError(f"Failed to persist id counter to {self.path}: {exc}") from exc


def _require_non_negative(value: int, name: str) -> None:
    if value is None or isinstance(value, bool) or int(value) < 0:
        raise errors.ValidationError(f"{name} cannot be negative: {value}")
