"""In-memory metadata index over stored upload records."""

from __future__ import annotations

import itertools
import logging
import threading
from collections import defaultdict
from collections.abc import Iterable as IterableABC
from typing import Any, Iterable, Sequence

from uploadspace.models import FileRecord

LOGGER = logging.getLogger(__name__)


def _coerce_records(value: Any) -> list[FileRecord] | None:
    """Return ``value`` as a list of records, or ``None`` when it is malformed."""
    if isinstance(value, FileRecord):
        return [value]
    if isinstance(value, (str, bytes)) or not isinstance(value, (Sequence, set, frozenset)):
        return None
    records = list(value)
    if not all(isinstance(record, FileRecord) for record in records):
        return None
    return records


class AssetIndex:
    """Collection of :class:`FileRecord` entries indexed by category and folder.

    Readers never observe a partially replaced index: :meth:`replace_all` builds
    the new tables first and swaps them in under the lock.
    """

    def __init__(self, records: Iterable[FileRecord] = ()) -> None:
        """Initialize the index.

        Args:
            records: Optional initial records, indexed with :meth:`replace_all`.
        """
        self._lock = threading.Lock()
        self._ids = itertools.count()
        self._records: dict[int, FileRecord] = {}
        self._by_category: dict[str, set[int]] = defaultdict(set)
        self._by_folder: dict[str, set[int]] = defaultdict(set)
        initial = list(records)
        if initial:
            self.replace_all(initial)

    def __len__(self) -> int:
        return len(self._records)

    def replace_all(self, records: Iterable[FileRecord]) -> None:
        """Replace every record in the index.

        An empty input leaves the index untouched, so an empty reload never wipes
        existing data. Input that is not a collection of records (including a
        single bare record) is ignored the same way.

        Args:
            records: Complete set of records to index.
        """
        incoming = None
        if not isinstance(records, (FileRecord, str, bytes)) and isinstance(records, IterableABC):
            incoming = _coerce_records(list(records))
        if incoming is None:
            LOGGER.debug("Ignoring malformed replacement input of type %s", type(records).__name__)
            return
        if not incoming:
            LOGGER.debug("Skipping index replace with empty input")
            return

        ids = itertools.count()
        table: dict[int, FileRecord] = {}
        by_category: dict[str, set[int]] = defaultdict(set)
        by_folder: dict[str, set[int]] = defaultdict(set)
        for record in incoming:
            record_id = next(ids)
            table[record_id] = record
            by_category[record.category].add(record_id)
            by_folder[record.folder].add(record_id)

        with self._lock:
            self._ids = ids
            self._records = table
            self._by_category = by_category
            self._by_folder = by_folder
        LOGGER.info("Indexed %d upload records", len(table))

    def add(self, records: Any) -> None:
        """Insert one record or a sequence of records.

        Anything else is ignored without raising.
        """
        incoming = _coerce_records(records)
        if incoming is None:
            LOGGER.debug("Ignoring malformed record input of type %s", type(records).__name__)
            return

        with self._lock:
            for record in incoming:
                record_id = next(self._ids)
                self._records[record_id] = record
                self._by_category[record.category].add(record_id)
                self._by_folder[record.folder].add(record_id)

    def query(self, category: str, folder: str) -> list[FileRecord]:
        """Return records matching both ``category`` and ``folder``, sorted by filename."""
        with self._lock:
            in_category = self._by_category.get(category)
            in_folder = self._by_folder.get(folder)
            if not in_category or not in_folder:
                return []
            smaller, larger = sorted((in_category, in_folder), key=len)
            matches = [self._records[record_id] for record_id in smaller if record_id in larger]
        return sorted(matches, key=lambda record: record.filename)

    def records(self) -> list[FileRecord]:
        """Return every record in insertion order."""
        with self._lock:
            return [self._records[record_id] for record_id in sorted(self._records)]


__all__ = ["AssetIndex"]
