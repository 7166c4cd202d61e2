# src/asynctable/backend/memory.py
"""In-process reference backend.

A thread-safe wide-column store that implements both DataPlaneClient and
AdminClient. It keeps one version per cell and evaluates
asynctable.backend.filters objects server-side, so the whole request pipeline
can run without an external store.

Thread Safety:
    Every public method takes the store's lock. Scans materialize their rows
    under the lock and yield from the snapshot.
"""

from __future__ import annotations

import itertools
from collections.abc import Iterator, Sequence
from threading import Lock
from typing import TYPE_CHECKING

import structlog

from asynctable.backend.errors import NoSuchColumnFamily, TableExists, TableNotFound
from asynctable.backend.protocols import Cell

if TYPE_CHECKING:
    from asynctable.backend.filters import BackendFilter

logger = structlog.get_logger(__name__)

# row key -> (family, qualifier) -> (value, timestamp)
_Row = dict[tuple[bytes, bytes], tuple[bytes, int]]


class _Table:
    __slots__ = ("families", "rows")

    def __init__(self, families: Sequence[bytes]) -> None:
        self.families = frozenset(families)
        self.rows: dict[bytes, _Row] = {}


class InMemoryBackend:
    """Dictionary-backed store with HBase-like data and admin planes.

    Example:
        backend = InMemoryBackend()
        backend.create_table(b"t", [b"cf"])
        backend.put(b"t", b"r1", b"cf", b"q", b"v1")
        backend.get(b"t", b"r1")  # [Cell(row=b"r1", family=b"cf", ...)]
    """

    def __init__(self) -> None:
        self._tables: dict[bytes, _Table] = {}
        self._lock = Lock()
        # Timestamps only need to be unique and increasing within this store.
        self._clock = itertools.count(1)

    # ------------------------------------------------------------------
    # Admin plane
    # ------------------------------------------------------------------

    def create_table(self, table: bytes, families: Sequence[bytes]) -> None:
        with self._lock:
            if table in self._tables:
                raise TableExists(table)
            self._tables[table] = _Table(families)
        logger.debug("Table created", table=table, families=sorted(families))

    def delete_table(self, table: bytes) -> None:
        with self._lock:
            if self._tables.pop(table, None) is None:
                raise TableNotFound(table)
        logger.debug("Table deleted", table=table)

    def table_exists(self, table: bytes) -> bool:
        with self._lock:
            return table in self._tables

    # ------------------------------------------------------------------
    # Data plane
    # ------------------------------------------------------------------

    def put(self, table: bytes, key: bytes, family: bytes, qualifier: bytes, value: bytes) -> None:
        with self._lock:
            stored = self._table(table)
            self._check_family(table, stored, family)
            stored.rows.setdefault(key, {})[(family, qualifier)] = (bytes(value), next(self._clock))

    def get(
        self,
        table: bytes,
        key: bytes,
        *,
        family: bytes | None = None,
        qualifiers: Sequence[bytes] | None = None,
        row_filter: BackendFilter | None = None,
    ) -> list[Cell]:
        with self._lock:
            stored = self._table(table)
            if family is not None:
                self._check_family(table, stored, family)
            row = stored.rows.get(key)
            if row is None:
                return []
            return self._select(key, row, family, qualifiers, row_filter)

    def delete(
        self,
        table: bytes,
        key: bytes,
        *,
        family: bytes | None = None,
        qualifiers: Sequence[bytes] | None = None,
    ) -> None:
        with self._lock:
            stored = self._table(table)
            if family is not None:
                self._check_family(table, stored, family)
            row = stored.rows.get(key)
            if row is None:
                return
            if family is None:
                del stored.rows[key]
                return
            for coordinate in list(row):
                if coordinate[0] != family:
                    continue
                if qualifiers is None or coordinate[1] in qualifiers:
                    del row[coordinate]
            if not row:
                del stored.rows[key]

    def append(self, table: bytes, key: bytes, family: bytes, qualifier: bytes, value: bytes) -> Cell:
        with self._lock:
            stored = self._table(table)
            self._check_family(table, stored, family)
            row = stored.rows.setdefault(key, {})
            previous, _ = row.get((family, qualifier), (b"", 0))
            combined = previous + bytes(value)
            timestamp = next(self._clock)
            row[(family, qualifier)] = (combined, timestamp)
            return Cell(row=key, family=family, qualifier=qualifier, value=combined, timestamp=timestamp)

    def scan(
        self,
        table: bytes,
        *,
        start_key: bytes = b"",
        stop_key: bytes = b"",
        family: bytes | None = None,
        qualifiers: Sequence[bytes] | None = None,
        row_filter: BackendFilter | None = None,
        limit: int | None = None,
    ) -> Iterator[tuple[bytes, list[Cell]]]:
        with self._lock:
            stored = self._table(table)
            if family is not None:
                self._check_family(table, stored, family)
            results: list[tuple[bytes, list[Cell]]] = []
            for key in sorted(stored.rows):
                if key < start_key:
                    continue
                if stop_key and key >= stop_key:
                    break
                cells = self._select(key, stored.rows[key], family, qualifiers, row_filter)
                if not cells:
                    continue
                results.append((key, cells))
                if limit is not None and len(results) >= limit:
                    break
        return iter(results)

    # ------------------------------------------------------------------
    # Internals (lock held by caller)
    # ------------------------------------------------------------------

    def _table(self, table: bytes) -> _Table:
        stored = self._tables.get(table)
        if stored is None:
            raise TableNotFound(table)
        return stored

    @staticmethod
    def _check_family(table: bytes, stored: _Table, family: bytes) -> None:
        if family not in stored.families:
            raise NoSuchColumnFamily(table, family)

    @staticmethod
    def _select(
        key: bytes,
        row: _Row,
        family: bytes | None,
        qualifiers: Sequence[bytes] | None,
        row_filter: BackendFilter | None,
    ) -> list[Cell]:
        cells = [
            Cell(row=key, family=fam, qualifier=qual, value=value, timestamp=ts)
            for (fam, qual), (value, ts) in sorted(row.items())
            if (family is None or fam == family) and (qualifiers is None or qual in qualifiers)
        ]
        if row_filter is not None and cells:
            cells = row_filter.apply(key, cells)
        return cells
