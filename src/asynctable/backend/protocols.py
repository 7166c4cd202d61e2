# src/asynctable/backend/protocols.py
"""Interfaces the adapter consumes from the backing store.

The data plane is a synchronous, blocking client. The dispatch engine only
ever calls it from worker threads, so implementations must be safe to call
concurrently.

The admin plane is not used by the request pipeline. It is declared here so
that tests and applications can provision tables against the same object.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from asynctable.backend.filters import BackendFilter


@dataclass(frozen=True, slots=True)
class Cell:
    """One stored cell as the backend returns it."""

    row: bytes
    family: bytes
    qualifier: bytes
    value: bytes
    timestamp: int


class DataPlaneClient(Protocol):
    """Synchronous read/write operations against tables."""

    def put(self, table: bytes, key: bytes, family: bytes, qualifier: bytes, value: bytes) -> None:
        """Store one cell, replacing any previous value."""
        ...

    def get(
        self,
        table: bytes,
        key: bytes,
        *,
        family: bytes | None = None,
        qualifiers: Sequence[bytes] | None = None,
        row_filter: BackendFilter | None = None,
    ) -> list[Cell]:
        """Return the cells of one row, empty if the row does not exist."""
        ...

    def delete(
        self,
        table: bytes,
        key: bytes,
        *,
        family: bytes | None = None,
        qualifiers: Sequence[bytes] | None = None,
    ) -> None:
        """Delete a whole row, one family of it, or some columns of one family."""
        ...

    def append(self, table: bytes, key: bytes, family: bytes, qualifier: bytes, value: bytes) -> Cell:
        """Append bytes to a cell's value (creating it if absent) and return the new cell."""
        ...

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
    ) -> Iterable[tuple[bytes, list[Cell]]]:
        """Yield (row key, cells) in key order for rows in [start_key, stop_key)."""
        ...


class AdminClient(Protocol):
    """Table lifecycle operations."""

    def create_table(self, table: bytes, families: Sequence[bytes]) -> None: ...

    def delete_table(self, table: bytes) -> None: ...

    def table_exists(self, table: bytes) -> bool: ...
