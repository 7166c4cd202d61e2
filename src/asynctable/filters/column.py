"""Filters over column coordinates that need no comparator."""

from __future__ import annotations

from asynctable.backend import filters as backend
from asynctable.contracts.errors import InvalidFilterError
from asynctable.filters.base import ScanFilter


class ColumnPrefixFilter(ScanFilter):
    """Keep only columns whose qualifier starts with ``prefix``."""

    __slots__ = ("_prefix",)

    def __init__(self, prefix: bytes) -> None:
        if not prefix:
            raise InvalidFilterError("column prefix must not be empty")
        self._prefix = bytes(prefix)

    def name(self) -> bytes:
        return backend.ColumnPrefixFilter.KIND

    def to_backend_filter(self) -> backend.ColumnPrefixFilter:
        return backend.ColumnPrefixFilter(self._prefix)

    def __str__(self) -> str:
        return f"ColumnPrefixFilter({self._prefix!r})"


class ColumnRangeFilter(ScanFilter):
    """Keep only columns whose qualifier falls in a range.

    A None bound leaves that side open. By default the start is inclusive and
    the stop exclusive, like scans.
    """

    __slots__ = ("_start", "_start_inclusive", "_stop", "_stop_inclusive")

    def __init__(
        self,
        start_column: bytes | None,
        stop_column: bytes | None,
        *,
        start_inclusive: bool = True,
        stop_inclusive: bool = False,
    ) -> None:
        if start_column is not None and stop_column is not None and start_column > stop_column:
            raise InvalidFilterError(f"column range start {start_column!r} sorts after stop {stop_column!r}")
        self._start = start_column
        self._start_inclusive = start_inclusive
        self._stop = stop_column
        self._stop_inclusive = stop_inclusive

    def name(self) -> bytes:
        return backend.ColumnRangeFilter.KIND

    def to_backend_filter(self) -> backend.ColumnRangeFilter:
        return backend.ColumnRangeFilter(self._start, self._start_inclusive, self._stop, self._stop_inclusive)

    def __str__(self) -> str:
        left = "[" if self._start_inclusive else "("
        right = "]" if self._stop_inclusive else ")"
        return f"ColumnRangeFilter({left}{self._start!r}, {self._stop!r}{right})"


class KeyOnlyFilter(ScanFilter):
    """Return cell coordinates with empty values."""

    __slots__ = ()

    def name(self) -> bytes:
        return backend.KeyOnlyFilter.KIND

    def to_backend_filter(self) -> backend.KeyOnlyFilter:
        return backend.KeyOnlyFilter()

    def __str__(self) -> str:
        return "KeyOnlyFilter()"


class FirstKeyOnlyFilter(ScanFilter):
    """Return only the first cell of each row. Handy for counting rows."""

    __slots__ = ()

    def name(self) -> bytes:
        return backend.FirstKeyOnlyFilter.KIND

    def to_backend_filter(self) -> backend.FirstKeyOnlyFilter:
        return backend.FirstKeyOnlyFilter()

    def __str__(self) -> str:
        return "FirstKeyOnlyFilter()"
