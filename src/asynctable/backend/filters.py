# src/asynctable/backend/filters.py
"""Backend-native filter objects evaluated by the store.

These mirror the comparator/filter family of HBase-style stores. The store
calls apply() once per row with the row's cells (already restricted to the
requested family/qualifiers); an empty result drops the row.

Comparators hold their reference bytes in a private slot, ``_value``. The
public ``value`` property is read-only. RegexStringComparator's constructor
only accepts text and stores it UTF-8 encoded, while matching runs in raw-byte
mode against ``_value``. A caller that needs a regex over arbitrary bytes
therefore cannot express it through the public API; see
asynctable.filters.translation for how the adapter deals with that.
"""

from __future__ import annotations

import dataclasses
import re
from abc import ABC, abstractmethod
from collections.abc import Sequence
from enum import StrEnum
from typing import ClassVar

from asynctable.backend.protocols import Cell


class CompareOp(StrEnum):
    """How a comparator result is turned into pass/fail.

    The comparator orders the cell's data relative to its reference value;
    LESS passes when the data sorts before the reference.
    """

    LESS = "less"
    LESS_OR_EQUAL = "less_or_equal"
    EQUAL = "equal"
    NOT_EQUAL = "not_equal"
    GREATER_OR_EQUAL = "greater_or_equal"
    GREATER = "greater"
    NO_OP = "no_op"

    def accepts(self, comparison: int) -> bool:
        """Apply this operator to a compare_to() result."""
        if self is CompareOp.LESS:
            return comparison < 0
        if self is CompareOp.LESS_OR_EQUAL:
            return comparison <= 0
        if self is CompareOp.EQUAL:
            return comparison == 0
        if self is CompareOp.NOT_EQUAL:
            return comparison != 0
        if self is CompareOp.GREATER_OR_EQUAL:
            return comparison >= 0
        if self is CompareOp.GREATER:
            return comparison > 0
        return False


# =============================================================================
# Comparators
# =============================================================================


class ByteArrayComparable(ABC):
    """Base comparator holding a reference byte string."""

    __slots__ = ("_value",)

    def __init__(self, value: bytes) -> None:
        self._value = bytes(value)

    @property
    def value(self) -> bytes:
        """Reference bytes this comparator matches against."""
        return self._value

    @abstractmethod
    def compare_to(self, data: bytes) -> int:
        """Order ``data`` relative to the reference: <0, 0 or >0."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"


class BinaryComparator(ByteArrayComparable):
    """Lexicographic byte comparison."""

    __slots__ = ()

    def compare_to(self, data: bytes) -> int:
        return (data > self._value) - (data < self._value)


class BinaryPrefixComparator(ByteArrayComparable):
    """Lexicographic comparison of the data's prefix of the reference's length."""

    __slots__ = ()

    def compare_to(self, data: bytes) -> int:
        prefix = data[: len(self._value)]
        return (prefix > self._value) - (prefix < self._value)


class SubstringComparator(ByteArrayComparable):
    """Case-insensitive containment test. 0 when contained, 1 otherwise."""

    __slots__ = ()

    def __init__(self, substr: str) -> None:
        super().__init__(substr.lower().encode("utf-8"))

    def compare_to(self, data: bytes) -> int:
        return 0 if self._value in data.lower() else 1


class RegexStringComparator(ByteArrayComparable):
    """Regular expression search over raw bytes. 0 on match, 1 otherwise.

    The constructor accepts text and stores it UTF-8 encoded. The charset is
    carried for the store's bookkeeping only; matching never decodes the
    data.
    """

    __slots__ = ("_charset", "_compiled")

    def __init__(self, expr: str) -> None:
        super().__init__(expr.encode("utf-8"))
        self._charset = "utf-8"
        self._compiled: re.Pattern[bytes] | None = None

    @property
    def charset(self) -> str:
        return self._charset

    def set_charset(self, charset: str) -> None:
        self._charset = charset

    def compare_to(self, data: bytes) -> int:
        return 0 if self._pattern().search(data) is not None else 1

    def _pattern(self) -> re.Pattern[bytes]:
        # _value can change after construction, so the cache is keyed on it.
        if self._compiled is None or self._compiled.pattern != self._value:
            self._compiled = re.compile(self._value, re.DOTALL)
        return self._compiled


# =============================================================================
# Filters
# =============================================================================


class BackendFilter(ABC):
    """A server-side predicate over one row's cells."""

    KIND: ClassVar[bytes]

    @abstractmethod
    def apply(self, key: bytes, cells: list[Cell]) -> list[Cell]:
        """Return the cells of the row that survive this filter."""


class CompareFilter(BackendFilter):
    """Filter that runs a comparator against one component of each cell."""

    def __init__(self, op: CompareOp, comparator: ByteArrayComparable) -> None:
        self.op = op
        self.comparator = comparator

    def passes(self, data: bytes) -> bool:
        return self.op.accepts(self.comparator.compare_to(data))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.op.name}, {self.comparator!r})"


class RowFilter(CompareFilter):
    """Keep the whole row when its key passes."""

    KIND = b"RowFilter"

    def apply(self, key: bytes, cells: list[Cell]) -> list[Cell]:
        return list(cells) if self.passes(key) else []


class FamilyFilter(CompareFilter):
    KIND = b"FamilyFilter"

    def apply(self, key: bytes, cells: list[Cell]) -> list[Cell]:
        return [cell for cell in cells if self.passes(cell.family)]


class QualifierFilter(CompareFilter):
    KIND = b"QualifierFilter"

    def apply(self, key: bytes, cells: list[Cell]) -> list[Cell]:
        return [cell for cell in cells if self.passes(cell.qualifier)]


class ValueFilter(CompareFilter):
    KIND = b"ValueFilter"

    def apply(self, key: bytes, cells: list[Cell]) -> list[Cell]:
        return [cell for cell in cells if self.passes(cell.value)]


class ColumnPrefixFilter(BackendFilter):
    KIND = b"ColumnPrefixFilter"

    def __init__(self, prefix: bytes) -> None:
        self.prefix = prefix

    def apply(self, key: bytes, cells: list[Cell]) -> list[Cell]:
        return [cell for cell in cells if cell.qualifier.startswith(self.prefix)]


class ColumnRangeFilter(BackendFilter):
    """Keep qualifiers inside a range. A None bound is unbounded."""

    KIND = b"ColumnRangeFilter"

    def __init__(
        self,
        min_column: bytes | None,
        min_inclusive: bool,
        max_column: bytes | None,
        max_inclusive: bool,
    ) -> None:
        self.min_column = min_column
        self.min_inclusive = min_inclusive
        self.max_column = max_column
        self.max_inclusive = max_inclusive

    def _in_range(self, qualifier: bytes) -> bool:
        if self.min_column is not None:
            if qualifier < self.min_column or (qualifier == self.min_column and not self.min_inclusive):
                return False
        if self.max_column is not None:
            if qualifier > self.max_column or (qualifier == self.max_column and not self.max_inclusive):
                return False
        return True

    def apply(self, key: bytes, cells: list[Cell]) -> list[Cell]:
        return [cell for cell in cells if self._in_range(cell.qualifier)]


class KeyOnlyFilter(BackendFilter):
    """Strip values, keeping coordinates."""

    KIND = b"KeyOnlyFilter"

    def apply(self, key: bytes, cells: list[Cell]) -> list[Cell]:
        return [dataclasses.replace(cell, value=b"") for cell in cells]


class FirstKeyOnlyFilter(BackendFilter):
    """Keep only the first cell of each row."""

    KIND = b"FirstKeyOnlyFilter"

    def apply(self, key: bytes, cells: list[Cell]) -> list[Cell]:
        return list(cells[:1])


class FilterListOperator(StrEnum):
    MUST_PASS_ALL = "must_pass_all"
    MUST_PASS_ONE = "must_pass_one"


class FilterList(BackendFilter):
    """Combine filters with AND (sequential) or OR (union) semantics."""

    KIND = b"FilterList"

    def __init__(self, filters: Sequence[BackendFilter], operator: FilterListOperator = FilterListOperator.MUST_PASS_ALL) -> None:
        self.filters = tuple(filters)
        self.operator = operator

    def apply(self, key: bytes, cells: list[Cell]) -> list[Cell]:
        if self.operator is FilterListOperator.MUST_PASS_ALL:
            for member in self.filters:
                cells = member.apply(key, cells)
                if not cells:
                    return []
            return cells

        # MUST_PASS_ONE: a cell survives if any member keeps it. Keep the
        # first member's rendition so value-rewriting filters stay consistent.
        kept = [{(c.family, c.qualifier): c for c in member.apply(key, cells)} for member in self.filters]
        result: list[Cell] = []
        for cell in cells:
            coordinate = (cell.family, cell.qualifier)
            for survivors in kept:
                if coordinate in survivors:
                    result.append(survivors[coordinate])
                    break
        return result
