"""Filters that compare one component of each cell against a comparator.

Which component depends on the filter:

    RowFilter        row key (whole row kept or dropped)
    FamilyFilter     column family
    QualifierFilter  column qualifier
    ValueFilter      cell value
"""

from __future__ import annotations

from enum import StrEnum
from typing import ClassVar

from asynctable.backend import filters as backend
from asynctable.filters.base import ScanFilter
from asynctable.filters.comparators import FilterComparator


class CompareOp(StrEnum):
    """Comparison operator. LESS passes data that sorts before the reference."""

    LESS = "less"
    LESS_OR_EQUAL = "less_or_equal"
    EQUAL = "equal"
    NOT_EQUAL = "not_equal"
    GREATER_OR_EQUAL = "greater_or_equal"
    GREATER = "greater"
    NO_OP = "no_op"

    def to_backend(self) -> backend.CompareOp:
        return backend.CompareOp(self.value)


class CompareFilter(ScanFilter):
    """Base for the comparator-driven filters."""

    __slots__ = ("_op", "_comparator")

    _backend_class: ClassVar[type[backend.CompareFilter]]

    def __init__(self, op: CompareOp, comparator: FilterComparator) -> None:
        self._op = op
        self._comparator = comparator

    @property
    def op(self) -> CompareOp:
        return self._op

    @property
    def comparator(self) -> FilterComparator:
        return self._comparator

    def name(self) -> bytes:
        return self._backend_class.KIND

    def to_backend_filter(self) -> backend.CompareFilter:
        return self._backend_class(self._op.to_backend(), self._comparator.to_backend_comparator(self.name()))

    def __str__(self) -> str:
        return f"{type(self).__name__}({self._op.name}, {self._comparator})"


class RowFilter(CompareFilter):
    __slots__ = ()
    _backend_class = backend.RowFilter


class FamilyFilter(CompareFilter):
    __slots__ = ()
    _backend_class = backend.FamilyFilter


class QualifierFilter(CompareFilter):
    __slots__ = ()
    _backend_class = backend.QualifierFilter


class ValueFilter(CompareFilter):
    __slots__ = ()
    _backend_class = backend.ValueFilter
