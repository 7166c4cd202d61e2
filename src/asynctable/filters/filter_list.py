"""Combination of several filters."""

from __future__ import annotations

from collections.abc import Sequence
from enum import StrEnum

from asynctable.backend import filters as backend
from asynctable.contracts.errors import InvalidFilterError
from asynctable.filters.base import ScanFilter


class FilterListOperator(StrEnum):
    """MUST_PASS_ALL applies members in order (AND); MUST_PASS_ONE keeps what any member keeps (OR)."""

    MUST_PASS_ALL = "must_pass_all"
    MUST_PASS_ONE = "must_pass_one"


class FilterList(ScanFilter):
    """Apply several filters as one.

    Translation is all-or-nothing: if any member fails to translate, the
    whole list fails with that member's error.
    """

    __slots__ = ("_filters", "_operator")

    def __init__(self, filters: Sequence[ScanFilter], operator: FilterListOperator = FilterListOperator.MUST_PASS_ALL) -> None:
        if not filters:
            raise InvalidFilterError("filter list must contain at least one filter")
        self._filters = tuple(filters)
        self._operator = operator

    @property
    def filters(self) -> tuple[ScanFilter, ...]:
        return self._filters

    @property
    def operator(self) -> FilterListOperator:
        return self._operator

    def name(self) -> bytes:
        return backend.FilterList.KIND

    def to_backend_filter(self) -> backend.FilterList:
        members = [member.to_backend_filter() for member in self._filters]
        return backend.FilterList(members, backend.FilterListOperator(self._operator.value))

    def __str__(self) -> str:
        inner = ", ".join(str(member) for member in self._filters)
        return f"FilterList({self._operator.name}, [{inner}])"
