"""Comparators used by the compare filters (RowFilter, ValueFilter, ...)."""

from __future__ import annotations

from abc import ABC, abstractmethod

from asynctable.backend import filters as backend
from asynctable.core.codec import DEFAULT_CHARSET
from asynctable.filters.base import WriteOnceSlots
from asynctable.filters.regex import pattern_forms
from asynctable.filters.translation import inject_comparator_bytes


class FilterComparator(WriteOnceSlots, ABC):
    """Reference value plus comparison rule, translated alongside its filter."""

    __slots__ = ()

    @abstractmethod
    def to_backend_comparator(self, filter_kind: bytes) -> backend.ByteArrayComparable:
        """Build the backend comparator.

        Args:
            filter_kind: Kind name of the enclosing filter, for error reporting.
        """


class BinaryComparator(FilterComparator):
    """Lexicographic comparison against ``value``."""

    __slots__ = ("_value",)

    def __init__(self, value: bytes) -> None:
        self._value = bytes(value)

    @property
    def value(self) -> bytes:
        return self._value

    def to_backend_comparator(self, filter_kind: bytes) -> backend.BinaryComparator:
        return backend.BinaryComparator(self._value)

    def __str__(self) -> str:
        return f"BinaryComparator({self._value!r})"


class BinaryPrefixComparator(FilterComparator):
    """Lexicographic comparison against ``value``, looking only at a prefix of the data."""

    __slots__ = ("_value",)

    def __init__(self, value: bytes) -> None:
        self._value = bytes(value)

    @property
    def value(self) -> bytes:
        return self._value

    def to_backend_comparator(self, filter_kind: bytes) -> backend.BinaryPrefixComparator:
        return backend.BinaryPrefixComparator(self._value)

    def __str__(self) -> str:
        return f"BinaryPrefixComparator({self._value!r})"


class SubstringComparator(FilterComparator):
    """Case-insensitive containment of ``substr``. Use with EQUAL or NOT_EQUAL."""

    __slots__ = ("_substr",)

    def __init__(self, substr: str) -> None:
        self._substr = substr

    @property
    def substr(self) -> str:
        return self._substr

    def to_backend_comparator(self, filter_kind: bytes) -> backend.SubstringComparator:
        return backend.SubstringComparator(self._substr)

    def __str__(self) -> str:
        return f"SubstringComparator({self._substr!r})"


class RegexStringComparator(FilterComparator):
    """Raw-byte regular expression match. Use with EQUAL or NOT_EQUAL.

    Carries the same byte/text pair as KeyRegexpFilter and goes through the
    same comparator patch when translated.
    """

    __slots__ = ("_expr", "_expr_string", "_charset")

    def __init__(self, expr: bytes | str, charset: str = DEFAULT_CHARSET) -> None:
        self._expr, self._expr_string, self._charset = pattern_forms(expr, charset)

    @property
    def expr(self) -> bytes:
        return self._expr

    @property
    def charset(self) -> str:
        return self._charset

    def to_backend_comparator(self, filter_kind: bytes) -> backend.RegexStringComparator:
        comparator = backend.RegexStringComparator(self._expr_string)
        comparator.set_charset(self._charset)
        inject_comparator_bytes(comparator, self._expr, filter_kind=filter_kind)
        return comparator

    def __str__(self) -> str:
        return f"RegexStringComparator({self._expr!r}, {self._charset})"
