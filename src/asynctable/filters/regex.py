# src/asynctable/filters/regex.py
"""Row-key regular expression filter.

The regular expression is applied server-side to the row key. Rows whose key
does not match are never returned, which cuts down what crosses the network
when a prefix scan is not selective enough.

Matching is done on raw bytes. A pattern given as bytes is matched byte for
byte; a pattern given as text is first encoded under ``charset``. Either way
the backend sees exactly those bytes (see filters.translation).

Be careful with user-supplied patterns: an expensive regex runs against every
row key the scan touches.
"""

from __future__ import annotations

from asynctable.backend import filters as backend
from asynctable.contracts.errors import InvalidFilterError
from asynctable.core.codec import DEFAULT_CHARSET, ByteCodec
from asynctable.filters.base import ScanFilter
from asynctable.filters.translation import inject_comparator_bytes


def pattern_forms(regexp: bytes | bytearray | str, charset: str) -> tuple[bytes, str, str]:
    """Compute the (raw bytes, text, canonical charset) triple for a pattern.

    Both forms are fixed here, once. The text form only feeds the backend's
    text constructor; bytes that do not decode under the charset become
    replacement characters there, while the raw form keeps them intact.

    Raises:
        InvalidFilterError: Empty pattern, or a pattern that is neither text nor bytes.
        UnsupportedEncodingError: Unknown charset.
    """
    name = ByteCodec.canonical_name(charset)
    if isinstance(regexp, str):
        if not regexp:
            raise InvalidFilterError("regular expression must not be empty")
        try:
            return ByteCodec.encode(regexp, name), regexp, name
        except UnicodeEncodeError as e:
            raise InvalidFilterError(f"regular expression {regexp!r} is not representable in {name}") from e
    if isinstance(regexp, bytes | bytearray):
        if not regexp:
            raise InvalidFilterError("regular expression must not be empty")
        raw = bytes(regexp)
        return raw, ByteCodec.decode(raw, name, errors="replace"), name
    raise InvalidFilterError(f"regular expression must be bytes or str, got {type(regexp).__name__}")


class KeyRegexpFilter(ScanFilter):
    """Filter rows by a regular expression over the row key.

    Args:
        regexp: The pattern, as raw bytes or as text
        charset: Encoding relating the two forms (default ISO-8859-1)

    Example:
        # Both filters match the same rows:
        KeyRegexpFilter(b"^user\\xe9")
        KeyRegexpFilter("^useré", "iso-8859-1")
    """

    __slots__ = ("_regexp", "_regexp_string", "_charset")

    def __init__(self, regexp: bytes | bytearray | str, charset: str = DEFAULT_CHARSET) -> None:
        self._regexp, self._regexp_string, self._charset = pattern_forms(regexp, charset)

    def name(self) -> bytes:
        return backend.RowFilter.KIND

    def get_regexp(self) -> bytes:
        """The pattern bytes (a copy)."""
        return bytes(self._regexp)

    def get_charset(self) -> str:
        """Canonical name of the charset the pattern was built with."""
        return self._charset

    @property
    def regexp_string(self) -> str:
        """The pattern as decoded text."""
        return self._regexp_string

    def to_backend_filter(self) -> backend.RowFilter:
        comparator = backend.RegexStringComparator(self._regexp_string)
        comparator.set_charset(self._charset)
        inject_comparator_bytes(comparator, self._regexp, filter_kind=self.name())
        return backend.RowFilter(backend.CompareOp.EQUAL, comparator)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KeyRegexpFilter):
            return NotImplemented
        return self._regexp == other._regexp and self._charset == other._charset

    def __hash__(self) -> int:
        return hash((KeyRegexpFilter, self._regexp, self._charset))

    def __str__(self) -> str:
        return f'KeyRegexpFilter("{self._regexp.decode("utf-8", "replace")}", {self._charset})'
