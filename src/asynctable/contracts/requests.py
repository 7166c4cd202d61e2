# src/asynctable/contracts/requests.py
"""Request and result value objects.

Requests are frozen dataclasses validated at construction. ``str`` arguments
are accepted for convenience and encoded as UTF-8; after __post_init__ every
byte field holds ``bytes``. Nothing here talks to a backend.

Each request class pins its RequestKind as a ClassVar, so the dispatcher can
route on ``request.kind`` without isinstance checks.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Self

from asynctable.contracts.enums import RequestKind
from asynctable.contracts.errors import InvalidRequestError

if TYPE_CHECKING:
    from asynctable.filters.base import ScanFilter

BytesLike = bytes | bytearray | memoryview | str


def to_bytes(value: BytesLike, field_name: str) -> bytes:
    """Normalize a byte-ish argument. Text is encoded as UTF-8."""
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, bytes | bytearray | memoryview):
        return bytes(value)
    raise InvalidRequestError(f"{field_name} must be bytes or str, got {type(value).__name__}")


def _optional_bytes(value: BytesLike | None, field_name: str) -> bytes | None:
    return None if value is None else to_bytes(value, field_name)


def _qualifier_tuple(values: Sequence[BytesLike] | None, field_name: str) -> tuple[bytes, ...] | None:
    if values is None:
        return None
    if isinstance(values, str | bytes | bytearray | memoryview):
        raise InvalidRequestError(f"{field_name} must be a sequence of qualifiers, not a single value")
    normalized = tuple(to_bytes(v, field_name) for v in values)
    if not normalized:
        raise InvalidRequestError(f"{field_name} must not be empty; pass None to select every column")
    return normalized


@dataclass(frozen=True, slots=True)
class KeyValue:
    """One cell of a result row."""

    key: bytes
    family: bytes
    qualifier: bytes
    value: bytes
    timestamp: int


RowResult = list[KeyValue]


@dataclass(frozen=True)
class _RowRequest:
    """Fields shared by every single-row request: a table and a row key."""

    kind: ClassVar[RequestKind]

    table: bytes
    key: bytes

    def __post_init__(self) -> None:
        table = to_bytes(self.table, "table")
        key = to_bytes(self.key, "key")
        if not table:
            raise InvalidRequestError(f"{self.kind.value}: table must not be empty")
        if not key:
            raise InvalidRequestError(f"{self.kind.value}: row key must not be empty")
        object.__setattr__(self, "table", table)
        object.__setattr__(self, "key", key)


@dataclass(frozen=True)
class GetRequest(_RowRequest):
    """Read one row, optionally restricted to a family, some qualifiers, or a filter."""

    kind: ClassVar[RequestKind] = RequestKind.GET

    family: bytes | None = None
    qualifiers: tuple[bytes, ...] | None = None
    filter: ScanFilter | None = None

    def __post_init__(self) -> None:
        super().__post_init__()
        object.__setattr__(self, "family", _optional_bytes(self.family, "family"))
        object.__setattr__(self, "qualifiers", _qualifier_tuple(self.qualifiers, "qualifiers"))
        if self.family is not None and not self.family:
            raise InvalidRequestError("get: family must not be empty")
        if self.qualifiers is not None and self.family is None:
            raise InvalidRequestError("get: qualifiers require a family")


@dataclass(frozen=True)
class _CellMutation(_RowRequest):
    """A write addressing exactly one cell."""

    family: bytes
    qualifier: bytes
    value: bytes

    def __post_init__(self) -> None:
        super().__post_init__()
        family = to_bytes(self.family, "family")
        qualifier = to_bytes(self.qualifier, "qualifier")
        value = to_bytes(self.value, "value")
        if not family:
            raise InvalidRequestError(f"{self.kind.value}: family must not be empty")
        if not qualifier:
            raise InvalidRequestError(f"{self.kind.value}: qualifier must not be empty")
        object.__setattr__(self, "family", family)
        object.__setattr__(self, "qualifier", qualifier)
        object.__setattr__(self, "value", value)

    @classmethod
    def from_key_value(cls, table: BytesLike, kv: KeyValue) -> Self:
        """Build the mutation that writes ``kv.value`` at kv's coordinates."""
        return cls(table=to_bytes(table, "table"), key=kv.key, family=kv.family, qualifier=kv.qualifier, value=kv.value)


@dataclass(frozen=True)
class PutRequest(_CellMutation):
    """Store one cell, replacing the previous value."""

    kind: ClassVar[RequestKind] = RequestKind.PUT


@dataclass(frozen=True)
class AppendRequest(_CellMutation):
    """Append bytes to one cell's current value."""

    kind: ClassVar[RequestKind] = RequestKind.APPEND


@dataclass(frozen=True)
class DeleteRequest(_RowRequest):
    """Delete a row, a family of it, or specific columns of a family.

    family=None deletes the whole row. qualifiers=None with a family deletes
    the whole family.
    """

    kind: ClassVar[RequestKind] = RequestKind.DELETE

    family: bytes | None = None
    qualifiers: tuple[bytes, ...] | None = None

    def __post_init__(self) -> None:
        super().__post_init__()
        object.__setattr__(self, "family", _optional_bytes(self.family, "family"))
        object.__setattr__(self, "qualifiers", _qualifier_tuple(self.qualifiers, "qualifiers"))
        if self.family is not None and not self.family:
            raise InvalidRequestError("delete: family must not be empty")
        if self.qualifiers is not None and self.family is None:
            raise InvalidRequestError("delete: qualifiers require a family")


@dataclass(frozen=True)
class ScanRequest:
    """Read the rows of [start_key, stop_key) in key order.

    An empty start_key starts at the first row; an empty stop_key runs to the
    last. max_rows caps the number of rows returned.
    """

    kind: ClassVar[RequestKind] = RequestKind.SCAN

    table: bytes
    start_key: bytes = b""
    stop_key: bytes = b""
    family: bytes | None = None
    qualifiers: tuple[bytes, ...] | None = None
    filter: ScanFilter | None = None
    max_rows: int | None = None

    def __post_init__(self) -> None:
        table = to_bytes(self.table, "table")
        if not table:
            raise InvalidRequestError("scan: table must not be empty")
        start_key = to_bytes(self.start_key, "start_key")
        stop_key = to_bytes(self.stop_key, "stop_key")
        if stop_key and start_key > stop_key:
            raise InvalidRequestError(f"scan: start_key {start_key!r} sorts after stop_key {stop_key!r}")
        if self.max_rows is not None and self.max_rows < 1:
            raise InvalidRequestError(f"scan: max_rows must be >= 1, got {self.max_rows}")
        object.__setattr__(self, "table", table)
        object.__setattr__(self, "start_key", start_key)
        object.__setattr__(self, "stop_key", stop_key)
        object.__setattr__(self, "family", _optional_bytes(self.family, "family"))
        object.__setattr__(self, "qualifiers", _qualifier_tuple(self.qualifiers, "qualifiers"))
        if self.family is not None and not self.family:
            raise InvalidRequestError("scan: family must not be empty")
        if self.qualifiers is not None and self.family is None:
            raise InvalidRequestError("scan: qualifiers require a family")

    @property
    def key(self) -> bytes:
        """Start key, reported where a single row key is expected (errors, logs)."""
        return self.start_key


Request = GetRequest | PutRequest | DeleteRequest | AppendRequest | ScanRequest
