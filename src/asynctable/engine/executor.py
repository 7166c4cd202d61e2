# src/asynctable/engine/executor.py
"""Per-request execution against the backend data plane.

execute_request() performs exactly one backend call for one request and
converts the backend's answer into the caller-facing result type. Any
exception the backend raises is classified into a BackendOperationError
subclass, so what reaches a Deferred never depends on the backend's own
exception hierarchy.

Result types by kind:
    GET     list[KeyValue] (empty when the row does not exist)
    PUT     None
    DELETE  None
    APPEND  list[KeyValue] holding the updated cell
    SCAN    Iterator[list[KeyValue]], one list per row, materialized here
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

from asynctable.backend.errors import BackendError, NoSuchColumnFamily, TableNotFound
from asynctable.contracts.errors import (
    BackendOperationError,
    NoSuchColumnFamilyError,
    TableNotFoundError,
)
from asynctable.contracts.requests import (
    AppendRequest,
    DeleteRequest,
    GetRequest,
    KeyValue,
    PutRequest,
    Request,
    RowResult,
    ScanRequest,
)

if TYPE_CHECKING:
    from asynctable.backend.filters import BackendFilter
    from asynctable.backend.protocols import Cell, DataPlaneClient


def to_key_value(cell: Cell) -> KeyValue:
    return KeyValue(
        key=cell.row,
        family=cell.family,
        qualifier=cell.qualifier,
        value=cell.value,
        timestamp=cell.timestamp,
    )


def classify_backend_error(request: Request, error: Exception) -> BackendOperationError:
    """Wrap a backend exception into the caller-facing taxonomy.

    Missing tables and families map to their dedicated subclasses. Any other
    BackendError keeps its own retryable flag; exceptions from outside the
    backend hierarchy are treated as permanent.
    """
    if isinstance(error, TableNotFound):
        return TableNotFoundError(request.kind, request.table, request.key, error)
    if isinstance(error, NoSuchColumnFamily):
        return NoSuchColumnFamilyError(request.kind, request.table, request.key, error)
    retryable = error.retryable if isinstance(error, BackendError) else False
    return BackendOperationError(request.kind, request.table, request.key, error, retryable=retryable)


def execute_request(
    backend: DataPlaneClient,
    request: Request,
    backend_filter: BackendFilter | None = None,
) -> Any:
    """Run one request against the backend and return its result.

    Args:
        backend: Data plane to call
        request: Validated request
        backend_filter: Already translated filter of a read request

    Raises:
        BackendOperationError: The backend call failed (classified).
    """
    if not isinstance(request, GetRequest | PutRequest | DeleteRequest | AppendRequest | ScanRequest):
        raise TypeError(f"Unknown request type: {type(request).__name__}")
    try:
        return _dispatch(backend, request, backend_filter)
    except BackendOperationError:
        raise
    except Exception as e:
        raise classify_backend_error(request, e) from e


def _dispatch(backend: DataPlaneClient, request: Request, backend_filter: BackendFilter | None) -> Any:
    if isinstance(request, GetRequest):
        cells = backend.get(
            request.table,
            request.key,
            family=request.family,
            qualifiers=request.qualifiers,
            row_filter=backend_filter,
        )
        return [to_key_value(cell) for cell in cells]
    if isinstance(request, PutRequest):
        backend.put(request.table, request.key, request.family, request.qualifier, request.value)
        return None
    if isinstance(request, DeleteRequest):
        backend.delete(request.table, request.key, family=request.family, qualifiers=request.qualifiers)
        return None
    if isinstance(request, AppendRequest):
        cell = backend.append(request.table, request.key, request.family, request.qualifier, request.value)
        return [to_key_value(cell)]
    return _scan(backend, request, backend_filter)


def _scan(backend: DataPlaneClient, request: ScanRequest, backend_filter: BackendFilter | None) -> Iterator[RowResult]:
    rows = [
        [to_key_value(cell) for cell in cells]
        for _key, cells in backend.scan(
            request.table,
            start_key=request.start_key,
            stop_key=request.stop_key,
            family=request.family,
            qualifiers=request.qualifiers,
            row_filter=backend_filter,
            limit=request.max_rows,
        )
    ]
    return iter(rows)
