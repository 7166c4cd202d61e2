"""Shared contracts: request value objects, status enums and the error taxonomy.

Nothing in this package talks to a backend or starts a thread; every other
subsystem depends on it and it depends on none of them.
"""

from asynctable.contracts.enums import DeferredState, FlushReason, PatchFailure, RequestKind
from asynctable.contracts.errors import (
    AsyncTableError,
    BackendOperationError,
    BufferFullError,
    ClientClosedError,
    DeferredTimeoutError,
    DoubleCompletionError,
    FilterTranslationError,
    FlushFailedError,
    InvalidFilterError,
    InvalidRequestError,
    NoSuchColumnFamilyError,
    RetriesExhaustedError,
    TableNotFoundError,
    UnsupportedEncodingError,
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

__all__ = [
    # enums
    "DeferredState",
    "FlushReason",
    "PatchFailure",
    "RequestKind",
    # errors
    "AsyncTableError",
    "BackendOperationError",
    "BufferFullError",
    "ClientClosedError",
    "DeferredTimeoutError",
    "DoubleCompletionError",
    "FilterTranslationError",
    "FlushFailedError",
    "InvalidFilterError",
    "InvalidRequestError",
    "NoSuchColumnFamilyError",
    "RetriesExhaustedError",
    "TableNotFoundError",
    "UnsupportedEncodingError",
    # requests
    "AppendRequest",
    "DeleteRequest",
    "GetRequest",
    "KeyValue",
    "PutRequest",
    "Request",
    "RowResult",
    "ScanRequest",
]
