"""Errors raised by the reference backend.

These are backend-native: the dispatch engine never lets them reach callers
directly. executor.classify_backend_error() wraps them into
BackendOperationError subclasses.
"""

from __future__ import annotations


class BackendError(Exception):
    """Base class for reference backend failures.

    Attributes:
        retryable: True when the same call may succeed if repeated
    """

    retryable: bool = False


class TableNotFound(BackendError):
    """No table with the given name exists."""

    def __init__(self, table: bytes) -> None:
        self.table = table
        super().__init__(f"Table not found: {table!r}")


class TableExists(BackendError):
    """create_table() was called for a name that is already taken."""

    def __init__(self, table: bytes) -> None:
        self.table = table
        super().__init__(f"Table already exists: {table!r}")


class NoSuchColumnFamily(BackendError):
    """A mutation or read named a family the table does not declare."""

    def __init__(self, table: bytes, family: bytes) -> None:
        self.table = table
        self.family = family
        super().__init__(f"Column family {family!r} does not exist in table {table!r}")


class BackendUnavailableError(BackendError):
    """Transient failure: the store could not serve the call right now."""

    retryable = True
