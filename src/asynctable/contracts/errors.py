"""Exception taxonomy for asynctable.

Errors fall into three groups:

- Caller input (InvalidRequestError, InvalidFilterError, UnsupportedEncodingError,
  BufferFullError, ClientClosedError): raised synchronously from the call that
  received the bad input. These never reach the worker pool.
- Execution (BackendOperationError and subclasses, FilterTranslationError,
  FlushFailedError): delivered through the Deferred of the request that failed.
- Invariant violations (DoubleCompletionError): a bug in the dispatch engine.
  Never caught by the engine itself.

DeferredTimeoutError sits apart: it is raised to a waiter whose bounded wait
expired. The underlying operation keeps running.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from asynctable.contracts.enums import DeferredState, PatchFailure, RequestKind


class AsyncTableError(Exception):
    """Base class for every error raised by asynctable."""


# =============================================================================
# Caller input
# =============================================================================


class InvalidRequestError(AsyncTableError, ValueError):
    """A request failed field validation at construction time."""


class InvalidFilterError(AsyncTableError, ValueError):
    """A filter was built from arguments it cannot represent."""


class UnsupportedEncodingError(AsyncTableError, LookupError):
    """The named character encoding is unknown or is not a text encoding.

    Attributes:
        encoding: The identifier the caller supplied
    """

    def __init__(self, encoding: str, detail: str | None = None) -> None:
        self.encoding = encoding
        message = f"Unsupported encoding: {encoding!r}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class BufferFullError(AsyncTableError):
    """A write was rejected because too many writes are outstanding.

    Outstanding means buffered or dispatched but not yet terminal. The
    rejected write was NOT enqueued; the caller still owns it.

    Attributes:
        pending: Outstanding writes at the time of rejection
        capacity: Configured max_pending_writes
    """

    def __init__(self, pending: int, capacity: int) -> None:
        self.pending = pending
        self.capacity = capacity
        super().__init__(f"Write buffer full: {pending} writes outstanding (capacity {capacity})")


class ClientClosedError(AsyncTableError):
    """A request was submitted after the client was closed."""


# =============================================================================
# Filter translation
# =============================================================================


class FilterTranslationError(AsyncTableError):
    """The raw-byte patch of a backend comparator could not be applied.

    Raised instead of falling back to the backend's text path, which would
    silently change which rows match.

    Attributes:
        filter_kind: Kind name of the filter being translated
        reason: Whether the field was missing or the write was rejected
    """

    def __init__(self, filter_kind: bytes, reason: PatchFailure, cause: BaseException | None = None) -> None:
        self.filter_kind = filter_kind
        self.reason = reason
        self.__cause__ = cause
        kind = filter_kind.decode("utf-8", "replace")
        super().__init__(f"Cannot translate {kind} into a backend filter: {reason.value} ({cause!r})")


# =============================================================================
# Backend execution
# =============================================================================


class BackendOperationError(AsyncTableError):
    """A backend call failed.

    Wraps whatever the backend collaborator raised. The original exception is
    chained as __cause__ and kept on ``cause``.

    Attributes:
        operation: The request kind that was executing
        table: Table the request addressed
        key: Row key (or scan start key)
        cause: The backend's exception
        retryable: Whether the failure is transient and may be retried
    """

    def __init__(
        self,
        operation: RequestKind,
        table: bytes,
        key: bytes,
        cause: BaseException,
        *,
        retryable: bool = False,
    ) -> None:
        self.operation = operation
        self.table = table
        self.key = key
        self.cause = cause
        self.retryable = retryable
        self.__cause__ = cause
        super().__init__(f"{operation.value} on table {table!r} row {key!r} failed: {cause}")


class TableNotFoundError(BackendOperationError):
    """The backend has no table with the requested name."""


class NoSuchColumnFamilyError(BackendOperationError):
    """The request named a column family the table does not declare."""


class RetriesExhaustedError(BackendOperationError):
    """A retryable failure persisted through every allowed attempt.

    Attributes:
        attempts: Total number of attempts made
        last_error: The failure from the final attempt
    """

    def __init__(self, attempts: int, last_error: BackendOperationError) -> None:
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            last_error.operation,
            last_error.table,
            last_error.key,
            last_error.cause,
            retryable=False,
        )
        self.args = (f"Gave up after {attempts} attempts: {last_error}",)


class FlushFailedError(AsyncTableError):
    """At least one member of a flush barrier failed.

    Raised only after every member reached a terminal state.

    Attributes:
        failures: The failures of the members that failed, in barrier order
    """

    def __init__(self, failures: Sequence[BaseException]) -> None:
        self.failures = tuple(failures)
        first = self.failures[0] if self.failures else None
        super().__init__(f"{len(self.failures)} request(s) failed during flush; first: {first}")


# =============================================================================
# Waiting
# =============================================================================


class DeferredTimeoutError(AsyncTableError, TimeoutError):
    """A bounded wait on a Deferred expired.

    The awaited work is not cancelled; the Deferred still resolves later.

    Attributes:
        timeout: The bound that expired, in seconds
    """

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"Deferred not completed within {timeout}s")


# =============================================================================
# Invariant violations
# =============================================================================


class DoubleCompletionError(AsyncTableError, RuntimeError):
    """A Deferred was completed a second time.

    Indicates a bug in whoever holds the completing side. The stored outcome
    of the Deferred is left unchanged.

    Attributes:
        state: Terminal state the Deferred was already in
    """

    def __init__(self, state: DeferredState, attempted: str) -> None:
        self.state = state
        super().__init__(f"Cannot {attempted} a Deferred that is already {state.value}")
