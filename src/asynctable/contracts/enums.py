"""Status codes, kinds and reasons used across subsystem boundaries."""

from enum import StrEnum


class RequestKind(StrEnum):
    """Kind of operation a request describes.

    Reads (GET, SCAN) are executed immediately on the worker pool.
    Writes (PUT, DELETE, APPEND) go through the write buffer.
    """

    GET = "get"
    PUT = "put"
    DELETE = "delete"
    APPEND = "append"
    SCAN = "scan"

    @property
    def is_write(self) -> bool:
        """True for kinds that are buffered until the next flush."""
        return self in _WRITE_KINDS


_WRITE_KINDS = frozenset({RequestKind.PUT, RequestKind.DELETE, RequestKind.APPEND})


class DeferredState(StrEnum):
    """Lifecycle of a Deferred.

    PENDING is the only non-terminal state. A Deferred makes exactly one
    transition out of it.
    """

    PENDING = "pending"
    RESOLVED = "resolved"
    FAILED = "failed"


class FlushReason(StrEnum):
    """What caused the write buffer to be drained.

    Values:
        EXPLICIT: Caller invoked flush()
        SIZE: Buffer reached the configured flush threshold
        INTERVAL: Configured interval elapsed since the last flush
        SHUTDOWN: Client is closing and drains what is left
    """

    EXPLICIT = "explicit"
    SIZE = "size"
    INTERVAL = "interval"
    SHUTDOWN = "shutdown"


class PatchFailure(StrEnum):
    """Why the raw-byte comparator patch could not be applied."""

    MISSING_FIELD = "missing_field"
    ACCESS_DENIED = "access_denied"
