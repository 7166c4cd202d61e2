# src/asynctable/engine/buffer.py
"""Write buffer holding accepted writes until the next flush.

Writes leave the buffer only as a whole: swap() hands the caller every
buffered entry and leaves the buffer empty, so a flush can never observe
(or dispatch) half of a batch.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from asynctable.contracts.requests import AppendRequest, DeleteRequest, PutRequest
from asynctable.engine.deferred import Deferred

WriteRequest = PutRequest | DeleteRequest | AppendRequest


@dataclass(frozen=True, slots=True)
class BufferedWrite:
    """A write accepted by the dispatcher and not yet dispatched.

    Attributes:
        request: The validated write request
        deferred: Handle returned to the caller at submission
        enqueued_at: Clock reading when the write was accepted
    """

    request: WriteRequest
    deferred: Deferred[Any]
    enqueued_at: float


class WriteBuffer:
    """Append-only FIFO of BufferedWrite entries.

    Thread Safety:
        NOT thread-safe. The Dispatcher serializes every access under its
        own lock, together with the trigger evaluator and in-flight set, so
        append and swap are atomic with respect to each other.

    Example:
        buffer = WriteBuffer()
        buffer.append(BufferedWrite(request, Deferred(), clock.monotonic()))
        batch = buffer.swap()  # buffer is now empty
    """

    def __init__(self) -> None:
        self._entries: list[BufferedWrite] = []

    def append(self, entry: BufferedWrite) -> None:
        self._entries.append(entry)

    def swap(self) -> list[BufferedWrite]:
        """Take every buffered entry, in acceptance order, and empty the buffer."""
        drained, self._entries = self._entries, []
        return drained

    @property
    def oldest_enqueued_at(self) -> float | None:
        """Acceptance time of the oldest buffered write, None when empty."""
        if not self._entries:
            return None
        return self._entries[0].enqueued_at

    def __len__(self) -> int:
        return len(self._entries)
