# src/asynctable/client.py
"""AsyncTableClient: the deferred-returning surface callers program against.

Every operation returns immediately with a Deferred. Reads are executed right
away on the worker pool; writes are buffered and reach the backend on the
next flush (explicit, size, interval or shutdown).

Example:
    backend = InMemoryBackend()
    backend.create_table(b"t", [b"cf"])

    with AsyncTableClient(backend) as client:
        client.put(PutRequest(table=b"t", key=b"r1", family=b"cf", qualifier=b"q", value=b"v1"))
        client.flush().join()
        row = client.get(GetRequest(table=b"t", key=b"r1")).join()
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from types import TracebackType
from typing import TYPE_CHECKING, TypeVar

from asynctable.contracts.errors import InvalidRequestError
from asynctable.contracts.requests import (
    AppendRequest,
    DeleteRequest,
    GetRequest,
    PutRequest,
    RowResult,
    ScanRequest,
)
from asynctable.core.config import AsyncTableSettings, load_settings
from asynctable.core.logging import configure_from_settings
from asynctable.engine.deferred import Deferred
from asynctable.engine.dispatcher import Dispatcher

if TYPE_CHECKING:
    from asynctable.backend.protocols import DataPlaneClient
    from asynctable.engine.clock import Clock

_R = TypeVar("_R")


class AsyncTableClient:
    """Asynchronous wide-column client over a synchronous data plane.

    Thread-safe: any number of threads may submit requests concurrently.
    """

    def __init__(
        self,
        backend: DataPlaneClient,
        settings: AsyncTableSettings | None = None,
        *,
        clock: Clock | None = None,
        start_timer: bool = True,
    ) -> None:
        self._dispatcher = Dispatcher(backend, settings, clock, start_timer=start_timer)

    @classmethod
    def from_settings(cls, backend: DataPlaneClient, config_path: Path | str) -> AsyncTableClient:
        """Build a client from a YAML config file (with ASYNCTABLE_* overrides).

        Also applies the file's logging section.
        """
        settings = load_settings(Path(config_path))
        configure_from_settings(settings.logging)
        return cls(backend, settings)

    @property
    def settings(self) -> AsyncTableSettings:
        return self._dispatcher.settings

    @property
    def pending_writes(self) -> int:
        """Writes accepted but not yet terminal (buffered or in flight)."""
        return self._dispatcher.pending_writes

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def put(self, request: PutRequest) -> Deferred[None]:
        """Buffer a cell write. Resolves with None once the backend stored it."""
        return self._dispatcher.submit(_expect(request, PutRequest))

    def get(self, request: GetRequest) -> Deferred[RowResult]:
        """Read one row. Resolves with its cells, empty if the row does not exist."""
        return self._dispatcher.submit(_expect(request, GetRequest))

    def delete(self, request: DeleteRequest) -> Deferred[None]:
        """Buffer a row, family or column deletion."""
        return self._dispatcher.submit(_expect(request, DeleteRequest))

    def append(self, request: AppendRequest) -> Deferred[RowResult]:
        """Buffer an append. Resolves with the updated cell."""
        return self._dispatcher.submit(_expect(request, AppendRequest))

    def scan(self, request: ScanRequest) -> Deferred[Iterator[RowResult]]:
        """Read a key range. Resolves with an iterator over rows."""
        return self._dispatcher.submit(_expect(request, ScanRequest))

    def flush(self) -> Deferred[None]:
        """Send every buffered write now; the result completes when all accepted writes have."""
        return self._dispatcher.flush()

    def close(self, timeout: float | None = None) -> None:
        """Flush, wait for outstanding writes, and release the worker pool."""
        self._dispatcher.close(timeout)

    def __enter__(self) -> AsyncTableClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()


def _expect(request: object, expected: type[_R]) -> _R:
    if not isinstance(request, expected):
        raise InvalidRequestError(f"Expected {expected.__name__}, got {type(request).__name__}")
    return request
