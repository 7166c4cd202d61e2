# src/asynctable/engine/dispatcher.py
"""Dispatcher: the request pipeline between the client surface and the backend.

Reads (GET, SCAN) are submitted to the worker pool immediately. Writes (PUT,
DELETE, APPEND) are appended to the WriteBuffer and leave it only when a flush
swaps the whole buffer out and submits every entry to the pool.

Flushes happen on:
- explicit request (flush())
- size trigger: evaluated inside the enqueue critical section
- interval trigger: evaluated by the FlushTimer background thread
- shutdown (close())

Thread Safety:
    One lock guards the buffer, the trigger evaluator and the in-flight set.
    Reads never take it. Backend calls and Deferred completion always run
    outside it, on worker threads.

Backpressure:
    A write is rejected with BufferFullError when buffered plus in-flight
    writes have reached max_pending_writes. A rejected write is never
    enqueued and never reaches the backend.
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from threading import Lock
from typing import TYPE_CHECKING, Any

import structlog

from asynctable.contracts.enums import FlushReason
from asynctable.contracts.errors import (
    BackendOperationError,
    BufferFullError,
    ClientClosedError,
    DeferredTimeoutError,
    FlushFailedError,
)
from asynctable.contracts.requests import AppendRequest, DeleteRequest, GetRequest, PutRequest, ScanRequest
from asynctable.core.config import AsyncTableSettings
from asynctable.engine.buffer import BufferedWrite, WriteBuffer, WriteRequest
from asynctable.engine.clock import DEFAULT_CLOCK
from asynctable.engine.deferred import Deferred
from asynctable.engine.executor import execute_request
from asynctable.engine.retry import RetryConfig, RetryManager
from asynctable.engine.triggers import FlushTriggerEvaluator

if TYPE_CHECKING:
    from collections.abc import Callable

    from asynctable.backend.filters import BackendFilter
    from asynctable.backend.protocols import DataPlaneClient
    from asynctable.contracts.requests import Request
    from asynctable.engine.clock import Clock

logger = structlog.get_logger(__name__)

# Lower bound on the timer's polling period
_MIN_POLL_SECONDS = 0.005


class FlushTimer:
    """Background thread that drives the interval trigger.

    Polls at a quarter of the flush interval, so an interval flush happens at
    most interval / 4 late. The poll callable does its own locking.
    """

    def __init__(self, poll: Callable[[], FlushReason | None], interval_seconds: float) -> None:
        self._poll = poll
        self._period = max(interval_seconds / 4, _MIN_POLL_SECONDS)
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._loop,
            name="asynctable-flush-timer",
            daemon=True,
        )

    @property
    def period(self) -> float:
        return self._period

    def start(self) -> None:
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        """Signal the loop to exit and wait for the thread."""
        self._stop_event.set()
        if self._thread.is_alive():
            self._thread.join(timeout)

    def _loop(self) -> None:
        while not self._stop_event.wait(self._period):
            try:
                self._poll()
            except Exception as e:
                # Keep polling: one failed evaluation must not stop interval flushes
                logger.error("Flush timer poll failed", error=str(e), error_type=type(e).__name__, exc_info=True)


class Dispatcher:
    """Routes requests to the worker pool, buffering writes until flushed.

    Example:
        dispatcher = Dispatcher(backend, AsyncTableSettings())
        put = dispatcher.submit(PutRequest(table=b"t", key=b"r1", family=b"cf", qualifier=b"q", value=b"v"))
        dispatcher.flush().join()
        put.state  # DeferredState.RESOLVED
        dispatcher.close()
    """

    def __init__(
        self,
        backend: DataPlaneClient,
        settings: AsyncTableSettings | None = None,
        clock: Clock | None = None,
        *,
        start_timer: bool = True,
    ) -> None:
        """Initialize dispatcher.

        Args:
            backend: Data plane the worker threads call
            settings: Client configuration (defaults when omitted)
            clock: Optional clock for the flush triggers. Defaults to system clock.
            start_timer: Start the FlushTimer thread. Tests that drive the
                interval trigger through poll_triggers() pass False.
        """
        self._backend = backend
        self._settings = settings if settings is not None else AsyncTableSettings()
        self._clock = clock if clock is not None else DEFAULT_CLOCK

        buffer_settings = self._settings.buffer
        self._capacity = buffer_settings.max_pending_writes
        self._join_timeout = self._settings.timeouts.join_timeout_seconds
        self._flush_timeout = self._settings.timeouts.flush_timeout_seconds

        self._lock = Lock()
        self._buffer = WriteBuffer()
        self._triggers = FlushTriggerEvaluator(
            buffer_settings.flush_threshold,
            buffer_settings.flush_interval_seconds,
            self._clock,
        )
        self._in_flight: set[Deferred[Any]] = set()
        self._closed = False

        self._retry = RetryManager(RetryConfig.from_settings(self._settings.retry))
        self._pool = ThreadPoolExecutor(
            max_workers=self._settings.concurrency.max_workers,
            thread_name_prefix="asynctable-worker",
        )

        self._timer: FlushTimer | None = None
        if start_timer and buffer_settings.flush_interval_seconds is not None:
            self._timer = FlushTimer(self.poll_triggers, buffer_settings.flush_interval_seconds)
            self._timer.start()

        logger.debug(
            "Dispatcher started",
            max_workers=self._settings.concurrency.max_workers,
            flush_threshold=buffer_settings.flush_threshold,
            flush_interval_seconds=buffer_settings.flush_interval_seconds,
            max_pending_writes=self._capacity,
        )

    @property
    def settings(self) -> AsyncTableSettings:
        return self._settings

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending_writes(self) -> int:
        """Buffered writes plus dispatched writes whose Deferred is not yet terminal."""
        with self._lock:
            return len(self._buffer) + len(self._in_flight)

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submit(self, request: Request) -> Deferred[Any]:
        """Accept a request and return its Deferred.

        Raises:
            ClientClosedError: close() has been called.
            BufferFullError: A write arrived while the pending bound is reached.
            FilterTranslationError: A read's filter could not be translated.
        """
        if isinstance(request, PutRequest | DeleteRequest | AppendRequest):
            return self._enqueue(request)
        return self._submit_read(request)

    def _submit_read(self, request: GetRequest | ScanRequest) -> Deferred[Any]:
        if self._closed:
            raise ClientClosedError(f"Cannot submit {request.kind.value}: client is closed")

        backend_filter: BackendFilter | None = None
        if request.filter is not None:
            backend_filter = request.filter.to_backend_filter()

        deferred: Deferred[Any] = Deferred(default_timeout=self._join_timeout)
        try:
            self._pool.submit(self._run, request, deferred, backend_filter)
        except RuntimeError as e:
            # Pool shut down between the closed check and the submit
            raise ClientClosedError(f"Cannot submit {request.kind.value}: client is closed") from e
        return deferred

    def _enqueue(self, request: WriteRequest) -> Deferred[Any]:
        deferred: Deferred[Any] = Deferred(default_timeout=self._join_timeout)
        with self._lock:
            if self._closed:
                raise ClientClosedError(f"Cannot submit {request.kind.value}: client is closed")

            pending = len(self._buffer) + len(self._in_flight)
            if pending >= self._capacity:
                logger.warning(
                    "Write rejected, too many pending writes",
                    operation=request.kind.value,
                    table=request.table,
                    pending=pending,
                    capacity=self._capacity,
                )
                raise BufferFullError(pending, self._capacity)

            self._buffer.append(BufferedWrite(request, deferred, self._clock.monotonic()))
            self._triggers.record_accept()
            if self._triggers.should_trigger():
                reason = self._triggers.which_triggered()
                assert reason is not None
                self._flush_locked(reason)
        return deferred

    # ------------------------------------------------------------------
    # Flushing
    # ------------------------------------------------------------------

    def flush(self, reason: FlushReason = FlushReason.EXPLICIT) -> Deferred[None]:
        """Dispatch every buffered write and return a barrier.

        The barrier covers the writes drained by this flush AND the writes
        still in flight from earlier flushes, so once it is terminal every
        write accepted before this call is terminal too. It fails with
        FlushFailedError if any of them failed; siblings are unaffected.
        """
        with self._lock:
            return self._flush_locked(reason)

    def poll_triggers(self) -> FlushReason | None:
        """Flush if the size or interval trigger has fired.

        Returns:
            The reason of the flush that was started, or None.
        """
        with self._lock:
            if not self._triggers.should_trigger():
                return None
            reason = self._triggers.which_triggered()
            assert reason is not None
            self._flush_locked(reason)
        return reason

    def _flush_locked(self, reason: FlushReason) -> Deferred[None]:
        """Swap the buffer out and submit the batch. Caller holds self._lock."""
        oldest = self._buffer.oldest_enqueued_at
        drained = self._buffer.swap()
        self._triggers.reset()

        members = [entry.deferred for entry in drained]
        members.extend(self._in_flight)
        for entry in drained:
            self._in_flight.add(entry.deferred)
            self._pool.submit(self._run, entry.request, entry.deferred, None)

        if drained:
            logger.debug(
                "Flush started",
                reason=reason.value,
                batch_size=len(drained),
                in_flight=len(self._in_flight) - len(drained),
                oldest_write_age=self._clock.monotonic() - oldest if oldest is not None else 0.0,
            )

        barrier = Deferred.group(members, default_timeout=self._flush_timeout)
        if drained:
            batch_size = len(drained)
            barrier.add_both(lambda outcome: self._log_flush_done(reason, batch_size, outcome))
        return barrier

    @staticmethod
    def _log_flush_done(reason: FlushReason, batch_size: int, outcome: object) -> None:
        if isinstance(outcome, FlushFailedError):
            logger.warning(
                "Flush completed with failures",
                reason=reason.value,
                batch_size=batch_size,
                failed=len(outcome.failures),
            )
        else:
            logger.debug("Flush completed", reason=reason.value, batch_size=batch_size)

    # ------------------------------------------------------------------
    # Execution (worker threads)
    # ------------------------------------------------------------------

    def _run(self, request: Request, deferred: Deferred[Any], backend_filter: BackendFilter | None) -> None:
        """Execute one request and complete its Deferred exactly once."""
        try:
            try:
                result = self._retry.execute_with_retry(
                    lambda: execute_request(self._backend, request, backend_filter),
                    on_retry=lambda attempt, error: self._log_retry(request, attempt, error),
                )
            except BackendOperationError as e:
                logger.warning(
                    "Backend operation failed",
                    operation=request.kind.value,
                    table=request.table,
                    key=request.key,
                    retryable=e.retryable,
                    error_type=type(e).__name__,
                    error=str(e),
                )
                deferred.fail(e)
            except Exception as e:
                logger.error(
                    "Request execution failed unexpectedly",
                    operation=request.kind.value,
                    table=request.table,
                    key=request.key,
                    error_type=type(e).__name__,
                    error=str(e),
                    exc_info=True,
                )
                deferred.fail(e)
            else:
                deferred.resolve(result)
        finally:
            if request.kind.is_write:
                with self._lock:
                    self._in_flight.discard(deferred)

    @staticmethod
    def _log_retry(request: Request, attempt: int, error: BaseException) -> None:
        logger.info(
            "Retrying backend operation",
            operation=request.kind.value,
            table=request.table,
            key=request.key,
            attempt=attempt,
            error=str(error),
        )

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    def close(self, timeout: float | None = None) -> None:
        """Stop the timer, flush what is buffered, wait, and shut the pool down.

        Failed writes were already delivered to their own Deferreds; close()
        only logs them. Idempotent.

        Args:
            timeout: Bound on the final drain. Defaults to the configured
                flush timeout (None waits forever).

        Raises:
            DeferredTimeoutError: The drain did not finish in time. The pool
                is shut down without waiting; running backend calls complete
                in the background.
        """
        if self._timer is not None:
            self._timer.stop()

        with self._lock:
            if self._closed:
                return
            self._closed = True
            barrier = self._flush_locked(FlushReason.SHUTDOWN)

        try:
            if timeout is None:
                barrier.join()
            else:
                barrier.join(timeout)
        except FlushFailedError as e:
            logger.warning("Writes failed during shutdown flush", failed=len(e.failures))
        except DeferredTimeoutError:
            logger.warning("Shutdown flush timed out", timeout=barrier.default_timeout if timeout is None else timeout)
            self._pool.shutdown(wait=False)
            raise

        self._pool.shutdown(wait=True)
        logger.info("Dispatcher closed")
