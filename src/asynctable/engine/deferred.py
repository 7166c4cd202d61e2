# src/asynctable/engine/deferred.py
"""Deferred: the single-assignment result handle returned by every request.

A Deferred wraps a concurrent.futures.Future and adds the parts a
deferred-returning client API expects:

- an explicit three-state lifecycle (PENDING -> RESOLVED | FAILED) where a
  second completion is an error rather than a silent no-op
- success-only and failure-only callbacks next to the combined one
- a bounded join() that raises DeferredTimeoutError without cancelling work
- a fan-in barrier (Deferred.group) used by flush()

Callback Ordering:
    Callbacks added before completion run in registration order on the
    thread that completes the Deferred. Callbacks added after completion run
    immediately on the registering thread. A callback that raises is logged
    and the remaining callbacks still run.
"""

from __future__ import annotations

import concurrent.futures
from collections.abc import Callable, Iterable
from threading import Lock
from typing import Any, Generic, TypeVar

import structlog

from asynctable.contracts.enums import DeferredState
from asynctable.contracts.errors import DeferredTimeoutError, DoubleCompletionError, FlushFailedError

logger = structlog.get_logger(__name__)

T = TypeVar("T")

# Distinguishes "no timeout argument" from an explicit None (wait forever).
_UNSET: Any = object()


class Deferred(Generic[T]):
    """Result of an asynchronous request.

    The producing side calls resolve() or fail() exactly once. Consumers
    either block in join() or react through callbacks.

    Example:
        deferred = client.get(GetRequest(table=b"t", key=b"r1"))
        deferred.add_callback(lambda row: print(len(row)))
        row = deferred.join(timeout=5.0)

    Attributes:
        default_timeout: Bound used by join() when no timeout is passed.
            None waits forever. The dispatcher sets this from configuration.
    """

    def __init__(self, *, default_timeout: float | None = None) -> None:
        self._future: concurrent.futures.Future[T] = concurrent.futures.Future()
        self._state = DeferredState.PENDING
        self._state_lock = Lock()
        self.default_timeout = default_timeout

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def succeed(cls, value: T) -> Deferred[T]:
        """Return a Deferred already resolved with value."""
        deferred: Deferred[T] = cls()
        deferred.resolve(value)
        return deferred

    @classmethod
    def failure(cls, error: BaseException) -> Deferred[Any]:
        """Return a Deferred already failed with error."""
        deferred: Deferred[Any] = cls()
        deferred.fail(error)
        return deferred

    @classmethod
    def group(cls, deferreds: Iterable[Deferred[Any]], *, default_timeout: float | None = None) -> Deferred[None]:
        """Fan-in barrier over several Deferreds.

        The returned Deferred completes only after EVERY member is terminal.
        It resolves with None when all members resolved, and fails with
        FlushFailedError carrying each member failure (in member order) when
        at least one failed. An empty group is resolved immediately.
        """
        members = list(deferreds)
        barrier: Deferred[None] = cls(default_timeout=default_timeout)
        if not members:
            barrier.resolve(None)
            return barrier

        remaining = len(members)
        lock = Lock()

        def _member_done(_outcome: object) -> None:
            nonlocal remaining
            with lock:
                remaining -= 1
                last = remaining == 0
            if not last:
                return
            failures = [error for member in members if (error := member.exception()) is not None]
            if failures:
                barrier.fail(FlushFailedError(failures))
            else:
                barrier.resolve(None)

        for member in members:
            member.add_both(_member_done)
        return barrier

    # ------------------------------------------------------------------
    # Producer side
    # ------------------------------------------------------------------

    def resolve(self, value: T) -> None:
        """Complete successfully.

        Raises:
            DoubleCompletionError: The Deferred is already terminal.
        """
        self._transition(DeferredState.RESOLVED, "resolve")
        self._future.set_result(value)

    def fail(self, error: BaseException) -> None:
        """Complete with a failure.

        Raises:
            DoubleCompletionError: The Deferred is already terminal.
        """
        self._transition(DeferredState.FAILED, "fail")
        self._future.set_exception(error)

    def _transition(self, target: DeferredState, attempted: str) -> None:
        with self._state_lock:
            if self._state is not DeferredState.PENDING:
                raise DoubleCompletionError(self._state, attempted)
            self._state = target

    # ------------------------------------------------------------------
    # Consumer side
    # ------------------------------------------------------------------

    @property
    def state(self) -> DeferredState:
        return self._state

    def done(self) -> bool:
        """True once the outcome is stored and readable without blocking."""
        return self._future.done()

    def join(self, timeout: float | None = _UNSET) -> T:
        """Block until terminal and return the value or raise the failure.

        Args:
            timeout: Seconds to wait. None waits forever. Omitted uses
                default_timeout.

        Raises:
            DeferredTimeoutError: The bound expired first. The underlying
                work is not cancelled and the Deferred still completes later.
            BaseException: Whatever the Deferred failed with.
        """
        bound = self.default_timeout if timeout is _UNSET else timeout
        finished, _ = concurrent.futures.wait([self._future], timeout=bound)
        if not finished:
            assert bound is not None
            raise DeferredTimeoutError(bound)
        return self._future.result()

    def exception(self) -> BaseException | None:
        """Failure of a terminal Deferred, None if it resolved.

        Raises:
            RuntimeError: The Deferred is still pending.
        """
        if not self._future.done():
            raise RuntimeError("Deferred is still pending")
        return self._future.exception()

    def add_callback(self, fn: Callable[[T], Any]) -> Deferred[T]:
        """Run fn(value) if the Deferred resolves."""

        def _on_done(future: concurrent.futures.Future[T]) -> None:
            if future.exception() is None:
                self._invoke(fn, future.result())

        self._future.add_done_callback(_on_done)
        return self

    def add_errback(self, fn: Callable[[BaseException], Any]) -> Deferred[T]:
        """Run fn(error) if the Deferred fails."""

        def _on_done(future: concurrent.futures.Future[T]) -> None:
            error = future.exception()
            if error is not None:
                self._invoke(fn, error)

        self._future.add_done_callback(_on_done)
        return self

    def add_both(self, fn: Callable[[Any], Any]) -> Deferred[T]:
        """Run fn(value) on success or fn(error) on failure."""

        def _on_done(future: concurrent.futures.Future[T]) -> None:
            error = future.exception()
            self._invoke(fn, future.result() if error is None else error)

        self._future.add_done_callback(_on_done)
        return self

    def _invoke(self, fn: Callable[[Any], Any], outcome: object) -> None:
        try:
            fn(outcome)
        except Exception as e:
            logger.error(
                "Deferred callback raised",
                callback=getattr(fn, "__qualname__", repr(fn)),
                state=self._state.value,
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )

    def __repr__(self) -> str:
        return f"<Deferred state={self._state.value}>"
