"""Flush trigger evaluation for the write buffer.

Two triggers can be configured; they are combinable (first one to fire wins):
- size: fires when the buffer holds flush_threshold writes
- interval: fires when flush_interval_seconds have passed since the last
  flush and the buffer is not empty

The dispatcher calls record_accept() for every buffered write and
should_trigger() both from the enqueue path and from the flush timer. When
should_trigger() returns True, which_triggered() reports the FlushReason.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from asynctable.contracts.enums import FlushReason
from asynctable.engine.clock import DEFAULT_CLOCK

if TYPE_CHECKING:
    from asynctable.engine.clock import Clock


class FlushTriggerEvaluator:
    """Evaluates the size and interval triggers for one write buffer.

    Thread Safety:
        NOT thread-safe. Guarded by the Dispatcher lock.

    Example:
        evaluator = FlushTriggerEvaluator(flush_threshold=100, flush_interval_seconds=1.0)

        evaluator.record_accept()
        if evaluator.should_trigger():
            print(f"Triggered by: {evaluator.which_triggered()}")
            dispatcher.flush(evaluator.which_triggered())
            evaluator.reset()
    """

    def __init__(
        self,
        flush_threshold: int | None,
        flush_interval_seconds: float | None,
        clock: Clock | None = None,
    ) -> None:
        """Initialize evaluator.

        Args:
            flush_threshold: Buffered-write count that fires the size trigger,
                or None to disable it
            flush_interval_seconds: Time since the last flush that fires the
                interval trigger, or None to disable it
            clock: Optional clock for time access. Defaults to system clock.
                   Inject MockClock for deterministic testing.
        """
        self._flush_threshold = flush_threshold
        self._flush_interval = flush_interval_seconds
        self._clock = clock if clock is not None else DEFAULT_CLOCK
        self._buffered = 0
        self._last_flush_time = self._clock.monotonic()
        self._last_triggered: FlushReason | None = None

        # When the size threshold was first reached (for "first to fire wins")
        self._size_fire_time: float | None = None

    @property
    def buffered_count(self) -> int:
        """Writes accepted since the last reset."""
        return self._buffered

    @property
    def seconds_since_flush(self) -> float:
        return self._clock.monotonic() - self._last_flush_time

    def record_accept(self) -> None:
        """Record that a write was added to the buffer."""
        self._buffered += 1
        if (
            self._size_fire_time is None
            and self._flush_threshold is not None
            and self._buffered >= self._flush_threshold
        ):
            self._size_fire_time = self._clock.monotonic()

    def should_trigger(self) -> bool:
        """Evaluate whether ANY trigger condition is met (OR logic).

        When both triggers are satisfied, the one that fired EARLIEST is
        reported. The interval trigger's fire time is deterministic
        (last flush + interval); the size trigger's is the clock reading when
        the threshold was reached. An exact tie reports SIZE.

        Side effect:
            Sets the value returned by which_triggered().
        """
        self._last_triggered = None
        current_time = self._clock.monotonic()

        # (fire_time, tie_rank, reason)
        candidates: list[tuple[float, int, FlushReason]] = []

        if self._size_fire_time is not None:
            candidates.append((self._size_fire_time, 0, FlushReason.SIZE))

        if self._flush_interval is not None and self._buffered > 0:
            interval_fire_time = self._last_flush_time + self._flush_interval
            if current_time >= interval_fire_time:
                candidates.append((interval_fire_time, 1, FlushReason.INTERVAL))

        if not candidates:
            return False

        candidates.sort()
        self._last_triggered = candidates[0][2]
        return True

    def which_triggered(self) -> FlushReason | None:
        """Return which trigger fired on the last should_trigger() call."""
        return self._last_triggered

    def reset(self) -> None:
        """Start a new interval. Call whenever the buffer is swapped out."""
        self._buffered = 0
        self._last_flush_time = self._clock.monotonic()
        self._last_triggered = None
        self._size_fire_time = None
