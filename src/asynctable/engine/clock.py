# src/asynctable/engine/clock.py
"""Clock abstraction for testable flush-interval logic.

The dispatcher's interval trigger measures time since the last flush.
Production code uses SystemClock (the default); tests inject MockClock and
advance time without sleeping.
"""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    """Abstract monotonic clock."""

    def monotonic(self) -> float:
        """Return monotonic time in seconds. Never goes backwards."""
        ...


class SystemClock:
    """Production clock using time.monotonic()."""

    def monotonic(self) -> float:
        return time.monotonic()


class MockClock:
    """Controllable clock for deterministic testing.

    Example:
        clock = MockClock(start=0.0)
        evaluator = FlushTriggerEvaluator(flush_threshold=None, flush_interval_seconds=1.0, clock=clock)

        evaluator.record_accept()
        clock.advance(1.1)
        assert evaluator.should_trigger()
    """

    def __init__(self, start: float = 0.0) -> None:
        self._current = start

    def monotonic(self) -> float:
        return self._current

    def advance(self, seconds: float) -> None:
        """Advance mock time by specified seconds.

        Raises:
            ValueError: If seconds is negative.
        """
        if seconds < 0:
            raise ValueError(f"Cannot advance time by negative amount: {seconds}")
        self._current += seconds


# Default clock for production use
DEFAULT_CLOCK: Clock = SystemClock()
