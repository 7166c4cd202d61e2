# tests/engine/test_clock.py
"""Tests for clock abstractions."""

import pytest

from asynctable.engine.clock import DEFAULT_CLOCK, MockClock, SystemClock


class TestMockClock:
    def test_starts_at_given_time(self) -> None:
        assert MockClock(start=12.5).monotonic() == 12.5

    def test_advance_accumulates(self) -> None:
        clock = MockClock()
        clock.advance(1.0)
        clock.advance(0.5)

        assert clock.monotonic() == 1.5

    def test_negative_advance_rejected(self) -> None:
        with pytest.raises(ValueError, match="negative"):
            MockClock().advance(-0.1)


class TestSystemClock:
    def test_non_decreasing(self) -> None:
        clock = SystemClock()
        first = clock.monotonic()

        assert clock.monotonic() >= first

    def test_default_is_system_clock(self) -> None:
        assert isinstance(DEFAULT_CLOCK, SystemClock)
