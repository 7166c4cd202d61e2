# tests/conftest.py
"""Shared test fixtures and helpers.

Backends:
- backend: InMemoryBackend with table b"t" (families b"cf", b"cf2")
- gated_backend: the same store behind a GatedBackend, whose data-plane calls
  can be held on an Event or made to fail per row key

Dispatch engine:
- clock: MockClock at t=0
- make_dispatcher / make_client: factories building a Dispatcher or
  AsyncTableClient on a MockClock with the FlushTimer thread disabled. Both
  triggers are off unless a test turns them on, so writes move only when the
  test says so. Everything built is closed at teardown.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

from __future__ import annotations

import os
import threading
from collections.abc import Callable, Iterator, Sequence
from typing import Any

import pytest
from hypothesis import Phase, Verbosity, settings

from asynctable.backend import InMemoryBackend
from asynctable.backend.filters import BackendFilter
from asynctable.backend.protocols import Cell
from asynctable.client import AsyncTableClient
from asynctable.core.config import (
    AsyncTableSettings,
    BufferSettings,
    ConcurrencySettings,
    RetrySettings,
    TimeoutSettings,
)
from asynctable.engine.clock import MockClock
from asynctable.engine.dispatcher import Dispatcher

TABLE = b"t"
FAMILIES = (b"cf", b"cf2")

# Upper bound for any blocking wait inside a test, so a bug fails instead of hanging
WAIT_SECONDS = 5.0


# =============================================================================
# Backends
# =============================================================================


class GatedBackend:
    """DataPlaneClient wrapper that can hold calls and inject failures.

    Calls block while ``gate`` is clear (bounded by WAIT_SECONDS) and are
    recorded in ``calls`` as (operation, row key) in arrival order.
    """

    def __init__(self, inner: InMemoryBackend) -> None:
        self.inner = inner
        self.gate = threading.Event()
        self.gate.set()
        self.calls: list[tuple[str, bytes]] = []
        self._lock = threading.Lock()
        self._transient: dict[bytes, list[Exception]] = {}
        self._permanent: dict[bytes, Exception] = {}

    def fail_times(self, key: bytes, error: Exception, times: int) -> None:
        """Raise error for the next ``times`` calls on key, then succeed."""
        self._transient[key] = [error] * times

    def fail_always(self, key: bytes, error: Exception) -> None:
        self._permanent[key] = error

    def calls_for(self, key: bytes) -> int:
        with self._lock:
            return sum(1 for _, called_key in self.calls if called_key == key)

    def _enter(self, operation: str, key: bytes) -> None:
        with self._lock:
            self.calls.append((operation, key))
        self.gate.wait(WAIT_SECONDS)
        with self._lock:
            pending = self._transient.get(key)
            if pending:
                raise pending.pop(0)
            error = self._permanent.get(key)
        if error is not None:
            raise error

    def put(self, table: bytes, key: bytes, family: bytes, qualifier: bytes, value: bytes) -> None:
        self._enter("put", key)
        self.inner.put(table, key, family, qualifier, value)

    def get(
        self,
        table: bytes,
        key: bytes,
        *,
        family: bytes | None = None,
        qualifiers: Sequence[bytes] | None = None,
        row_filter: BackendFilter | None = None,
    ) -> list[Cell]:
        self._enter("get", key)
        return self.inner.get(table, key, family=family, qualifiers=qualifiers, row_filter=row_filter)

    def delete(
        self,
        table: bytes,
        key: bytes,
        *,
        family: bytes | None = None,
        qualifiers: Sequence[bytes] | None = None,
    ) -> None:
        self._enter("delete", key)
        self.inner.delete(table, key, family=family, qualifiers=qualifiers)

    def append(self, table: bytes, key: bytes, family: bytes, qualifier: bytes, value: bytes) -> Cell:
        self._enter("append", key)
        return self.inner.append(table, key, family, qualifier, value)

    def scan(self, table: bytes, **kwargs: Any) -> Iterator[tuple[bytes, list[Cell]]]:
        self._enter("scan", kwargs.get("start_key", b""))
        return self.inner.scan(table, **kwargs)


@pytest.fixture
def backend() -> InMemoryBackend:
    store = InMemoryBackend()
    store.create_table(TABLE, FAMILIES)
    return store


@pytest.fixture
def gated_backend(backend: InMemoryBackend) -> Iterator[GatedBackend]:
    gated = GatedBackend(backend)
    yield gated
    # Never leave worker threads parked on the gate
    gated.gate.set()


# =============================================================================
# Dispatch engine
# =============================================================================


@pytest.fixture
def clock() -> MockClock:
    return MockClock(start=0.0)


def build_settings(
    *,
    flush_threshold: int | None = None,
    flush_interval_seconds: float | None = None,
    max_pending_writes: int = 100,
    max_workers: int = 2,
    max_attempts: int = 1,
    join_timeout_seconds: float | None = WAIT_SECONDS,
    flush_timeout_seconds: float | None = WAIT_SECONDS,
) -> AsyncTableSettings:
    """Settings tuned for tests: triggers off, tiny retry delays, bounded waits."""
    return AsyncTableSettings(
        buffer=BufferSettings(
            flush_threshold=flush_threshold,
            flush_interval_seconds=flush_interval_seconds,
            max_pending_writes=max_pending_writes,
        ),
        concurrency=ConcurrencySettings(max_workers=max_workers),
        timeouts=TimeoutSettings(
            join_timeout_seconds=join_timeout_seconds,
            flush_timeout_seconds=flush_timeout_seconds,
        ),
        retry=RetrySettings(
            max_attempts=max_attempts,
            initial_delay_seconds=0.001,
            max_delay_seconds=0.005,
        ),
    )


@pytest.fixture
def make_dispatcher(backend: InMemoryBackend, clock: MockClock) -> Iterator[Callable[..., Dispatcher]]:
    """Factory: make_dispatcher(data_plane=None, **settings_overrides)."""
    created: list[Dispatcher] = []

    def _make(data_plane: Any = None, **overrides: Any) -> Dispatcher:
        dispatcher = Dispatcher(
            data_plane if data_plane is not None else backend,
            build_settings(**overrides),
            clock,
            start_timer=False,
        )
        created.append(dispatcher)
        return dispatcher

    yield _make
    for dispatcher in created:
        dispatcher.close(timeout=WAIT_SECONDS)


@pytest.fixture
def make_client(backend: InMemoryBackend, clock: MockClock) -> Iterator[Callable[..., AsyncTableClient]]:
    """Factory: make_client(data_plane=None, **settings_overrides)."""
    created: list[AsyncTableClient] = []

    def _make(data_plane: Any = None, **overrides: Any) -> AsyncTableClient:
        client = AsyncTableClient(
            data_plane if data_plane is not None else backend,
            build_settings(**overrides),
            clock=clock,
            start_timer=False,
        )
        created.append(client)
        return client

    yield _make
    for client in created:
        client.close(timeout=WAIT_SECONDS)


# =============================================================================
# Hypothesis Configuration
# =============================================================================

# CI profile: Fast tests for continuous integration
settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)

# Nightly profile: Thorough testing for scheduled runs
settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Debug profile: Minimal examples with verbose output for debugging
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Load profile from environment, default to "ci"
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))
