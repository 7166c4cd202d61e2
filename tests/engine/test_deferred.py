# tests/engine/test_deferred.py
"""Tests for Deferred."""

import threading
import time

import pytest

from asynctable.contracts.enums import DeferredState
from asynctable.contracts.errors import DeferredTimeoutError, DoubleCompletionError, FlushFailedError
from asynctable.engine.deferred import Deferred


class TestLifecycle:
    def test_starts_pending(self) -> None:
        deferred: Deferred[int] = Deferred()

        assert deferred.state is DeferredState.PENDING
        assert deferred.done() is False

    def test_resolve(self) -> None:
        deferred: Deferred[int] = Deferred()
        deferred.resolve(5)

        assert deferred.state is DeferredState.RESOLVED
        assert deferred.done() is True
        assert deferred.join() == 5
        assert deferred.exception() is None

    def test_fail(self) -> None:
        deferred: Deferred[int] = Deferred()
        error = ValueError("boom")
        deferred.fail(error)

        assert deferred.state is DeferredState.FAILED
        assert deferred.exception() is error
        with pytest.raises(ValueError, match="boom"):
            deferred.join()

    def test_exception_on_pending_raises(self) -> None:
        with pytest.raises(RuntimeError, match="still pending"):
            Deferred().exception()

    def test_factories(self) -> None:
        assert Deferred.succeed("x").join() == "x"
        assert isinstance(Deferred.failure(KeyError("k")).exception(), KeyError)


class TestDoubleCompletion:
    @pytest.mark.parametrize("second", ["resolve", "fail"])
    def test_second_completion_after_resolve(self, second: str) -> None:
        deferred: Deferred[int] = Deferred()
        deferred.resolve(1)

        with pytest.raises(DoubleCompletionError) as exc_info:
            if second == "resolve":
                deferred.resolve(2)
            else:
                deferred.fail(ValueError("late"))

        assert exc_info.value.state is DeferredState.RESOLVED
        assert deferred.join() == 1

    def test_second_completion_after_fail_keeps_failure(self) -> None:
        deferred: Deferred[int] = Deferred()
        original = ValueError("first")
        deferred.fail(original)

        with pytest.raises(DoubleCompletionError):
            deferred.resolve(2)

        assert deferred.state is DeferredState.FAILED
        assert deferred.exception() is original

    def test_concurrent_completion_has_exactly_one_winner(self) -> None:
        deferred: Deferred[int] = Deferred()
        start = threading.Barrier(8)
        losers: list[DoubleCompletionError] = []
        lock = threading.Lock()

        def complete(value: int) -> None:
            start.wait()
            try:
                deferred.resolve(value)
            except DoubleCompletionError as e:
                with lock:
                    losers.append(e)

        threads = [threading.Thread(target=complete, args=(i,)) for i in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(losers) == 7
        assert deferred.join() in range(8)


class TestCallbacks:
    def test_registration_order_before_completion(self) -> None:
        deferred: Deferred[int] = Deferred()
        seen: list[str] = []
        deferred.add_callback(lambda v: seen.append(f"a{v}"))
        deferred.add_both(lambda v: seen.append(f"b{v}"))
        deferred.add_callback(lambda v: seen.append(f"c{v}"))

        deferred.resolve(1)

        assert seen == ["a1", "b1", "c1"]

    def test_late_callback_runs_immediately_on_registering_thread(self) -> None:
        deferred = Deferred.succeed(3)
        threads: list[threading.Thread] = []

        deferred.add_callback(lambda _: threads.append(threading.current_thread()))

        assert threads == [threading.current_thread()]

    def test_callbacks_run_on_completing_thread(self) -> None:
        deferred: Deferred[int] = Deferred()
        threads: list[threading.Thread] = []
        deferred.add_callback(lambda _: threads.append(threading.current_thread()))

        worker = threading.Thread(target=deferred.resolve, args=(1,))
        worker.start()
        worker.join()

        assert threads == [worker]

    def test_errback_only_on_failure(self) -> None:
        resolved: Deferred[int] = Deferred()
        failed: Deferred[int] = Deferred()
        seen: list[object] = []
        resolved.add_errback(seen.append)
        failed.add_callback(seen.append)
        error = ValueError("x")
        failed.add_errback(seen.append)

        resolved.resolve(1)
        failed.fail(error)

        assert seen == [error]

    def test_add_both_receives_error(self) -> None:
        seen: list[object] = []
        error = KeyError("k")

        Deferred.failure(error).add_both(seen.append)

        assert seen == [error]

    def test_raising_callback_does_not_stop_others(self) -> None:
        deferred: Deferred[int] = Deferred()
        seen: list[int] = []

        def broken(_: int) -> None:
            raise RuntimeError("callback bug")

        deferred.add_callback(broken)
        deferred.add_callback(seen.append)
        deferred.resolve(9)

        assert seen == [9]
        assert deferred.join() == 9

    def test_chaining_returns_self(self) -> None:
        deferred: Deferred[int] = Deferred()
        assert deferred.add_callback(print).add_errback(print).add_both(print) is deferred


class TestJoin:
    def test_timeout_raises_without_completing(self) -> None:
        deferred: Deferred[int] = Deferred()

        with pytest.raises(DeferredTimeoutError) as exc_info:
            deferred.join(timeout=0.01)

        assert exc_info.value.timeout == 0.01
        assert deferred.state is DeferredState.PENDING
        deferred.resolve(1)
        assert deferred.join() == 1

    def test_default_timeout_used_when_omitted(self) -> None:
        deferred: Deferred[int] = Deferred(default_timeout=0.01)

        with pytest.raises(DeferredTimeoutError):
            deferred.join()

    def test_explicit_none_waits_for_completion(self) -> None:
        deferred: Deferred[int] = Deferred(default_timeout=0.01)
        timer = threading.Timer(0.05, deferred.resolve, args=(4,))
        timer.start()

        assert deferred.join(None) == 4

    def test_join_wakes_on_completion(self) -> None:
        deferred: Deferred[str] = Deferred()
        threading.Timer(0.02, deferred.resolve, args=("done",)).start()

        started = time.monotonic()
        assert deferred.join(timeout=5.0) == "done"
        assert time.monotonic() - started < 5.0


class TestGroup:
    def test_empty_group_resolves(self) -> None:
        assert Deferred.group([]).join() is None

    def test_resolves_after_every_member(self) -> None:
        members: list[Deferred[int]] = [Deferred() for _ in range(3)]
        barrier = Deferred.group(members)

        members[0].resolve(1)
        members[2].resolve(3)
        assert barrier.done() is False

        members[1].resolve(2)
        assert barrier.join() is None

    def test_fails_only_after_every_member_is_terminal(self) -> None:
        members: list[Deferred[int]] = [Deferred() for _ in range(3)]
        barrier = Deferred.group(members)
        first, second = ValueError("a"), KeyError("b")

        members[1].fail(second)
        assert barrier.done() is False
        members[0].fail(first)
        assert barrier.done() is False
        members[2].resolve(3)

        with pytest.raises(FlushFailedError) as exc_info:
            barrier.join()
        assert exc_info.value.failures == (first, second)

    def test_already_terminal_members(self) -> None:
        barrier = Deferred.group([Deferred.succeed(1), Deferred.succeed(2)])
        assert barrier.state is DeferredState.RESOLVED

    def test_group_default_timeout(self) -> None:
        barrier = Deferred.group([Deferred()], default_timeout=0.01)

        with pytest.raises(DeferredTimeoutError):
            barrier.join()
