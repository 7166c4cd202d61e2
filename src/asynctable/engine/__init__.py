"""Dispatch engine: Deferreds, the write buffer and the worker pool.

This package provides:
- Deferred: single-assignment result handle with callbacks and bounded join
- Dispatcher: routes reads to the pool, buffers writes, runs flushes
- FlushTriggerEvaluator: size and interval flush triggers
- RetryManager: retry logic with tenacity

Example:
    from asynctable.backend import InMemoryBackend
    from asynctable.engine import Dispatcher

    dispatcher = Dispatcher(InMemoryBackend())
    barrier = dispatcher.flush()
    barrier.join()
"""

from asynctable.engine.buffer import BufferedWrite, WriteBuffer
from asynctable.engine.clock import DEFAULT_CLOCK, Clock, MockClock, SystemClock
from asynctable.engine.deferred import Deferred
from asynctable.engine.dispatcher import Dispatcher, FlushTimer
from asynctable.engine.executor import classify_backend_error, execute_request
from asynctable.engine.retry import RetryConfig, RetryManager
from asynctable.engine.triggers import FlushTriggerEvaluator

__all__ = [
    "DEFAULT_CLOCK",
    "BufferedWrite",
    "Clock",
    "Deferred",
    "Dispatcher",
    "FlushTimer",
    "FlushTriggerEvaluator",
    "MockClock",
    "RetryConfig",
    "RetryManager",
    "SystemClock",
    "WriteBuffer",
    "classify_backend_error",
    "execute_request",
]
