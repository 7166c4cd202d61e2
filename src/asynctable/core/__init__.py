"""Core infrastructure: byte codec, configuration, logging."""

from asynctable.core.codec import DEFAULT_CHARSET, ByteCodec
from asynctable.core.config import (
    AsyncTableSettings,
    BufferSettings,
    ConcurrencySettings,
    LoggingSettings,
    RetrySettings,
    TimeoutSettings,
    load_settings,
)
from asynctable.core.logging import configure_logging, get_logger

__all__ = [
    "DEFAULT_CHARSET",
    "AsyncTableSettings",
    "BufferSettings",
    "ByteCodec",
    "ConcurrencySettings",
    "LoggingSettings",
    "RetrySettings",
    "TimeoutSettings",
    "configure_logging",
    "get_logger",
    "load_settings",
]
