# src/asynctable/core/logging.py
"""Structured logging setup for asynctable.

Library modules only ever call structlog.get_logger(__name__) and log
key/value events; nothing in the library configures output. Applications (or
AsyncTableClient.from_settings) call configure_logging() once.

configure_logging() wires structlog into stdlib logging through
ProcessorFormatter, so events from asynctable and records from stdlib loggers
(tenacity, dynaconf, the application) share one renderer.

Row keys, table names and other byte fields are rendered as text with
non-printable bytes escaped, so console and JSON output show ``row\\xe9``
rather than a Python bytes repr.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.stdlib import ProcessorFormatter

from asynctable.core.config import LoggingSettings


def _render_bytes_fields(
    logger: logging.Logger | None,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Turn bytes values into escaped text, leaving printable ASCII unchanged."""
    for name, value in event_dict.items():
        if isinstance(value, bytes | bytearray):
            event_dict[name] = bytes(value).decode("ascii", "backslashreplace")
    return event_dict


def _remove_internal_fields(
    logger: logging.Logger | None,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Drop the bookkeeping keys ProcessorFormatter adds to every record."""
    del event_dict["_record"]
    del event_dict["_from_structlog"]
    return event_dict


def _shared_processors() -> list[Any]:
    """Processors run for structlog events and foreign stdlib records alike."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        _render_bytes_fields,
    ]


def _final_processors(json_output: bool) -> list[Any]:
    if json_output:
        return [
            _remove_internal_fields,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [
        _remove_internal_fields,
        structlog.dev.ConsoleRenderer(colors=False),
    ]


def configure_logging(
    *,
    json_output: bool = False,
    level: str = "INFO",
) -> None:
    """Route structlog and stdlib logging to stdout through one formatter.

    Replaces the root logger's handlers; calling it again reconfigures.

    Args:
        json_output: One JSON object per line instead of console rendering.
        level: Root log level (DEBUG, INFO, WARNING, ERROR).
    """
    log_level = getattr(logging, level.upper())
    shared = _shared_processors()

    structlog.configure(
        processors=[*shared, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Reconfiguration (tests, from_settings) must reach existing loggers
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        ProcessorFormatter(
            processors=_final_processors(json_output),
            foreign_pre_chain=shared,
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)


def configure_from_settings(settings: LoggingSettings) -> None:
    """Apply the ``logging`` section of AsyncTableSettings."""
    configure_logging(json_output=settings.json_output, level=settings.level)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger
