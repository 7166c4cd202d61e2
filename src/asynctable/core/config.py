# src/asynctable/core/config.py
"""Configuration schema and loading for asynctable clients.

The schema is a tree of frozen Pydantic models; load_settings() fills it from
a YAML file and ASYNCTABLE_* environment variables via Dynaconf.
"""

import os
import re
from pathlib import Path
from typing import Any, Literal, Self

import structlog
from pydantic import BaseModel, Field, model_validator

logger = structlog.get_logger(__name__)


class BufferSettings(BaseModel):
    """Write buffering and flush triggers.

    Triggers are combinable (first one to fire wins):
    - flush_threshold: flush once this many writes are buffered
    - flush_interval_seconds: flush once this long has passed since the last flush

    Setting a trigger to null disables it; with both disabled, writes only
    leave the buffer on an explicit flush() or on close().

    Example YAML:
        buffer:
          flush_threshold: 500
          flush_interval_seconds: 0.5
          max_pending_writes: 20000
    """

    model_config = {"frozen": True, "extra": "forbid"}

    flush_threshold: int | None = Field(
        default=1000,
        gt=0,
        description="Flush after N buffered writes",
    )
    flush_interval_seconds: float | None = Field(
        default=1.0,
        gt=0,
        description="Flush after N seconds since the previous flush",
    )
    max_pending_writes: int = Field(
        default=10_000,
        gt=0,
        description="Reject writes with BufferFullError beyond this many buffered or in-flight writes",
    )

    @model_validator(mode="after")
    def _validate_threshold_within_capacity(self) -> Self:
        """A threshold above capacity could never fire."""
        if self.flush_threshold is not None and self.flush_threshold > self.max_pending_writes:
            raise ValueError(
                f"flush_threshold ({self.flush_threshold}) cannot exceed max_pending_writes ({self.max_pending_writes})"
            )
        return self


class ConcurrencySettings(BaseModel):
    """Worker pool sizing."""

    model_config = {"frozen": True, "extra": "forbid"}

    max_workers: int = Field(
        default=4,
        gt=0,
        description="Maximum backend calls in flight at once",
    )


class TimeoutSettings(BaseModel):
    """Default bounds for the two blocking calls, join() and flush().join().

    null means wait forever. An expired bound raises DeferredTimeoutError to
    the waiter only; the backend call keeps running.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    join_timeout_seconds: float | None = Field(default=None, gt=0)
    flush_timeout_seconds: float | None = Field(default=None, gt=0)


class RetrySettings(BaseModel):
    """Retry behavior for transient backend failures."""

    model_config = {"frozen": True, "extra": "forbid"}

    max_attempts: int = Field(default=3, ge=1, description="Total tries per request, including the first")
    initial_delay_seconds: float = Field(default=0.05, gt=0)
    max_delay_seconds: float = Field(default=2.0, gt=0)
    exponential_base: float = Field(default=2.0, gt=1.0)


class LoggingSettings(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    json_output: bool = False


class AsyncTableSettings(BaseModel):
    """Top-level client configuration."""

    model_config = {"frozen": True, "extra": "forbid"}

    buffer: BufferSettings = Field(default_factory=BufferSettings)
    concurrency: ConcurrencySettings = Field(default_factory=ConcurrencySettings)
    timeouts: TimeoutSettings = Field(default_factory=TimeoutSettings)
    retry: RetrySettings = Field(default_factory=RetrySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# ${NAME} or ${NAME:-fallback}
_ENV_REFERENCE = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


def _substitute_env(value: Any) -> Any:
    """Replace ${NAME} references in every string of a nested config value.

    An unset variable with no fallback is left as written, so the field's
    validator reports the literal reference.
    """
    if isinstance(value, dict):
        return {key: _substitute_env(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_substitute_env(item) for item in value]
    if not isinstance(value, str):
        return value

    def _lookup(match: re.Match[str]) -> str:
        name, fallback = match.groups()
        if name in os.environ:
            return os.environ[name]
        return fallback if fallback is not None else match.group(0)

    return _ENV_REFERENCE.sub(_lookup, value)


def _lowercase_keys(value: Any) -> Any:
    """Dynaconf upper-cases keys; Pydantic fields are lower-case."""
    if isinstance(value, dict):
        return {str(k).lower(): _lowercase_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_lowercase_keys(item) for item in value]
    return value


def _env_section_names() -> set[str]:
    """Top-level setting names contributed by ASYNCTABLE_* environment variables."""
    prefix = "ASYNCTABLE_"
    return {
        name[len(prefix) :].split("__", 1)[0].lower()
        for name in os.environ
        if name.startswith(prefix) and len(name) > len(prefix)
    }


def load_settings(config_path: Path) -> AsyncTableSettings:
    """Read AsyncTableSettings from a YAML file.

    ASYNCTABLE_* environment variables override the file, which overrides the
    model defaults. Nested keys use a double underscore, as in
    ``ASYNCTABLE_BUFFER__FLUSH_THRESHOLD=500``. String values may also refer
    to the environment with ``${NAME}`` or ``${NAME:-fallback}``.

    Top-level names that ASYNCTABLE_* variables supply but that are not
    settings sections are logged and ignored. Unknown sections written in
    the file fail validation.

    Raises:
        FileNotFoundError: config_path does not exist
        pydantic.ValidationError: The merged values are not valid settings
    """
    from dynaconf import Dynaconf

    # Dynaconf treats a missing settings file as empty
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    source = Dynaconf(
        envvar_prefix="ASYNCTABLE",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    bookkeeping = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw = {key: value for key, value in source.as_dict().items() if key not in bookkeeping}
    raw = _lowercase_keys(raw)

    # Other tools share the ASYNCTABLE_ prefix; only the file can add unknown sections
    stray = {name for name in _env_section_names() if name not in AsyncTableSettings.model_fields}
    if stray & raw.keys():
        logger.warning("Ignoring environment variables outside known sections", sections=sorted(stray & raw.keys()))
    raw = {key: value for key, value in raw.items() if key not in stray}
    return AsyncTableSettings(**_substitute_env(raw))
