# tests/core/test_config.py
"""Tests for configuration schema and loading."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from asynctable.core.config import (
    AsyncTableSettings,
    BufferSettings,
    RetrySettings,
    TimeoutSettings,
    load_settings,
)


def _write_config(tmp_path: Path, data: dict) -> Path:
    path = tmp_path / "asynctable.yaml"
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


class TestDefaults:
    def test_defaults(self) -> None:
        settings = AsyncTableSettings()

        assert settings.buffer.flush_threshold == 1000
        assert settings.buffer.flush_interval_seconds == 1.0
        assert settings.buffer.max_pending_writes == 10_000
        assert settings.concurrency.max_workers == 4
        assert settings.timeouts.join_timeout_seconds is None
        assert settings.timeouts.flush_timeout_seconds is None
        assert settings.retry.max_attempts == 3
        assert settings.logging.level == "INFO"
        assert settings.logging.json_output is False

    def test_settings_are_frozen(self) -> None:
        settings = BufferSettings()

        with pytest.raises(ValidationError):
            settings.flush_threshold = 5  # type: ignore[misc]

    def test_unknown_keys_rejected(self) -> None:
        with pytest.raises(ValidationError):
            AsyncTableSettings(bogus={})  # type: ignore[call-arg]


class TestValidation:
    def test_threshold_cannot_exceed_capacity(self) -> None:
        with pytest.raises(ValidationError, match="cannot exceed max_pending_writes"):
            BufferSettings(flush_threshold=200, max_pending_writes=100)

    def test_triggers_can_be_disabled(self) -> None:
        settings = BufferSettings(flush_threshold=None, flush_interval_seconds=None)

        assert settings.flush_threshold is None
        assert settings.flush_interval_seconds is None

    @pytest.mark.parametrize("field", ["flush_threshold", "max_pending_writes"])
    def test_counts_must_be_positive(self, field: str) -> None:
        with pytest.raises(ValidationError):
            BufferSettings(**{field: 0})

    def test_timeouts_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            TimeoutSettings(join_timeout_seconds=0)

    def test_at_least_one_attempt(self) -> None:
        with pytest.raises(ValidationError):
            RetrySettings(max_attempts=0)


class TestLoadSettings:
    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / "missing.yaml")

    def test_yaml_values(self, tmp_path: Path) -> None:
        path = _write_config(
            tmp_path,
            {
                "buffer": {"flush_threshold": 50, "flush_interval_seconds": 0.25},
                "concurrency": {"max_workers": 8},
                "logging": {"level": "DEBUG"},
            },
        )

        settings = load_settings(path)

        assert settings.buffer.flush_threshold == 50
        assert settings.buffer.flush_interval_seconds == 0.25
        assert settings.buffer.max_pending_writes == 10_000
        assert settings.concurrency.max_workers == 8
        assert settings.logging.level == "DEBUG"

    def test_environment_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = _write_config(tmp_path, {"buffer": {"flush_threshold": 50}})
        monkeypatch.setenv("ASYNCTABLE_BUFFER__FLUSH_THRESHOLD", "75")

        settings = load_settings(path)

        assert settings.buffer.flush_threshold == 75

    def test_env_var_expansion(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = _write_config(tmp_path, {"concurrency": {"max_workers": "${TABLE_CLIENT_WORKERS}"}})
        monkeypatch.setenv("TABLE_CLIENT_WORKERS", "6")

        assert load_settings(path).concurrency.max_workers == 6

    def test_env_var_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = _write_config(tmp_path, {"concurrency": {"max_workers": "${TABLE_CLIENT_UNSET:-3}"}})
        monkeypatch.delenv("TABLE_CLIENT_UNSET", raising=False)

        assert load_settings(path).concurrency.max_workers == 3

    def test_unrelated_prefixed_env_var_ignored(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = _write_config(tmp_path, {"concurrency": {"max_workers": 2}})
        monkeypatch.setenv("ASYNCTABLE_DEPLOY_ROLE", "worker")

        assert load_settings(path).concurrency.max_workers == 2

    def test_unknown_section_in_file_rejected(self, tmp_path: Path) -> None:
        path = _write_config(tmp_path, {"bufer": {"flush_threshold": 5}})

        with pytest.raises(ValidationError):
            load_settings(path)

    def test_invalid_values_fail_validation(self, tmp_path: Path) -> None:
        path = _write_config(tmp_path, {"buffer": {"flush_threshold": 200, "max_pending_writes": 100}})

        with pytest.raises(ValidationError):
            load_settings(path)
