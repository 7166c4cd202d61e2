# src/asynctable/engine/retry.py
"""Retries for transient backend failures, built on tenacity.

Every request the dispatcher runs goes through RetryManager.execute_with_retry().
Only failures the backend flagged as transient (BackendOperationError with
retryable=True) are tried again; anything else propagates from the first
attempt. The request's Deferred is completed once, with the outcome of the
final attempt.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from asynctable.contracts.errors import BackendOperationError, RetriesExhaustedError

if TYPE_CHECKING:
    from asynctable.core.config import RetrySettings

T = TypeVar("T")


def is_retryable_backend_error(error: BaseException) -> bool:
    """True for backend failures flagged as transient."""
    return isinstance(error, BackendOperationError) and error.retryable


@dataclass
class RetryConfig:
    """Backoff parameters for one RetryManager.

    max_attempts counts every try including the first, so 1 disables retrying.
    Delays grow from base_delay by exponential_base per attempt, capped at
    max_delay, plus up to ``jitter`` seconds of random spread.
    """

    max_attempts: int = 3
    base_delay: float = 0.05
    max_delay: float = 2.0
    jitter: float = 0.05
    exponential_base: float = 2.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

    @classmethod
    def no_retry(cls) -> "RetryConfig":
        return cls(max_attempts=1)

    @classmethod
    def from_settings(cls, settings: "RetrySettings") -> "RetryConfig":
        """Build from the ``retry`` section of AsyncTableSettings.

        Jitter is not configurable; it is bounded by the initial delay so a
        short first backoff stays short.
        """
        return cls(
            max_attempts=settings.max_attempts,
            base_delay=settings.initial_delay_seconds,
            max_delay=settings.max_delay_seconds,
            jitter=settings.initial_delay_seconds,
            exponential_base=settings.exponential_base,
        )


class RetryManager:
    """Runs a callable under the configured backoff policy.

    Example:
        manager = RetryManager(RetryConfig.from_settings(settings.retry))

        cells = manager.execute_with_retry(
            lambda: execute_request(backend, request),
            on_retry=lambda attempt, error: logger.info("Retrying", attempt=attempt),
        )
    """

    def __init__(self, config: RetryConfig) -> None:
        self._config = config
        self._retrying = Retrying(
            stop=stop_after_attempt(config.max_attempts),
            wait=wait_exponential_jitter(
                initial=config.base_delay,
                max=config.max_delay,
                exp_base=config.exponential_base,
                jitter=config.jitter,
            ),
            reraise=False,
        )

    @property
    def config(self) -> RetryConfig:
        return self._config

    def execute_with_retry(
        self,
        operation: Callable[[], T],
        *,
        is_retryable: Callable[[BaseException], bool] = is_retryable_backend_error,
        on_retry: Callable[[int, BaseException], None] | None = None,
    ) -> T:
        """Call ``operation`` until it succeeds, fails permanently, or attempts run out.

        Args:
            operation: Zero-argument callable doing one attempt
            is_retryable: Decides whether a failure is worth another attempt
            on_retry: Called as (attempt, error) after a failed attempt that
                will be retried; never after the last one

        Raises:
            RetriesExhaustedError: A retryable backend failure persisted
                through every attempt. Chained from the last failure.
            Exception: A failure is_retryable rejected, raised unchanged.
        """

        def _before_sleep(state: RetryCallState) -> None:
            assert state.outcome is not None
            error = state.outcome.exception()
            assert error is not None
            if on_retry is not None:
                on_retry(state.attempt_number, error)

        retrying = self._retrying.copy(
            retry=retry_if_exception(is_retryable),
            before_sleep=_before_sleep,
        )
        try:
            return retrying(operation)
        except RetryError as e:
            final_error = e.last_attempt.exception()
            assert final_error is not None, "RetryError is only raised after a failed attempt"
            if isinstance(final_error, BackendOperationError):
                raise RetriesExhaustedError(e.last_attempt.attempt_number, final_error) from final_error
            raise final_error from e
