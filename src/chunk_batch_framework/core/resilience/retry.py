"""Retry execution with exponential backoff and jitter for chunk writes."""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable
from typing import TypeVar

from chunk_batch_framework.core.config.retry import RetryConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _exception_chain(error: BaseException) -> list[BaseException]:
    """Return *error* followed by its ``__cause__`` chain."""
    chain: list[BaseException] = []
    current: BaseException | None = error
    while current is not None and current not in chain:
        chain.append(current)
        current = current.__cause__
    return chain


class RetryExecutor:
    """Executes callables with configurable retry logic.

    Uses exponential backoff with jitter based on a ``RetryConfig``.

    Args:
        config: Retry configuration specifying attempts, delays, and retryable exceptions.
        jitter_factor: Random jitter multiplier applied to each delay (0 disables jitter).
        sleep_func: Injectable sleep function for testing. Defaults to ``time.sleep``.
    """

    def __init__(
        self,
        config: RetryConfig,
        jitter_factor: float = 0.25,
        sleep_func: Callable[[float], None] | None = None,
    ) -> None:
        self._config = config
        self._jitter_factor = jitter_factor
        self._sleep = sleep_func or time.sleep

    @property
    def config(self) -> RetryConfig:
        """Return the retry configuration."""
        return self._config

    def calculate_delay(self, attempt: int) -> float:
        """Calculate the delay in seconds before retry number ``attempt + 1``.

        Uses exponential backoff: ``min(initial * multiplier^attempt, max) * (1 + jitter)``.

        Args:
            attempt: Zero-based attempt index (0 = first retry).
        """
        base = self._config.initial_delay_seconds * (self._config.backoff_multiplier**attempt)
        base = min(base, self._config.max_delay_seconds)

        if self._jitter_factor > 0:
            base += base * self._jitter_factor * random.random()

        return base

    def is_retryable(self, error: BaseException) -> bool:
        """Check whether an exception should be retried.

        Matches ``retry_on_exceptions`` against the error and every exception
        in its ``__cause__`` chain, so a ``SinkError`` wrapping a
        ``sqlite3.OperationalError`` matches ``"OperationalError"``. A name
        without a dot is matched against the class and its bases; a name with
        a dot against the fully-qualified ``module.class`` path.
        """
        for candidate in _exception_chain(error):
            error_type = type(candidate)
            qualified_name = f"{error_type.__module__}.{error_type.__name__}"
            for exc_name in self._config.retry_on_exceptions:
                if "." in exc_name:
                    if exc_name == qualified_name:
                        return True
                elif any(cls.__name__ == exc_name for cls in error_type.__mro__):
                    return True
        return False

    def execute(
        self,
        func: Callable[[], T],
        on_retry: Callable[[int, Exception, float], None] | None = None,
    ) -> T:
        """Execute a callable with retry logic.

        Args:
            func: Zero-argument callable to execute.
            on_retry: Optional callback invoked before each retry with
                ``(attempt, exception, delay)`` where attempt is 1-based.

        Returns:
            The return value of *func*.

        Raises:
            Exception: The last exception if all attempts are exhausted,
                or immediately if the exception is not retryable.
        """
        attempt = 0
        while True:
            try:
                return func()
            except Exception as exc:
                is_last = attempt == self._config.max_attempts - 1
                if is_last or not self.is_retryable(exc):
                    raise

                delay = self.calculate_delay(attempt)
                logger.debug(
                    "Attempt %d/%d failed (%s), retrying in %.3fs",
                    attempt + 1,
                    self._config.max_attempts,
                    type(exc).__name__,
                    delay,
                )
                if on_retry is not None:
                    on_retry(attempt + 1, exc, delay)

                self._sleep(delay)
                attempt += 1
