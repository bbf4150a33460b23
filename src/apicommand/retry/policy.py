r"""Composable retry policy.

A ``RetryPolicy`` retries a single function on a set of error types, up
to a maximum number of attempts, optionally waiting between attempts and
calling a hook before each retry. Policies nest: the function retried by
one policy can itself run another policy.
"""

from __future__ import annotations

__all__ = ["RetryPolicy"]

import asyncio
import logging
import time
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from apicommand.retry.strategy import RetryStrategy

logger: logging.Logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryPolicy:
    """Retries a function on a set of errors.

    Args:
        retry_on: The error types that trigger a retry. Any other
            exception propagates immediately.
        max_attempts: Maximum number of attempts, including the first
            one. Must be >= 1.
        strategy: Optional strategy calculating the delay before each
            retry. Without a strategy, retries happen immediately.
        before_retry: Optional hook called with ``(error, attempt,
            delay)`` before each retry, where ``attempt`` is the number
            of the attempt that failed (1-indexed).
        max_total_time: Optional time budget in seconds. Once it is
            spent, the last error propagates without a further attempt.
        name: A name used in log messages.

    Example:
        ```pycon
        >>> from apicommand.retry import RetryPolicy
        >>> calls = []
        >>> def flaky(attempt):
        ...     calls.append(attempt)
        ...     if attempt < 3:
        ...         raise ConnectionError("reset")
        ...     return "done"
        ...
        >>> RetryPolicy(retry_on=(ConnectionError,), max_attempts=3).call(flaky)
        'done'
        >>> calls
        [1, 2, 3]

        ```
    """

    def __init__(
        self,
        retry_on: tuple[type[Exception], ...],
        max_attempts: int,
        strategy: RetryStrategy | None = None,
        before_retry: Callable[[Exception, int, float], None] | None = None,
        max_total_time: float | None = None,
        name: str = "retry",
    ) -> None:
        if max_attempts < 1:
            msg = f"max_attempts must be >= 1, got {max_attempts}"
            raise ValueError(msg)
        self.retry_on = retry_on
        self.max_attempts = max_attempts
        self.strategy = strategy
        self.before_retry = before_retry
        self.max_total_time = max_total_time
        self.name = name

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self.name!r}, "
            f"retry_on={tuple(e.__name__ for e in self.retry_on)}, "
            f"max_attempts={self.max_attempts})"
        )

    def call(self, func: Callable[[int], T]) -> T:
        """Call ``func(attempt)`` until it succeeds or the policy gives
        up.

        Args:
            func: The function to call. It receives the attempt number
                (1-indexed).

        Returns:
            The value returned by the first successful call.

        Raises:
            Exception: The error of the last attempt, when it is not
                retryable or the attempt or time budget is spent.
        """
        start_time = time.time()
        attempt = 1
        while True:
            try:
                return func(attempt)
            except self.retry_on as exc:
                delay = self._next_delay(exc, attempt, start_time)
                if delay is None:
                    raise
                if delay > 0:
                    time.sleep(delay)
            attempt += 1

    async def call_async(self, func: Callable[[int], Awaitable[T]]) -> T:
        """Asynchronous version of ``call``.

        The delays are spent in ``asyncio.sleep`` so the event loop keeps
        running, and cancelling the task interrupts them.
        """
        start_time = time.time()
        attempt = 1
        while True:
            try:
                return await func(attempt)
            except self.retry_on as exc:
                delay = self._next_delay(exc, attempt, start_time)
                if delay is None:
                    raise
                if delay > 0:
                    await asyncio.sleep(delay)
            attempt += 1

    def _next_delay(self, error: Exception, attempt: int, start_time: float) -> float | None:
        r"""Return the delay before the next attempt, or None when the
        policy gives up."""
        if attempt >= self.max_attempts:
            logger.debug(
                f"{self.name}: giving up after {attempt} attempt(s) "
                f"({type(error).__name__}: {error})"
            )
            return None
        if self.max_total_time is not None:
            elapsed_time = time.time() - start_time
            if elapsed_time >= self.max_total_time:
                logger.debug(
                    f"{self.name}: exceeded max_total_time "
                    f"({elapsed_time:.2f}s >= {self.max_total_time:.2f}s) "
                    f"after {attempt} attempt(s)"
                )
                return None
        delay = self.strategy.calculate_delay(attempt - 1, error) if self.strategy else 0.0
        logger.debug(
            f"{self.name}: attempt {attempt}/{self.max_attempts} failed with "
            f"{type(error).__name__}, retrying"
        )
        if self.before_retry is not None:
            self.before_retry(error, attempt, delay)
        return delay
