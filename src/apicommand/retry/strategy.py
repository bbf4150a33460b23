r"""Retry strategy for calculating backoff delays.

This module provides the RetryStrategy class for calculating the delay
before a retry from a backoff strategy, a cap, optional jitter and the
optional Retry-After header of the failed response.
"""

from __future__ import annotations

__all__ = ["RetryStrategy"]

import logging
import random
from typing import TYPE_CHECKING

from apicommand.backoff import ExponentialBackoff
from apicommand.utils.retry_after import parse_retry_after

if TYPE_CHECKING:
    from apicommand.backoff import BaseBackoffStrategy

logger: logging.Logger = logging.getLogger(__name__)


class RetryStrategy:
    """Strategy for calculating retry delays with backoff and jitter.

    The delay is calculated as follows:
    1. Determine the base delay:
       - If ``respect_retry_after`` is set and the error carries a
         Retry-After header: use that value
       - Otherwise: use ``backoff_strategy.calculate(retry)``
    2. Apply the ``max_wait_time`` cap (if set)
    3. Add jitter (if ``jitter_factor`` > 0):
       ``random.uniform(0, jitter_factor) * delay``

    Args:
        backoff_strategy: Backoff strategy instance. Defaults to
            ExponentialBackoff().
        jitter_factor: Factor for adding random jitter to delays.
        max_wait_time: Optional maximum delay in seconds.
        respect_retry_after: Whether the Retry-After header of the
            error replaces the backoff delay.

    Example:
        ```pycon
        >>> from apicommand.retry import RetryStrategy
        >>> strategy = RetryStrategy()
        >>> [strategy.calculate_delay(retry) for retry in range(3)]
        [1.0, 2.0, 4.0]
        >>> RetryStrategy(max_wait_time=3.0).calculate_delay(5)
        3.0

        ```
    """

    def __init__(
        self,
        backoff_strategy: BaseBackoffStrategy | None = None,
        jitter_factor: float = 0.0,
        max_wait_time: float | None = None,
        respect_retry_after: bool = False,
    ) -> None:
        self.backoff_strategy: BaseBackoffStrategy = (
            backoff_strategy if backoff_strategy is not None else ExponentialBackoff()
        )
        self.jitter_factor = jitter_factor
        self.max_wait_time = max_wait_time
        self.respect_retry_after = respect_retry_after

    def calculate_delay(self, retry: int, error: Exception | None = None) -> float:
        """Calculate the delay before a retry.

        Args:
            retry: The retry number (0-indexed): 0 is the delay between
                the first and the second attempt.
            error: The error of the failed attempt, if any.

        Returns:
            The delay in seconds.
        """
        delay = self._retry_after(error)
        if delay is None:
            delay = self.backoff_strategy.calculate(retry)

        if self.max_wait_time is not None and delay > self.max_wait_time:
            logger.debug(f"Capping delay from {delay:.2f}s to {self.max_wait_time:.2f}s")
            delay = self.max_wait_time

        if self.jitter_factor > 0:
            jitter = random.uniform(0, self.jitter_factor) * delay  # noqa: S311
            logger.debug(
                f"Waiting {delay + jitter:.2f}s before retry (base={delay:.2f}s, jitter={jitter:.2f}s)"
            )
            return delay + jitter
        logger.debug(f"Waiting {delay:.2f}s before retry")
        return delay

    def _retry_after(self, error: Exception | None) -> float | None:
        if not self.respect_retry_after or error is None:
            return None
        header = getattr(error, "header", None)
        if header is None:
            return None
        retry_after = parse_retry_after(header.get("Retry-After"))
        if retry_after is not None:
            logger.debug(f"Using Retry-After header value: {retry_after:.2f}s")
        return retry_after
