r"""Parameter validation utilities for request options.

This module provides validation functions for the retry-related
request options to ensure they meet the required constraints before
being used by a command.
"""

from __future__ import annotations

__all__ = ["validate_retry_params", "validate_timeout"]

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx


def validate_timeout(timeout: float | httpx.Timeout | None) -> None:
    """Validate timeout parameter.

    Args:
        timeout: Maximum seconds to wait for server responses.
            Must be > 0 if provided as a numeric value.

    Raises:
        ValueError: If timeout is a numeric value <= 0.

    Example:
        ```pycon
        >>> from apicommand.core.validation import validate_timeout
        >>> validate_timeout(10.0)
        >>> validate_timeout(None)
        >>> validate_timeout(0)
        Traceback (most recent call last):
        ...
        ValueError: timeout must be > 0, got 0

        ```
    """
    if isinstance(timeout, (int, float)) and timeout <= 0:
        msg = f"timeout must be > 0, got {timeout}"
        raise ValueError(msg)


def validate_retry_params(
    retries: int,
    jitter_factor: float = 0.0,
    max_total_time: float | None = None,
    max_wait_time: float | None = None,
) -> None:
    """Validate retry parameters.

    Args:
        retries: Number of retries after the initial attempt.
            Must be >= 0. A value of 0 means a single attempt.
        jitter_factor: Factor for adding random jitter to backoff delays.
            Must be >= 0.
        max_total_time: Maximum total time budget for all attempts.
            Must be > 0 if provided.
        max_wait_time: Maximum backoff delay cap in seconds.
            Must be > 0 if provided.

    Raises:
        ValueError: If retries or jitter_factor are negative, or if
            max_total_time or max_wait_time are non-positive.

    Example:
        ```pycon
        >>> from apicommand.core.validation import validate_retry_params
        >>> validate_retry_params(retries=3)
        >>> validate_retry_params(retries=3, jitter_factor=0.1, max_wait_time=5.0)
        >>> validate_retry_params(retries=-1)
        Traceback (most recent call last):
        ...
        ValueError: retries must be >= 0, got -1

        ```
    """
    if isinstance(retries, bool) or not isinstance(retries, int):
        msg = f"retries must be an integer, got {retries!r}"
        raise TypeError(msg)
    if retries < 0:
        msg = f"retries must be >= 0, got {retries}"
        raise ValueError(msg)
    if jitter_factor < 0:
        msg = f"jitter_factor must be >= 0, got {jitter_factor}"
        raise ValueError(msg)
    if max_total_time is not None and max_total_time <= 0:
        msg = f"max_total_time must be > 0, got {max_total_time}"
        raise ValueError(msg)
    if max_wait_time is not None and max_wait_time <= 0:
        msg = f"max_wait_time must be > 0, got {max_wait_time}"
        raise ValueError(msg)
