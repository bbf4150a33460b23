r"""Callback types and data structures for observability.

The options of a command accept four callbacks that are invoked during
its execution, for logging, metrics or alerting:

- on_request: Called before each transport call
- on_retry: Called before each transient retry (before the backoff delay)
- on_success: Called when the command succeeds
- on_failure: Called when the command fails with a terminal error

They are purely observational and independent from the completion
callback passed to ``HttpCommand.execute``.

Example:
    ```pycon
    >>> from apicommand.callbacks import RetryInfo
    >>> from apicommand.core.config import RequestOptions
    >>> def log_retry(retry_info: RetryInfo) -> None:
    ...     print(f"Retry {retry_info.attempt}/{retry_info.max_attempts}")
    ...
    >>> options = RequestOptions(retries=3, on_retry=log_retry)

    ```
"""

from __future__ import annotations

__all__ = [
    "FailureInfo",
    "RequestInfo",
    "ResponseInfo",
    "RetryInfo",
    "invoke_on_failure",
    "invoke_on_request",
    "invoke_on_retry",
    "invoke_on_success",
]

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable


@dataclass
class RequestInfo:
    """Information passed to on_request callback.

    Attributes:
        url: The URL being requested.
        method: The HTTP method (e.g., "GET", "POST").
        attempt: The current attempt number (1-indexed).
    """

    url: str
    method: str
    attempt: int


@dataclass
class RetryInfo:
    """Information passed to on_retry callback.

    Attributes:
        url: The URL being requested.
        method: The HTTP method (e.g., "GET", "POST").
        attempt: The number of the upcoming attempt (1-indexed). The
            first retry is attempt 2.
        max_attempts: Maximum number of attempts of the retry scope.
        wait_time: The delay in seconds before the upcoming attempt.
        error: The error that triggered the retry.
        status_code: The HTTP status code that triggered the retry (if any).
    """

    url: str
    method: str
    attempt: int
    max_attempts: int
    wait_time: float
    error: Exception
    status_code: int | None


@dataclass
class ResponseInfo:
    """Information passed to on_success callback.

    Attributes:
        url: The URL that was requested.
        method: The HTTP method (e.g., "GET", "POST").
        result: The decoded result.
        total_time: Total time spent on the command including backoff (seconds).
    """

    url: str
    method: str
    result: Any
    total_time: float


@dataclass
class FailureInfo:
    """Information passed to on_failure callback.

    Attributes:
        url: The URL that was requested.
        method: The HTTP method (e.g., "GET", "POST").
        error: The terminal error.
        status_code: The final HTTP status code (if any).
        total_time: Total time spent on the command including backoff (seconds).
    """

    url: str
    method: str
    error: Exception
    status_code: int | None
    total_time: float


def invoke_on_request(
    on_request: Callable[[RequestInfo], None] | None, *, url: str, method: str, attempt: int
) -> None:
    if on_request is not None:
        on_request(RequestInfo(url=url, method=method, attempt=attempt))


def invoke_on_retry(
    on_retry: Callable[[RetryInfo], None] | None,
    *,
    url: str,
    method: str,
    attempt: int,
    max_attempts: int,
    wait_time: float,
    error: Exception,
) -> None:
    """Invoke on_retry callback if provided.

    Args:
        on_retry: Optional callback to invoke before each retry.
        url: The URL being requested.
        method: The HTTP method.
        attempt: The number of the attempt that just failed (1-indexed).
            The callback receives the number of the upcoming attempt.
        max_attempts: Maximum number of attempts.
        wait_time: The delay in seconds before the upcoming attempt.
        error: The error that triggered the retry.
    """
    if on_retry is not None:
        on_retry(
            RetryInfo(
                url=url,
                method=method,
                attempt=attempt + 1,
                max_attempts=max_attempts,
                wait_time=wait_time,
                error=error,
                status_code=getattr(error, "status_code", None),
            )
        )


def invoke_on_success(
    on_success: Callable[[ResponseInfo], None] | None,
    *,
    url: str,
    method: str,
    result: Any,
    start_time: float,
) -> None:
    if on_success is not None:
        on_success(
            ResponseInfo(
                url=url, method=method, result=result, total_time=time.time() - start_time
            )
        )


def invoke_on_failure(
    on_failure: Callable[[FailureInfo], None] | None,
    *,
    url: str,
    method: str,
    error: Exception,
    start_time: float,
) -> None:
    if on_failure is not None:
        on_failure(
            FailureInfo(
                url=url,
                method=method,
                error=error,
                status_code=getattr(error, "status_code", None),
                total_time=time.time() - start_time,
            )
        )
