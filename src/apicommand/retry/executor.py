r"""Two-tier retry of a command attempt.

Every attempt runs inside two nested retry policies:

- The outer (transient) policy retries ``ServerError``,
  ``RateLimitError`` and ``TransmissionError`` up to ``retries + 1``
  attempts with an exponential backoff.
- The inner (authorization) policy retries ``AuthorizationError`` once,
  right after refreshing the credential, but only during the first outer
  attempt and only when the credential can be refreshed. Later
  authorization failures are terminal, so a credential that keeps being
  rejected cannot loop.
"""

from __future__ import annotations

__all__ = ["authorization_policy", "execute_with_retry", "transient_policy"]

from typing import TYPE_CHECKING, TypeVar

from apicommand.core.config import RETRIABLE_ERRORS
from apicommand.exceptions import AuthorizationError
from apicommand.retry.policy import RetryPolicy
from apicommand.retry.strategy import RetryStrategy

if TYPE_CHECKING:
    from collections.abc import Callable

    from apicommand.core.config import RequestOptions

T = TypeVar("T")


def transient_policy(
    options: RequestOptions,
    before_retry: Callable[[Exception, int, float], None] | None = None,
) -> RetryPolicy:
    """Create the outer policy retrying transient errors.

    Args:
        options: The request options providing the number of retries
            and the backoff settings.
        before_retry: Optional hook called before each retry.

    Returns:
        The transient retry policy.

    Example:
        ```pycon
        >>> from apicommand.core.config import RequestOptions
        >>> from apicommand.retry import transient_policy
        >>> transient_policy(RequestOptions(retries=2)).max_attempts
        3

        ```
    """
    return RetryPolicy(
        retry_on=RETRIABLE_ERRORS,
        max_attempts=options.retries + 1,
        strategy=RetryStrategy(
            backoff_strategy=options.backoff_strategy,
            jitter_factor=options.jitter_factor,
            max_wait_time=options.max_wait_time,
            respect_retry_after=options.respect_retry_after,
        ),
        before_retry=before_retry,
        max_total_time=options.max_total_time,
        name="transient",
    )


def authorization_policy(
    can_refresh: bool,
    refresh: Callable[[], None] | None = None,
) -> RetryPolicy:
    """Create the inner policy retrying authorization failures.

    Args:
        can_refresh: Whether one retry is allowed after refreshing the
            credential.
        refresh: The refresh hook called before the retry.

    Returns:
        A policy with two attempts if ``can_refresh`` is set, otherwise
        a single attempt.
    """
    return RetryPolicy(
        retry_on=(AuthorizationError,),
        max_attempts=2 if can_refresh else 1,
        before_retry=None if refresh is None else (lambda error, attempt, delay: refresh()),
        name="authorization",
    )


def execute_with_retry(
    attempt_func: Callable[[], T],
    *,
    options: RequestOptions,
    refreshable: bool,
    refresh: Callable[[], None] | None = None,
    on_retry: Callable[[Exception, int, float], None] | None = None,
) -> T:
    """Run a synchronous attempt under the two-tier retry policies.

    Args:
        attempt_func: The function performing one attempt.
        options: The request options of the command.
        refreshable: Whether the credential can be refreshed.
        refresh: The refresh hook called before an authorization retry.
        on_retry: Optional hook called before each transient retry.

    Returns:
        The value returned by the first successful attempt.

    Raises:
        Exception: The last error when both policies give up.
    """
    outer = transient_policy(options, before_retry=on_retry)

    def outer_attempt(attempt: int) -> T:
        inner = authorization_policy(attempt == 1 and refreshable, refresh)
        return inner.call(lambda _: attempt_func())

    return outer.call(outer_attempt)
