r"""Two-tier retry of an asynchronous command attempt.

See ``apicommand.retry.executor`` for the semantics of the two tiers.
"""

from __future__ import annotations

__all__ = ["execute_with_retry_async"]

from typing import TYPE_CHECKING, TypeVar

from apicommand.retry.executor import authorization_policy, transient_policy

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from apicommand.core.config import RequestOptions

T = TypeVar("T")


async def execute_with_retry_async(
    attempt_func: Callable[[], Awaitable[T]],
    *,
    options: RequestOptions,
    refreshable: bool,
    refresh: Callable[[], None] | None = None,
    on_retry: Callable[[Exception, int, float], None] | None = None,
) -> T:
    """Run an asynchronous attempt under the two-tier retry policies.

    Args:
        attempt_func: The coroutine function performing one attempt.
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

    async def outer_attempt(attempt: int) -> T:
        inner = authorization_policy(attempt == 1 and refreshable, refresh)
        return await inner.call_async(lambda _: attempt_func())

    return await outer.call_async(outer_attempt)
