r"""Retry package implementing composable retry policies.

Public API:
    - RetryStrategy: Calculates the delay before a retry
    - RetryPolicy: Retries a function on a set of errors
    - transient_policy: The policy for transient errors
    - authorization_policy: The policy for authorization failures
    - execute_with_retry: Two-tier retry of a synchronous attempt
    - execute_with_retry_async: Two-tier retry of an asynchronous attempt
"""

from __future__ import annotations

__all__ = [
    "RetryPolicy",
    "RetryStrategy",
    "authorization_policy",
    "execute_with_retry",
    "execute_with_retry_async",
    "transient_policy",
]

from apicommand.retry.executor import authorization_policy, execute_with_retry, transient_policy
from apicommand.retry.executor_async import execute_with_retry_async
from apicommand.retry.policy import RetryPolicy
from apicommand.retry.strategy import RetryStrategy
