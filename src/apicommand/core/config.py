r"""Request options and process-wide defaults.

This module provides the configuration constants and the dataclass that
carries the options of a single command. Commands never reference the
process-wide defaults directly: they receive a copy at construction
time, so changing the defaults later does not affect in-flight
commands.
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_MAX_WAIT_TIME",
    "DEFAULT_RETRIES",
    "DEFAULT_TIMEOUT",
    "FORM_CONTENT_TYPE",
    "RETRIABLE_ERRORS",
    "RequestOptions",
    "configure_defaults",
    "get_default_options",
    "reset_defaults",
]

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from apicommand.core.validation import validate_retry_params
from apicommand.exceptions import RateLimitError, ServerError, TransmissionError

if TYPE_CHECKING:
    from collections.abc import Callable

    from apicommand.auth import Authorization
    from apicommand.backoff import BaseBackoffStrategy
    from apicommand.callbacks import FailureInfo, RequestInfo, ResponseInfo, RetryInfo


# Default number of retries after the initial attempt
# Total attempts = retries + 1
DEFAULT_RETRIES = 0

# Default transport timeout in seconds, used by the clients when they
# create their own httpx client
DEFAULT_TIMEOUT = 60.0

# Upper bound of a single backoff delay
DEFAULT_MAX_WAIT_TIME = 60.0

# Errors retried by the outer (transient) retry scope
RETRIABLE_ERRORS = (ServerError, RateLimitError, TransmissionError)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=UTF-8"


@dataclass
class RequestOptions:
    """Options of a single command.

    Args:
        retries: Number of retries for transient errors. Must be >= 0.
        authorization: A bearer token, a credential object exposing
            ``apply(headers)`` (and optionally ``refresh()``), or None.
        header: Default headers, merged under the headers explicitly
            set on the command.
        backoff_strategy: Optional backoff strategy for transient
            errors. Defaults to ``ExponentialBackoff()`` (1, 2, 4, ...
            seconds).
        jitter_factor: Factor for adding random jitter to backoff
            delays. Must be >= 0.
        max_wait_time: Optional cap of a single backoff delay in
            seconds. Must be > 0 if provided.
        max_total_time: Optional time budget in seconds for all
            attempts. Must be > 0 if provided.
        respect_retry_after: Whether the Retry-After header of a failed
            response replaces the computed backoff delay.
        on_request: Optional callback called before each attempt.
        on_retry: Optional callback called before each transient retry.
        on_success: Optional callback called when a command succeeds.
        on_failure: Optional callback called when a command fails.

    Example:
        ```pycon
        >>> from apicommand.core.config import RequestOptions
        >>> options = RequestOptions(retries=3, authorization="token")
        >>> options.retries
        3
        >>> options.merge(retries=5).retries
        5
        >>> options.retries
        3

        ```
    """

    retries: int = DEFAULT_RETRIES
    authorization: Authorization | None = None
    header: dict[str, str] = field(default_factory=dict)
    backoff_strategy: BaseBackoffStrategy | None = None
    jitter_factor: float = 0.0
    max_wait_time: float | None = DEFAULT_MAX_WAIT_TIME
    max_total_time: float | None = None
    respect_retry_after: bool = False
    on_request: Callable[[RequestInfo], None] | None = None
    on_retry: Callable[[RetryInfo], None] | None = None
    on_success: Callable[[ResponseInfo], None] | None = None
    on_failure: Callable[[FailureInfo], None] | None = None

    def __post_init__(self) -> None:
        validate_retry_params(
            retries=self.retries,
            jitter_factor=self.jitter_factor,
            max_total_time=self.max_total_time,
            max_wait_time=self.max_wait_time,
        )

    @classmethod
    def default(cls) -> RequestOptions:
        """Return a copy of the process-wide default options."""
        return get_default_options()

    def copy(self) -> RequestOptions:
        """Return a copy whose header mapping is independent of this
        one."""
        return replace(self, header=dict(self.header))

    def merge(self, **overrides: Any) -> RequestOptions:
        """Create new options with the given parameters overridden.

        Only non-None override values are applied.

        Args:
            **overrides: Keyword arguments for parameters to override.

        Returns:
            A new RequestOptions instance with overrides applied.

        Example:
            ```pycon
            >>> from apicommand.core.config import RequestOptions
            >>> options = RequestOptions(header={"X-Trace": "1"})
            >>> merged = options.merge(retries=2, authorization=None)
            >>> merged.retries, merged.header
            (2, {'X-Trace': '1'})

            ```
        """
        filtered_overrides = {k: v for k, v in overrides.items() if v is not None}
        return replace(self.copy(), **filtered_overrides)


_default_options: RequestOptions = RequestOptions()


def get_default_options() -> RequestOptions:
    """Return a copy of the process-wide default options.

    Example:
        ```pycon
        >>> from apicommand.core.config import get_default_options
        >>> get_default_options() is get_default_options()
        False

        ```
    """
    return _default_options.copy()


def configure_defaults(**overrides: Any) -> RequestOptions:
    """Override the process-wide default options.

    This is meant to be called once at startup. Commands created before
    the call keep the options they copied.

    Args:
        **overrides: Keyword arguments for the options to override.

    Returns:
        A copy of the new default options.

    Raises:
        ValueError: If an overridden option is invalid.
    """
    global _default_options  # noqa: PLW0603
    _default_options = _default_options.merge(**overrides)
    return get_default_options()


def reset_defaults() -> None:
    """Restore the factory default options."""
    global _default_options  # noqa: PLW0603
    _default_options = RequestOptions()
