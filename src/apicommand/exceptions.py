r"""Define the error taxonomy raised when executing API commands.

Every error that originates from a command execution is one of the
``ApiError`` variants below. The variant is decided by the HTTP status
code of the response (or by the transport failure when no usable
response was received), and it drives the retry decisions of the
command.

Example:
    ```pycon
    >>> from apicommand.exceptions import ApiError, ServerError
    >>> error = ServerError("Server error", status_code=503)
    >>> isinstance(error, ApiError)
    True
    >>> error.status_code
    503

    ```
"""

from __future__ import annotations

__all__ = [
    "ApiError",
    "AuthorizationError",
    "ClientError",
    "ConfigurationError",
    "RateLimitError",
    "RedirectError",
    "ServerError",
    "TransmissionError",
]

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx


class ApiError(Exception):
    """Base class of all errors produced by an API command.

    Args:
        message: A human-readable description of the error.
        status_code: The HTTP status code of the response, if any.
        header: The response headers, if any.
        body: The response body, if any.
        cause: The underlying exception, if this error wraps one.

    Attributes:
        message: A human-readable description of the error.
        status_code: The HTTP status code of the response, if any.
        header: The response headers, if any.
        body: The response body, if any.
        cause: The underlying exception, if this error wraps one.
    """

    def __init__(
        self,
        message: str | Exception,
        *,
        status_code: int | None = None,
        header: httpx.Headers | None = None,
        body: bytes | str | None = None,
        cause: Exception | None = None,
    ) -> None:
        if isinstance(message, Exception):
            cause = cause or message
            message = str(message) or type(message).__name__
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.header = header
        self.body = body
        self.cause = cause

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, status_code={self.status_code})"


class RedirectError(ApiError):
    r"""Raised when a redirect (3xx) response was not followed by the
    transport."""


class AuthorizationError(ApiError):
    """Raised when the request is not authorized (401)."""


class RateLimitError(ApiError):
    """Raised when the rate limit is exceeded (429)."""


class ClientError(ApiError):
    r"""Raised when the request is invalid and should not be retried
    without modification."""


class ServerError(ApiError):
    r"""Raised when an error occurred on the server and the request can
    be retried."""


class TransmissionError(ApiError):
    r"""Raised when the request could not be transmitted or the response
    could not be interpreted (timeout, socket error, unknown status)."""


class ConfigurationError(ValueError):
    r"""Raised when a command cannot be prepared, for example when a
    required URL template variable is missing."""
