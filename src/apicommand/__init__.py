r"""apicommand - Execution engine for the requests of generated API
clients.

This package turns a logical request description (method, URL template,
headers, body, query and path parameters) into an HTTP call made with
httpx, retries it across two independent failure classes and hands the
caller either a decoded result or a typed error.

Key Features:
    - URL templates (RFC 6570) expanded once per command
    - Form-encoding of the parameters of POST/PUT requests without body
    - Retry of transient errors (5xx, 429, transport failures) with
      exponential backoff
    - One retry after refreshing the credential on a first 401
    - Typed errors: RedirectError, AuthorizationError, RateLimitError,
      ClientError, ServerError, TransmissionError
    - Lifecycle hooks for decoding, success/error handling and release
    - Synchronous and asynchronous execution

Example:
    ```pycon
    >>> import httpx
    >>> from apicommand import HttpCommand, RequestOptions
    >>> command = HttpCommand(
    ...     "GET",
    ...     "https://example.com/v1/files/{fileId}",
    ...     params={"fileId": "abc"},
    ...     options=RequestOptions(retries=3),
    ... )
    >>> with httpx.Client() as client:  # doctest: +SKIP
    ...     body = command.execute(client)
    ...

    ```
"""

from __future__ import annotations

__all__ = [
    "ApiClient",
    "ApiError",
    "AsyncApiClient",
    "AuthorizationError",
    "ClientError",
    "CommandHooks",
    "ConfigurationError",
    "HttpCommand",
    "HttpMethod",
    "RateLimitError",
    "RedirectError",
    "RequestOptions",
    "ServerError",
    "TransmissionError",
    "__version__",
    "configure_defaults",
]

from importlib.metadata import PackageNotFoundError, version

from apicommand.client import ApiClient
from apicommand.client_async import AsyncApiClient
from apicommand.command import HttpCommand
from apicommand.core.config import RequestOptions, configure_defaults
from apicommand.core.method import HttpMethod
from apicommand.exceptions import (
    ApiError,
    AuthorizationError,
    ClientError,
    ConfigurationError,
    RateLimitError,
    RedirectError,
    ServerError,
    TransmissionError,
)
from apicommand.hooks import CommandHooks

try:
    __version__ = version(__name__)
except PackageNotFoundError:  # pragma: no cover
    # Package is not installed, fallback if needed
    __version__ = "0.0.0"
