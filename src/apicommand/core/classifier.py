r"""Classification of HTTP responses and transport failures.

This module maps an HTTP status code to one of the error variants of
``apicommand.exceptions`` (or to success), and translates the
exceptions raised by the transport into the same taxonomy.

| Status                      | Outcome              |
|-----------------------------|----------------------|
| 200-299                     | success              |
| 301, 302, 303, 307          | RedirectError        |
| 401                         | AuthorizationError   |
| 429                         | RateLimitError       |
| 304, 400, 402-499           | ClientError          |
| 500-599                     | ServerError          |
| anything else               | TransmissionError    |
"""

from __future__ import annotations

__all__ = ["check_status", "classify_exception", "classify_status", "is_success"]

import logging
from contextlib import suppress
from typing import TYPE_CHECKING

import httpx

from apicommand.exceptions import (
    ApiError,
    AuthorizationError,
    ClientError,
    RateLimitError,
    RedirectError,
    ServerError,
    TransmissionError,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

logger: logging.Logger = logging.getLogger(__name__)

REDIRECT_STATUS_CODES = (301, 302, 303, 307)


def is_success(status: int) -> bool:
    return 200 <= status < 300


def classify_status(
    status: int,
    header: httpx.Headers | Mapping[str, str] | None = None,
    body: bytes | str | None = None,
    message: str | None = None,
) -> ApiError | None:
    """Classify an HTTP status code.

    Args:
        status: The HTTP status code of the response.
        header: The response headers.
        body: The response body.
        message: Optional error message replacing the default one of
            the error variant.

    Returns:
        None for a successful (2xx) status, otherwise the error variant
        matching the status code.

    Example:
        ```pycon
        >>> from apicommand.core.classifier import classify_status
        >>> classify_status(204) is None
        True
        >>> classify_status(404)
        ClientError(message='Invalid request', status_code=404)
        >>> classify_status(302, {"Location": "https://example.com/next"}).message
        'Redirect to https://example.com/next'

        ```
    """
    if is_success(status):
        return None
    headers = httpx.Headers(header) if header is not None else httpx.Headers()
    kwargs = {"status_code": status, "header": headers, "body": body}
    if status in REDIRECT_STATUS_CODES:
        location = headers.get("Location")
        default = f"Redirect to {location}" if location else "Redirect"
        return RedirectError(message or default, **kwargs)
    if status == 401:
        return AuthorizationError(message or "Unauthorized", **kwargs)
    if status == 429:
        return RateLimitError(message or "Rate limit exceeded", **kwargs)
    if status in (304, 400) or 402 <= status < 500:
        return ClientError(message or "Invalid request", **kwargs)
    if 500 <= status < 600:
        return ServerError(message or "Server error", **kwargs)
    logger.warning(f"Encountered unexpected status code {status}")
    return TransmissionError(message or "Unknown error", **kwargs)


def check_status(
    status: int,
    header: httpx.Headers | Mapping[str, str] | None = None,
    body: bytes | str | None = None,
    message: str | None = None,
) -> None:
    """Check an HTTP status code and raise the matching error if it is
    not a success.

    Args:
        status: The HTTP status code of the response.
        header: The response headers.
        body: The response body.
        message: Optional error message.

    Raises:
        ApiError: The error variant matching a non-2xx status code.

    Example:
        ```pycon
        >>> from apicommand.core.classifier import check_status
        >>> check_status(200)
        >>> check_status(503)
        Traceback (most recent call last):
        ...
        apicommand.exceptions.ServerError: Server error

        ```
    """
    error = classify_status(status, header, body, message)
    if error is not None:
        raise error


def _response_body(response: httpx.Response) -> bytes | None:
    with suppress(httpx.ResponseNotRead):
        return response.content
    return None


def classify_exception(exc: Exception) -> Exception:
    """Translate an exception raised during an attempt into the error
    taxonomy.

    ``ApiError`` instances are returned unchanged. Exceptions carrying an
    HTTP response are classified by its status code. Transport failures
    (timeouts, connection or protocol errors, socket errors) become
    ``TransmissionError``. Any other exception is returned unchanged.

    Args:
        exc: The exception to translate.

    Returns:
        The translated exception.

    Example:
        ```pycon
        >>> import httpx
        >>> from apicommand.core.classifier import classify_exception
        >>> classify_exception(httpx.ReadTimeout("timed out"))
        TransmissionError(message='timed out', status_code=None)

        ```
    """
    if isinstance(exc, ApiError):
        return exc
    if isinstance(exc, httpx.HTTPStatusError):
        response = exc.response
        error = classify_status(response.status_code, response.headers, _response_body(response))
        if error is None:
            error = TransmissionError(exc, status_code=response.status_code)
        error.cause = exc
        return error
    if isinstance(exc, (httpx.RequestError, OSError)):
        return TransmissionError(exc)
    return exc
