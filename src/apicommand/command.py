r"""HTTP command: the execution unit of a single API request.

An ``HttpCommand`` describes one logical API call. ``execute`` prepares
the request once, then runs attempts under the two-tier retry policies
of ``apicommand.retry`` until it gets a result or a terminal error:

```python
import httpx

from apicommand import HttpCommand, RequestOptions

command = HttpCommand(
    "GET",
    "https://example.com/v1/files/{fileId}",
    params={"fileId": "abc"},
    query={"fields": "name"},
    options=RequestOptions(retries=3, authorization="token"),
)
with httpx.Client() as client:
    body = command.execute(client)
```
"""

from __future__ import annotations

__all__ = ["HttpCommand"]

import logging
import time
from typing import TYPE_CHECKING, Any, BinaryIO, NoReturn, Union

import httpx

from apicommand.auth import apply_authorization, is_refreshable
from apicommand.callbacks import (
    invoke_on_failure,
    invoke_on_request,
    invoke_on_retry,
    invoke_on_success,
)
from apicommand.core.classifier import check_status, classify_exception
from apicommand.core.config import RequestOptions
from apicommand.core.method import HttpMethod
from apicommand.hooks import CommandHooks
from apicommand.retry import execute_with_retry, execute_with_retry_async

if TYPE_CHECKING:
    from collections.abc import Mapping

    from apicommand.hooks import CompletionCallback

logger: logging.Logger = logging.getLogger(__name__)

Body = Union[bytes, str, BinaryIO]


class HttpCommand:
    r"""Command for an HTTP request and its response.

    Args:
        method: The HTTP method, as an ``HttpMethod`` or a
            case-insensitive name.
        url: The URL, either a template string with named placeholders
            (e.g. ``https://example.com/files/{fileId}``) or a literal
            ``httpx.URL``.
        body: Optional request body: bytes, a string, or a binary
            stream. A seekable stream is rewound before each attempt; any
            other stream is read once during preparation.
        header: Optional headers of the request. They win over the
            default headers of the options.
        query: Optional query parameters. They win over the query
            parameters already present in the URL.
        params: Optional values of the URL template variables.
        options: Optional request options. Defaults to a copy of the
            process-wide default options. The command always keeps its
            own copy.
        hooks: Optional lifecycle hooks. Defaults to ``CommandHooks()``.

    Attributes:
        form_encoded: Whether the query parameters were moved to a
            form-encoded body, or None before preparation.
        response: The last response received, or None.

    Note:
        A command is meant to be executed once and is not safe for
        concurrent use: preparation updates its URL, body and headers
        in place.
    """

    def __init__(
        self,
        method: HttpMethod | str,
        url: str | httpx.URL,
        *,
        body: Body | None = None,
        header: Mapping[str, str] | httpx.Headers | None = None,
        query: Mapping[str, Any] | None = None,
        params: Mapping[str, Any] | None = None,
        options: RequestOptions | None = None,
        hooks: CommandHooks | None = None,
    ) -> None:
        self.options: RequestOptions = (
            options.copy() if options is not None else RequestOptions.default()
        )
        self.method = HttpMethod.from_value(method)
        self.url: str | httpx.URL = url
        self.body = body
        self.header = httpx.Headers(header)
        self.query: dict[str, Any] = dict(query or {})
        self.params: dict[str, Any] = dict(params or {})
        self.hooks = hooks if hooks is not None else CommandHooks()
        self.form_encoded: bool | None = None
        self.response: httpx.Response | None = None
        self._prepared = False
        self._attempts = 0

    def __repr__(self) -> str:
        return f"{type(self).__name__}(method={self.method.value}, url={str(self.url)!r})"

    @property
    def attempts(self) -> int:
        r"""The number of transport calls performed so far."""
        return self._attempts

    @property
    def prepared(self) -> bool:
        r"""Whether the request was prepared (see ``prepare``)."""
        return self._prepared

    def prepare(self) -> None:
        r"""Prepare the request before the first attempt.

        Subsequent calls do nothing, so the URL expansion and the
        form-encoding decision are never repeated.

        Raises:
            ConfigurationError: If a required URL template variable is
                missing.
        """
        if self._prepared:
            return
        self.hooks.prepare(self)
        self._buffer_body()
        self._prepared = True

    def authorization_refreshable(self) -> bool:
        r"""Indicate whether the attached credential can be refreshed."""
        return is_refreshable(self.options.authorization)

    def execute(
        self, client: httpx.Client, callback: CompletionCallback | None = None
    ) -> Any:
        r"""Execute the command, retrying as necessary.

        Args:
            client: The HTTP client used as transport.
            callback: Optional completion callback. It receives
                ``(result, None)`` on success or ``(None, error)`` on
                failure, and the error is then not raised.

        Returns:
            The decoded result, or None if the command failed and a
            callback was supplied.

        Raises:
            ServerError: An error occurred on the server and the
                request can be retried.
            ClientError: The request is invalid and should not be
                retried without modification.
            AuthorizationError: Authorization is required.
            RateLimitError: The rate limit was exceeded.
            RedirectError: A redirect was not followed.
            TransmissionError: The request could not be transmitted.
        """
        start_time = time.time()
        try:
            self.prepare()
            result = execute_with_retry(
                lambda: self.execute_once(client),
                options=self.options,
                refreshable=self.authorization_refreshable(),
                refresh=self.refresh_authorization,
                on_retry=self._on_retry,
            )
        except Exception as exc:
            self._on_failure(exc, start_time)
            return self.hooks.on_error(self, exc, callback)
        else:
            return self._on_success(result, start_time, callback)
        finally:
            self.hooks.release(self)

    async def execute_async(
        self, client: httpx.AsyncClient, callback: CompletionCallback | None = None
    ) -> Any:
        r"""Execute the command with an asynchronous client, retrying as
        necessary.

        Backoff delays are spent in ``asyncio.sleep``. Cancelling the
        task interrupts the command and the release hook still runs.

        Args:
            client: The asynchronous HTTP client used as transport.
            callback: Optional completion callback (see ``execute``).

        Returns:
            The decoded result, or None if the command failed and a
            callback was supplied.
        """
        start_time = time.time()
        try:
            self.prepare()
            result = await execute_with_retry_async(
                lambda: self.execute_once_async(client),
                options=self.options,
                refreshable=self.authorization_refreshable(),
                refresh=self.refresh_authorization,
                on_retry=self._on_retry,
            )
        except Exception as exc:
            self._on_failure(exc, start_time)
            return self.hooks.on_error(self, exc, callback)
        else:
            return self._on_success(result, start_time, callback)
        finally:
            self.hooks.release(self)

    def execute_once(self, client: httpx.Client) -> Any:
        r"""Execute the command once, without retry.

        Args:
            client: The HTTP client used as transport.

        Returns:
            The decoded result.

        Raises:
            ApiError: The error variant matching the response status or
                the transport failure.
        """
        url, content = self._begin_attempt()
        try:
            response = client.request(
                self.method.value,
                url,
                headers=self.request_header(),
                content=content,
                follow_redirects=True,
            )
            return self._handle_response(response)
        except Exception as exc:
            self._raise_classified(exc)

    async def execute_once_async(self, client: httpx.AsyncClient) -> Any:
        r"""Asynchronous version of ``execute_once``."""
        url, content = self._begin_attempt()
        try:
            response = await client.request(
                self.method.value,
                url,
                headers=self.request_header(),
                content=content,
                follow_redirects=True,
            )
            return self._handle_response(response)
        except Exception as exc:
            self._raise_classified(exc)

    def request_header(self) -> httpx.Headers:
        r"""Build the headers of one attempt.

        The authorization is applied first, then the explicit headers of
        the command are merged on top. An ``Authorization`` header
        injected by the credential is kept.
        """
        request_header = httpx.Headers(self.header)
        authorization = self.options.authorization
        apply_authorization(request_header, authorization)
        injected = request_header.get("Authorization") if authorization is not None else None
        request_header.update(self.header)
        if injected is not None:
            request_header["Authorization"] = injected
        return request_header

    def process_response(self, status: int, header: httpx.Headers, body: bytes) -> Any:
        r"""Check the response and either decode its body or raise the
        matching error.

        Raises:
            ApiError: If the status code is not a success.
        """
        check_status(status, header, body)
        return self.hooks.decode_response_body(header.get("Content-Type"), body)

    def refresh_authorization(self) -> None:
        self.hooks.refresh_authorization(self)

    def _begin_attempt(self) -> tuple[str, bytes | str | None]:
        r"""Rewind the body and record a new attempt.

        Returns:
            The URL and the content to send.
        """
        self._rewind_body()
        self._attempts += 1
        url = str(self.url)
        logger.debug(f"Sending HTTP {self.method.value} {url} (attempt {self._attempts})")
        invoke_on_request(
            self.options.on_request, url=url, method=self.method.value, attempt=self._attempts
        )
        return url, self._content()

    def _buffer_body(self) -> None:
        r"""Read a stream that cannot be rewound into bytes, so every
        attempt sends the same payload."""
        if self.body is None or isinstance(self.body, (bytes, str)):
            return
        if not _is_seekable(self.body):
            self.body = self.body.read()

    def _rewind_body(self) -> None:
        if self.body is not None and _is_seekable(self.body):
            self.body.seek(0)

    def _content(self) -> bytes | str | None:
        if self.body is None or isinstance(self.body, (bytes, str)):
            return self.body
        return self.body.read()

    def _handle_response(self, response: httpx.Response) -> Any:
        self.response = response
        logger.debug(
            f"{self.method.value} {self.url} returned status {response.status_code}"
        )
        result = self.process_response(response.status_code, response.headers, response.content)
        return self.hooks.on_success(self, result)

    def _raise_classified(self, exc: Exception) -> NoReturn:
        logger.debug(f"Caught error {exc!r}")
        error = classify_exception(exc)
        if error is exc:
            raise exc
        raise error from exc

    def _on_retry(self, error: Exception, attempt: int, delay: float) -> None:
        invoke_on_retry(
            self.options.on_retry,
            url=str(self.url),
            method=self.method.value,
            attempt=attempt,
            max_attempts=self.options.retries + 1,
            wait_time=delay,
            error=error,
        )

    def _on_success(
        self, result: Any, start_time: float, callback: CompletionCallback | None
    ) -> Any:
        invoke_on_success(
            self.options.on_success,
            url=str(self.url),
            method=self.method.value,
            result=result,
            start_time=start_time,
        )
        if callback is not None:
            callback(result, None)
        return result

    def _on_failure(self, error: Exception, start_time: float) -> None:
        invoke_on_failure(
            self.options.on_failure,
            url=str(self.url),
            method=self.method.value,
            error=error,
            start_time=start_time,
        )


def _is_seekable(body: Any) -> bool:
    if not callable(getattr(body, "seek", None)):
        return False
    seekable = getattr(body, "seekable", None)
    return seekable is None or seekable()
