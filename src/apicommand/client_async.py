r"""Asynchronous context manager client for API commands."""

from __future__ import annotations

__all__ = ["AsyncApiClient"]

from typing import TYPE_CHECKING, Any

import httpx

from apicommand.command import HttpCommand
from apicommand.core.config import DEFAULT_TIMEOUT, RequestOptions
from apicommand.core.validation import validate_timeout

if TYPE_CHECKING:
    from types import TracebackType

    from typing import Self

    from apicommand.core.method import HttpMethod
    from apicommand.hooks import CommandHooks, CompletionCallback


class AsyncApiClient:
    r"""Asynchronous context manager executing API commands.

    This is the asynchronous counterpart of ``ApiClient``: commands are
    executed with an ``httpx.AsyncClient`` and their backoff delays do
    not block the event loop.

    .. code-block:: python

        from apicommand import AsyncApiClient, RequestOptions

        async with AsyncApiClient(options=RequestOptions(retries=3)) as client:
            data = await client.request("GET", "https://example.com/v1/items")

    Args:
        options: Optional default options of the commands created by
            this client.
        client: Optional ``httpx.AsyncClient`` used as transport. If
            None, a new client is created with ``timeout``.
        timeout: Transport timeout of the client created when
            ``client`` is None. Must be > 0.
        hooks: Optional lifecycle hooks of the commands created by this
            client.
    """

    def __init__(
        self,
        *,
        options: RequestOptions | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float | httpx.Timeout = DEFAULT_TIMEOUT,
        hooks: CommandHooks | None = None,
    ) -> None:
        validate_timeout(timeout)
        self._options: RequestOptions = (
            options.copy() if options is not None else RequestOptions.default()
        )
        self._client: httpx.AsyncClient = (
            client if client is not None else httpx.AsyncClient(timeout=timeout)
        )
        self._hooks = hooks
        self._owns_client = client is None

    @property
    def options(self) -> RequestOptions:
        return self._options

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        r"""Close the underlying httpx client if this client created it."""
        if self._owns_client:
            await self._client.aclose()

    def command(
        self,
        method: HttpMethod | str,
        url: str | httpx.URL,
        *,
        options: RequestOptions | None = None,
        **kwargs: Any,
    ) -> HttpCommand:
        r"""Create a command with the options and hooks of this client."""
        kwargs.setdefault("hooks", self._hooks)
        return HttpCommand(
            method, url, options=options if options is not None else self._options, **kwargs
        )

    async def execute(
        self, command: HttpCommand, callback: CompletionCallback | None = None
    ) -> Any:
        return await command.execute_async(self._client, callback)

    async def request(
        self,
        method: HttpMethod | str,
        url: str | httpx.URL,
        callback: CompletionCallback | None = None,
        **kwargs: Any,
    ) -> Any:
        r"""Create and execute a command."""
        return await self.execute(self.command(method, url, **kwargs), callback)
