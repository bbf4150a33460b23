r"""Synchronous context manager client for API commands.

The ApiClient owns (or borrows) an ``httpx.Client`` used as transport
and the default options of the commands it creates.
"""

from __future__ import annotations

__all__ = ["ApiClient"]

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


class ApiClient:
    r"""Synchronous context manager executing API commands.

    Two usage patterns are supported:

    **External lifecycle management**: an ``httpx.Client`` passed to
    ``ApiClient`` is borrowed and never closed by it.

    .. code-block:: python

        import httpx
        from apicommand import ApiClient, RequestOptions

        with httpx.Client() as http_client:
            with ApiClient(client=http_client, options=RequestOptions(retries=3)) as client:
                data = client.request("GET", "https://example.com/v1/items")

    **ApiClient manages the lifecycle**: without ``client``, a default
    ``httpx.Client`` is created and closed when the ``with`` block
    exits.

    .. code-block:: python

        from apicommand import ApiClient, RequestOptions

        with ApiClient(options=RequestOptions(retries=3, authorization="token")) as client:
            command = client.command("GET", "https://example.com/v1/files/{fileId}",
                                     params={"fileId": "abc"})
            data = client.execute(command)

    Args:
        options: Optional default options of the commands created by
            this client. Defaults to a copy of the process-wide
            defaults.
        client: Optional ``httpx.Client`` used as transport. If None, a
            new client is created with ``timeout``.
        timeout: Transport timeout of the client created when
            ``client`` is None. Must be > 0.
        hooks: Optional lifecycle hooks of the commands created by this
            client.
    """

    def __init__(
        self,
        *,
        options: RequestOptions | None = None,
        client: httpx.Client | None = None,
        timeout: float | httpx.Timeout = DEFAULT_TIMEOUT,
        hooks: CommandHooks | None = None,
    ) -> None:
        validate_timeout(timeout)
        self._options: RequestOptions = (
            options.copy() if options is not None else RequestOptions.default()
        )
        self._client: httpx.Client = (
            client if client is not None else httpx.Client(timeout=timeout)
        )
        self._hooks = hooks
        self._owns_client = client is None

    @property
    def options(self) -> RequestOptions:
        return self._options

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        r"""Close the underlying httpx client if this client created it."""
        if self._owns_client:
            self._client.close()

    def command(
        self,
        method: HttpMethod | str,
        url: str | httpx.URL,
        *,
        options: RequestOptions | None = None,
        **kwargs: Any,
    ) -> HttpCommand:
        r"""Create a command with the options and hooks of this client.

        Args:
            method: The HTTP method.
            url: The URL or URL template.
            options: Optional options replacing the client options.
            **kwargs: Additional keyword arguments passed to
                ``HttpCommand`` (body, header, query, params, hooks).

        Returns:
            The new command.
        """
        kwargs.setdefault("hooks", self._hooks)
        return HttpCommand(
            method, url, options=options if options is not None else self._options, **kwargs
        )

    def execute(self, command: HttpCommand, callback: CompletionCallback | None = None) -> Any:
        r"""Execute a command with the transport of this client.

        Args:
            command: The command to execute.
            callback: Optional completion callback.

        Returns:
            The decoded result of the command.
        """
        return command.execute(self._client, callback)

    def request(
        self,
        method: HttpMethod | str,
        url: str | httpx.URL,
        callback: CompletionCallback | None = None,
        **kwargs: Any,
    ) -> Any:
        r"""Create and execute a command.

        Args:
            method: The HTTP method.
            url: The URL or URL template.
            callback: Optional completion callback.
            **kwargs: Additional keyword arguments passed to
                ``command()``.

        Returns:
            The decoded result of the command.
        """
        return self.execute(self.command(method, url, **kwargs), callback)
