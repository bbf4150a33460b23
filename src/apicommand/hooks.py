r"""Lifecycle hooks of an API command.

``CommandHooks`` groups the extension points of a command: request
preparation, response body decoding, success and error handling,
credential refresh and resource release. The retry logic calls them at
fixed points and never depends on what they do, so a generated client
customizes serialization or cleanup by passing its own hooks to the
command:

```python
import json

from apicommand import CommandHooks, HttpCommand


class JsonHooks(CommandHooks):
    def decode_response_body(self, content_type, body):
        if content_type and content_type.startswith("application/json"):
            return json.loads(body)
        return body


command = HttpCommand("GET", "https://example.com/v1/items", hooks=JsonHooks())
```
"""

from __future__ import annotations

__all__ = ["CommandHooks", "CompletionCallback"]

import logging
import reprlib
from typing import TYPE_CHECKING, Any, Callable, Optional

from apicommand.auth import is_refreshable
from apicommand.core.builder import prepare_request

if TYPE_CHECKING:
    from apicommand.command import HttpCommand

logger: logging.Logger = logging.getLogger(__name__)

CompletionCallback = Callable[[Any, Optional[Exception]], None]


class CommandHooks:
    """Default lifecycle hooks of an API command.

    Subclass and override the methods to customize a command.
    """

    def prepare(self, command: HttpCommand) -> None:
        """Prepare the request (headers, URL, body) before the first
        attempt."""
        prepare_request(command)

    def decode_response_body(self, content_type: str | None, body: bytes) -> Any:  # noqa: ARG002
        """Decode the body of a successful response.

        Args:
            content_type: The Content-Type header of the response.
            body: The raw response body.

        Returns:
            The decoded result. The default returns the body unchanged.
        """
        return body

    def on_success(self, command: HttpCommand, result: Any) -> Any:
        """Process the decoded result of a successful attempt.

        Returns:
            The result of the command. The default returns ``result``
            unchanged.
        """
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"Success - {command.method} {command.url}: {reprlib.repr(result)}")
        return result

    def on_error(
        self,
        command: HttpCommand,
        error: Exception,
        callback: CompletionCallback | None = None,
    ) -> None:
        """Process the terminal error of a command.

        Args:
            command: The failed command.
            error: The terminal error.
            callback: The completion callback passed to ``execute``, if
                any.

        Raises:
            Exception: ``error`` itself when no callback was supplied.
        """
        logger.debug(f"Error - {command.method} {command.url}: {error!r}")
        if callback is None:
            raise error
        callback(None, error)

    def refresh_authorization(self, command: HttpCommand) -> None:
        """Refresh the credential after an authorization failure.

        The default refreshes the credential of the command options when
        it exposes a ``refresh`` method.
        """
        logger.debug("Retrying after authentication failure")
        authorization = command.options.authorization
        if is_refreshable(authorization):
            authorization.refresh()

    def release(self, command: HttpCommand) -> None:
        """Release the resources used by the command.

        Called once after the command completes, whatever the outcome.
        The default does nothing.
        """
