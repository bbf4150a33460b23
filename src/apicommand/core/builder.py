r"""Preparation of a command's request before it is sent.

Preparation resolves everything that does not change between attempts:
the default headers, the concrete URL and the form-encoding decision. It
runs once per command, before the first attempt.
"""

from __future__ import annotations

__all__ = ["expand_url", "merge_default_headers", "merge_query", "prepare_request"]

import logging
from typing import TYPE_CHECKING, Any

import httpx

from apicommand.core.config import FORM_CONTENT_TYPE
from apicommand.core.method import FORM_ENCODED_METHODS
from apicommand.template import expand_template

if TYPE_CHECKING:
    from collections.abc import Mapping

    from apicommand.command import HttpCommand

logger: logging.Logger = logging.getLogger(__name__)


def merge_default_headers(
    header: httpx.Headers, defaults: Mapping[str, str] | None
) -> httpx.Headers:
    """Merge default headers under the explicit ones.

    Args:
        header: The headers explicitly set on the command.
        defaults: The default headers. A default is only added when no
            header of the same (case-insensitive) name is already set.

    Returns:
        The merged headers.

    Example:
        ```pycon
        >>> import httpx
        >>> from apicommand.core.builder import merge_default_headers
        >>> header = merge_default_headers(
        ...     httpx.Headers({"Accept": "text/plain"}),
        ...     {"accept": "application/json", "User-Agent": "demo"},
        ... )
        >>> header["Accept"], header["User-Agent"]
        ('text/plain', 'demo')

        ```
    """
    if not defaults:
        return header
    missing = [(key, value) for key, value in defaults.items() if key not in header]
    if not missing:
        return header
    return httpx.Headers([*header.raw, *missing])


def expand_url(url: str | httpx.URL, params: Mapping[str, Any]) -> httpx.URL:
    """Resolve the URL of a command.

    A string is a URL template and is expanded with the path
    parameters. An ``httpx.URL`` is a literal address and is returned
    unchanged.
    """
    if isinstance(url, httpx.URL):
        return url
    return httpx.URL(expand_template(url, params))


def merge_query(url: httpx.URL, query: Mapping[str, Any] | None) -> httpx.URL:
    """Merge query parameters into the query string of ``url``.

    Explicit query parameters win over the ones already present in the
    URL. None values are dropped and list values produce repeated keys.

    Example:
        ```pycon
        >>> import httpx
        >>> from apicommand.core.builder import merge_query
        >>> str(merge_query(httpx.URL("https://example.com/?a=0&c=3"), {"a": 1, "b": 2}))
        'https://example.com/?a=1&c=3&b=2'

        ```
    """
    if not query:
        return url
    params = {key: value for key, value in query.items() if value is not None}
    return url.copy_merge_params(params)


def prepare_request(command: HttpCommand) -> None:
    """Prepare the request of a command in place.

    The following steps are applied:
    1. The default headers of the options are merged under the
       explicit headers.
    2. The URL template is expanded with the path parameters.
    3. The query parameters are merged into the URL.
    4. A POST or PUT without body sends its query parameters as a
       form-encoded body and the URL query string is cleared.

    Args:
        command: The command to prepare.

    Raises:
        ConfigurationError: If a required URL template variable is
            missing.
    """
    command.header = merge_default_headers(command.header, command.options.header)
    url = merge_query(expand_url(command.url, command.params), command.query)

    if command.method in FORM_ENCODED_METHODS and command.body is None:
        command.form_encoded = True
        command.body = str(url.params).encode("utf-8")
        command.header["Content-Type"] = FORM_CONTENT_TYPE
        url = url.copy_with(params={})
        logger.debug(f"Form-encoded the query parameters of {command.method} {url}")
    else:
        command.form_encoded = False
    command.url = url
