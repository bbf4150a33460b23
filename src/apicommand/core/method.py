r"""HTTP methods supported by API commands."""

from __future__ import annotations

__all__ = ["FORM_ENCODED_METHODS", "HttpMethod"]

from enum import Enum


class HttpMethod(str, Enum):
    """HTTP method of a command.

    Example:
        ```pycon
        >>> from apicommand.core.method import HttpMethod
        >>> HttpMethod.from_value("post")
        <HttpMethod.POST: 'POST'>

        ```
    """

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_value(cls, value: str | HttpMethod) -> HttpMethod:
        """Return the method matching a case-insensitive name.

        Raises:
            ValueError: If the name is not a supported HTTP method.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            msg = f"Unsupported HTTP method: {value!r}"
            raise ValueError(msg) from None


# Methods whose parameters are sent as a form body when no body is given
FORM_ENCODED_METHODS = (HttpMethod.POST, HttpMethod.PUT)
