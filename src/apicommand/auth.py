r"""Credential handling for API commands.

A command is authorized either by a static bearer token (a plain
string) or by a credential object that writes its own headers, for
example for signed-request schemes. A credential that also exposes a
``refresh`` method can recover from an authorization failure: the
command refreshes it once and tries again.
"""

from __future__ import annotations

__all__ = [
    "Authorization",
    "Credential",
    "RefreshableCredential",
    "apply_authorization",
    "is_refreshable",
]

from typing import TYPE_CHECKING, Protocol, Union, runtime_checkable

if TYPE_CHECKING:
    import httpx


@runtime_checkable
class Credential(Protocol):
    """A credential that applies itself to the request headers."""

    def apply(self, headers: httpx.Headers) -> None:
        """Add the authorization headers to ``headers`` in place."""


@runtime_checkable
class RefreshableCredential(Credential, Protocol):
    """A credential that can renew itself after an authorization
    failure."""

    def refresh(self) -> None:
        """Renew the credential."""


Authorization = Union[str, Credential]


def apply_authorization(headers: httpx.Headers, authorization: Authorization | None) -> None:
    """Apply the authorization to the request headers.

    Args:
        headers: The request headers, updated in place.
        authorization: A bearer token, a credential object, or None.

    Raises:
        TypeError: If the authorization is neither a string nor a
            credential object.

    Example:
        ```pycon
        >>> import httpx
        >>> from apicommand.auth import apply_authorization
        >>> headers = httpx.Headers()
        >>> apply_authorization(headers, "secret")
        >>> headers["Authorization"]
        'Bearer secret'

        ```
    """
    if authorization is None:
        return
    if isinstance(authorization, str):
        headers["Authorization"] = f"Bearer {authorization}"
    elif callable(getattr(authorization, "apply", None)):
        authorization.apply(headers)
    else:
        msg = (
            "authorization must be a bearer token string or an object with an "
            f"apply(headers) method, got {type(authorization).__name__}"
        )
        raise TypeError(msg)


def is_refreshable(authorization: Authorization | None) -> bool:
    """Indicate whether the authorization can be refreshed after an
    authorization failure.

    Example:
        ```pycon
        >>> from apicommand.auth import is_refreshable
        >>> is_refreshable("secret")
        False
        >>> is_refreshable(None)
        False

        ```
    """
    if authorization is None or isinstance(authorization, str):
        return False
    return callable(getattr(authorization, "apply", None)) and callable(
        getattr(authorization, "refresh", None)
    )
