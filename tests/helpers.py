r"""Shared test helpers for command execution tests."""

from __future__ import annotations

__all__ = [
    "TEST_URL",
    "RecordingCredential",
    "SigningCredential",
    "create_mock_async_client",
    "create_mock_client",
    "create_response",
]

from typing import TYPE_CHECKING, Any
from unittest.mock import AsyncMock, Mock

import httpx

if TYPE_CHECKING:
    from collections.abc import Mapping

TEST_URL = "https://api.example.com/data"


def create_response(
    status_code: int = 200,
    content: bytes = b"",
    headers: Mapping[str, str] | None = None,
) -> httpx.Response:
    """Create a real httpx.Response with the given status, body and
    headers."""
    return httpx.Response(status_code, content=content, headers=headers)


def create_mock_client(side_effect: Any) -> Mock:
    """Create a mock httpx.Client whose ``request`` method returns (or
    raises) the items of ``side_effect`` in order."""
    client = Mock(spec=httpx.Client)
    client.request.side_effect = side_effect
    return client


def create_mock_async_client(side_effect: Any) -> Mock:
    """Asynchronous version of ``create_mock_client``."""
    return Mock(spec=httpx.AsyncClient, request=AsyncMock(side_effect=side_effect))


class SigningCredential:
    """Credential writing its own headers, without refresh support."""

    def __init__(self, token: str = "signed") -> None:
        self.token = token
        self.applied = 0

    def apply(self, headers: httpx.Headers) -> None:
        self.applied += 1
        headers["Authorization"] = f"Signature {self.token}"
        headers["X-Signed"] = "true"


class RecordingCredential(SigningCredential):
    """Refreshable credential recording the refresh calls."""

    def __init__(self, token: str = "token-1") -> None:
        super().__init__(token)
        self.refreshed = 0

    def apply(self, headers: httpx.Headers) -> None:
        self.applied += 1
        headers["Authorization"] = f"Bearer {self.token}"

    def refresh(self) -> None:
        self.refreshed += 1
        self.token = f"token-{self.refreshed + 1}"
