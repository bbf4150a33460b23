r"""Utility functions used by the command execution engine."""

from __future__ import annotations

__all__ = ["parse_retry_after"]

from apicommand.utils.retry_after import parse_retry_after
