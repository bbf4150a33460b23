r"""Backoff strategies for delays between retried command attempts."""

from __future__ import annotations

__all__ = ["BaseBackoffStrategy", "ConstantBackoff", "ExponentialBackoff"]

from apicommand.backoff.base import BaseBackoffStrategy
from apicommand.backoff.constant import ConstantBackoff
from apicommand.backoff.exponential import ExponentialBackoff
