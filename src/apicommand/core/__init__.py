r"""Core request preparation, response classification and
configuration."""

from __future__ import annotations

__all__ = [
    "DEFAULT_MAX_WAIT_TIME",
    "DEFAULT_RETRIES",
    "DEFAULT_TIMEOUT",
    "HttpMethod",
    "RETRIABLE_ERRORS",
    "RequestOptions",
    "check_status",
    "classify_exception",
    "classify_status",
    "configure_defaults",
    "get_default_options",
    "prepare_request",
    "reset_defaults",
    "validate_retry_params",
    "validate_timeout",
]

from apicommand.core.builder import prepare_request
from apicommand.core.classifier import check_status, classify_exception, classify_status
from apicommand.core.config import (
    DEFAULT_MAX_WAIT_TIME,
    DEFAULT_RETRIES,
    DEFAULT_TIMEOUT,
    RETRIABLE_ERRORS,
    RequestOptions,
    configure_defaults,
    get_default_options,
    reset_defaults,
)
from apicommand.core.method import HttpMethod
from apicommand.core.validation import validate_retry_params, validate_timeout
