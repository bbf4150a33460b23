r"""URL template expansion.

Command URLs are RFC 6570 templates (e.g.
``https://example.com/v1/files/{fileId}``). Expansion is delegated to the
``uritemplate`` library; this module only adds the check that every
variable the URL cannot do without was supplied.
"""

from __future__ import annotations

__all__ = ["expand_template", "missing_variables"]

import logging
from typing import TYPE_CHECKING, Any

from uritemplate import URITemplate

from apicommand.exceptions import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Mapping

logger: logging.Logger = logging.getLogger(__name__)

# Operators whose variables only produce optional query components
_OPTIONAL_OPERATORS = ("?", "&")


def missing_variables(template: str, params: Mapping[str, Any]) -> list[str]:
    """Return the required template variables absent from ``params``.

    Variables of query expressions (``{?name}``, ``{&name}``) are
    optional and never reported.

    Example:
        ```pycon
        >>> from apicommand.template import missing_variables
        >>> missing_variables("/files/{fileId}{?fields}", {})
        ['fileId']

        ```
    """
    missing = []
    for variable in URITemplate(template).variables:
        # uritemplate >= 4.2 reports the operator as an enum member
        operator = getattr(variable.operator, "value", variable.operator)
        if operator in _OPTIONAL_OPERATORS:
            continue
        missing.extend(
            name for name in variable.variable_names if params.get(name) is None
        )
    return missing


def expand_template(template: str, params: Mapping[str, Any]) -> str:
    """Expand a URL template with the given path parameters.

    Args:
        template: The URL template.
        params: The values of the template variables.

    Returns:
        The expanded URL.

    Raises:
        ConfigurationError: If a required template variable is missing.

    Example:
        ```pycon
        >>> from apicommand.template import expand_template
        >>> expand_template("https://example.com/files/{fileId}", {"fileId": "abc"})
        'https://example.com/files/abc'

        ```
    """
    missing = missing_variables(template, params)
    if missing:
        msg = f"Missing template variables {missing} for URL template {template!r}"
        raise ConfigurationError(msg)
    url = URITemplate(template).expand(dict(params))
    logger.debug(f"Expanded URL template {template!r} to {url!r}")
    return url
