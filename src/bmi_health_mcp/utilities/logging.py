"""Logging utilities for the health calculator server."""

import logging
from collections.abc import Collection, Mapping
from typing import Any, Literal

from rich.console import Console
from rich.logging import RichHandler

MAX_LOGGED_STRING = 64


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a module of this package.

    Args:
        name: the module name, usually ``__name__``

    Returns:
        a configured logger instance
    """
    return logging.getLogger(name)


def configure_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO",
) -> None:
    """Configure logging for the server process.

    Args:
        level: the log level to use
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
    )


def sanitize_arguments(
    arguments: Mapping[str, Any] | None,
    allowed_keys: Collection[str] | None = None,
) -> dict[str, Any]:
    """Return a copy of tool arguments that is safe to put in a log line.

    Keys outside ``allowed_keys`` are reported by name only, and long strings
    are truncated so free text pasted by a user never lands in the logs whole.

    Parameters
    ----------
    arguments:
        Tool arguments as received from the client. ``None`` yields ``{}``.
    allowed_keys:
        Keys whose values may be logged, typically the input schema's
        properties. ``None`` allows every key.
    """
    if not arguments:
        return {}

    sanitized: dict[str, Any] = {}
    for key, value in arguments.items():
        if allowed_keys is not None and key not in allowed_keys:
            sanitized[key] = "***"
        elif isinstance(value, str) and len(value) > MAX_LOGGED_STRING:
            sanitized[key] = value[:MAX_LOGGED_STRING] + "..."
        elif isinstance(value, (Mapping, list)):
            sanitized[key] = f"<{type(value).__name__}>"
        else:
            sanitized[key] = value
    return sanitized
