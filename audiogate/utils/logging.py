"""
Shared logging helpers with Rich markup.

Messages get a coloured status icon; they render as markup through the
RichHandler installed by ``audiogate.logging.configure_logging``.
"""

import logging
from typing import Any

DEFAULT_LOGGER_NAME = "audiogate"


def _resolve(logger: logging.Logger | None, logger_name: str | None) -> logging.Logger:
    if logger is not None:
        return logger
    return logging.getLogger(logger_name or DEFAULT_LOGGER_NAME)


def log_warning(
    message: str,
    *args: Any,
    logger_name: str | None = None,
    logger: logging.Logger | None = None,
    **kwargs: Any,
) -> None:
    """Log a warning message with yellow warning sign."""
    _resolve(logger, logger_name).warning("[yellow]⚠[/yellow] " + message, *args, **kwargs)
