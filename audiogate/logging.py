"""
Rich-enhanced logging configuration for audiogate.

Every module logs through ``logging.getLogger(__name__)``, so configuring
the ``audiogate`` logger here controls all validator output.

.. warning::
    With ``rich_tracebacks=True`` this installs Rich's global traceback
    handler, which is right for the CLI but not for a host application
    embedding the validator. Libraries should pass ``rich_tracebacks=False``.

Usage:
    from audiogate.logging import configure_logging, get_logger

    configure_logging(level="info", use_rich=True)
    logger = get_logger("quality")
    logger.info("[green]✓[/green] Track validated")
"""

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from rich.console import Console
from rich.logging import RichHandler
from rich.traceback import install as install_rich_traceback

from .utils.ui import AUDIOGATE_THEME

if TYPE_CHECKING:
    from .config import LoggingSettings

# Logs go to stderr so report output on stdout stays machine-readable
log_console = Console(theme=AUDIOGATE_THEME, stderr=True)

# All package loggers live under this name
MODULE_LOGGER_NAME = "audiogate"

LogLevel = Literal["debug", "info", "warning", "error", "critical"]

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


def _get_log_level(level: LogLevel | str | int) -> int:
    """Convert level string to logging constant."""
    if isinstance(level, int):
        return level
    return _LEVELS.get(level.lower(), logging.INFO)


def configure_logging(
    level: LogLevel | str | int = "info",
    console: bool = True,
    file_path: str | Path | None = None,
    file_log_level: LogLevel | str | int | None = None,
    use_rich: bool = True,
    rich_tracebacks: bool = True,
    show_path: bool = False,
) -> logging.Logger:
    """
    Configure the ``audiogate`` logger.

    Args:
        level: Log level for console output
        console: Whether to enable console logging
        file_path: Optional file path for file logging
        file_log_level: Log level for file output (defaults to level)
        use_rich: Use RichHandler for the console
        rich_tracebacks: Install Rich's global traceback handler
        show_path: Show file path in console logs

    Returns:
        Configured logger instance
    """
    log_level = _get_log_level(level)
    file_level = _get_log_level(file_log_level) if file_log_level else log_level

    if use_rich and rich_tracebacks:
        install_rich_traceback(console=log_console, show_locals=False, extra_lines=3, word_wrap=True)

    logger = logging.getLogger(MODULE_LOGGER_NAME)
    logger.setLevel(min(log_level, file_level) if file_path else log_level)
    logger.handlers.clear()

    if console:
        console_handler: logging.Handler
        if use_rich:
            console_handler = RichHandler(
                level=log_level,
                console=log_console,
                show_path=show_path,
                rich_tracebacks=rich_tracebacks,
                markup=True,
                log_time_format="[%X]",
                keywords=["LUFS", "dBTP", "ffmpeg", "rejected", "boptone_only", "distribution_ready"],
            )
        else:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(log_level)
            console_handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        logger.addHandler(console_handler)

    # File output stays plain text so it can be grepped
    if file_path:
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setLevel(file_level)
        file_handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        logger.addHandler(file_handler)

    return logger


def configure_from_settings(settings: "LoggingSettings", level: LogLevel | str | None = None) -> logging.Logger:
    """Configure logging from LoggingSettings, optionally overriding the level."""
    return configure_logging(
        level=level or settings.level,
        file_path=settings.file_path,
        use_rich=settings.use_rich,
    )


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get a logger under the ``audiogate`` hierarchy.

    Example:
        logger = get_logger("cli")  # audiogate.cli
    """
    if name:
        return logging.getLogger(f"{MODULE_LOGGER_NAME}.{name}")
    return logging.getLogger(MODULE_LOGGER_NAME)


__all__ = [
    "configure_from_settings",
    "configure_logging",
    "get_logger",
    "MODULE_LOGGER_NAME",
]
