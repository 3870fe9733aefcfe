"""
Common utilities shared across CLI commands.

This module provides:
- The validation service factory
- Shared console and UI instances
- Reading upload files from disk
"""

from pathlib import Path

import typer

from audiogate.config import get_settings
from audiogate.logging import get_logger
from audiogate.quality import AudioValidationService, FfmpegLoudnessMeasurer, get_validation_service
from audiogate.utils.ui import Icons, console, ui

from .async_utils import run_async

__all__ = [
    "console",
    "ffmpeg_available",
    "get_service",
    "Icons",
    "logger",
    "read_upload",
    "run_async",
    "ui",
]

logger = get_logger("cli")


def get_service() -> AudioValidationService:
    """Get the validation service bound to the current settings."""
    return get_validation_service()


def ffmpeg_available() -> bool:
    """Whether the configured ffmpeg binary can be found."""
    return FfmpegLoudnessMeasurer.from_config(get_settings().loudness).is_available()


def read_upload(path: Path) -> bytes:
    """Read a file to validate.

    Raises:
        typer.Exit: If the file cannot be read
    """
    try:
        return path.read_bytes()
    except OSError as e:
        ui.error(f"Cannot read {path}", details=str(e))
        raise typer.Exit(2) from e
