"""
CLI module for the audiogate developer tool.

Subcommands:
- validate: Validate audio, cover art, and run the legacy pre-check
"""

from audiogate.cli.common import console, get_service, ui

__all__ = [
    "console",
    "get_service",
    "ui",
]
