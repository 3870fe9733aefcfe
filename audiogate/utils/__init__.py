"""
Utility modules.
"""

from .logging import log_warning
from .ui import Icons, UIHelper, console, ui

__all__ = [
    "console",
    "ui",
    "Icons",
    "UIHelper",
    # Logging helpers
    "log_warning",
]
