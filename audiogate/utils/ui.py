"""
Rich UI utilities for console output.

Usage:
    from audiogate.utils.ui import console, ui

    ui.success("Track accepted")
    ui.error("Upload rejected", details="DURATION_TOO_SHORT")

    with ui.spinner("Measuring loudness..."):
        result = run_async(service.validate_for_distribution(data, name))

    console.print(ui.tier_badge(result.quality_tier))
"""

from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from rich.box import DOUBLE, ROUNDED, SIMPLE
from rich.console import Console
from rich.panel import Panel
from rich.rule import Rule
from rich.status import Status
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

from ..quality.models import IssueSeverity, QualityTier

# =============================================================================
# Custom Theme
# =============================================================================

AUDIOGATE_THEME = Theme(
    {
        # Status colors
        "success": "bold green",
        "error": "bold red",
        "warning": "bold yellow",
        "info": "bold cyan",
        "debug": "dim",
        "muted": "dim white",
        # UI elements
        "header": "bold magenta",
        "subheader": "bold blue",
        "accent": "bold cyan",
        # Quality tiers
        "tier.boptone_premium": "bold bright_blue",
        "tier.distribution_ready": "bold green",
        "tier.boptone_only": "yellow",
        "tier.rejected": "bold red",
        # Issue severities
        "severity.error": "red",
        "severity.warning": "yellow",
        "severity.info": "cyan",
        # Data types
        "duration": "green",
        "loudness": "magenta",
    }
)

# =============================================================================
# Global Console
# =============================================================================

console = Console(theme=AUDIOGATE_THEME, highlight=True, emoji=True)


class Icons:
    """Unicode icons for consistent visual feedback."""

    SUCCESS = "✓"
    ERROR = "✗"
    WARNING = "⚠"
    INFO = "ℹ"
    BULLET = "•"
    ARROW_RIGHT = "→"

    MUSIC = "🎵"
    HEADPHONES = "🎧"
    SPEAKER = "🔊"
    IMAGE = "🖼️"
    FILE = "📄"
    GEAR = "⚙️"
    PREMIUM = "💎"


SEVERITY_ICONS = {
    IssueSeverity.ERROR: Icons.ERROR,
    IssueSeverity.WARNING: Icons.WARNING,
    IssueSeverity.INFO: Icons.INFO,
}


class UIHelper:
    """Central UI helper for consistent visual output."""

    def __init__(self, console: Console):
        self.console = console
        self.icons = Icons

    # -------------------------------------------------------------------------
    # Status Messages
    # -------------------------------------------------------------------------

    def _status(self, style: str, prefix: str, message: str, details: str | None) -> None:
        text = Text()
        text.append(f"{prefix} ", style=style)
        text.append_text(Text.from_markup(message))
        if details:
            text.append(f"\n   {details}", style="muted")
        self.console.print(text)

    def success(self, message: str, details: str | None = None) -> None:
        """Print a success message."""
        self._status("success", Icons.SUCCESS, message, details)

    def error(self, message: str, details: str | None = None) -> None:
        """Print an error message."""
        self._status("error", Icons.ERROR, f"[error]{message}[/error]", details)

    def warning(self, message: str, details: str | None = None) -> None:
        """Print a warning message."""
        self._status("warning", Icons.WARNING, message, details)

    def info(self, message: str, details: str | None = None) -> None:
        """Print an info message."""
        self._status("info", Icons.INFO, message, details)

    def muted(self, message: str) -> None:
        self.console.print(f"[muted]{message}[/muted]")

    # -------------------------------------------------------------------------
    # Headers & Sections
    # -------------------------------------------------------------------------

    def header(self, title: str, subtitle: str | None = None, icon: str | None = None) -> None:
        """Print a styled header banner."""
        content = Text()
        content.append(f"{icon} {title}" if icon else title, style="header")
        if subtitle:
            content.append(f"\n{subtitle}", style="muted")
        self.console.print()
        self.console.print(Panel(content, box=DOUBLE, border_style="header", padding=(1, 2)))
        self.console.print()

    def section(self, title: str, icon: str | None = None) -> None:
        """Print a section header with rule."""
        label = f"{icon} {title}" if icon else title
        self.console.print()
        self.console.print(Rule(label, style="subheader", align="left"))

    @contextmanager
    def spinner(self, message: str, spinner_name: str = "dots") -> Generator[Status]:
        """Context manager for spinner with status updates."""
        with self.console.status(f"[info]{message}[/info]", spinner=spinner_name) as status:
            yield status

    # -------------------------------------------------------------------------
    # Tables & Panels
    # -------------------------------------------------------------------------

    def create_table(
        self,
        title: str | None = None,
        columns: list[str] | None = None,
        show_lines: bool = False,
        box_style: Any = ROUNDED,
    ) -> Table:
        """Create a styled table."""
        table = Table(
            title=title,
            show_lines=show_lines,
            box=box_style,
            header_style="bold cyan",
            border_style="dim",
        )
        for col in columns or []:
            table.add_column(col)
        return table

    def key_value_table(self, data: dict[str, Any], title: str | None = None) -> Table:
        """Create a two-column key-value table."""
        table = Table(title=title, show_header=False, box=SIMPLE, padding=(0, 1))
        table.add_column("Key", style="bold cyan", no_wrap=True)
        table.add_column("Value")
        for key, value in data.items():
            table.add_row(key, str(value) if value is not None else "[dim]N/A[/dim]")
        return table

    def panel(self, content: str | Text, title: str | None = None, style: str = "cyan") -> Panel:
        """Create a styled panel."""
        return Panel(content, title=title, border_style=style, box=ROUNDED, padding=(1, 2))

    # -------------------------------------------------------------------------
    # Specialized Displays
    # -------------------------------------------------------------------------

    def tier_badge(self, tier: QualityTier) -> Text:
        """Create a quality tier badge."""
        return Text(f"{tier.emoji} {tier.label.upper()}", style=f"tier.{tier.value_name}")

    def severity_label(self, severity: IssueSeverity) -> Text:
        icon = SEVERITY_ICONS.get(severity, Icons.BULLET)
        return Text(f"{icon} {severity.value}", style=f"severity.{severity.value}")

    def loudness_display(self, value: float | None, unit: str) -> Text:
        if value is None:
            return Text("n/a", style="muted")
        return Text(f"{value:.1f} {unit}", style="loudness")

    def readiness(self, ready: bool) -> Text:
        if ready:
            return Text(Icons.SUCCESS, style="success")
        return Text(Icons.ERROR, style="error")


ui = UIHelper(console)

__all__ = [
    "AUDIOGATE_THEME",
    "console",
    "Icons",
    "SEVERITY_ICONS",
    "ui",
    "UIHelper",
]
