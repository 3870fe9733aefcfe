"""
Output formatter implementations for validation results.

Provides a plugin-based output formatting system with support for:
- Table (Rich console report)
- JSON (full result document)
- CSV (one row per issue)

Usage:
    formatter = get_formatter(OutputFormat.JSON, output=Path("report.json"))
    formatter.format_result(result, filename="master.wav")
    formatter.output()
"""

import csv
import json
import sys
from abc import ABC, abstractmethod
from enum import Enum
from io import StringIO
from pathlib import Path
from typing import Any, TextIO

from rich.box import ROUNDED
from rich.console import Console, Group
from rich.table import Table

from ..quality.models import AudioValidationResult
from ..utils.ui import AUDIOGATE_THEME, UIHelper, console as default_console

# Column order for issue rows
ISSUE_COLUMNS = ["filename", "quality_tier", "code", "severity", "field", "message", "value", "requirement"]


class OutputFormat(str, Enum):
    """Supported output formats."""

    TABLE = "table"
    JSON = "json"
    CSV = "csv"


def issue_rows(result: AudioValidationResult, filename: str = "") -> list[dict[str, Any]]:
    """
    Flatten a result into one dict per issue.

    A result without issues still yields one row so the verdict is recorded.
    """
    tier = result.quality_tier.value_name
    if not result.issues:
        return [{"filename": filename, "quality_tier": tier}]
    return [
        {
            "filename": filename,
            "quality_tier": tier,
            "code": issue.code,
            "severity": issue.severity.value,
            "field": issue.field,
            "message": issue.message,
            "value": issue.value,
            "requirement": issue.requirement,
        }
        for issue in result.issues
    ]


def result_document(result: AudioValidationResult, filename: str = "") -> dict[str, Any]:
    """JSON-ready representation of a result."""
    document: dict[str, Any] = {"filename": filename}
    document.update(result.model_dump(mode="json"))
    return document


class OutputFormatter(ABC):
    """
    Base class for output formatters.

    Formatters convert a validation result into a specific output format
    and handle output to console, file, or stream.
    """

    def __init__(
        self,
        output: Path | TextIO | None = None,
        console: Console | None = None,
    ):
        """
        Initialize formatter.

        Args:
            output: File path or stream to write to (None = stdout/console)
            console: Rich console instance (for table formatter)
        """
        self.output_target = output
        self.console = console or default_console

    @abstractmethod
    def format_result(self, result: AudioValidationResult, filename: str = "") -> "OutputFormatter":
        """Format a validation result; returns self for chaining."""
        pass

    @abstractmethod
    def output(self) -> None:
        """Write formatted output to target (console, file, or stream)."""
        pass

    def _get_output_stream(self) -> tuple[TextIO, bool]:
        """Get output stream and whether it should be closed."""
        if self.output_target is None:
            return sys.stdout, False
        elif isinstance(self.output_target, Path):
            return open(self.output_target, "w", newline="", encoding="utf-8"), True  # noqa: SIM115
        else:
            return self.output_target, False

    def _write_text(self, text: str) -> None:
        stream, should_close = self._get_output_stream()
        try:
            stream.write(text)
        finally:
            if should_close:
                stream.close()


class TableFormatter(OutputFormatter):
    """
    Rich report for console output.

    Shows the verdict, technical profile, loudness measurement, issues and
    recommendations.
    """

    def __init__(
        self,
        output: Path | TextIO | None = None,
        console: Console | None = None,
        box: Any = ROUNDED,
    ):
        super().__init__(output, console)
        self.box = box
        self._renderable: Group | None = None

    def format_result(self, result: AudioValidationResult, filename: str = "") -> "TableFormatter":
        ui = UIHelper(self.console)
        tier_style = f"tier.{result.quality_tier.value_name}"
        parts: list[Any] = [
            ui.tier_badge(result.quality_tier),
            ui.panel(result.summary, title=filename or None, style=tier_style),
        ]

        profile = result.technical_profile
        if profile is not None:
            parts.append(
                ui.key_value_table(
                    {
                        "Format": profile.format,
                        "Codec": profile.codec,
                        "Size": f"{profile.file_size_mb:.1f} MB",
                        "Duration": profile.duration_display,
                        "Sample rate": f"{profile.sample_rate_hz:,} Hz",
                        "Bit depth": f"{profile.bit_depth}-bit" if profile.bit_depth else None,
                        "Channels": profile.channel_layout,
                        "Bitrate": f"{profile.bitrate_kbps} kbps" if profile.bitrate_kbps else None,
                        "Lossless": "yes" if profile.is_lossless else "no",
                        "Encoder": profile.encoder,
                    },
                    title="Technical profile",
                )
            )

        report = result.loudness_report
        if report is not None:
            loudness = Table(title="Loudness", box=self.box)
            loudness.add_column("Integrated")
            loudness.add_column("True peak")
            loudness.add_column("LRA")
            loudness.add_row(
                ui.loudness_display(report.integrated_lufs, "LUFS"),
                ui.loudness_display(report.true_peak_dbtp, "dBTP"),
                ui.loudness_display(report.loudness_range, "LU"),
            )
            platforms = Table(title="Platform readiness", box=self.box)
            for name in report.platform_readiness:
                platforms.add_column(name.title(), justify="center")
            if report.platform_readiness:
                platforms.add_row(*(ui.readiness(ready) for ready in report.platform_readiness.values()))
            parts.extend([loudness, platforms])

        if result.issues:
            issues = Table(title="Issues", box=self.box, show_lines=True)
            issues.add_column("Severity", no_wrap=True)
            issues.add_column("Code", style="bold")
            issues.add_column("Message")
            issues.add_column("Requirement", style="muted")
            for issue in result.issues:
                issues.add_row(ui.severity_label(issue.severity), issue.code, issue.message, issue.requirement or "")
            parts.append(issues)

        if result.recommendations:
            lines = "\n".join(f"{ui.icons.ARROW_RIGHT} {rec}" for rec in result.recommendations)
            parts.append(ui.panel(lines, title="Recommendations", style="info"))

        self._renderable = Group(*parts)
        return self

    def output(self) -> None:
        """Output report to console or file."""
        if self._renderable is None:
            return

        if self.output_target is None:
            self.console.print(self._renderable)
        elif isinstance(self.output_target, Path):
            # Export to file (as plain text)
            with open(self.output_target, "w", encoding="utf-8") as f:
                Console(file=f, theme=AUDIOGATE_THEME, force_terminal=False, width=200).print(self._renderable)
        else:
            Console(file=self.output_target, theme=AUDIOGATE_THEME, force_terminal=False, width=200).print(self._renderable)


class JSONFormatter(OutputFormatter):
    """
    JSON formatter for structured data output.

    Produces the full result document, suitable for piping to other tools.
    """

    def __init__(
        self,
        output: Path | TextIO | None = None,
        console: Console | None = None,
        indent: int = 2,
        compact: bool = False,
    ):
        super().__init__(output, console)
        self.indent = None if compact else indent
        self._formatted: str = ""

    def format_result(self, result: AudioValidationResult, filename: str = "") -> "JSONFormatter":
        self._formatted = json.dumps(result_document(result, filename), indent=self.indent, default=str)
        return self

    def output(self) -> None:
        self._write_text(self._formatted + "\n")


class CSVFormatter(OutputFormatter):
    """
    CSV formatter: one row per issue.

    Produces standard CSV that can be opened in a spreadsheet.
    """

    def __init__(
        self,
        output: Path | TextIO | None = None,
        console: Console | None = None,
        delimiter: str = ",",
        include_header: bool = True,
    ):
        super().__init__(output, console)
        self.delimiter = delimiter
        self.include_header = include_header
        self._formatted: str = ""

    def format_result(self, result: AudioValidationResult, filename: str = "") -> "CSVFormatter":
        string_buffer = StringIO()
        writer = csv.DictWriter(string_buffer, fieldnames=ISSUE_COLUMNS, delimiter=self.delimiter, restval="")
        if self.include_header:
            writer.writeheader()
        for row in issue_rows(result, filename):
            writer.writerow({key: "" if value is None else value for key, value in row.items()})
        self._formatted = string_buffer.getvalue()
        return self

    def output(self) -> None:
        self._write_text(self._formatted)


def get_formatter(
    format: OutputFormat | str,
    output: Path | TextIO | None = None,
    console: Console | None = None,
    **kwargs: Any,
) -> OutputFormatter:
    """
    Factory function to get appropriate formatter.

    Args:
        format: Output format (table, json, csv)
        output: Output target (None = stdout/console)
        console: Rich console instance
        **kwargs: Additional formatter-specific options

    Raises:
        ValueError: If format is not supported
    """
    if isinstance(format, str):
        try:
            format = OutputFormat(format.lower())
        except ValueError:
            raise ValueError(f"Unsupported output format: {format}") from None

    formatters: dict[OutputFormat, type[OutputFormatter]] = {
        OutputFormat.TABLE: TableFormatter,
        OutputFormat.JSON: JSONFormatter,
        OutputFormat.CSV: CSVFormatter,
    }
    return formatters[format](output=output, console=console, **kwargs)
