"""
Output formatting plugin architecture.

Renders validation results as a Rich report, JSON, or CSV.
"""

from .formatters import (
    CSVFormatter,
    JSONFormatter,
    OutputFormat,
    OutputFormatter,
    TableFormatter,
    get_formatter,
    issue_rows,
    result_document,
)

__all__ = [
    "CSVFormatter",
    "JSONFormatter",
    "OutputFormat",
    "OutputFormatter",
    "TableFormatter",
    "get_formatter",
    "issue_rows",
    "result_document",
]
