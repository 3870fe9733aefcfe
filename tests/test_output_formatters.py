"""
Tests for output formatters.
"""

import csv
import json
from io import StringIO

import pytest
from rich.console import Console

from audiogate.output import (
    CSVFormatter,
    JSONFormatter,
    OutputFormat,
    TableFormatter,
    get_formatter,
    issue_rows,
    result_document,
)
from audiogate.quality.models import IssueSeverity, LoudnessReport, QualityTier
from audiogate.quality.results import ResultBuilder
from audiogate.quality.rules import Findings
from audiogate.utils.ui import AUDIOGATE_THEME


@pytest.fixture
def rejected_result():
    findings = Findings()
    findings.add(
        "DURATION_TOO_SHORT",
        IssueSeverity.ERROR,
        "duration",
        "Track duration (12.0s) is below the 30-second minimum required by most DSPs.",
        value=12.0,
        requirement="Minimum duration: 30 seconds",
        recommendation="Tracks shorter than 30 seconds are rejected.",
    )
    findings.add("MONO_AUDIO", IssueSeverity.WARNING, "channels", "This track is mono.", value=1)
    return ResultBuilder().build(findings)


@pytest.fixture
def clean_result():
    report = LoudnessReport(
        integrated_lufs=-14.0,
        true_peak_dbtp=-1.5,
        loudness_range=5.0,
        spotify_ready=True,
        platform_readiness={"spotify": True, "apple": True},
    )
    return ResultBuilder().build(Findings(), loudness_report=report)


class TestOutputFormat:
    """Tests for OutputFormat enum."""

    def test_values(self):
        assert OutputFormat.TABLE.value == "table"
        assert OutputFormat.JSON.value == "json"
        assert OutputFormat.CSV.value == "csv"


class TestGetFormatter:
    """Tests for get_formatter factory function."""

    def test_get_table_formatter(self):
        assert isinstance(get_formatter(OutputFormat.TABLE), TableFormatter)

    def test_get_formatter_by_string(self):
        assert isinstance(get_formatter("json"), JSONFormatter)

    def test_get_formatter_case_insensitive(self):
        assert isinstance(get_formatter("CSV"), CSVFormatter)

    def test_get_formatter_invalid_format(self):
        with pytest.raises(ValueError, match="Unsupported output format"):
            get_formatter("xml")

    def test_kwargs_passed_through(self):
        formatter = get_formatter("json", compact=True)
        assert formatter.indent is None


class TestIssueRows:
    """Tests for issue_rows and result_document."""

    def test_one_row_per_issue(self, rejected_result):
        """Test each issue becomes a row carrying the tier."""
        rows = issue_rows(rejected_result, "intro.wav")
        assert [row["code"] for row in rows] == ["DURATION_TOO_SHORT", "MONO_AUDIO"]
        assert all(row["quality_tier"] == "rejected" for row in rows)
        assert rows[0]["severity"] == "error"

    def test_clean_result_single_row(self, clean_result):
        """Test a result without issues still yields its verdict."""
        assert issue_rows(clean_result, "master.wav") == [
            {"filename": "master.wav", "quality_tier": "distribution_ready"}
        ]

    def test_result_document(self, clean_result):
        """Test the document is JSON-ready and starts with the filename."""
        document = result_document(clean_result, "master.wav")
        assert list(document)[0] == "filename"
        assert document["quality_tier"] == "distribution_ready"
        assert document["loudness_report"]["is_clipping"] is False


class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_output_to_stream(self, rejected_result):
        stream = StringIO()
        JSONFormatter(output=stream).format_result(rejected_result, "intro.wav").output()

        data = json.loads(stream.getvalue())
        assert data["filename"] == "intro.wav"
        assert data["is_uploadable"] is False
        assert data["errors"][0]["code"] == "DURATION_TOO_SHORT"
        assert data["recommendations"] == ["Tracks shorter than 30 seconds are rejected."]

    def test_output_to_file(self, clean_result, tmp_path):
        path = tmp_path / "report.json"
        JSONFormatter(output=path).format_result(clean_result).output()
        assert json.loads(path.read_text())["quality_tier"] == "distribution_ready"

    def test_compact(self, clean_result):
        stream = StringIO()
        JSONFormatter(output=stream, compact=True).format_result(clean_result).output()
        assert stream.getvalue().count("\n") == 1


class TestCSVFormatter:
    """Tests for CSVFormatter."""

    def test_output_rows(self, rejected_result):
        stream = StringIO()
        CSVFormatter(output=stream).format_result(rejected_result, "intro.wav").output()

        rows = list(csv.DictReader(StringIO(stream.getvalue())))
        assert len(rows) == 2
        assert rows[0]["code"] == "DURATION_TOO_SHORT"
        assert rows[0]["value"] == "12.0"
        assert rows[1]["requirement"] == ""

    def test_without_header(self, rejected_result):
        stream = StringIO()
        CSVFormatter(output=stream, include_header=False).format_result(rejected_result).output()
        assert not stream.getvalue().startswith("filename")

    def test_custom_delimiter(self, clean_result):
        stream = StringIO()
        CSVFormatter(output=stream, delimiter=";").format_result(clean_result, "a.wav").output()
        assert stream.getvalue().splitlines()[1].startswith("a.wav;distribution_ready")


class TestTableFormatter:
    """Tests for TableFormatter."""

    @pytest.fixture
    def console(self):
        return Console(file=StringIO(), theme=AUDIOGATE_THEME, width=160, force_terminal=False)

    def test_rejected_report(self, console, rejected_result):
        TableFormatter(console=console).format_result(rejected_result, "intro.wav").output()
        text = console.file.getvalue()

        assert "REJECTED" in text
        assert "DURATION_TOO_SHORT" in text
        assert "Recommendations" in text

    def test_loudness_report(self, console, clean_result):
        TableFormatter(console=console).format_result(clean_result).output()
        text = console.file.getvalue()

        assert "-14.0 LUFS" in text
        assert "Platform readiness" in text
        assert "Spotify" in text

    def test_output_to_file(self, clean_result, tmp_path):
        path = tmp_path / "report.txt"
        TableFormatter(output=path).format_result(clean_result, "a.wav").output()
        assert "DISTRIBUTION READY" in path.read_text(encoding="utf-8")

    def test_output_before_format_is_noop(self, console):
        TableFormatter(console=console).output()
        assert console.file.getvalue() == ""

    def test_tier_styles_exist(self, console):
        """Test every tier has a theme style."""
        for tier in QualityTier:
            assert console.get_style(f"tier.{tier.value_name}") is not None
