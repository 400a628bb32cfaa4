# Copyright (c) Syntropy Systems
"""Tests for report models, rendering and persistence."""

from datetime import datetime, timezone
from pathlib import Path

import pytest
from rich.console import Console

from scalebench.diagnostic import AggregatedSample, Diagnostic, diagnose
from scalebench.models.report import BenchmarkReport, DiagnosticRecord
from scalebench.report import (
    build_diagnostic_table,
    format_diagnostic_text,
    format_report_text,
    load_report,
    report_stem,
    save_report,
)


@pytest.fixture
def diagnostic() -> Diagnostic:
    return diagnose(
        [
            AggregatedSample(0, 2.6),
            AggregatedSample(1, 10.0),
            AggregatedSample(2, 5.5),
            AggregatedSample(4, 3.0),
        ]
    )


@pytest.fixture
def report(diagnostic: Diagnostic) -> BenchmarkReport:
    record = DiagnosticRecord.from_diagnostic(
        diagnostic,
        name="heavy",
        total_work=1000,
        repetitions=5,
        backend="process",
        digits=100,
    )
    return BenchmarkReport(
        machine={"logical_cpus": 4, "system": "Linux"},
        diagnostics=[record],
        total_seconds=42.4,
    )


class TestDiagnosticRecord:
    """Tests for the pydantic report models."""

    def test_round_trip(self, diagnostic: Diagnostic) -> None:
        """A record rebuilds the diagnostic it was made from."""
        record = DiagnosticRecord.from_diagnostic(
            diagnostic, name="x", total_work=10, repetitions=3, backend="thread"
        )

        assert record.to_diagnostic() == diagnostic

    def test_without_automatic(self) -> None:
        """The automatic level is optional."""
        diagnostic = diagnose([AggregatedSample(1, 4.0), AggregatedSample(2, 2.0)])
        record = DiagnosticRecord.from_diagnostic(
            diagnostic, name="x", total_work=10, repetitions=3, backend="thread"
        )

        assert record.automatic_seconds is None
        assert record.to_diagnostic().automatic is None

    def test_created_at_is_utc(self) -> None:
        assert BenchmarkReport().created_at.endswith("Z")


class TestFormatting:
    """Tests for table and text rendering."""

    def test_text_table(self, diagnostic: Diagnostic) -> None:
        """One header, then auto, serial and one line per level."""
        lines = format_diagnostic_text(diagnostic).splitlines()

        assert lines[0].startswith(" Parallelism;")
        assert lines[1].startswith("Auto")
        assert lines[2].split(";")[0].strip() == "1"
        assert [line.split(";")[0].strip() for line in lines[3:]] == ["2", "4"]
        assert lines[-1].split(";")[3].strip() == "3.33"
        assert all(line.count(";") == 4 for line in lines)

    def test_report_text(self, report: BenchmarkReport) -> None:
        text = format_report_text(report)

        assert "heavy (1,000 items, 100 digits, 5 repetitions, process backend):" in text
        assert "All done in 42s." in text

    def test_rich_table(self, diagnostic: Diagnostic) -> None:
        """The rich table has a row per level including the baselines."""
        table = build_diagnostic_table(diagnostic, title="Scalability")
        console = Console(width=120, record=True)
        console.print(table)

        assert table.row_count == 4
        assert "Scalability" in console.export_text()


class TestPersistence:
    """Tests for saving and loading reports."""

    def test_report_stem(self) -> None:
        now = datetime(2024, 3, 5, 14, 7, tzinfo=timezone.utc)

        assert report_stem(now) == "scalebench.20240305.1407"

    def test_save_and_load(self, report: BenchmarkReport, temp_dir: Path) -> None:
        """JSON and text files are written side by side."""
        now = datetime(2024, 3, 5, 14, 7, tzinfo=timezone.utc)

        path = save_report(report, temp_dir / "out", now=now)

        assert path == temp_dir / "out" / "scalebench.20240305.1407.json"
        assert path.with_suffix(".txt").read_text() == format_report_text(report)
        assert load_report(path) == report

    def test_unknown_fields_are_ignored(self, report: BenchmarkReport) -> None:
        """Reports with extra fields still load."""
        data = report.model_dump()
        data["written_by"] = "a newer scalebench"

        assert BenchmarkReport.model_validate(data) == report
