# Copyright (c) Syntropy Systems
"""Rendering and persistence of benchmark results."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

from rich.table import Table

from scalebench.models.report import BenchmarkReport

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from scalebench.diagnostic import Diagnostic
    from scalebench.models.base import JSONValue

REPORT_PREFIX = "scalebench"


def build_diagnostic_table(diagnostic: Diagnostic, title: str | None = None) -> Table:
    """Build the speed-up table for one diagnostic."""
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Parallelism", justify="right")
    table.add_column("Time (s)", justify="right")
    table.add_column("Ideal (s)", justify="right")
    table.add_column("Factor", justify="right")
    table.add_column("Acc. error", justify="right")

    if diagnostic.automatic is not None:
        table.add_row(
            "[dim]auto[/dim]",
            f"{diagnostic.automatic.average_seconds:.1f}",
            "",
            "",
            "",
        )
    table.add_row("1", f"{diagnostic.serial.average_seconds:.1f}", "", "", "")

    for row in diagnostic.rows:
        # Highlight where scaling starts to break down
        error = row.squared_error
        style = "green" if error < 1.0 else "yellow" if error < 4.0 else "red"
        table.add_row(
            str(row.level),
            f"{row.measured_seconds:.1f}",
            f"{row.ideal_seconds:.1f}",
            f"[{style}]{row.speedup_factor:.2f}[/{style}]",
            f"{row.cumulative_squared_error:.2f}",
        )

    return table


def build_machine_table(machine: Mapping[str, JSONValue]) -> Table:
    """Build a two-column table of machine facts."""
    table = Table(title="Machine", show_header=False)
    table.add_column("Key", style="dim")
    table.add_column("Value")
    for key, value in machine.items():
        table.add_row(key.replace("_", " "), str(value))
    return table


def format_diagnostic_text(diagnostic: Diagnostic) -> str:
    """Semicolon-separated plain-text table, one line per level."""
    lines = [" Parallelism;  Time (s); Ideal (s); Factor;    Acc. error"]
    if diagnostic.automatic is not None:
        auto_time = f"{diagnostic.automatic.average_seconds:,.1f}"
        lines.append(f"{'Auto':<12};{auto_time:>10};{'':10};{'':6};{'':14}")
    serial_time = f"{diagnostic.serial.average_seconds:,.1f}"
    lines.append(f"{1:>12};{serial_time:>10};{'':10};{'':6};{'':14}")

    for row in diagnostic.rows:
        measured = f"{row.measured_seconds:,.1f}"
        ideal = f"{row.ideal_seconds:,.1f}"
        factor = f"{row.speedup_factor:,.2f}"
        error = f"{row.cumulative_squared_error:,.2f}"
        lines.append(
            f"{row.level:>12};{measured:>10};{ideal:>10};{factor:>6};{error:>14}"
        )

    return "\n".join(lines) + "\n"


def format_report_text(report: BenchmarkReport) -> str:
    """Plain-text rendering of a whole report."""
    parts = [f"scalebench report ({report.created_at})", "", "Machine:"]
    parts.extend(f"{key:<24};{value}" for key, value in report.machine.items())

    for record in report.diagnostics:
        parts.append("")
        header = f"{record.name} ({record.total_work:,} items"
        if record.digits is not None:
            header += f", {record.digits} digits"
        header += f", {record.repetitions} repetitions, {record.backend} backend):"
        parts.append(header)
        parts.append(format_diagnostic_text(record.to_diagnostic()).rstrip("\n"))

    if report.total_seconds is not None:
        parts.extend(["", f"All done in {report.total_seconds:,.0f}s."])
    return "\n".join(parts) + "\n"


def report_stem(now: datetime | None = None) -> str:
    """File name (without suffix) for a report written at ``now``."""
    if now is None:
        now = datetime.now(timezone.utc)
    return f"{REPORT_PREFIX}.{now:%Y%m%d.%H%M}"


def save_report(
    report: BenchmarkReport,
    directory: Path,
    now: datetime | None = None,
) -> Path:
    """Write the report as JSON plus a plain-text twin.

    Returns the path of the JSON file.
    """
    directory.mkdir(parents=True, exist_ok=True)
    stem = report_stem(now)
    json_path = directory / f"{stem}.json"
    text_path = directory / f"{stem}.txt"

    _ = json_path.write_text(report.model_dump_json(indent=2) + "\n", encoding="utf-8")
    _ = text_path.write_text(format_report_text(report), encoding="utf-8")
    return json_path


def load_report(path: Path) -> BenchmarkReport:
    """Read a report written by save_report."""
    return BenchmarkReport.model_validate_json(path.read_text(encoding="utf-8"))
