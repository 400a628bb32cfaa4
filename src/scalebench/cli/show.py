# Copyright (c) Syntropy Systems
"""scalebench show command."""
from __future__ import annotations

from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console

from scalebench.report import (
    build_diagnostic_table,
    build_machine_table,
    format_report_text,
    load_report,
)

console = Console()


def show(
    report_file: Path = typer.Argument(
        ...,
        help="Report JSON written by 'scalebench bench'",
        exists=True,
    ),
    text: bool = typer.Option(
        False,
        "--text", "-t",
        help="Print the plain-text rendering instead of tables",
    ),
) -> None:
    """Display a saved benchmark report."""
    try:
        report = load_report(report_file)
    except (OSError, ValidationError) as e:
        console.print(f"[red]Error loading report:[/red] {e}")
        raise typer.Exit(1) from e

    if text:
        console.print(format_report_text(report), markup=False, highlight=False)
        return

    console.print(f"[bold]Report[/bold] [dim]{report.created_at}[/dim]")
    if report.machine:
        console.print(build_machine_table(report.machine))

    for record in report.diagnostics:
        console.print()
        console.print(
            build_diagnostic_table(
                record.to_diagnostic(),
                title=f"{record.name} ({record.total_work:,} items, {record.backend})",
            )
        )

    if report.total_seconds is not None:
        console.print(f"\n[dim]Total time:[/dim] {report.total_seconds:,.0f}s")
