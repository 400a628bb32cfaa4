# Copyright (c) Syntropy Systems
"""scalebench bench command - the full two-workload benchmark."""
from __future__ import annotations

import time
from dataclasses import replace
from pathlib import Path

import typer
from rich.console import Console

from scalebench.cli.sweep import (
    ABORTED_EXIT_CODE,
    check_repetitions,
    load_config_or_exit,
    run_diagnostic,
)
from scalebench.config import validate_backend
from scalebench.diagnostic import sweep_levels
from scalebench.errors import ScalebenchError
from scalebench.machine import collect_machine_info
from scalebench.models.report import BenchmarkReport, DiagnosticRecord
from scalebench.report import build_diagnostic_table, build_machine_table, save_report
from scalebench.workload import PRESETS

console = Console()

QUICK_DIVISOR = 10


def bench(
    output_dir: Path | None = typer.Option(
        None,
        "--output-dir", "-o",
        help="Directory for the report files (default from config)",
    ),
    backend: str | None = typer.Option(
        None,
        "--backend", "-b",
        help="Executor backend: thread, process or sequential",
    ),
    quick: bool = typer.Option(
        False,
        "--quick",
        help=f"Run 1/{QUICK_DIVISOR} of the work per run",
    ),
    max_level: int | None = typer.Option(
        None,
        "--max-level",
        help="Highest parallelism level to sweep",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet", "-q",
        help="Only print samples and the final tables",
    ),
) -> None:
    """Run the heavy and light pi workloads and save a report.

    The heavy workload computes 100 digits per item, the light one 25 digits
    over many more items, which exposes scheduling overhead. Results are
    written as JSON and plain text.

    Example:
        scalebench bench --quick -o results/

    """
    started = time.perf_counter()
    config = load_config_or_exit()
    if backend is not None:
        config.backend = backend
    check_repetitions(config.repetitions)
    try:
        _ = validate_backend(config.backend)
    except ScalebenchError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    console.print("[bold]Collecting machine information...[/bold]")
    machine = collect_machine_info()
    console.print(build_machine_table(machine.to_dict()))

    levels = sweep_levels(machine.logical_cpus, config.level_multiplier, max_level)
    report = BenchmarkReport(machine=machine.to_dict())

    for full_preset in PRESETS:
        preset = full_preset
        if quick:
            preset = replace(
                full_preset,
                total_work=max(1, full_preset.total_work // QUICK_DIVISOR),
            )
        console.print(
            f"\n[bold]{preset.name.capitalize()} workload:[/bold] "
            f"{preset.total_work:,} items of {preset.digits} digits"
        )
        try:
            diagnostic = run_diagnostic(preset, config, levels, quiet)
        except (ScalebenchError, ValueError) as e:
            console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(1) from e

        if diagnostic is None:
            console.print("\n[yellow]Benchmark stopped, no report written[/yellow]")
            raise typer.Exit(ABORTED_EXIT_CODE)

        console.print()
        console.print(
            build_diagnostic_table(diagnostic, title=f"{preset.name} workload")
        )
        report.diagnostics.append(
            DiagnosticRecord.from_diagnostic(
                diagnostic,
                name=preset.name,
                total_work=preset.total_work,
                repetitions=config.repetitions,
                backend=config.backend,
                digits=preset.digits,
            )
        )

    report.total_seconds = time.perf_counter() - started
    target_dir = output_dir if output_dir is not None else Path(config.results_dir)
    try:
        report_path = save_report(report, target_dir)
    except OSError as e:
        console.print(f"[red]Error writing report:[/red] {e}")
        raise typer.Exit(1) from e

    console.print(f"\n[green]All done in {report.total_seconds:,.0f}s[/green]")
    console.print(f"  [dim]report:[/dim] {report_path}")
    console.print(f"  [dim]text:[/dim] {report_path.with_suffix('.txt')}")
