# Copyright (c) Syntropy Systems
"""scalebench sweep command."""
from __future__ import annotations

import typer
from rich.console import Console

from scalebench.cli.progress import graceful_stop, make_message_fn, make_progress_fn
from scalebench.config import ScalebenchConfig, load_config, validate_backend
from scalebench.diagnostic import (
    MIN_SAMPLES_PER_LEVEL,
    Diagnostic,
    Sample,
    sweep_and_diagnose,
    sweep_levels,
)
from scalebench.errors import ScalebenchError
from scalebench.machine import logical_cpu_count
from scalebench.report import build_diagnostic_table
from scalebench.workload import PiWorkload, WorkloadPreset

console = Console()

ABORTED_EXIT_CODE = 130


def load_config_or_exit() -> ScalebenchConfig:
    """Load configuration, turning errors into a clean exit."""
    try:
        return load_config()
    except (ScalebenchError, OSError, ValueError) as e:
        console.print(f"[red]Error loading config:[/red] {e}")
        raise typer.Exit(1) from e


def check_repetitions(repetitions: int) -> None:
    """Refuse sweeps too short for a trimmed mean."""
    if repetitions < MIN_SAMPLES_PER_LEVEL:
        console.print(
            f"[red]Error:[/red] --repetitions must be at least "
            f"{MIN_SAMPLES_PER_LEVEL} (best and worst runs are discarded)"
        )
        raise typer.Exit(1)


def run_diagnostic(
    preset: WorkloadPreset,
    config: ScalebenchConfig,
    levels: list[int],
    quiet: bool = False,
) -> Diagnostic | None:
    """Sweep ``preset`` over ``levels`` and reduce it to a diagnostic.

    Returns None when the user stopped the sweep.
    """
    work_fn = PiWorkload(preset.digits)

    def on_sample(repetition: int, sample: Sample) -> None:
        label = "auto" if sample.level == 0 else str(sample.level)
        console.print(
            f"  [dim]{repetition + 1}/{config.repetitions}[/dim] "
            f"parallelism {label}: [bold]{sample.elapsed_seconds:.2f}s[/bold]"
        )

    with graceful_stop() as stop_event:
        return sweep_and_diagnose(
            work_fn,
            preset.total_work,
            config.repetitions,
            levels,
            ideal_batch_seconds=config.ideal_batch_seconds,
            initial_batch_size=config.initial_batch_size,
            backend=config.backend,
            progress_fn=make_progress_fn(stop_event, preset.total_work, quiet),
            message_fn=make_message_fn(quiet),
            on_sample=on_sample,
        )


def sweep(
    digits: int = typer.Option(
        100,
        "--digits", "-d",
        help="Digits of pi computed per work item",
    ),
    work: int = typer.Option(
        1000,
        "--work", "-w",
        help="Work items per run",
    ),
    repetitions: int | None = typer.Option(
        None,
        "--repetitions", "-r",
        help="Runs per parallelism level (default from config)",
    ),
    backend: str | None = typer.Option(
        None,
        "--backend", "-b",
        help="Executor backend: thread, process or sequential",
    ),
    batch_seconds: float | None = typer.Option(
        None,
        "--batch-seconds",
        help="Target duration of each batch",
    ),
    batch_size: int | None = typer.Option(
        None,
        "--batch-size",
        help="Initial batch size",
    ),
    multiplier: float | None = typer.Option(
        None,
        "--multiplier", "-m",
        help="Sweep up to logical CPUs times this factor",
    ),
    max_level: int | None = typer.Option(
        None,
        "--max-level",
        help="Highest parallelism level to sweep",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet", "-q",
        help="Only print samples and the final table",
    ),
) -> None:
    """Measure how the pi workload scales with parallelism.

    Runs the workload once per repetition and parallelism level, then prints
    the trimmed-mean time of each level against ideal linear speed-up.

    Example:
        scalebench sweep --digits 50 --work 2000 --max-level 8

    """
    config = load_config_or_exit()
    if repetitions is not None:
        config.repetitions = repetitions
    if backend is not None:
        config.backend = backend
    if batch_seconds is not None:
        config.ideal_batch_seconds = batch_seconds
    if batch_size is not None:
        config.initial_batch_size = batch_size
    if multiplier is not None:
        config.level_multiplier = multiplier

    check_repetitions(config.repetitions)
    try:
        _ = validate_backend(config.backend)
    except ScalebenchError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    preset = WorkloadPreset(name="sweep", digits=digits, total_work=work)
    levels = sweep_levels(logical_cpu_count(), config.level_multiplier, max_level)

    console.print(
        f"[bold]Sweeping {work:,} items of {digits} digits[/bold] "
        f"over levels {levels[1]}-{levels[-1]} plus auto, "
        f"{config.repetitions} repetitions, {config.backend} backend"
    )
    console.print("[dim]Ctrl+C to stop after the current batch[/dim]")

    try:
        diagnostic = run_diagnostic(preset, config, levels, quiet)
    except (ScalebenchError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    if diagnostic is None:
        console.print("\n[yellow]Sweep stopped, no diagnostic produced[/yellow]")
        raise typer.Exit(ABORTED_EXIT_CODE)

    console.print()
    console.print(build_diagnostic_table(diagnostic, title="Scalability"))
