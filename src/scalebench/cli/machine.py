# Copyright (c) Syntropy Systems
"""scalebench machine command."""

from rich.console import Console

from scalebench.config import find_config_dir, load_config
from scalebench.diagnostic import sweep_levels
from scalebench.errors import ScalebenchError
from scalebench.machine import collect_machine_info

console = Console()


def machine() -> None:
    """Show the machine facts a benchmark depends on.

    Reports:
    - CPU counts and platform
    - Which config file is in effect
    - The parallelism levels a sweep would cover
    """
    info = collect_machine_info()

    console.print(f"[green]✓[/green] Logical CPUs: {info.logical_cpus}")
    if info.physical_cpus is not None:
        console.print(f"[green]✓[/green] Physical CPUs: {info.physical_cpus}")
    else:
        console.print("[yellow]⚠[/yellow] Physical CPU count unavailable")
    if info.processor:
        console.print(f"[dim]•[/dim] Processor: {info.processor}")
    if info.system:
        console.print(f"[dim]•[/dim] System: {info.system} {info.release or ''}")
    console.print(
        f"[dim]•[/dim] Python: {info.python_version} "
        f"({'64' if info.is_64bit_python else '32'}-bit)"
    )
    if info.memory_total_gb is not None:
        console.print(f"[dim]•[/dim] Memory: {info.memory_total_gb:.1f} GB")

    config_dir = find_config_dir()
    if config_dir is not None:
        console.print(f"[green]✓[/green] Config: {config_dir / 'config.yaml'}")
    else:
        console.print("[dim]•[/dim] No .scalebench directory, using defaults")

    try:
        config = load_config(config_dir)
    except ScalebenchError as e:
        console.print(f"[red]✗[/red] Invalid config: {e}")
        return

    levels = sweep_levels(info.logical_cpus, config.level_multiplier)
    console.print(
        f"[dim]•[/dim] Sweep levels: auto, 1-{levels[-1]} "
        f"({config.backend} backend, {config.repetitions} repetitions)"
    )
