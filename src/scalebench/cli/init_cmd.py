# Copyright (c) Syntropy Systems
"""scalebench init command."""

from pathlib import Path

import typer
import yaml
from rich.console import Console

from scalebench.config import CONFIG_DIR_NAME, CONFIG_FILE_NAME, ScalebenchConfig

console = Console()


def init(
    path: Path = typer.Argument(
        Path(),
        help="Directory to initialize (default: current directory)",
    ),
) -> None:
    """Initialize a scalebench project.

    Creates a .scalebench directory holding config.yaml with the defaults.
    """
    target = path.resolve()
    config_dir = target / CONFIG_DIR_NAME

    if config_dir.exists():
        console.print(f"[yellow]Already initialized:[/yellow] {config_dir}")
        return

    config_dir.mkdir(parents=True)

    config_path = config_dir / CONFIG_FILE_NAME
    with config_path.open("w") as f:
        yaml.dump(ScalebenchConfig().to_dict(), f, default_flow_style=False)

    console.print(f"[green]Initialized scalebench project:[/green] {config_dir}")
    console.print(f"  [dim]config:[/dim] {config_path}")
