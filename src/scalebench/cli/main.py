# Copyright (c) Syntropy Systems
"""Main CLI entry point for scalebench."""

import logging

import typer
from rich.logging import RichHandler

from scalebench.cli.bench import bench
from scalebench.cli.init_cmd import init
from scalebench.cli.machine import machine
from scalebench.cli.show import show
from scalebench.cli.sweep import sweep

app = typer.Typer(
    name="scalebench",
    help=(
        "Measure how CPU-bound work scales with parallelism on this machine."
    ),
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Log scheduler and sweep activity",
    ),
) -> None:
    """Configure logging before any command runs."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


# Register commands
_ = app.command()(init)
_ = app.command()(machine)
_ = app.command()(sweep)
_ = app.command()(bench)
_ = app.command()(show)


if __name__ == "__main__":
    app()
