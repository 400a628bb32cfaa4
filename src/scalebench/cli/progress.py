# Copyright (c) Syntropy Systems
"""Console progress reporting and Ctrl+C handling for long runs."""
from __future__ import annotations

import contextlib
import signal
from datetime import datetime
from threading import Event
from typing import TYPE_CHECKING

from rich.console import Console

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

console = Console()

# Set by the first Ctrl+C; checked at every batch boundary
_stop_event = Event()


def _signal_handler(signum, frame):
    """First SIGINT stops at the next batch boundary, the second one now."""
    if _stop_event.is_set():
        raise KeyboardInterrupt
    console.print(
        "\n[yellow]Stop requested, finishing current batch...[/yellow] "
        "[dim](Ctrl+C again to abort immediately)[/dim]"
    )
    _stop_event.set()


@contextlib.contextmanager
def graceful_stop() -> Iterator[Event]:
    """Install the SIGINT handler for the duration of a run."""
    _stop_event.clear()
    previous = signal.signal(signal.SIGINT, _signal_handler)
    try:
        yield _stop_event
    finally:
        _ = signal.signal(signal.SIGINT, previous)


def make_progress_fn(
    stop_event: Event,
    total_work: int,
    quiet: bool = False,
) -> Callable[[int, float], bool]:
    """Progress callback that prints a line and honors ``stop_event``."""

    def progress(done: int, elapsed: float) -> bool:
        if not quiet:
            console.print(
                f"    [dim]{datetime.now():%H:%M:%S}[/dim] "
                f"Done {done:,} of {total_work:,} in {elapsed:.1f}s..."
            )
        return not stop_event.is_set()

    return progress


def make_message_fn(quiet: bool = False) -> Callable[[str], None] | None:
    """Message callback printing scheduler messages, or None when quiet."""
    if quiet:
        return None

    def message(text: str) -> None:
        console.print(f"    [dim]{text}[/dim]")

    return message
