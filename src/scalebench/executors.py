# Copyright (c) Syntropy Systems
"""Executor strategies for running one batch of work items.

Each strategy runs ``fn`` over a range of indices and returns only once every
item has finished, which makes a batch a barrier. The first exception raised
by an item propagates out of ``run_batch`` unchanged; items not yet started
are cancelled.
"""
from __future__ import annotations

import logging
import signal
import sys
from abc import ABC, abstractmethod
from concurrent.futures import (
    FIRST_EXCEPTION,
    Executor,
    Future,
    ProcessPoolExecutor,
    ThreadPoolExecutor,
    wait,
)
from typing import TYPE_CHECKING

from scalebench.config import validate_backend
from scalebench.machine import logical_cpu_count

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

# Process pools ship items to workers in chunks; aim for a few per worker
CHUNKS_PER_WORKER = 4

# ProcessPoolExecutor refuses more workers than this on Windows
WINDOWS_MAX_PROCESS_WORKERS = 61


class ExecutorStrategy(ABC):
    """Runs batches of indexed work items.

    Attributes:
        max_workers: Worker limit requested from the pool (None = automatic).

    """

    max_workers: int | None

    @abstractmethod
    def run_batch(self, fn: Callable[[int], object], indices: range) -> None:
        """Run ``fn`` for every index and wait for all of them."""

    @abstractmethod
    def shutdown(self, cancel_futures: bool = False) -> None:
        """Release the pool."""

    def warm_up(self) -> None:
        """Start workers ahead of the first batch so it isn't timed."""

    def __enter__(self) -> ExecutorStrategy:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        # On failure, don't wait for queued items of the failed batch
        self.shutdown(cancel_futures=exc_type is not None)
        return False


class _PoolStrategy(ExecutorStrategy):
    """Shared submit-and-wait logic for concurrent.futures pools."""

    _executor: Executor
    _worker_count: int

    def _submit(
        self, fn: Callable[[int], object], indices: range
    ) -> list[Future[object]]:
        return [self._executor.submit(fn, i) for i in indices]

    def run_batch(self, fn: Callable[[int], object], indices: range) -> None:
        futures = self._submit(fn, indices)
        done, not_done = wait(futures, return_when=FIRST_EXCEPTION)

        failed = next((f for f in done if f.exception() is not None), None)
        if failed is None:
            return

        for future in not_done:
            _ = future.cancel()
        # Let running items finish before surfacing the error
        _ = wait(not_done)
        _ = failed.result()

    def warm_up(self) -> None:
        # One no-op per worker makes the pool spawn all of them
        futures = [self._executor.submit(_noop) for _ in range(self._worker_count)]
        _ = wait(futures)
        logger.debug("Warmed up %d workers", self._worker_count)

    def shutdown(self, cancel_futures: bool = False) -> None:
        self._executor.shutdown(wait=True, cancel_futures=cancel_futures)


class ThreadPoolStrategy(_PoolStrategy):
    """Thread-based execution.

    Accepts any callable. Pure-Python CPU work is serialized by the GIL, so
    threads only scale for workloads that release it (NumPy, I/O, C
    extensions).
    """

    def __init__(self, max_workers: int | None = None) -> None:
        self.max_workers = max_workers
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="scalebench",
        )
        self._worker_count = max_workers or logical_cpu_count()


class ProcessPoolStrategy(_PoolStrategy):
    """Process-based execution for CPU-bound Python workloads.

    ``fn`` must be picklable (a module-level function or an instance of a
    module-level class). Items are sent to workers in chunks. Workers ignore
    SIGINT, so Ctrl+C is handled by the parent alone.
    """

    def __init__(self, max_workers: int | None = None) -> None:
        self.max_workers = max_workers
        self._worker_count = cap_process_workers(max_workers or logical_cpu_count())
        self._executor = ProcessPoolExecutor(
            max_workers=self._worker_count,
            initializer=_ignore_sigint,
        )

    def _chunks(self, indices: range) -> list[range]:
        chunk = max(1, len(indices) // (self._worker_count * CHUNKS_PER_WORKER))
        return [
            range(start, min(start + chunk, indices.stop))
            for start in range(indices.start, indices.stop, chunk)
        ]

    def _submit(
        self, fn: Callable[[int], object], indices: range
    ) -> list[Future[object]]:
        return [
            self._executor.submit(_run_chunk, fn, chunk)
            for chunk in self._chunks(indices)
        ]


class SequentialStrategy(ExecutorStrategy):
    """Runs items inline, in index order.

    Deterministic; meant for debugging and tests.
    """

    def __init__(self) -> None:
        self.max_workers = 1

    def run_batch(self, fn: Callable[[int], object], indices: range) -> None:
        for i in indices:
            _ = fn(i)

    def shutdown(self, cancel_futures: bool = False) -> None:
        """No-op; nothing to release."""


def cap_process_workers(requested: int, platform: str | None = None) -> int:
    """Clamp a process-pool size to what the platform accepts."""
    if platform is None:
        platform = sys.platform
    if platform == "win32" and requested > WINDOWS_MAX_PROCESS_WORKERS:
        logger.warning(
            "Capping process workers at %d (requested %d)",
            WINDOWS_MAX_PROCESS_WORKERS,
            requested,
        )
        return WINDOWS_MAX_PROCESS_WORKERS
    return requested


def _ignore_sigint() -> None:
    _ = signal.signal(signal.SIGINT, signal.SIG_IGN)


def _noop() -> None:
    pass


def _run_chunk(fn: Callable[[int], object], chunk: range) -> None:
    for i in chunk:
        _ = fn(i)


def create_strategy(backend: str, max_workers: int | None) -> ExecutorStrategy:
    """Build the executor strategy named by ``backend``."""
    _ = validate_backend(backend)
    logger.debug("Creating %s executor (max_workers=%s)", backend, max_workers)
    if backend == "thread":
        return ThreadPoolStrategy(max_workers)
    if backend == "process":
        return ProcessPoolStrategy(max_workers)
    return SequentialStrategy()
