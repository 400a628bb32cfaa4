# Copyright (c) Syntropy Systems
"""Adaptive batch-parallel work scheduler.

Runs a work function once for every index in ``[0, total_work)``. Indices are
handed out in consecutive batches; each batch runs concurrently on a bounded
pool and is a barrier. After every batch the progress callback may stop the
run, and the batch size is retuned so batches take about
``ideal_batch_seconds``.

Cancellation is cooperative: the earliest point a stop request is seen is the
end of the batch in flight.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from scalebench.batching import floor_batch_size, next_batch_size
from scalebench.config import validate_backend
from scalebench.errors import InvalidConfigurationError
from scalebench.executors import create_strategy
from scalebench.parallelism import resolve_parallelism

if TYPE_CHECKING:
    from collections.abc import Callable

    from typing_extensions import TypeAlias

    ProgressCallback: TypeAlias = Callable[[int, float], bool]
    MessageCallback: TypeAlias = Callable[[str], None]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkResult:
    """Outcome of one scheduler run.

    ``work_done`` is the number of leading indices whose work has returned;
    ``time_taken`` is wall-clock seconds from the first batch to the last,
    excluding worker start-up.
    """

    work_done: int
    time_taken: float
    aborted: bool


@dataclass(frozen=True)
class Batch:
    """Half-open range ``[start, end)`` of indices run together."""

    start: int
    end: int

    @property
    def size(self) -> int:
        """Number of items in the batch."""
        return self.end - self.start

    def indices(self) -> range:
        """Indices covered by the batch."""
        return range(self.start, self.end)


def _emit(message_fn: MessageCallback | None, text: str) -> None:
    logger.info(text)
    if message_fn is not None:
        message_fn(text)


def _validate(
    total_work: int,
    ideal_batch_seconds: float,
    initial_batch_size: int,
    backend: str,
) -> None:
    if total_work < 0:
        msg = f"total_work must be >= 0, got {total_work}"
        raise InvalidConfigurationError(msg)
    if initial_batch_size < 1:
        msg = f"initial_batch_size must be >= 1, got {initial_batch_size}"
        raise InvalidConfigurationError(msg)
    if not ideal_batch_seconds > 0:
        msg = f"ideal_batch_seconds must be > 0, got {ideal_batch_seconds}"
        raise InvalidConfigurationError(msg)
    _ = validate_backend(backend)


def run_work(
    work_fn: Callable[[int], object],
    total_work: int,
    parallel_factor: int = 0,
    ideal_batch_seconds: float = 10.0,
    initial_batch_size: int = 100,
    progress_fn: ProgressCallback | None = None,
    message_fn: MessageCallback | None = None,
    *,
    backend: str = "thread",
    logical_cpus: int | None = None,
) -> WorkResult:
    """Run ``work_fn`` over ``range(total_work)`` in adaptive batches.

    Args:
        work_fn: Called once per index, in no particular order and possibly
            concurrently for distinct indices. Its return value is ignored.
            Must be picklable for the process backend.
        total_work: Number of indices.
        parallel_factor: 0 for automatic, >0 for an explicit maximum, <0 to
            leave that many CPUs unused.
        ideal_batch_seconds: Target duration of a batch.
        initial_batch_size: Size of the first batch; later sizes are
            rounded up to multiples of it.
        progress_fn: Called after each batch with ``(done, elapsed_seconds)``.
            Returning False stops the run.
        message_fn: Receives human-readable status messages.
        backend: "thread", "process" or "sequential".
        logical_cpus: Override the machine's logical CPU count.

    Returns:
        WorkResult; ``aborted`` is True only when ``progress_fn`` stopped the
        run before all work was done.

    Raises:
        InvalidConfigurationError: Before any work, for invalid arguments.
        Exception: Whatever ``work_fn`` raised, unchanged.

    """
    _validate(total_work, ideal_batch_seconds, initial_batch_size, backend)

    policy = resolve_parallelism(parallel_factor, logical_cpus)
    _emit(message_fn, f"Machine has {policy.logical_cpus} CPUs in total.")
    if message_fn is not None:
        message_fn(policy.rationale)

    if total_work == 0:
        return WorkResult(work_done=0, time_taken=0.0, aborted=False)

    current_size = initial_batch_size
    index = 0

    with create_strategy(backend, policy.max_workers) as strategy:
        # Worker start-up is not part of the measured run
        strategy.warm_up()
        start_time = time.perf_counter()
        while index < total_work:
            current_size = floor_batch_size(
                current_size, policy.effective_concurrency
            )
            batch = Batch(index, min(index + current_size, total_work))

            batch_start = time.perf_counter()
            strategy.run_batch(work_fn, batch.indices())
            batch_elapsed = time.perf_counter() - batch_start

            index = batch.end
            if progress_fn is not None and index < total_work:
                if not progress_fn(index, time.perf_counter() - start_time):
                    _emit(message_fn, "Execution aborted.")
                    return WorkResult(
                        work_done=index,
                        time_taken=time.perf_counter() - start_time,
                        aborted=True,
                    )
            elif progress_fn is not None:
                # Final report; the run is complete whatever it returns
                _ = progress_fn(index, time.perf_counter() - start_time)

            previous_size = current_size
            current_size = next_batch_size(
                current_size,
                batch_elapsed,
                ideal_batch_seconds,
                total_work - index,
                initial_batch_size,
                policy.effective_concurrency,
            )
            if current_size != previous_size:
                _emit(message_fn, f"Batch size adjusted to {current_size:,}.")

        elapsed = time.perf_counter() - start_time

    _emit(message_fn, f"All done in {elapsed:.1f}s.")
    return WorkResult(work_done=total_work, time_taken=elapsed, aborted=False)
