# Copyright (c) Syntropy Systems
"""Scalability sweeps and their reduction into a speed-up diagnostic."""
from __future__ import annotations

import logging
import math
from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from scalebench.errors import (
    DiagnosticError,
    InsufficientSamplesError,
    InvalidConfigurationError,
)
from scalebench.machine import logical_cpu_count
from scalebench.scheduler import run_work

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from scalebench.scheduler import MessageCallback, ProgressCallback

logger = logging.getLogger(__name__)

AUTOMATIC_LEVEL = 0
SERIAL_LEVEL = 1
MIN_SAMPLES_PER_LEVEL = 3


@dataclass(frozen=True)
class Sample:
    """Elapsed time of one full run at one parallelism level."""

    level: int
    elapsed_seconds: float


@dataclass(frozen=True)
class AggregatedSample:
    """Trimmed-mean time for one parallelism level."""

    level: int
    average_seconds: float


@dataclass(frozen=True)
class DiagnosticRow:
    """Measured versus ideal linear speed-up at one level."""

    level: int
    measured_seconds: float
    ideal_seconds: float
    speedup_factor: float
    squared_error: float
    cumulative_squared_error: float


@dataclass(frozen=True)
class Diagnostic:
    """Speed-up curve for a sweep.

    The automatic and serial baselines carry no ideal or error values; rows
    cover every level above serial.
    """

    serial: AggregatedSample
    automatic: AggregatedSample | None = None
    rows: list[DiagnosticRow] = field(default_factory=list)

    @property
    def total_squared_error(self) -> float:
        """Cumulative squared error at the highest level."""
        return self.rows[-1].cumulative_squared_error if self.rows else 0.0


def sweep_levels(
    logical_cpus: int | None = None,
    multiplier: float = 1.5,
    max_level: int | None = None,
) -> list[int]:
    """Levels to sweep: automatic, serial, then 2 up to cpus * multiplier.

    ``max_level`` caps the range when given.
    """
    if logical_cpus is None:
        logical_cpus = logical_cpu_count()
    top = max(SERIAL_LEVEL, math.ceil(logical_cpus * multiplier))
    if max_level is not None:
        top = max(SERIAL_LEVEL, min(top, max_level))
    return [AUTOMATIC_LEVEL, *range(SERIAL_LEVEL, top + 1)]


def run_sweep(
    work_fn: Callable[[int], object],
    total_work_per_run: int,
    repetitions: int = 5,
    levels: Iterable[int] | None = None,
    *,
    ideal_batch_seconds: float = 1.0,
    initial_batch_size: int = 10,
    backend: str = "thread",
    progress_fn: ProgressCallback | None = None,
    message_fn: MessageCallback | None = None,
    on_sample: Callable[[int, Sample], None] | None = None,
) -> list[Sample] | None:
    """Run the scheduler once per (repetition, level) pair.

    Returns the collected samples, or None as soon as any run is aborted.
    ``on_sample`` receives ``(repetition, sample)`` after each run.
    """
    if repetitions < 1:
        msg = f"repetitions must be >= 1, got {repetitions}"
        raise InvalidConfigurationError(msg)
    level_list = list(levels) if levels is not None else sweep_levels()

    samples: list[Sample] = []
    for repetition in range(repetitions):
        logger.info(
            "Starting repetition %d of %d over %d levels",
            repetition + 1,
            repetitions,
            len(level_list),
        )
        for level in level_list:
            result = run_work(
                work_fn,
                total_work_per_run,
                level,
                ideal_batch_seconds,
                initial_batch_size,
                progress_fn,
                message_fn,
                backend=backend,
            )
            if result.aborted:
                logger.info("Sweep aborted at level %d", level)
                return None

            sample = Sample(level=level, elapsed_seconds=result.time_taken)
            samples.append(sample)
            if on_sample is not None:
                on_sample(repetition, sample)

    return samples


def trimmed_mean(values: Iterable[float]) -> float:
    """Mean after dropping one smallest and one largest value."""
    ordered = sorted(values)
    if len(ordered) < MIN_SAMPLES_PER_LEVEL:
        msg = f"need at least {MIN_SAMPLES_PER_LEVEL} values, got {len(ordered)}"
        raise ValueError(msg)
    kept = ordered[1:-1]
    return sum(kept) / len(kept)


def reduce_samples(samples: Iterable[Sample]) -> list[AggregatedSample]:
    """Trimmed mean per level, ordered by level.

    Raises:
        InsufficientSamplesError: A level has fewer than three samples.

    """
    by_level: defaultdict[int, list[float]] = defaultdict(list)
    for sample in samples:
        by_level[sample.level].append(sample.elapsed_seconds)

    aggregated: list[AggregatedSample] = []
    for level in sorted(by_level):
        values = by_level[level]
        if len(values) < MIN_SAMPLES_PER_LEVEL:
            raise InsufficientSamplesError(level, len(values), MIN_SAMPLES_PER_LEVEL)
        aggregated.append(
            AggregatedSample(level=level, average_seconds=trimmed_mean(values))
        )
    return aggregated


def diagnose(aggregated: Iterable[AggregatedSample]) -> Diagnostic:
    """Compare every level above serial against ideal linear speed-up."""
    by_level = {a.level: a for a in aggregated}
    serial = by_level.get(SERIAL_LEVEL)
    if serial is None:
        msg = "No serial (level 1) baseline to compare against"
        raise DiagnosticError(msg)

    rows: list[DiagnosticRow] = []
    accumulated = 0.0
    for level in sorted(by_level):
        if level <= SERIAL_LEVEL:
            continue
        measured = by_level[level].average_seconds
        ideal = serial.average_seconds / level
        speedup = serial.average_seconds / measured
        squared_error = (speedup - level) ** 2
        accumulated += squared_error
        rows.append(
            DiagnosticRow(
                level=level,
                measured_seconds=measured,
                ideal_seconds=ideal,
                speedup_factor=speedup,
                squared_error=squared_error,
                cumulative_squared_error=accumulated,
            )
        )

    return Diagnostic(
        serial=serial,
        automatic=by_level.get(AUTOMATIC_LEVEL),
        rows=rows,
    )


def sweep_and_diagnose(
    work_fn: Callable[[int], object],
    total_work_per_run: int,
    repetitions: int = 5,
    levels: Iterable[int] | None = None,
    *,
    ideal_batch_seconds: float = 1.0,
    initial_batch_size: int = 10,
    backend: str = "thread",
    progress_fn: ProgressCallback | None = None,
    message_fn: MessageCallback | None = None,
    on_sample: Callable[[int, Sample], None] | None = None,
) -> Diagnostic | None:
    """Run a sweep and reduce it; None when the sweep was aborted."""
    samples = run_sweep(
        work_fn,
        total_work_per_run,
        repetitions,
        levels,
        ideal_batch_seconds=ideal_batch_seconds,
        initial_batch_size=initial_batch_size,
        backend=backend,
        progress_fn=progress_fn,
        message_fn=message_fn,
        on_sample=on_sample,
    )
    if samples is None:
        return None
    return diagnose(reduce_samples(samples))
