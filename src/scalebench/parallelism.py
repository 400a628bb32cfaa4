# Copyright (c) Syntropy Systems
"""Resolve a signed parallelism factor into a worker limit."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from scalebench.machine import logical_cpu_count

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParallelismPolicy:
    """Concurrency a run will use.

    ``max_workers`` is what the executor is told; None leaves the choice to
    the executor. ``effective_concurrency`` is the worker count assumed for
    batch sizing, so it is always a positive integer.
    """

    factor: int
    logical_cpus: int
    max_workers: int | None
    effective_concurrency: int
    rationale: str

    @property
    def is_automatic(self) -> bool:
        """Whether the executor picks its own worker count."""
        return self.max_workers is None


def resolve_parallelism(
    factor: int,
    logical_cpus: int | None = None,
) -> ParallelismPolicy:
    """Turn a parallelism factor into a policy.

    - 0: automatic, the executor decides
    - >0: at most ``factor`` workers, whatever the machine has
    - <0: all logical CPUs but ``-factor``, never fewer than one
    """
    if logical_cpus is None:
        logical_cpus = logical_cpu_count()

    if factor == 0:
        max_workers = None
        effective = logical_cpus
        rationale = "Execution will use automatic parallelism."
    elif factor > 0:
        max_workers = factor
        effective = factor
        rationale = f"Execution will use parallelism of {factor} (explicit maximum)."
    else:
        max_workers = max(logical_cpus + factor, 1)
        effective = max_workers
        rationale = (
            f"Execution will use parallelism of {max_workers} "
            f"(reserving {-factor} of {logical_cpus} CPUs)."
        )

    logger.info(rationale)
    return ParallelismPolicy(
        factor=factor,
        logical_cpus=logical_cpus,
        max_workers=max_workers,
        effective_concurrency=effective,
        rationale=rationale,
    )
