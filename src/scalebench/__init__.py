"""
scalebench - parallel scalability benchmarking.

Fan CPU-bound work out in adaptive batches, sweep the degree of parallelism,
and compare the speed-up with the ideal linear one.
"""

from scalebench.diagnostic import (
    AggregatedSample,
    Diagnostic,
    DiagnosticRow,
    Sample,
    diagnose,
    reduce_samples,
    run_sweep,
    sweep_and_diagnose,
    sweep_levels,
)
from scalebench.parallelism import ParallelismPolicy, resolve_parallelism
from scalebench.scheduler import Batch, WorkResult, run_work

__version__ = "0.1.0"
__all__ = [
    "AggregatedSample",
    "Batch",
    "Diagnostic",
    "DiagnosticRow",
    "ParallelismPolicy",
    "Sample",
    "WorkResult",
    "__version__",
    "diagnose",
    "reduce_samples",
    "resolve_parallelism",
    "run_sweep",
    "run_work",
    "sweep_and_diagnose",
    "sweep_levels",
]
