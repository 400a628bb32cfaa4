# Copyright (c) Syntropy Systems
"""Exceptions raised by scalebench."""
from __future__ import annotations


class ScalebenchError(Exception):
    """Base class for scalebench errors."""


class InvalidConfigurationError(ScalebenchError, ValueError):
    """A run or sweep was configured with values it cannot honor."""


class InsufficientSamplesError(ScalebenchError):
    """Too few samples at one parallelism level for a trimmed mean."""

    level: int
    count: int

    def __init__(self, level: int, count: int, required: int = 3) -> None:
        self.level = level
        self.count = count
        msg = (
            f"Parallelism level {level} has {count} sample(s); "
            f"at least {required} are needed to drop the best and worst times"
        )
        super().__init__(msg)


class DiagnosticError(ScalebenchError):
    """Aggregated samples cannot be compared against a serial baseline."""
