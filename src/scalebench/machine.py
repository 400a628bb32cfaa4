# Copyright (c) Syntropy Systems
"""Machine topology probe (CPU counts, platform, memory)."""
from __future__ import annotations

import logging
import os
import platform
import struct
import sys
from dataclasses import dataclass
from typing import cast

import psutil

logger = logging.getLogger(__name__)


@dataclass
class MachineInfo:
    """Snapshot of the executing machine."""

    logical_cpus: int
    physical_cpus: int | None = None
    processor: str | None = None
    architecture: str | None = None
    system: str | None = None
    release: str | None = None
    python_version: str | None = None
    is_64bit_python: bool | None = None
    memory_total_gb: float | None = None

    def to_dict(self) -> dict[str, str | int | float | bool]:
        """Convert to dictionary, excluding None values."""
        result: dict[str, str | int | float | bool] = {
            "logical_cpus": self.logical_cpus,
        }
        if self.physical_cpus is not None:
            result["physical_cpus"] = self.physical_cpus
        if self.processor is not None:
            result["processor"] = self.processor
        if self.architecture is not None:
            result["architecture"] = self.architecture
        if self.system is not None:
            result["system"] = self.system
        if self.release is not None:
            result["release"] = self.release
        if self.python_version is not None:
            result["python_version"] = self.python_version
        if self.is_64bit_python is not None:
            result["is_64bit_python"] = self.is_64bit_python
        if self.memory_total_gb is not None:
            result["memory_total_gb"] = round(self.memory_total_gb, 2)
        return result


def logical_cpu_count() -> int:
    """Number of logical CPUs, never less than 1."""
    return os.cpu_count() or 1


def get_physical_cpu_count() -> int | None:
    """Number of physical cores, or None when the platform won't say."""
    try:
        count = psutil.cpu_count(logical=False)
    except (AttributeError, OSError, NotImplementedError):
        return None
    return cast("int | None", count)


def get_memory_total_gb() -> float | None:
    """Total physical memory in GB."""
    try:
        mem = psutil.virtual_memory()
        total = cast("int", mem.total)
    except (AttributeError, OSError, ValueError):
        return None
    else:
        return total / (1024**3)


def collect_machine_info() -> MachineInfo:
    """Collect the machine facts reported alongside a benchmark."""
    processor = platform.processor() or platform.machine() or None

    info = MachineInfo(
        logical_cpus=logical_cpu_count(),
        physical_cpus=get_physical_cpu_count(),
        processor=processor,
        architecture=platform.machine() or None,
        system=platform.system() or None,
        release=platform.release() or None,
        python_version=platform.python_version(),
        is_64bit_python=struct.calcsize("P") == 8 and sys.maxsize > 2**32,
        memory_total_gb=get_memory_total_gb(),
    )
    logger.debug("Collected machine info: %s", info.to_dict())
    return info
