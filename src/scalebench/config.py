# Copyright (c) Syntropy Systems
"""Configuration management for scalebench."""
from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import cast

import yaml

from scalebench.errors import InvalidConfigurationError

BACKENDS = ("thread", "process", "sequential")
CONFIG_DIR_NAME = ".scalebench"
CONFIG_FILE_NAME = "config.yaml"


@dataclass
class ScalebenchConfig:
    """Configuration for scalebench."""

    # Target wall-clock duration of each batch (seconds)
    ideal_batch_seconds: float = 1.0

    # Size of the first batch; later sizes are rounded to multiples of it
    initial_batch_size: int = 10

    # Times each parallelism level is measured (trimmed mean needs >= 3)
    repetitions: int = 5

    # Highest swept level is logical_cpus * level_multiplier
    level_multiplier: float = 1.5

    # Executor used by the scheduler: thread, process or sequential
    backend: str = "process"

    # Where `scalebench bench` writes its reports
    results_dir: str = "results"

    def to_dict(self) -> dict[str, object]:
        """Convert to a plain dictionary suitable for YAML."""
        return asdict(self)


def find_config_dir(start_path: Path | None = None) -> Path | None:
    """Find the nearest .scalebench directory by walking up from start_path.

    Returns None if no .scalebench directory is found.
    """
    if start_path is None:
        start_path = Path.cwd()

    current = start_path.resolve()

    while current != current.parent:
        config_dir = current / CONFIG_DIR_NAME
        if config_dir.is_dir():
            return config_dir
        current = current.parent

    # Check root
    config_dir = current / CONFIG_DIR_NAME
    if config_dir.is_dir():
        return config_dir

    return None


def get_global_config_dir() -> Path:
    """Get the global scalebench config directory (~/.scalebench)."""
    return Path.home() / CONFIG_DIR_NAME


def load_config(config_dir: Path | None = None) -> ScalebenchConfig:
    """Load configuration from .scalebench/config.yaml or defaults.

    Looks for config in:
    1. Provided config_dir
    2. Nearest .scalebench directory walking up
    3. ~/.scalebench/config.yaml
    4. Defaults

    Values of the wrong type are ignored and the default is kept.
    """
    config = ScalebenchConfig()

    config_path = None

    if config_dir is not None:
        config_path = config_dir / CONFIG_FILE_NAME
    else:
        found_dir = find_config_dir()
        if found_dir is not None:
            config_path = found_dir / CONFIG_FILE_NAME
        else:
            global_config = get_global_config_dir() / CONFIG_FILE_NAME
            if global_config.exists():
                config_path = global_config

    if config_path is not None and config_path.exists():
        with config_path.open() as f:
            data = cast("dict[str, object]", yaml.safe_load(f) or {})

        ideal_batch_seconds = data.get("ideal_batch_seconds")
        if isinstance(ideal_batch_seconds, (int, float)):
            config.ideal_batch_seconds = float(ideal_batch_seconds)
        initial_batch_size = data.get("initial_batch_size")
        if isinstance(initial_batch_size, int):
            config.initial_batch_size = initial_batch_size
        repetitions = data.get("repetitions")
        if isinstance(repetitions, int):
            config.repetitions = repetitions
        level_multiplier = data.get("level_multiplier")
        if isinstance(level_multiplier, (int, float)):
            config.level_multiplier = float(level_multiplier)
        backend = data.get("backend")
        if isinstance(backend, str):
            config.backend = backend
        results_dir = data.get("results_dir")
        if isinstance(results_dir, str):
            config.results_dir = results_dir

    validate_backend(config.backend)
    return config


def validate_backend(backend: str) -> str:
    """Return backend unchanged, or raise if it is not a known executor."""
    if backend not in BACKENDS:
        msg = f"Unknown backend '{backend}'; expected one of {', '.join(BACKENDS)}"
        raise InvalidConfigurationError(msg)
    return backend
