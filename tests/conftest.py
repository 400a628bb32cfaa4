# Copyright (c) Syntropy Systems
"""Pytest fixtures for scalebench tests."""

import os
import tempfile
import threading
from collections.abc import Generator
from pathlib import Path

import pytest
import yaml

# Store original cwd at module load time
_original_cwd = Path.cwd()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def scalebench_project(temp_dir: Path) -> Generator[Path, None, None]:
    """Create a temporary project with a fast, deterministic config."""
    config_dir = temp_dir / ".scalebench"
    config_dir.mkdir()
    config = {
        "ideal_batch_seconds": 0.05,
        "initial_batch_size": 5,
        "repetitions": 3,
        "level_multiplier": 1.0,
        "backend": "sequential",
        "results_dir": "results",
    }
    with (config_dir / "config.yaml").open("w") as f:
        yaml.dump(config, f)

    # Change to temp directory
    os.chdir(temp_dir)

    yield temp_dir

    # Always return to original cwd
    os.chdir(_original_cwd)


class CallRecorder:
    """Thread-safe record of the indices a work function was called with."""

    def __init__(self, fail_on: int | None = None) -> None:
        self.calls: list[int] = []
        self.fail_on = fail_on
        self._lock = threading.Lock()

    def __call__(self, index: int) -> None:
        if index == self.fail_on:
            msg = f"item {index} failed"
            raise ValueError(msg)
        with self._lock:
            self.calls.append(index)


@pytest.fixture
def recorder() -> CallRecorder:
    """A work function that records every index it sees."""
    return CallRecorder()


@pytest.fixture
def failing_recorder() -> CallRecorder:
    """A recording work function that raises on index 7."""
    return CallRecorder(fail_on=7)
