# Copyright (c) Syntropy Systems
"""Tests for configuration loading."""

from pathlib import Path

import pytest
import yaml

from scalebench.config import (
    ScalebenchConfig,
    find_config_dir,
    load_config,
    validate_backend,
)
from scalebench.errors import InvalidConfigurationError


class TestFindConfigDir:
    """Tests for find_config_dir."""

    def test_finds_in_parent(self, scalebench_project: Path) -> None:
        """The nearest .scalebench directory is found walking up."""
        nested = scalebench_project / "a" / "b"
        nested.mkdir(parents=True)

        assert find_config_dir(nested) == (scalebench_project / ".scalebench").resolve()

    def test_missing(self, temp_dir: Path) -> None:
        """No .scalebench directory anywhere gives None."""
        found = find_config_dir(temp_dir)

        assert found is None or not str(found).startswith(str(temp_dir.resolve()))


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults(self, temp_dir: Path) -> None:
        """A directory without config.yaml yields the defaults."""
        config = load_config(temp_dir)

        assert config == ScalebenchConfig()
        assert config.backend == "process"
        assert config.repetitions == 5

    def test_reads_project_config(self, scalebench_project: Path) -> None:
        """Values from the nearest project config are applied."""
        config = load_config()

        assert config.ideal_batch_seconds == 0.05
        assert config.initial_batch_size == 5
        assert config.repetitions == 3
        assert config.level_multiplier == 1.0
        assert config.backend == "sequential"

    def test_wrong_types_keep_defaults(self, temp_dir: Path) -> None:
        """Values of the wrong type are ignored."""
        (temp_dir / "config.yaml").write_text(
            yaml.dump({"repetitions": "many", "ideal_batch_seconds": 2})
        )

        config = load_config(temp_dir)

        assert config.repetitions == 5
        assert config.ideal_batch_seconds == 2.0

    def test_unknown_backend(self, temp_dir: Path) -> None:
        """An unknown backend is a configuration error."""
        (temp_dir / "config.yaml").write_text(yaml.dump({"backend": "gpu"}))

        with pytest.raises(InvalidConfigurationError, match="Unknown backend 'gpu'"):
            _ = load_config(temp_dir)

    def test_round_trips_through_yaml(self, temp_dir: Path) -> None:
        """to_dict output loads back to the same config."""
        original = ScalebenchConfig(repetitions=7, backend="thread")
        (temp_dir / "config.yaml").write_text(yaml.dump(original.to_dict()))

        assert load_config(temp_dir) == original


class TestValidateBackend:
    """Tests for validate_backend."""

    @pytest.mark.parametrize("backend", ["thread", "process", "sequential"])
    def test_known(self, backend: str) -> None:
        assert validate_backend(backend) == backend

    def test_error_is_a_value_error(self) -> None:
        """Configuration errors can be caught as ValueError."""
        with pytest.raises(ValueError, match="expected one of"):
            _ = validate_backend("cuda")
