# Copyright (c) Syntropy Systems
"""Tests for the parallelism policy resolver."""

import logging

import pytest

from scalebench.parallelism import resolve_parallelism


class TestResolveParallelism:
    """Tests for resolve_parallelism."""

    def test_zero_is_automatic(self) -> None:
        """Factor 0 leaves the worker count to the executor."""
        policy = resolve_parallelism(0, 8)

        assert policy.is_automatic
        assert policy.max_workers is None
        assert policy.effective_concurrency == 8
        assert "automatic" in policy.rationale

    @pytest.mark.parametrize("cpus", [1, 4, 64])
    def test_positive_is_explicit_maximum(self, cpus: int) -> None:
        """A positive factor is used as-is whatever the machine has."""
        policy = resolve_parallelism(5, cpus)

        assert policy.max_workers == 5
        assert policy.effective_concurrency == 5
        assert not policy.is_automatic

    def test_negative_reserves_cpus(self) -> None:
        """A negative factor leaves that many CPUs unused."""
        policy = resolve_parallelism(-3, 8)

        assert policy.max_workers == 5
        assert policy.effective_concurrency == 5
        assert "reserving 3" in policy.rationale

    def test_negative_is_floored_at_one(self) -> None:
        """Reserving more CPUs than exist still leaves one worker."""
        policy = resolve_parallelism(-20, 8)

        assert policy.max_workers == 1
        assert policy.effective_concurrency == 1

    def test_defaults_to_machine_cpu_count(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Without an override the logical CPU count comes from the machine."""
        monkeypatch.setattr("scalebench.parallelism.logical_cpu_count", lambda: 6)

        policy = resolve_parallelism(-1)

        assert policy.logical_cpus == 6
        assert policy.max_workers == 5

    def test_logs_rationale(self, caplog: pytest.LogCaptureFixture) -> None:
        """The chosen branch is logged at INFO."""
        with caplog.at_level(logging.INFO, logger="scalebench.parallelism"):
            policy = resolve_parallelism(2, 4)

        assert policy.rationale in caplog.text
