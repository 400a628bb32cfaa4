# Copyright (c) Syntropy Systems
"""Tests for the executor strategies."""

import multiprocessing
import os
import signal
import subprocess
import sys
import textwrap
import time
from pathlib import Path

import pytest

import scalebench
from scalebench.executors import (
    WINDOWS_MAX_PROCESS_WORKERS,
    ProcessPoolStrategy,
    SequentialStrategy,
    ThreadPoolStrategy,
    cap_process_workers,
    create_strategy,
)

# Runs a long process-backend job under the CLI's Ctrl+C handling
INTERRUPTIBLE_RUN = textwrap.dedent(
    """
    import multiprocessing
    import sys

    from scalebench.cli.progress import graceful_stop, make_progress_fn
    from scalebench.scheduler import run_work
    from scalebench.workload import PiWorkload

    if __name__ == "__main__":
        multiprocessing.set_start_method(sys.argv[1], force=True)
        with graceful_stop() as stop_event:
            inner = make_progress_fn(stop_event, 100_000, quiet=True)

            def progress(done, elapsed):
                print("PROGRESS", done, flush=True)
                return inner(done, elapsed)

            result = run_work(
                PiWorkload(300), 100_000, 2, 0.2, 2, progress, backend="process"
            )
        print("RESULT", result.aborted, result.work_done, flush=True)
    """
)


def require_sigint_ignored(index: int) -> None:
    if signal.getsignal(signal.SIGINT) is not signal.SIG_IGN:
        msg = f"item {index} ran in a worker that handles SIGINT"
        raise RuntimeError(msg)


def fail_on_three(index: int) -> None:
    if index == 3:
        msg = f"item {index} failed"
        raise ValueError(msg)


def start_methods() -> list[str]:
    return [
        m
        for m in ("fork", "spawn", "forkserver")
        if m in multiprocessing.get_all_start_methods()
    ]


class TestCreateStrategy:
    """Tests for create_strategy."""

    @pytest.mark.parametrize(
        ("backend", "cls"),
        [
            ("thread", ThreadPoolStrategy),
            ("process", ProcessPoolStrategy),
            ("sequential", SequentialStrategy),
        ],
    )
    def test_backends(self, backend: str, cls: type) -> None:
        with create_strategy(backend, 2) as strategy:
            assert isinstance(strategy, cls)


class TestProcessPoolStrategy:
    """Tests for the process backend."""

    def test_warm_up_starts_every_worker(self) -> None:
        """All workers exist before the first batch is submitted."""
        before = set(multiprocessing.active_children())

        with ProcessPoolStrategy(2) as strategy:
            strategy.warm_up()
            started = set(multiprocessing.active_children()) - before

            assert len(started) == 2

    def test_workers_ignore_sigint(self) -> None:
        """Ctrl+C is left to the parent process."""
        with ProcessPoolStrategy(2) as strategy:
            strategy.run_batch(require_sigint_ignored, range(8))

    def test_worker_error_propagates(self) -> None:
        """The worker's own exception reaches the caller."""
        with (
            ProcessPoolStrategy(2) as strategy,
            pytest.raises(ValueError, match="item 3"),
        ):
            strategy.run_batch(fail_on_three, range(8))

    @pytest.mark.parametrize(
        ("requested", "platform", "expected"),
        [
            (128, "win32", WINDOWS_MAX_PROCESS_WORKERS),
            (8, "win32", 8),
            (128, "linux", 128),
        ],
    )
    def test_cap_process_workers(
        self, requested: int, platform: str, expected: int
    ) -> None:
        """Only Windows limits the pool size."""
        assert cap_process_workers(requested, platform) == expected


@pytest.mark.skipif(sys.platform == "win32", reason="needs process groups")
@pytest.mark.parametrize("start_method", start_methods())
def test_ctrl_c_stops_process_run_gracefully(
    tmp_path: Path, start_method: str
) -> None:
    """SIGINT to the whole process group ends the run at a batch boundary."""
    script = tmp_path / "interruptible_run.py"
    script.write_text(INTERRUPTIBLE_RUN)
    env = dict(os.environ)
    src_dir = str(Path(scalebench.__file__).resolve().parent.parent)
    env["PYTHONPATH"] = os.pathsep.join(
        p for p in (src_dir, env.get("PYTHONPATH")) if p
    )

    proc = subprocess.Popen(
        [sys.executable, str(script), start_method],
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
        env=env,
        start_new_session=True,
    )
    try:
        assert proc.stdout is not None
        lines: list[str] = []
        for line in proc.stdout:
            lines.append(line)
            if line.startswith("PROGRESS"):
                break
        else:
            pytest.fail("run ended before any progress:\n" + "".join(lines))

        time.sleep(0.3)
        os.killpg(proc.pid, signal.SIGINT)
        rest, _ = proc.communicate(timeout=60)
    finally:
        if proc.poll() is None:
            proc.kill()

    output = "".join(lines) + rest
    assert proc.returncode == 0, output
    assert "Traceback" not in output
    assert output.count("Stop requested") == 1
    assert "RESULT True" in output
