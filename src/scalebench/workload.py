# Copyright (c) Syntropy Systems
"""CPU-bound reference workload: decimal digits of pi."""
from __future__ import annotations

from dataclasses import dataclass


def pi_digits(digits: int) -> str:
    """Return pi as ``"3."`` followed by ``digits`` decimals.

    Uses Gibbons' unbounded spigot, which works on Python integers only and
    gets quadratically slower with ``digits``; that cost is the point.
    """
    if digits <= 0:
        msg = f"digits must be greater than zero, got {digits}"
        raise ValueError(msg)

    out: list[str] = []
    q, r, t, k, n, m = 1, 0, 1, 1, 3, 3
    while len(out) < digits + 1:
        if 4 * q + r - t < n * t:
            out.append(str(n))
            q, r, n = 10 * q, 10 * (r - n * t), (10 * (3 * q + r)) // t - 10 * n
        else:
            q, r, t, k, n, m = (
                q * k,
                (2 * q + r) * m,
                t * m,
                k + 1,
                (q * (7 * k + 2) + r * m) // (t * m),
                m + 2,
            )
    return out[0] + "." + "".join(out[1:])


@dataclass(frozen=True)
class PiWorkload:
    """Work function computing ``digits`` decimals of pi per index.

    Instances pickle cleanly, so they run on the process backend.
    """

    digits: int

    def __call__(self, index: int) -> None:
        _ = pi_digits(self.digits)


@dataclass(frozen=True)
class WorkloadPreset:
    """A named workload size used by ``scalebench bench``."""

    name: str
    digits: int
    total_work: int


HEAVY = WorkloadPreset(name="heavy", digits=100, total_work=1000)
LIGHT = WorkloadPreset(name="light", digits=25, total_work=20000)
PRESETS = (HEAVY, LIGHT)
