# Copyright (c) Syntropy Systems
"""Batch-size controller.

Keeps each batch close to a target wall-clock duration so progress reports
arrive at a steady cadence. It is a single proportional step per batch:
scale the size by ideal/elapsed, bounded, then round up to a multiple of the
initial size.
"""
from __future__ import annotations

import math

TOLERANCE_FRACTION = 0.1
MIN_ADJUSTMENT = 0.001
MAX_ADJUSTMENT = 1000.0


def floor_batch_size(current_size: int, effective_concurrency: int) -> int:
    """Never hand out fewer items than there are workers."""
    return max(effective_concurrency, current_size)


def adjustment_factor(elapsed: float, ideal_seconds: float) -> float:
    """Scale factor for the next batch, clamped to [0.001, 1000]."""
    if elapsed <= 0:
        return MAX_ADJUSTMENT
    factor = ideal_seconds / elapsed
    return max(MIN_ADJUSTMENT, min(MAX_ADJUSTMENT, factor))


def round_up_to_multiple(size: int, multiple: int) -> int:
    """Round up to a multiple of ``multiple``, never below ``multiple``."""
    return max(multiple, -(-size // multiple) * multiple)


def next_batch_size(
    current_size: int,
    elapsed: float,
    ideal_seconds: float,
    remaining_work: int,
    initial_size: int,
    effective_concurrency: int,
) -> int:
    """Size of the batch after one that took ``elapsed`` seconds.

    Returns the (floored) current size when nothing is left to do or the
    batch landed within 10% of ``ideal_seconds``. The result may exceed
    ``remaining_work`` after rounding; callers clamp the batch end.
    """
    current = floor_batch_size(current_size, effective_concurrency)

    if remaining_work <= 0:
        return current
    if abs(elapsed - ideal_seconds) <= ideal_seconds * TOLERANCE_FRACTION:
        return current

    factor = adjustment_factor(elapsed, ideal_seconds)
    new_size = math.floor(current * factor)
    # A batch should not be larger than the work left
    new_size = min(new_size, remaining_work)
    return round_up_to_multiple(new_size, initial_size)
