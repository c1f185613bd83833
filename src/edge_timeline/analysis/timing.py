"""Placing analysis results on the run's timeline."""

from __future__ import annotations

import math
from typing import Iterable, List

from ..models import AnalysisResult, TimedResult


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up."""
    return int(math.floor(value + 0.5))


def aggregate(results: Iterable[AnalysisResult]) -> List[TimedResult]:
    """Sort ``results`` by capture time and add cumulative/incremental seconds.

    ``cumulative_s`` counts whole seconds from the earliest capture.
    ``incremental_s`` counts from a baseline that moves to the previous
    result's ``cumulative_s`` every time ``step`` changes between neighbours,
    so it restarts at each step boundary and grows within a step.
    """

    ordered = sorted(results, key=lambda r: r.captured_at_ms)
    if not ordered:
        return []

    t0 = ordered[0].captured_at_ms
    cumulative = [round_half_up((r.captured_at_ms - t0) / 1000.0) for r in ordered]

    timed: List[TimedResult] = []
    baseline = 0
    for i, result in enumerate(ordered):
        if i > 0 and result.step != ordered[i - 1].step:
            baseline = cumulative[i - 1]
        timed.append(
            TimedResult.from_result(
                result,
                cumulative_s=cumulative[i],
                incremental_s=cumulative[i] - baseline,
            )
        )
    return timed


__all__ = ["round_half_up", "aggregate"]
