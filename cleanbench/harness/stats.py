"""Descriptive statistics over duration samples."""

from __future__ import annotations

import math
import statistics
from dataclasses import dataclass
from typing import Sequence

from cleanbench.benchmark.exceptions import ConfigurationError


@dataclass(frozen=True)
class SampleSummary:
    """min/median/mean/max (and stdev) of a duration sequence, in milliseconds."""

    min: float
    median: float
    mean: float
    max: float
    stdev: float
    count: int


def summarize(samples: Sequence[float]) -> SampleSummary:
    """Reduce duration samples (ms) to descriptive statistics.

    The input is never reordered: ``statistics.median`` sorts a copy and
    applies the even/odd rule (average of the two central values for an even
    count). ``statistics.mean`` is exact before the final rounding, so the mean
    always lies within [min, max].
    """
    values = [float(v) for v in samples]
    if not values:
        raise ConfigurationError(
            "Cannot summarize an empty sample sequence",
            config_key="samples",
            config_value=[],
            reason="at least one measured sample is required",
        )
    n = len(values)
    return SampleSummary(
        min=min(values),
        median=statistics.median(values),
        mean=statistics.mean(values),
        max=max(values),
        stdev=statistics.stdev(values) if n > 1 else 0.0,
        count=n,
    )


def ops_per_second(mean_ms: float) -> float:
    """Throughput for a mean duration; ``math.inf`` when the mean is zero."""
    if mean_ms <= 0:
        return math.inf
    return 1000.0 / mean_ms
