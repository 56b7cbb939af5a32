"""Pydantic models for benchmark data structures.

Provides type-safe, validated records for samples, per-contender results and
per-fixture / overall reports. Records are frozen: they are created once per
session and handed to report sinks unchanged. All models include
schemaVersion for forward compatibility.
"""

from __future__ import annotations

import statistics
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, model_validator

from cleanbench.harness.stats import ops_per_second, summarize

SCHEMA_VERSION = "1.0"


class Sample(BaseModel):
    """A single measured iteration."""

    duration_ms: float = Field(..., ge=0.0, description="Duration of the timed call in milliseconds")
    heap_delta_bytes: Optional[int] = Field(None, ge=0, description="Heap growth across the call, clamped at zero")
    peak_heap_bytes: Optional[int] = Field(None, ge=0, description="Heap high-water mark observed after the call")
    peak_rss_bytes: Optional[int] = Field(None, ge=0, description="Resident set size observed after the call")

    model_config = ConfigDict(frozen=True)


class Result(BaseModel):
    """Timing and memory statistics of one contender on one fixture.

    Build with :meth:`from_samples`; every statistic is derived from ``samples``.
    """

    contender_name: str = Field(..., description="Contender that produced the samples")
    fixture_id: str = Field(..., description="Fixture the contender ran on")
    samples: List[Sample] = Field(..., min_length=1, description="Measured iterations in execution order")

    min_ms: float = Field(..., description="Minimum duration in milliseconds")
    median_ms: float = Field(..., description="Median duration in milliseconds")
    mean_ms: float = Field(..., description="Mean duration in milliseconds")
    max_ms: float = Field(..., description="Maximum duration in milliseconds")
    std_ms: float = Field(..., description="Sample standard deviation in milliseconds")
    ops_per_second: float = Field(..., description="1000 / mean_ms (inf when mean is zero)")
    warmup_iterations: int = Field(0, ge=0, description="Number of discarded warmup iterations")

    peak_heap_bytes: Optional[int] = Field(None, description="Max heap observed after any iteration")
    avg_heap_delta_bytes: Optional[float] = Field(None, description="Mean of clamped per-iteration heap deltas")
    peak_rss_bytes: Optional[int] = Field(None, description="Max RSS observed after any iteration")

    schemaVersion: str = Field(SCHEMA_VERSION, description="Schema version for forward compatibility")

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "contender_name": "recursive",
                "fixture_id": "nested.json",
                "samples": [{"duration_ms": 1.15}, {"duration_ms": 1.20}, {"duration_ms": 1.35}],
                "min_ms": 1.15,
                "median_ms": 1.20,
                "mean_ms": 1.2333,
                "max_ms": 1.35,
                "std_ms": 0.1041,
                "ops_per_second": 810.8,
                "warmup_iterations": 5,
                "schemaVersion": "1.0",
            }
        },
    )

    @model_validator(mode="after")
    def _check_ordering(self) -> "Result":
        if not (self.min_ms <= self.median_ms <= self.max_ms):
            raise ValueError("min_ms <= median_ms <= max_ms violated")
        if not (self.min_ms <= self.mean_ms <= self.max_ms):
            raise ValueError("min_ms <= mean_ms <= max_ms violated")
        return self

    @classmethod
    def from_samples(
        cls,
        contender_name: str,
        fixture_id: str,
        samples: Sequence[Sample],
        warmup_iterations: int = 0,
    ) -> "Result":
        """Derive a Result from measured samples."""
        summary = summarize([s.duration_ms for s in samples])

        deltas = [s.heap_delta_bytes for s in samples if s.heap_delta_bytes is not None]
        heaps = [s.peak_heap_bytes for s in samples if s.peak_heap_bytes is not None]
        rss = [s.peak_rss_bytes for s in samples if s.peak_rss_bytes is not None]

        return cls(
            contender_name=contender_name,
            fixture_id=fixture_id,
            samples=list(samples),
            min_ms=summary.min,
            median_ms=summary.median,
            mean_ms=summary.mean,
            max_ms=summary.max,
            std_ms=summary.stdev,
            ops_per_second=ops_per_second(summary.mean),
            warmup_iterations=warmup_iterations,
            peak_heap_bytes=max(heaps) if heaps else None,
            avg_heap_delta_bytes=float(statistics.mean(deltas)) if deltas else None,
            peak_rss_bytes=max(rss) if rss else None,
        )


class PerFixtureReport(BaseModel):
    """Ranking of every contender on a single fixture."""

    fixture_id: str = Field(..., description="Fixture identifier")
    results: List[Result] = Field(..., min_length=1, description="One Result per contender, fastest first")
    winner: str = Field(..., description="Contender with the lowest mean")
    runner_up: Optional[str] = Field(None, description="Second-lowest mean (None with a single contender)")
    speedup_percent: Optional[float] = Field(
        None, description="(runner_up.mean - winner.mean) / runner_up.mean * 100"
    )

    schemaVersion: str = Field(SCHEMA_VERSION, description="Schema version for forward compatibility")

    model_config = ConfigDict(frozen=True)

    def result_for(self, contender_name: str) -> Optional[Result]:
        for result in self.results:
            if result.contender_name == contender_name:
                return result
        return None


class FixtureFailure(BaseModel):
    """A fixture whose benchmark was aborted because a contender raised."""

    fixture_id: str = Field(..., description="Fixture that was aborted")
    contender_name: str = Field(..., description="Contender whose operation raised")
    stage: str = Field(..., description="'warmup', 'measurement' or 'input'")
    iteration: int = Field(..., ge=0, description="Zero-based iteration index within the stage")
    error_type: str = Field(..., description="Exception class name")
    message: str = Field(..., description="Exception message")

    schemaVersion: str = Field(SCHEMA_VERSION, description="Schema version for forward compatibility")

    model_config = ConfigDict(frozen=True)


class ContenderSummary(BaseModel):
    """Cross-fixture statistics for one contender."""

    name: str = Field(..., description="Contender name")
    mean_of_means_ms: float = Field(..., description="Arithmetic mean of per-fixture means")
    win_count: int = Field(0, ge=0, description="Fixtures where this contender had the lowest mean")
    fixtures: int = Field(..., ge=1, description="Fixtures contributing to mean_of_means_ms")
    max_peak_heap_bytes: Optional[int] = Field(None, description="Worst per-fixture heap peak")
    max_peak_rss_bytes: Optional[int] = Field(None, description="Worst per-fixture RSS peak")
    avg_heap_delta_bytes: Optional[float] = Field(None, description="Mean of per-fixture average heap deltas")

    model_config = ConfigDict(frozen=True)


class RunManifest(BaseModel):
    """Environment and settings needed to reproduce a session."""

    seed: Optional[int] = Field(None, description="Seed of the contender-ordering random source")
    shuffle: bool = Field(True, description="Whether contender order was randomized per fixture")
    warmup_iterations: int = Field(..., description="Warmup iterations per contender per fixture")
    measured_iterations: int = Field(..., description="Measured iterations per contender per fixture")
    memory_tracking: bool = Field(False, description="Whether memory was sampled around iterations")
    reclaim_hint_enabled: bool = Field(False, description="Whether gc was forced before snapshots")
    reclaim_cadence: int = Field(..., description="Iterations between forced collections")
    python_version: str = Field(..., description="Interpreter version")
    implementation: str = Field(..., description="Interpreter implementation (CPython, PyPy, ...)")
    platform: str = Field(..., description="Platform string")
    started_at: datetime = Field(..., description="Session start time")
    finished_at: Optional[datetime] = Field(None, description="Session end time")

    schemaVersion: str = Field(SCHEMA_VERSION, description="Schema version for forward compatibility")

    model_config = ConfigDict(frozen=True)


class OverallReport(BaseModel):
    """Cross-fixture verdict for a benchmark session."""

    per_contender: Dict[str, ContenderSummary] = Field(default_factory=dict)
    ranking: List[str] = Field(default_factory=list, description="Contenders by mean_of_means, fastest first")
    winner: Optional[str] = Field(None, description="Lowest mean_of_means")
    runner_up: Optional[str] = Field(None, description="Second-lowest mean_of_means")
    speedup_percent: Optional[float] = Field(None, description="Winner's advantage over the runner-up")
    fixtures_processed: int = Field(0, ge=0, description="Fixtures that entered aggregation")
    failures: List[FixtureFailure] = Field(default_factory=list, description="Aborted fixtures")
    manifest: Optional[RunManifest] = Field(None, description="Run settings and environment")

    schemaVersion: str = Field(SCHEMA_VERSION, description="Schema version for forward compatibility")

    model_config = ConfigDict(frozen=True)
