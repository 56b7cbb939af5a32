"""Per-fixture rankings and the cross-fixture verdict.

Per fixture, contenders rank by mean duration. Overall, they rank by the mean
of their per-fixture means; win counts are reported but never decide the
overall winner.
"""

from __future__ import annotations

import statistics
from typing import Dict, Iterable, List, Optional, Sequence

from cleanbench.benchmark.exceptions import ConfigurationError
from cleanbench.benchmark.models import (
    ContenderSummary,
    FixtureFailure,
    OverallReport,
    PerFixtureReport,
    Result,
    RunManifest,
)


def speedup_percent(winner_mean: float, runner_up_mean: float) -> float:
    """Winner's advantage as a percentage of the runner-up's mean."""
    if runner_up_mean <= 0:
        return 0.0
    return (runner_up_mean - winner_mean) / runner_up_mean * 100.0


def rank_fixture(fixture_id: str, results: Iterable[Result]) -> PerFixtureReport:
    """Rank one fixture's results by mean (ties broken by contender name)."""
    ranked = sorted(results, key=lambda r: (r.mean_ms, r.contender_name))
    if not ranked:
        raise ConfigurationError(
            f"No results to rank for fixture '{fixture_id}'",
            config_key="results",
            config_value=[],
            reason="at least one contender result is required",
        )
    names = [r.contender_name for r in ranked]
    if len(set(names)) != len(names):
        raise ConfigurationError(
            f"Duplicate contender results for fixture '{fixture_id}': {names}",
            config_key="results",
            config_value=names,
            reason="exactly one Result per contender is required",
        )

    winner = ranked[0]
    runner_up = ranked[1] if len(ranked) > 1 else None
    return PerFixtureReport(
        fixture_id=fixture_id,
        results=ranked,
        winner=winner.contender_name,
        runner_up=runner_up.contender_name if runner_up else None,
        speedup_percent=speedup_percent(winner.mean_ms, runner_up.mean_ms) if runner_up else None,
    )


def _max_or_none(values: List[Optional[int]]) -> Optional[int]:
    present = [v for v in values if v is not None]
    return max(present) if present else None


def _mean_or_none(values: List[Optional[float]]) -> Optional[float]:
    present = [v for v in values if v is not None]
    return float(statistics.mean(present)) if present else None


def summarize_contender(name: str, reports: Sequence[PerFixtureReport]) -> Optional[ContenderSummary]:
    """Cross-fixture summary for one contender (None if it has no results)."""
    results = [r for r in (rep.result_for(name) for rep in reports) if r is not None]
    if not results:
        return None
    return ContenderSummary(
        name=name,
        mean_of_means_ms=float(statistics.mean(r.mean_ms for r in results)),
        win_count=sum(1 for rep in reports if rep.winner == name),
        fixtures=len(results),
        max_peak_heap_bytes=_max_or_none([r.peak_heap_bytes for r in results]),
        max_peak_rss_bytes=_max_or_none([r.peak_rss_bytes for r in results]),
        avg_heap_delta_bytes=_mean_or_none([r.avg_heap_delta_bytes for r in results]),
    )


def aggregate(
    reports: Sequence[PerFixtureReport],
    contender_names: Sequence[str],
    failures: Sequence[FixtureFailure] = (),
    manifest: Optional[RunManifest] = None,
) -> OverallReport:
    """Combine per-fixture reports into the overall verdict.

    Ranking: mean_of_means ascending, then more wins, then name.
    """
    per_contender: Dict[str, ContenderSummary] = {}
    for name in contender_names:
        summary = summarize_contender(name, reports)
        if summary is not None:
            per_contender[name] = summary

    ranking = sorted(
        per_contender.values(),
        key=lambda s: (s.mean_of_means_ms, -s.win_count, s.name),
    )
    winner = ranking[0] if ranking else None
    runner_up = ranking[1] if len(ranking) > 1 else None

    return OverallReport(
        per_contender=per_contender,
        ranking=[s.name for s in ranking],
        winner=winner.name if winner else None,
        runner_up=runner_up.name if runner_up else None,
        speedup_percent=(
            speedup_percent(winner.mean_of_means_ms, runner_up.mean_of_means_ms)
            if winner and runner_up else None
        ),
        fixtures_processed=len(reports),
        failures=list(failures),
        manifest=manifest,
    )
