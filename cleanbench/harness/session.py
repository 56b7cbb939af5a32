"""Benchmark session: the fixture loop.

For every fixture the contenders are shuffled, run one at a time, ranked, and
handed to the sink; the overall verdict is computed once all fixtures are done.

Contender failure policy: a contender that raises aborts its fixture. No
Result from an aborted fixture reaches the sink or the aggregation (for any
contender), a FixtureFailure is recorded, and the session moves on to the next
fixture. A fixture's Results are held back until every contender has finished
on it.
"""

from __future__ import annotations

import platform
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterable, Iterator, List, Optional, Sequence

from cleanbench.benchmark.exceptions import ConfigurationError, ContenderError
from cleanbench.benchmark.models import FixtureFailure, OverallReport, PerFixtureReport, Result, RunManifest
from cleanbench.discovery import Contender, Fixture
from cleanbench.harness.aggregator import aggregate, rank_fixture
from cleanbench.harness.clock import Clock
from cleanbench.harness.config import BenchmarkConfig
from cleanbench.harness.memory import MemorySampler, ProcessMemorySampler
from cleanbench.harness.ordering import ContenderOrdering
from cleanbench.harness.runner import BenchRunner
from cleanbench.reporting.sink import BaseSink, ReportSink
from cleanbench.utils.logger import get_logger, log_benchmark_error

logger = get_logger(__name__)


@contextmanager
def _heap_tracing(sampler: MemorySampler, enabled: bool) -> Iterator[None]:
    start = getattr(sampler, "start", None)
    stop = getattr(sampler, "stop", None)
    if enabled and callable(start):
        start()
    try:
        yield
    finally:
        if enabled and callable(stop):
            stop()


def validate_inputs(fixtures: Sequence[Fixture], contenders: Sequence[Contender]) -> None:
    """Reject empty or ambiguous fixture/contender sets before measuring anything."""
    if not contenders:
        raise ConfigurationError(
            "No contenders to benchmark",
            config_key="contenders",
            config_value=[],
            reason="at least one contender is required",
        )
    if not fixtures:
        raise ConfigurationError(
            "No fixtures to benchmark",
            config_key="fixtures",
            config_value=[],
            reason="at least one fixture is required",
        )
    names = [c.name for c in contenders]
    if len(set(names)) != len(names):
        raise ConfigurationError(
            f"Duplicate contender names: {names}",
            config_key="contenders",
            config_value=names,
            reason="contender names must be unique",
        )
    ids = [f.id for f in fixtures]
    if len(set(ids)) != len(ids):
        raise ConfigurationError(
            f"Duplicate fixture ids: {ids}",
            config_key="fixtures",
            config_value=ids,
            reason="fixture ids must be unique",
        )


class BenchmarkSession:
    """Runs every contender on every fixture and reports to a sink.

    Collaborators are injectable; by default the session samples the real
    process, times with perf_counter, and orders contenders with a fresh seed
    (or ``config.seed``).
    """

    def __init__(
        self,
        config: Optional[BenchmarkConfig] = None,
        sink: Optional[ReportSink] = None,
        sampler: Optional[MemorySampler] = None,
        clock: Optional[Clock] = None,
        ordering: Optional[ContenderOrdering] = None,
    ):
        self.config = config or BenchmarkConfig()
        self.sink: ReportSink = sink or BaseSink()
        self.sampler = sampler
        self.clock = clock
        self.ordering = ordering

    def run(self, fixtures: Iterable[Fixture], contenders: Sequence[Contender]) -> OverallReport:
        fixtures = list(fixtures)
        contenders = list(contenders)
        validate_inputs(fixtures, contenders)

        config = self.config
        sampler = self.sampler or ProcessMemorySampler(trace_heap=config.memory_tracking)
        ordering = self.ordering or ContenderOrdering(seed=config.seed, enabled=config.shuffle)
        runner = BenchRunner.from_config(config, sampler, self.clock)
        started_at = datetime.now(timezone.utc)

        logger.info(
            "Benchmarking %d contender(s) on %d fixture(s): warmup=%d measured=%d seed=%s",
            len(contenders), len(fixtures), config.warmup_iterations, config.measured_iterations, ordering.seed,
        )

        reports: List[PerFixtureReport] = []
        failures: List[FixtureFailure] = []
        with _heap_tracing(sampler, config.memory_tracking):
            for fixture in fixtures:
                order = ordering.shuffle(contenders)
                logger.info("Performing measures on %s (order: %s)", fixture.id, ", ".join(c.name for c in order))
                try:
                    reports.append(self._run_fixture(runner, fixture, order))
                except ContenderError as exc:
                    failure = _failure_from(fixture, exc)
                    log_benchmark_error(logger, failure.contender_name, str(exc), fixture.id)
                    failures.append(failure)
                    self.sink.on_failure(failure)

        manifest = RunManifest(
            seed=ordering.seed,
            shuffle=ordering.enabled,
            warmup_iterations=config.warmup_iterations,
            measured_iterations=config.measured_iterations,
            memory_tracking=config.memory_tracking,
            reclaim_hint_enabled=runner.reclaim,
            reclaim_cadence=config.reclaim_cadence,
            python_version=platform.python_version(),
            implementation=platform.python_implementation(),
            platform=platform.platform(),
            started_at=started_at,
            finished_at=datetime.now(timezone.utc),
        )
        overall = aggregate(reports, [c.name for c in contenders], failures=failures, manifest=manifest)
        self.sink.on_overall(overall)
        return overall

    def _run_fixture(self, runner: BenchRunner, fixture: Fixture, order: Sequence[Contender]) -> PerFixtureReport:
        results: List[Result] = []
        for contender in order:
            result = runner.run_fixture(
                contender,
                fixture,
                self.config.warmup_iterations,
                self.config.measured_iterations,
            )
            results.append(result)
        report = rank_fixture(fixture.id, results)
        for result in results:
            self.sink.on_result(result)
        self.sink.on_fixture(report)
        return report


def _failure_from(fixture: Fixture, exc: ContenderError) -> FixtureFailure:
    original = exc.original_error
    return FixtureFailure(
        fixture_id=fixture.id,
        contender_name=exc.contender_name,
        stage=exc.stage,
        iteration=exc.iteration,
        error_type=type(original).__name__ if original is not None else type(exc).__name__,
        message=str(original) if original is not None else str(exc),
    )


def run_session(
    fixtures: Iterable[Fixture],
    contenders: Sequence[Contender],
    config: Optional[BenchmarkConfig] = None,
    sink: Optional[ReportSink] = None,
) -> OverallReport:
    """Convenience wrapper around BenchmarkSession(config, sink).run(...)."""
    return BenchmarkSession(config=config, sink=sink).run(fixtures, contenders)
