"""Report sink protocol and in-process sinks.

A sink receives plain records and decides alone how (or whether) to render
them. The harness never formats output itself.
"""

from __future__ import annotations

from typing import List, Optional, Protocol, Sequence

from cleanbench.benchmark.models import FixtureFailure, OverallReport, PerFixtureReport, Result


class ReportSink(Protocol):
    """Consumer of benchmark records."""

    def on_result(self, result: Result) -> None:
        ...

    def on_fixture(self, report: PerFixtureReport) -> None:
        ...

    def on_failure(self, failure: FixtureFailure) -> None:
        ...

    def on_overall(self, report: OverallReport) -> None:
        ...


class BaseSink:
    """Sink that ignores every record; subclass and override what you need."""

    def on_result(self, result: Result) -> None:
        pass

    def on_fixture(self, report: PerFixtureReport) -> None:
        pass

    def on_failure(self, failure: FixtureFailure) -> None:
        pass

    def on_overall(self, report: OverallReport) -> None:
        pass


class CollectingSink(BaseSink):
    """Keeps every record in memory, in arrival order."""

    def __init__(self) -> None:
        self.results: List[Result] = []
        self.fixtures: List[PerFixtureReport] = []
        self.failures: List[FixtureFailure] = []
        self.overall: Optional[OverallReport] = None

    def on_result(self, result: Result) -> None:
        self.results.append(result)

    def on_fixture(self, report: PerFixtureReport) -> None:
        self.fixtures.append(report)

    def on_failure(self, failure: FixtureFailure) -> None:
        self.failures.append(failure)

    def on_overall(self, report: OverallReport) -> None:
        self.overall = report


class MultiSink(BaseSink):
    """Fans every record out to several sinks, in order."""

    def __init__(self, sinks: Sequence[ReportSink]):
        self.sinks = list(sinks)

    def on_result(self, result: Result) -> None:
        for sink in self.sinks:
            sink.on_result(result)

    def on_fixture(self, report: PerFixtureReport) -> None:
        for sink in self.sinks:
            sink.on_fixture(report)

    def on_failure(self, failure: FixtureFailure) -> None:
        for sink in self.sinks:
            sink.on_failure(failure)

    def on_overall(self, report: OverallReport) -> None:
        for sink in self.sinks:
            sink.on_overall(report)
