"""Rich console rendering of benchmark records."""

from __future__ import annotations

import math
from typing import List, Optional

from rich.console import Console
from rich.rule import Rule
from rich.table import Table

from cleanbench.benchmark.models import FixtureFailure, OverallReport, PerFixtureReport
from cleanbench.reporting.sink import BaseSink


def fmt_ms(value: float) -> str:
    return f"{value:.3f} ms"


def fmt_pct(value: float) -> str:
    return f"{'+' if value >= 0 else ''}{value:.1f}%"


def fmt_ops(value: float) -> str:
    return "inf" if math.isinf(value) else f"{value:.1f}"


def fmt_bytes(value: Optional[float]) -> str:
    if value is None:
        return "-"
    size = float(value)
    for unit in ("B", "KiB", "MiB"):
        if abs(size) < 1024.0:
            return f"{size:.1f} {unit}" if unit != "B" else f"{int(size)} B"
        size /= 1024.0
    return f"{size:.1f} GiB"


class RichConsoleSink(BaseSink):
    """Prints a table per fixture and an overall summary."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()
        self._fixture_reports: List[PerFixtureReport] = []

    def on_fixture(self, report: PerFixtureReport) -> None:
        self._fixture_reports.append(report)
        self.console.print(Rule(f"Benchmark: {report.fixture_id}"))

        with_memory = any(r.peak_heap_bytes is not None for r in report.results)
        table = Table(show_header=True, header_style="bold")
        for column in ("Contender", "min", "median", "mean", "max", "ops/sec"):
            table.add_column(column, justify="left" if column == "Contender" else "right")
        if with_memory:
            for column in ("peak heap", "avg Δheap", "peak RSS"):
                table.add_column(column, justify="right")

        for result in report.results:
            row = [
                result.contender_name,
                fmt_ms(result.min_ms),
                fmt_ms(result.median_ms),
                fmt_ms(result.mean_ms),
                fmt_ms(result.max_ms),
                fmt_ops(result.ops_per_second),
            ]
            if with_memory:
                row += [
                    fmt_bytes(result.peak_heap_bytes),
                    fmt_bytes(result.avg_heap_delta_bytes),
                    fmt_bytes(result.peak_rss_bytes),
                ]
            table.add_row(*row)
        self.console.print(table)

        winner = report.results[0]
        if report.runner_up is not None and report.speedup_percent is not None:
            self.console.print(
                f"Fastest for {report.fixture_id}: [green]{winner.contender_name}[/green] "
                f"({fmt_ms(winner.mean_ms)} avg) → {fmt_pct(report.speedup_percent)} vs {report.runner_up}"
            )
        else:
            self.console.print(
                f"Only contender for {report.fixture_id}: {winner.contender_name} ({fmt_ms(winner.mean_ms)} avg)"
            )

    def on_failure(self, failure: FixtureFailure) -> None:
        self.console.print(
            f"[red]Aborted {failure.fixture_id}[/red]: {failure.contender_name} raised "
            f"{failure.error_type} during {failure.stage} (iteration {failure.iteration}): {failure.message}"
        )

    def on_overall(self, report: OverallReport) -> None:
        self.console.print(Rule("Overall Summary"))
        names = report.ranking

        if self._fixture_reports:
            per_file = Table(show_header=True, header_style="bold")
            per_file.add_column("Fixture")
            per_file.add_column("Winner")
            for name in names:
                per_file.add_column(f"{name} mean", justify="right")
            per_file.add_column("Speedup (winner)", justify="right")
            for fixture in self._fixture_reports:
                means = []
                for name in names:
                    result = fixture.result_for(name)
                    means.append(fmt_ms(result.mean_ms) if result else "-")
                speedup = fmt_pct(fixture.speedup_percent) if fixture.speedup_percent is not None else "-"
                per_file.add_row(fixture.fixture_id, fixture.winner, *means, speedup)
            self.console.print(per_file)

        summary = Table(show_header=True, header_style="bold")
        for column in ("Rank", "Contender", "mean of means", "wins", "max peak heap", "max peak RSS", "avg Δheap"):
            summary.add_column(column, justify="left" if column == "Contender" else "right")
        for rank, name in enumerate(names, start=1):
            s = report.per_contender[name]
            summary.add_row(
                str(rank),
                name,
                fmt_ms(s.mean_of_means_ms),
                str(s.win_count),
                fmt_bytes(s.max_peak_heap_bytes),
                fmt_bytes(s.max_peak_rss_bytes),
                fmt_bytes(s.avg_heap_delta_bytes),
            )
        self.console.print(summary)

        if report.failures:
            self.console.print(f"[red]{len(report.failures)} fixture(s) aborted[/red]")
        if report.winner is None:
            self.console.print("[yellow]No fixture completed; no verdict.[/yellow]")
        elif report.runner_up is None:
            self.console.print(f"Only contender: {report.winner}")
        else:
            self.console.print(
                f"Winner (overall mean across {report.fixtures_processed} fixtures): "
                f"[bold green]{report.winner}[/bold green] → {fmt_pct(report.speedup_percent or 0.0)} "
                f"vs {report.runner_up}"
            )
