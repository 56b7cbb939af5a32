"""cleanbench command line (`cleanbench run`, `cleanbench list`)."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer

from cleanbench.benchmark.defaults import get_defaults
from cleanbench.benchmark.exceptions import ConfigurationError, FixtureLoadError
from cleanbench.cleaners import default_registry
from cleanbench.discovery import DEFAULT_SAMPLES_DIR, load_fixture_dir
from cleanbench.harness.config import BenchmarkConfig
from cleanbench.harness.session import BenchmarkSession
from cleanbench.reporting import JsonReportSink, MultiSink, RichConsoleSink
from cleanbench.reporting.sink import ReportSink
from cleanbench.utils.logger import get_console, setup_logging

app = typer.Typer(
    name="cleanbench",
    help="Benchmark deep-clean implementations across JSON fixtures.",
    add_completion=False,
)


@app.command("run", help="Benchmark contenders on every fixture in a samples directory.")
def run(
    samples: Path = typer.Option(DEFAULT_SAMPLES_DIR, "--samples", "-s", help="Directory of *.json fixtures."),
    contenders: Optional[List[str]] = typer.Option(
        None, "--contender", "-c", help="Contender to include (repeatable; default: all)."
    ),
    warmup: int = typer.Option(get_defaults().warmup_iterations, "--warmup", "-w", help="Warmup iterations."),
    iterations: int = typer.Option(
        get_defaults().measured_iterations, "--iterations", "-n", help="Measured iterations."
    ),
    memory: bool = typer.Option(
        get_defaults().memory_tracking, "--memory/--no-memory", help="Sample heap and RSS around each call."
    ),
    reclaim: Optional[bool] = typer.Option(
        None, "--reclaim/--no-reclaim", help="Force gc before snapshots (default: when supported)."
    ),
    reclaim_cadence: int = typer.Option(
        get_defaults().reclaim_cadence, "--reclaim-cadence", help="Measured iterations between forced collections."
    ),
    shuffle: bool = typer.Option(
        get_defaults().shuffle, "--shuffle/--no-shuffle", help="Randomize contender order per fixture."
    ),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for the contender-order shuffle."),
    json_out: Optional[Path] = typer.Option(None, "--json-out", help="Write the full report as JSON."),
    log_level: str = typer.Option("WARNING", "--log-level", help="DEBUG, INFO, WARNING or ERROR."),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also log to this file (JSON lines)."),
) -> None:
    setup_logging(level=log_level, log_file=log_file, log_format="json")
    try:
        config = BenchmarkConfig(
            warmup_iterations=warmup,
            measured_iterations=iterations,
            memory_tracking=memory,
            reclaim_hint=reclaim,
            reclaim_cadence=reclaim_cadence,
            shuffle=shuffle,
            seed=seed,
        )
        selected = default_registry().select(contenders)
        fixtures = load_fixture_dir(samples)
    except (ConfigurationError, FixtureLoadError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=2)

    sinks: List[ReportSink] = [RichConsoleSink(get_console())]
    if json_out is not None:
        sinks.append(JsonReportSink(json_out))

    try:
        report = BenchmarkSession(config=config, sink=MultiSink(sinks)).run(fixtures, selected)
    except ConfigurationError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=2)

    if report.failures:
        raise typer.Exit(code=1)


@app.command("list", help="List bundled contenders and the fixtures in a samples directory.")
def list_targets(
    samples: Path = typer.Option(DEFAULT_SAMPLES_DIR, "--samples", "-s", help="Directory of *.json fixtures."),
) -> None:
    typer.echo("Contenders:")
    for contender in default_registry():
        flag = " (mutates input)" if contender.mutates_input else ""
        typer.echo(f"  {contender.name}: {contender.description}{flag}")
    try:
        fixtures = load_fixture_dir(samples)
    except FixtureLoadError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=2)
    typer.echo(f"Fixtures ({samples}):")
    for fixture in fixtures:
        typer.echo(f"  {fixture.id}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
