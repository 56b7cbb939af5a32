"""cleanbench: compare deep-clean implementations across JSON fixtures."""

from cleanbench.benchmark.exceptions import (
    BenchmarkError,
    ConfigurationError,
    ContenderError,
    FixtureLoadError,
)
from cleanbench.benchmark.models import (
    ContenderSummary,
    FixtureFailure,
    OverallReport,
    PerFixtureReport,
    Result,
    RunManifest,
    Sample,
)
from cleanbench.discovery import Contender, ContenderRegistry, Fixture, load_fixture_dir
from cleanbench.harness.config import BenchmarkConfig
from cleanbench.harness.runner import BenchRunner
from cleanbench.harness.session import BenchmarkSession, run_session

__version__ = "0.1.0"

__all__ = [
    "BenchRunner",
    "BenchmarkConfig",
    "BenchmarkError",
    "BenchmarkSession",
    "ConfigurationError",
    "Contender",
    "ContenderError",
    "ContenderRegistry",
    "ContenderSummary",
    "Fixture",
    "FixtureFailure",
    "FixtureLoadError",
    "OverallReport",
    "PerFixtureReport",
    "Result",
    "RunManifest",
    "Sample",
    "load_fixture_dir",
    "run_session",
]
