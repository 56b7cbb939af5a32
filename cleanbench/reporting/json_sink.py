"""JSON file output of a benchmark session."""

from __future__ import annotations

import json
from pathlib import Path
from typing import List

from cleanbench.benchmark.models import OverallReport, PerFixtureReport
from cleanbench.reporting.sink import BaseSink
from cleanbench.utils.logger import get_logger

logger = get_logger(__name__)


class JsonReportSink(BaseSink):
    """Writes per-fixture reports and the overall report to one JSON file.

    The file is written when the overall report arrives.
    """

    def __init__(self, path: Path, include_samples: bool = True):
        self.path = Path(path)
        self.include_samples = include_samples
        self._fixtures: List[PerFixtureReport] = []

    def on_fixture(self, report: PerFixtureReport) -> None:
        self._fixtures.append(report)

    def on_overall(self, report: OverallReport) -> None:
        exclude = None if self.include_samples else {"results": {"__all__": {"samples"}}}
        payload = {
            "overall": report.model_dump(mode="json"),
            "fixtures": [f.model_dump(mode="json", exclude=exclude) for f in self._fixtures],
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)
        logger.info("Benchmark report saved to %s", self.path)
