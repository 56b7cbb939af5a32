"""Report sinks: consumers of benchmark records."""

from cleanbench.reporting.console import RichConsoleSink
from cleanbench.reporting.json_sink import JsonReportSink
from cleanbench.reporting.sink import BaseSink, CollectingSink, MultiSink, ReportSink

__all__ = [
    "BaseSink",
    "CollectingSink",
    "JsonReportSink",
    "MultiSink",
    "ReportSink",
    "RichConsoleSink",
]
