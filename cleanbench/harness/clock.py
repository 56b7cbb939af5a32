"""Monotonic duration measurement for a single invocation."""

from __future__ import annotations

import time
from typing import Any, Callable, Tuple


class Clock:
    """Times one call with a monotonic, high-resolution counter.

    ``time.perf_counter`` is unaffected by wall-clock adjustments. The timer is
    injectable so tests can script durations. Exceptions raised by the timed
    operation propagate unchanged; no sample is produced for a failed call.
    """

    def __init__(self, timer: Callable[[], float] = time.perf_counter):
        self._timer = timer

    def call(self, operation: Callable[[], Any]) -> Tuple[float, Any]:
        """Return ``(elapsed_ms, value)`` of ``operation()``.

        The value is handed back so the caller decides when it is released.
        """
        start = self._timer()
        value = operation()
        end = self._timer()
        return (end - start) * 1000.0, value

    def measure(self, operation: Callable[[], Any]) -> float:
        """Return the elapsed milliseconds of ``operation()``."""
        return self.call(operation)[0]
