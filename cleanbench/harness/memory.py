"""Process memory snapshots and the forced-reclaim hint.

Heap usage comes from ``tracemalloc`` (Python-level allocations), resident set
size from ``psutil``. A delta around a single call is noisy under automatic
garbage collection, so the runner forces a collection on a cadence right
before its "before" snapshot and clamps negative deltas to zero.
"""

from __future__ import annotations

import gc
import tracemalloc
from dataclasses import dataclass
from typing import Optional, Protocol

import psutil

from cleanbench.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class MemorySnapshot:
    """Point-in-time memory usage of the current process."""

    heap_used_bytes: int
    resident_set_bytes: int
    heap_peak_bytes: Optional[int] = None  # high-water mark since the last reset_peak()


class MemorySampler(Protocol):
    """What the bench runner needs from a memory collaborator."""

    reclaim_supported: bool

    def snapshot(self) -> MemorySnapshot:
        ...

    def force_reclaim(self) -> None:
        ...

    def reset_peak(self) -> None:
        ...


def detect_reclaim_support() -> bool:
    """Return True when the runtime exposes an explicit collection trigger."""
    return callable(getattr(gc, "collect", None))


class ProcessMemorySampler:
    """Samples the current process with tracemalloc + psutil.

    Use as a context manager (or call start()/stop()) to trace heap
    allocations for the duration of a session. Tracing that was already active
    when the sampler started is left running on exit.
    """

    def __init__(self, trace_heap: bool = True):
        self.trace_heap = trace_heap
        self.reclaim_supported = detect_reclaim_support()
        self._owns_tracing = False
        self._rss_available = True
        try:
            self._process: Optional[psutil.Process] = psutil.Process()
        except psutil.Error as exc:
            logger.warning("RSS sampling unavailable (%s); reporting 0 bytes", exc)
            self._process = None
            self._rss_available = False

        if self.reclaim_supported:
            logger.info("Forced reclaim available (gc.collect)")
        else:
            logger.warning(
                "Forced reclaim unsupported in this runtime; memory deltas will be noisier"
            )

    def start(self) -> "ProcessMemorySampler":
        if self.trace_heap and not tracemalloc.is_tracing():
            tracemalloc.start()
            self._owns_tracing = True
        return self

    def stop(self) -> None:
        if self._owns_tracing:
            tracemalloc.stop()
            self._owns_tracing = False

    def __enter__(self) -> "ProcessMemorySampler":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    def snapshot(self) -> MemorySnapshot:
        heap_used = 0
        heap_peak: Optional[int] = None
        if tracemalloc.is_tracing():
            heap_used, heap_peak = tracemalloc.get_traced_memory()
        return MemorySnapshot(
            heap_used_bytes=heap_used,
            resident_set_bytes=self._rss(),
            heap_peak_bytes=heap_peak,
        )

    def _rss(self) -> int:
        if self._process is None:
            return 0
        try:
            return int(self._process.memory_info().rss)
        except psutil.Error as exc:
            if self._rss_available:
                logger.warning("RSS sampling failed (%s); reporting 0 bytes from now on", exc)
                self._rss_available = False
            self._process = None
            return 0

    def reset_peak(self) -> None:
        if tracemalloc.is_tracing():
            tracemalloc.reset_peak()

    def force_reclaim(self) -> None:
        if self.reclaim_supported:
            gc.collect()
