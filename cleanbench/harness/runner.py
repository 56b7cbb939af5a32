"""Bench runner: one contender against one fixture.

Warmup iterations are executed and discarded, then measured iterations are
timed one call at a time. Input production (including cloning for contenders
that mutate their input) and forced collection always happen outside the
timed region.
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional, Tuple

from cleanbench.benchmark.exceptions import ContenderError
from cleanbench.benchmark.models import Result, Sample
from cleanbench.discovery import Contender, Fixture
from cleanbench.harness.clock import Clock
from cleanbench.harness.config import BenchmarkConfig, validate_iterations
from cleanbench.harness.memory import MemorySampler, MemorySnapshot
from cleanbench.utils.logger import get_logger, log_benchmark_complete, log_benchmark_start

logger = get_logger(__name__)

ANONYMOUS_FIXTURE = "<inline>"


class BenchRunner:
    """Runs warmup + measured iterations and derives a Result.

    Args:
        sampler: Memory collaborator (snapshots and forced reclaim).
        clock: Duration source; a perf_counter Clock by default.
        memory_tracking: Take before/after snapshots around each measured call.
        reclaim: Force a collection before the first measured iteration and
            then every ``reclaim_cadence`` measured iterations.
        reclaim_cadence: Measured iterations between forced collections.
    """

    def __init__(
        self,
        sampler: MemorySampler,
        clock: Optional[Clock] = None,
        *,
        memory_tracking: bool = False,
        reclaim: bool = False,
        reclaim_cadence: int = 3,
    ):
        self.sampler = sampler
        self.clock = clock or Clock()
        self.memory_tracking = memory_tracking
        self.reclaim = reclaim
        self.reclaim_cadence = max(1, reclaim_cadence)

    @classmethod
    def from_config(
        cls,
        config: BenchmarkConfig,
        sampler: MemorySampler,
        clock: Optional[Clock] = None,
    ) -> "BenchRunner":
        reclaim = config.resolve_reclaim(sampler.reclaim_supported)
        if config.reclaim_hint and not sampler.reclaim_supported:
            logger.warning(
                "Reclaim hint requested but unsupported; continuing without forced collection "
                "(memory deltas will be less accurate)"
            )
        return cls(
            sampler,
            clock,
            memory_tracking=config.memory_tracking,
            reclaim=reclaim,
            reclaim_cadence=config.reclaim_cadence,
        )

    def run_fixture(
        self,
        contender: Contender,
        fixture: Fixture,
        warmup_iterations: int,
        measured_iterations: int,
    ) -> Result:
        """Run ``contender`` on ``fixture``, cloning per iteration if it mutates its input."""
        producer = fixture.producer(clone=contender.mutates_input)
        return self.run(
            contender,
            producer,
            warmup_iterations,
            measured_iterations,
            fixture_id=fixture.id,
        )

    def run(
        self,
        contender: Contender,
        input_producer: Callable[[], Any],
        warmup_iterations: int,
        measured_iterations: int,
        fixture_id: str = ANONYMOUS_FIXTURE,
    ) -> Result:
        """Benchmark one contender; contender failures surface as ContenderError."""
        validate_iterations(warmup_iterations, measured_iterations)
        log_benchmark_start(logger, contender.name, fixture_id)

        for i in range(warmup_iterations):
            data = self._produce(contender, input_producer, fixture_id, "warmup", i)
            self._call(contender, data, fixture_id, "warmup", i)

        samples: List[Sample] = []
        for i in range(measured_iterations):
            data = self._produce(contender, input_producer, fixture_id, "measurement", i)
            if self.reclaim and i % self.reclaim_cadence == 0:
                self.sampler.force_reclaim()

            before: Optional[MemorySnapshot] = None
            if self.memory_tracking:
                before = self.sampler.snapshot()
                self.sampler.reset_peak()

            duration_ms, output = self._timed_call(contender, data, fixture_id, i)

            # output stays referenced until the after-snapshot so its allocation is counted
            if before is None:
                samples.append(Sample(duration_ms=duration_ms))
            else:
                samples.append(_memory_sample(duration_ms, before, self.sampler.snapshot()))
            del output, data

        result = Result.from_samples(
            contender.name,
            fixture_id,
            samples,
            warmup_iterations=warmup_iterations,
        )
        log_benchmark_complete(logger, contender.name, result.mean_ms, fixture_id)
        return result

    def _produce(
        self,
        contender: Contender,
        input_producer: Callable[[], Any],
        fixture_id: str,
        stage: str,
        iteration: int,
    ) -> Any:
        try:
            return input_producer()
        except Exception as exc:
            raise ContenderError(
                f"Input production failed for '{contender.name}' on '{fixture_id}' "
                f"({stage} iteration {iteration}): {exc}",
                contender_name=contender.name,
                fixture_id=fixture_id,
                stage="input",
                iteration=iteration,
                original_error=exc,
            ) from exc

    def _call(self, contender: Contender, data: Any, fixture_id: str, stage: str, iteration: int) -> None:
        try:
            contender.operation(data)
        except Exception as exc:
            raise _contender_error(contender, fixture_id, stage, iteration, exc) from exc

    def _timed_call(self, contender: Contender, data: Any, fixture_id: str, iteration: int) -> Tuple[float, Any]:
        try:
            return self.clock.call(lambda: contender.operation(data))
        except Exception as exc:
            raise _contender_error(contender, fixture_id, "measurement", iteration, exc) from exc


def _contender_error(
    contender: Contender,
    fixture_id: str,
    stage: str,
    iteration: int,
    exc: Exception,
) -> ContenderError:
    return ContenderError(
        f"Contender '{contender.name}' raised {type(exc).__name__} on '{fixture_id}' "
        f"({stage} iteration {iteration}): {exc}",
        contender_name=contender.name,
        fixture_id=fixture_id,
        stage=stage,
        iteration=iteration,
        original_error=exc,
    )


def _memory_sample(duration_ms: float, before: MemorySnapshot, after: MemorySnapshot) -> Sample:
    # gc may run mid-call and free more than the call allocated
    heap_delta = max(0, after.heap_used_bytes - before.heap_used_bytes)
    peak_heap = max(after.heap_used_bytes, after.heap_peak_bytes or 0)
    return Sample(
        duration_ms=duration_ms,
        heap_delta_bytes=heap_delta,
        peak_heap_bytes=max(0, peak_heap),
        peak_rss_bytes=max(0, after.resident_set_bytes),
    )
