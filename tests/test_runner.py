"""Tests for BenchRunner: iteration counts, timing, memory attribution and failures."""

import logging
import sys
import time
import tracemalloc
from pathlib import Path

import pytest
from hypothesis import given, settings, strategies as st

# Add repo root to path for imports
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from cleanbench.benchmark.exceptions import ConfigurationError, ContenderError
from cleanbench.cleaners import clean_in_place
from cleanbench.discovery import Contender, Fixture
from cleanbench.harness.clock import Clock
from cleanbench.harness.config import BenchmarkConfig
from cleanbench.harness.memory import MemorySnapshot, ProcessMemorySampler
from cleanbench.harness.runner import BenchRunner
from fakes import FakeSampler, stepping_clock


def _noop(data):
    return data


class TestIterations:
    """Test warmup/measured iteration handling."""

    def test_measured_count_without_warmup(self):
        runner = BenchRunner(FakeSampler(), stepping_clock())
        result = runner.run(Contender("noop", _noop), lambda: {}, 0, 5)
        assert len(result.samples) == 5
        assert result.warmup_iterations == 0

    def test_warmup_is_executed_but_not_sampled(self):
        calls = []
        contender = Contender("counting", lambda data: calls.append(data))
        runner = BenchRunner(FakeSampler(), stepping_clock())
        result = runner.run(contender, lambda: 1, 3, 5)
        assert len(calls) == 8
        assert len(result.samples) == 5
        assert result.warmup_iterations == 3

    def test_scripted_durations(self):
        runner = BenchRunner(FakeSampler(), stepping_clock(2.0))
        result = runner.run(Contender("noop", _noop), lambda: None, 1, 4, fixture_id="f.json")
        assert result.fixture_id == "f.json"
        assert result.mean_ms == pytest.approx(2.0)
        assert result.ops_per_second == pytest.approx(500.0)

    def test_zero_measured_iterations_rejected(self):
        runner = BenchRunner(FakeSampler())
        with pytest.raises(ConfigurationError) as exc_info:
            runner.run(Contender("noop", _noop), lambda: None, 0, 0)
        assert exc_info.value.config_key == "measured_iterations"

    def test_negative_warmup_rejected(self):
        runner = BenchRunner(FakeSampler())
        with pytest.raises(ConfigurationError):
            runner.run(Contender("noop", _noop), lambda: None, -1, 3)


class TestThroughput:
    """Test wall-clock timing against a sleep-based contender."""

    def test_ten_millisecond_contender(self):
        contender = Contender("sleepy", lambda data: time.sleep(0.01))
        runner = BenchRunner(FakeSampler(), Clock())
        result = runner.run(contender, lambda: None, 1, 5)
        assert result.min_ms >= 9.0
        assert result.ops_per_second == pytest.approx(100.0, rel=0.3)


class TestMemoryAttribution:
    """Test snapshot ordering, reclaim cadence and delta clamping."""

    def test_negative_delta_clamped(self):
        sampler = FakeSampler([
            MemorySnapshot(heap_used_bytes=5000, resident_set_bytes=100),
            MemorySnapshot(heap_used_bytes=1200, resident_set_bytes=90, heap_peak_bytes=5100),
        ])
        runner = BenchRunner(sampler, stepping_clock(), memory_tracking=True)
        result = runner.run(Contender("noop", _noop), lambda: None, 0, 1)
        sample = result.samples[0]
        assert sample.heap_delta_bytes == 0
        assert sample.peak_heap_bytes == 5100
        assert sample.peak_rss_bytes == 90

    @given(
        st.integers(min_value=0, max_value=2**40),
        st.integers(min_value=0, max_value=2**40),
        st.integers(min_value=0, max_value=2**40),
    )
    @settings(max_examples=50)
    def test_delta_never_negative(self, heap_before, heap_after, rss_after):
        sampler = FakeSampler([
            MemorySnapshot(heap_used_bytes=heap_before, resident_set_bytes=0),
            MemorySnapshot(heap_used_bytes=heap_after, resident_set_bytes=rss_after),
        ])
        runner = BenchRunner(sampler, stepping_clock(), memory_tracking=True)
        sample = runner.run(Contender("noop", _noop), lambda: None, 0, 1).samples[0]
        assert sample.heap_delta_bytes == max(0, heap_after - heap_before)
        assert sample.peak_heap_bytes >= heap_after
        assert sample.peak_rss_bytes == rss_after

    def test_positive_delta_recorded(self):
        sampler = FakeSampler([
            MemorySnapshot(heap_used_bytes=1000, resident_set_bytes=100),
            MemorySnapshot(heap_used_bytes=1800, resident_set_bytes=120, heap_peak_bytes=2000),
        ])
        runner = BenchRunner(sampler, stepping_clock(), memory_tracking=True)
        result = runner.run(Contender("noop", _noop), lambda: None, 0, 1)
        assert result.samples[0].heap_delta_bytes == 800
        assert result.avg_heap_delta_bytes == pytest.approx(800.0)
        assert result.peak_heap_bytes == 2000
        assert result.peak_rss_bytes == 120

    def test_no_memory_fields_without_tracking(self):
        sampler = FakeSampler()
        result = BenchRunner(sampler, stepping_clock()).run(Contender("noop", _noop), lambda: None, 0, 3)
        assert "snapshot" not in sampler.calls
        assert result.peak_heap_bytes is None
        assert result.avg_heap_delta_bytes is None

    def test_reclaim_cadence(self):
        sampler = FakeSampler()
        runner = BenchRunner(sampler, stepping_clock(), reclaim=True, reclaim_cadence=3)
        runner.run(Contender("noop", _noop), lambda: None, 2, 7)
        # measured iterations 0, 3 and 6; iteration 0 doubles as the pre-measurement collection
        assert sampler.reclaims == 3

    def test_no_back_to_back_collection_after_warmup(self):
        sampler = FakeSampler()
        contender = Contender("noop", lambda data: sampler.calls.append("call"))
        runner = BenchRunner(sampler, stepping_clock(), reclaim=True, reclaim_cadence=5)
        runner.run(contender, lambda: None, 2, 1)
        assert sampler.calls == ["call", "call", "reclaim", "call"]

    def test_output_allocation_attributed(self):
        """A contender returning ~1 MB reports a heap delta of the same order."""
        if tracemalloc.is_tracing():
            pytest.skip("tracemalloc already active")
        contender = Contender("allocating", lambda data: bytearray(1_000_000))
        with ProcessMemorySampler(trace_heap=True) as sampler:
            runner = BenchRunner(sampler, memory_tracking=True, reclaim=True)
            result = runner.run(contender, lambda: None, 1, 5)
        assert 900_000 < result.avg_heap_delta_bytes < 2_000_000
        assert result.peak_heap_bytes >= 1_000_000

    def test_reclaim_disabled(self):
        sampler = FakeSampler()
        BenchRunner(sampler, stepping_clock(), reclaim=False).run(Contender("noop", _noop), lambda: None, 2, 7)
        assert sampler.reclaims == 0

    def test_event_order_keeps_timed_region_clean(self):
        """Input production and reclaim happen before the before-snapshot, never inside the call."""
        sampler = FakeSampler()
        contender = Contender("noop", lambda data: sampler.calls.append("call"))

        def produce():
            sampler.calls.append("produce")
            return {}

        runner = BenchRunner(sampler, stepping_clock(), memory_tracking=True, reclaim=True, reclaim_cadence=1)
        runner.run(contender, produce, 0, 2)
        per_iteration = ["produce", "reclaim", "snapshot", "reset_peak", "call", "snapshot"]
        assert sampler.calls == per_iteration * 2


class TestInputCloning:
    """Test per-iteration input isolation for mutating contenders."""

    def test_mutating_contender_gets_fresh_copy(self):
        fixture = Fixture(id="f.json", value={"keep": 1, "drop": None, "nested": {"gone": ""}})
        seen = []

        def recording_clean(data):
            seen.append(dict(data))
            return clean_in_place(data)

        contender = Contender("in_place", recording_clean, mutates_input=True)
        BenchRunner(FakeSampler(), stepping_clock()).run_fixture(contender, fixture, 2, 3)
        assert len(seen) == 5
        assert all(set(s) == {"keep", "drop", "nested"} for s in seen)
        assert fixture.value == {"keep": 1, "drop": None, "nested": {"gone": ""}}

    def test_pure_contender_shares_value(self):
        fixture = Fixture(id="f.json", value={"a": 1})
        ids = []
        contender = Contender("pure", lambda data: ids.append(id(data)))
        BenchRunner(FakeSampler(), stepping_clock()).run_fixture(contender, fixture, 1, 3)
        assert set(ids) == {id(fixture.value)}

    def test_factory_called_per_iteration(self):
        made = []

        def factory():
            made.append(1)
            return [None]

        fixture = Fixture(id="gen", factory=factory)
        BenchRunner(FakeSampler(), stepping_clock()).run_fixture(Contender("noop", _noop), fixture, 2, 3)
        assert len(made) == 5


class TestContenderFailures:
    """Test that contender exceptions surface as ContenderError with context."""

    def test_measurement_failure(self):
        calls = []

        def flaky(data):
            calls.append(data)
            if len(calls) == 4:
                raise ValueError("bad input")

        runner = BenchRunner(FakeSampler(), stepping_clock())
        with pytest.raises(ContenderError) as exc_info:
            runner.run(Contender("flaky", flaky), lambda: None, 1, 5, fixture_id="f.json")
        err = exc_info.value
        assert err.contender_name == "flaky"
        assert err.fixture_id == "f.json"
        assert err.stage == "measurement"
        assert err.iteration == 2
        assert isinstance(err.original_error, ValueError)

    def test_warmup_failure(self):
        def broken(data):
            raise KeyError("missing")

        runner = BenchRunner(FakeSampler(), stepping_clock())
        with pytest.raises(ContenderError) as exc_info:
            runner.run(Contender("broken", broken), lambda: None, 2, 5)
        assert exc_info.value.stage == "warmup"
        assert exc_info.value.iteration == 0

    def test_producer_failure(self):
        def producer():
            raise RuntimeError("cannot build input")

        runner = BenchRunner(FakeSampler(), stepping_clock())
        with pytest.raises(ContenderError) as exc_info:
            runner.run(Contender("noop", _noop), producer, 0, 2)
        assert exc_info.value.stage == "input"


class TestFromConfig:
    """Test BenchRunner.from_config reclaim resolution."""

    def test_auto_reclaim_when_supported(self):
        runner = BenchRunner.from_config(BenchmarkConfig(reclaim_hint=None), FakeSampler(reclaim_supported=True))
        assert runner.reclaim is True

    def test_requested_but_unsupported_degrades(self, caplog):
        with caplog.at_level(logging.WARNING):
            runner = BenchRunner.from_config(
                BenchmarkConfig(reclaim_hint=True),
                FakeSampler(reclaim_supported=False),
            )
        assert runner.reclaim is False
        assert "unsupported" in caplog.text

    def test_disabled_hint(self):
        runner = BenchRunner.from_config(BenchmarkConfig(reclaim_hint=False), FakeSampler())
        assert runner.reclaim is False

    def test_config_values_carried(self):
        config = BenchmarkConfig(memory_tracking=True, reclaim_cadence=7)
        runner = BenchRunner.from_config(config, FakeSampler())
        assert runner.memory_tracking is True
        assert runner.reclaim_cadence == 7
