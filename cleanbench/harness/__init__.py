"""Benchmark harness core: clock, memory sampler, statistics, runner, ordering, aggregation."""
