"""Benchmark session configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from cleanbench.benchmark.defaults import get_defaults
from cleanbench.benchmark.exceptions import ConfigurationError


def _get_default_value(attr_name: str, fallback):
    """Get default value from the global BenchmarkDefaults, with fallback."""
    return getattr(get_defaults(), attr_name, fallback)


@dataclass
class BenchmarkConfig:
    """Configuration for a benchmark session.

    Default values are read from BenchmarkDefaults at instance creation time,
    so ``set_defaults()`` affects configs created afterwards.

    Reclaim notes:
        - reclaim_hint=None enables the forced collection whenever the runtime
          supports it; True requests it (degrading with a warning when
          unsupported); False never forces a collection.
        - reclaim_cadence is the number of measured iterations between forced
          collections. Collecting before every iteration would hide the
          contender's own allocation behaviour.
    """
    warmup_iterations: int = field(default_factory=lambda: _get_default_value("warmup_iterations", 5))
    measured_iterations: int = field(default_factory=lambda: _get_default_value("measured_iterations", 50))
    memory_tracking: bool = field(default_factory=lambda: _get_default_value("memory_tracking", False))
    reclaim_hint: Optional[bool] = field(default_factory=lambda: _get_default_value("reclaim_hint", None))
    reclaim_cadence: int = field(default_factory=lambda: _get_default_value("reclaim_cadence", 3))
    shuffle: bool = field(default_factory=lambda: _get_default_value("shuffle", True))
    seed: Optional[int] = field(default_factory=lambda: _get_default_value("seed", None))

    def __post_init__(self):
        validate_iterations(self.warmup_iterations, self.measured_iterations)
        if self.reclaim_cadence < 1:
            raise ConfigurationError(
                f"reclaim_cadence must be a positive integer, got {self.reclaim_cadence}",
                config_key="reclaim_cadence",
                config_value=self.reclaim_cadence,
                reason="must be >= 1",
            )

    def resolve_reclaim(self, supported: bool) -> bool:
        """Whether forced collection is active for a sampler with the given support."""
        if self.reclaim_hint is None:
            return supported
        return bool(self.reclaim_hint) and supported


def validate_iterations(warmup_iterations: int, measured_iterations: int) -> None:
    """Fail fast on iteration counts that cannot produce a Result."""
    if warmup_iterations < 0:
        raise ConfigurationError(
            f"warmup_iterations must be >= 0, got {warmup_iterations}",
            config_key="warmup_iterations",
            config_value=warmup_iterations,
            reason="must be non-negative",
        )
    if measured_iterations < 1:
        raise ConfigurationError(
            f"measured_iterations must be >= 1, got {measured_iterations}",
            config_key="measured_iterations",
            config_value=measured_iterations,
            reason="a Result needs at least one measured sample",
        )
