"""Centralized default values for benchmark configuration.

This module provides a single source of truth for all default values used
throughout the benchmark harness. Defaults are overridden by passing values to
BenchmarkConfig directly or via CLI flags (e.g., --iterations, --warmup).

Warmup iterations exist so interpreter caches, lazily built lookup tables and
allocator pools reach steady state before timing starts.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


DEFAULT_WARMUP_ITERATIONS = 5
DEFAULT_MEASURED_ITERATIONS = 50
DEFAULT_RECLAIM_CADENCE = 3


@dataclass
class BenchmarkDefaults:
    """Centralized default values for benchmark configuration."""

    # Execution defaults
    warmup_iterations: int = DEFAULT_WARMUP_ITERATIONS
    measured_iterations: int = DEFAULT_MEASURED_ITERATIONS

    # Memory attribution
    memory_tracking: bool = False
    reclaim_hint: Optional[bool] = None  # None: use it when the runtime supports it
    reclaim_cadence: int = DEFAULT_RECLAIM_CADENCE

    # Fairness
    shuffle: bool = True
    seed: Optional[int] = None  # None: draw a fresh seed per session

    def to_dict(self) -> dict:
        """Convert defaults to dictionary."""
        return {
            "warmup_iterations": self.warmup_iterations,
            "measured_iterations": self.measured_iterations,
            "memory_tracking": self.memory_tracking,
            "reclaim_hint": self.reclaim_hint,
            "reclaim_cadence": self.reclaim_cadence,
            "shuffle": self.shuffle,
            "seed": self.seed,
        }


# Global instance - can be overridden for testing or custom configurations
_defaults = BenchmarkDefaults()


def get_defaults() -> BenchmarkDefaults:
    """Get the global BenchmarkDefaults instance."""
    return _defaults


def set_defaults(defaults: BenchmarkDefaults) -> None:
    """Set the global BenchmarkDefaults instance (useful for testing)."""
    global _defaults
    _defaults = defaults
