"""Custom exception hierarchy for benchmark sessions.

Configuration problems are raised before any measurement starts. Contender
failures carry enough context (contender, fixture, stage, iteration) to
reproduce the failing call.
"""

from __future__ import annotations

from typing import Any, Optional


class BenchmarkError(Exception):
    """Base exception for all benchmark-related errors."""
    pass


class ConfigurationError(BenchmarkError):
    """Raised when benchmark configuration is invalid.

    Attributes:
        config_key: Configuration key that is invalid
        config_value: Invalid value
        reason: Reason for invalidity
    """

    def __init__(
        self,
        message: str,
        config_key: str,
        config_value: Any,
        reason: str,
    ):
        super().__init__(message)
        self.config_key = config_key
        self.config_value = config_value
        self.reason = reason


class ContenderError(BenchmarkError):
    """Raised when a contender's operation fails during a benchmark.

    Attributes:
        contender_name: Name of the contender that failed
        fixture_id: Fixture being processed when the failure happened
        stage: 'warmup', 'measurement' or 'input'
        iteration: Zero-based iteration index within the stage
        original_error: The exception raised by the contender
    """

    def __init__(
        self,
        message: str,
        contender_name: str,
        fixture_id: Optional[str],
        stage: str,
        iteration: int,
        original_error: Exception | None = None,
    ):
        super().__init__(message)
        self.contender_name = contender_name
        self.fixture_id = fixture_id
        self.stage = stage
        self.iteration = iteration
        self.original_error = original_error


class FixtureLoadError(BenchmarkError):
    """Raised when a fixture file cannot be loaded.

    Attributes:
        path: Path that failed to load
        reason: Reason for failure
    """

    def __init__(
        self,
        message: str,
        path: str,
        reason: str,
    ):
        super().__init__(message)
        self.path = path
        self.reason = reason
