"""Configuration classes for benchmark execution."""

from __future__ import annotations

from dataclasses import dataclass
import math
import os
from typing import Optional

from .errors import ConfigurationError

MIN_WARMUP_RUNS = 3


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from e


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from e


def default_warmup_count(sample_count: int) -> int:
    """Return the warm-up count used when none is configured: 10% of N, at least 3."""
    return max(MIN_WARMUP_RUNS, math.ceil(sample_count * 0.1))


@dataclass(frozen=True)
class BenchmarkConfig:
    """Configuration for a comparison run.

    Attributes:
        sample_count: Number of timed runs per (case, size) cell (default: 100)
        warmup_count: Number of discarded runs before timing (default: 10% of
            sample_count, at least 3)
        resamples: Bootstrap resample count for the confidence interval (default: 1000)
        confidence: Confidence level of the interval (default: 0.95)
        outlier_fence: IQR multiplier for outlier rejection (default: 1.5)
        seed: Seed for bootstrap resampling (default: 0)
        verbose: Enable progress logging at INFO level (default: False)
    """

    sample_count: int = 100
    warmup_count: Optional[int] = None
    resamples: int = 1000
    confidence: float = 0.95
    outlier_fence: float = 1.5
    seed: int = 0
    verbose: bool = False

    def __post_init__(self):
        """Validate configuration values."""
        if self.sample_count < 1:
            raise ConfigurationError("sample_count must be at least 1")
        if self.warmup_count is not None and self.warmup_count < 0:
            raise ConfigurationError("warmup_count must be non-negative")
        if self.resamples < 1:
            raise ConfigurationError("resamples must be at least 1")
        if not 0.0 < self.confidence < 1.0:
            raise ConfigurationError("confidence must be between 0 and 1")
        if self.outlier_fence < 0:
            raise ConfigurationError("outlier_fence must be non-negative")

    @property
    def effective_warmup_count(self) -> int:
        if self.warmup_count is None:
            return default_warmup_count(self.sample_count)
        return self.warmup_count

    @classmethod
    def from_env(cls) -> BenchmarkConfig:
        """Build a configuration from MICROBENCH_* environment variables."""
        return cls(
            sample_count=_env_int("MICROBENCH_SAMPLES", 100),
            warmup_count=_env_int("MICROBENCH_WARMUP", None),
            resamples=_env_int("MICROBENCH_RESAMPLES", 1000),
            confidence=_env_float("MICROBENCH_CONFIDENCE", 0.95),
            outlier_fence=_env_float("MICROBENCH_OUTLIER_FENCE", 1.5),
            seed=_env_int("MICROBENCH_SEED", 0),
            verbose=_env_bool("MICROBENCH_VERBOSE", default=False),
        )
