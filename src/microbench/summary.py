"""Robust summary statistics for timing samples.

Samples are sorted, filtered with the standard IQR outlier fence, and the
mean of the retained samples is reported together with a percentile
bootstrap confidence interval. Resampling uses a seeded numpy Generator so
identical samples always produce identical intervals.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np

from .errors import ConfigurationError, InsufficientSamplesError

MIN_RETAINED_SAMPLES = 3


@dataclass(frozen=True)
class Estimate:
    """Central value with a confidence interval, in the samples' time unit.

    Attributes:
        central: Mean of the retained samples
        lower: Lower confidence bound
        upper: Upper confidence bound
        count: Number of samples retained after outlier rejection
        rejected: Number of samples discarded as outliers
    """

    central: float
    lower: float
    upper: float
    count: int
    rejected: int = 0

    def __post_init__(self):
        if self.count < MIN_RETAINED_SAMPLES:
            raise ValueError(f"an estimate needs at least {MIN_RETAINED_SAMPLES} retained samples")
        if not self.lower <= self.central <= self.upper:
            raise ValueError(
                f"interval [{self.lower}, {self.upper}] does not contain {self.central}"
            )

    @property
    def interval(self) -> tuple[float, float]:
        return (self.lower, self.upper)

    @property
    def width(self) -> float:
        return self.upper - self.lower

    @property
    def relative_width(self) -> float:
        """Interval width as a fraction of the central value (0.0 when central is 0)."""
        if self.central == 0:
            return 0.0
        return self.width / self.central

    def overlaps(self, other: Estimate) -> bool:
        """True when the two confidence intervals intersect."""
        return self.lower <= other.upper and other.lower <= self.upper


def reject_outliers(values: np.ndarray, fence: float = 1.5) -> np.ndarray:
    """Return the sorted values inside [Q1 - fence*IQR, Q3 + fence*IQR]."""
    ordered = np.sort(values)
    if ordered.size == 0:
        return ordered
    q1, q3 = np.percentile(ordered, [25, 75])
    iqr = q3 - q1
    keep = (ordered >= q1 - fence * iqr) & (ordered <= q3 + fence * iqr)
    return ordered[keep]


def bootstrap_interval(
    values: np.ndarray,
    resamples: int = 1000,
    confidence: float = 0.95,
    seed: int = 0,
) -> tuple[float, float]:
    """Percentile bootstrap interval for the mean of `values`."""
    rng = np.random.default_rng(seed)
    n = values.size
    means = np.empty(resamples)
    # Chunked so large sample sets don't materialize a resamples x n index matrix
    chunk = max(1, 1_000_000 // n)
    for start in range(0, resamples, chunk):
        stop = min(start + chunk, resamples)
        indices = rng.integers(0, n, size=(stop - start, n))
        means[start:stop] = values[indices].mean(axis=1)
    alpha = (1.0 - confidence) / 2.0
    lower, upper = np.quantile(means, [alpha, 1.0 - alpha])
    return float(lower), float(upper)


class Summarizer:
    """Turns SampleSets into Estimates with fixed statistical settings."""

    def __init__(
        self,
        resamples: int = 1000,
        confidence: float = 0.95,
        fence: float = 1.5,
        seed: int = 0,
    ):
        if resamples < 1:
            raise ConfigurationError("resamples must be at least 1")
        if not 0.0 < confidence < 1.0:
            raise ConfigurationError("confidence must be between 0 and 1")
        if fence < 0:
            raise ConfigurationError("fence must be non-negative")
        self.resamples = resamples
        self.confidence = confidence
        self.fence = fence
        self.seed = seed

    def summarize(self, samples: Iterable[float]) -> Estimate:
        """Summarize raw samples.

        Raises:
            InsufficientSamplesError: if fewer than 3 samples survive the fence.
        """
        values = np.asarray(list(samples), dtype=float)
        retained = reject_outliers(values, self.fence)
        count = int(retained.size)
        if count < MIN_RETAINED_SAMPLES:
            raise InsufficientSamplesError(count, int(values.size), MIN_RETAINED_SAMPLES)
        rejected = int(values.size) - count

        if retained[0] == retained[-1]:
            value = float(retained[0])
            return Estimate(value, value, value, count, rejected)

        central = float(retained.mean())
        lower, upper = bootstrap_interval(retained, self.resamples, self.confidence, self.seed)
        return Estimate(
            central=central,
            lower=min(lower, central),
            upper=max(upper, central),
            count=count,
            rejected=rejected,
        )


def summarize(
    samples: Iterable[float],
    resamples: int = 1000,
    confidence: float = 0.95,
    fence: float = 1.5,
    seed: int = 0,
) -> Estimate:
    """Summarize samples with a one-off Summarizer."""
    return Summarizer(resamples, confidence, fence, seed).summarize(samples)
