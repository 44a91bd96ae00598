"""Error taxonomy for benchmark runs."""

from __future__ import annotations


class MicrobenchError(Exception):
    """Base class for all harness errors."""


class ConfigurationError(MicrobenchError, ValueError):
    """Invalid run configuration. Fatal to the run, never retried."""


class InsufficientSamplesError(MicrobenchError):
    """Outlier rejection left too few samples to summarize."""

    def __init__(self, retained: int, total: int, minimum: int = 3):
        self.retained = retained
        self.total = total
        self.minimum = minimum
        super().__init__(
            f"only {retained} of {total} samples retained after outlier rejection "
            f"(need at least {minimum})"
        )


class CallableFailure(MicrobenchError):
    """The implementation under test raised while being sampled."""

    def __init__(self, name: str, sample_index: int, phase: str = "measure"):
        self.name = name
        self.sample_index = sample_index
        self.phase = phase
        label = name or "<unnamed>"
        super().__init__(f"{label} failed during {phase} run {sample_index}")
