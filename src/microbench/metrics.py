"""Sample collection and timing utilities."""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass
import logging
import os
import time
from typing import Any, Callable, Optional

import psutil

from .config import default_warmup_count
from .errors import CallableFailure, ConfigurationError

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


@contextmanager
def time_execution(clock: Clock = time.perf_counter_ns) -> Generator[dict[str, float], None, None]:
    """Context manager for timing a block of code.

    Yields a dictionary that receives 'duration_ns' and 'duration_ms' keys
    when the block exits.

    Example:
        with time_execution() as timing:
            result = parse(text)
        duration = timing['duration_ms']
    """
    start = clock()
    timing: dict[str, float] = {}
    try:
        yield timing
    finally:
        end = clock()
        timing["duration_ns"] = float(end - start)
        timing["duration_ms"] = (end - start) / 1_000_000.0


def collect_memory_usage() -> dict[str, float]:
    """Return the resident memory of this process as {'memory_mb': ...}."""
    process = psutil.Process(os.getpid())
    return {"memory_mb": process.memory_info().rss / (1024 * 1024)}


class Sink:
    """Observes every value produced by a measured call.

    Holding a reference to each result keeps the call's work observable, so
    no result is ever dead. The sink owns its state; nothing is module-global.
    """

    __slots__ = ("last", "count")

    def __init__(self):
        self.last: Any = None
        self.count = 0

    def consume(self, value: Any) -> Any:
        self.last = value
        self.count += 1
        return value


@dataclass(frozen=True)
class SampleSet:
    """Elapsed durations in nanoseconds for one case at one input size."""

    samples: tuple[int, ...]
    name: str = ""
    size: int = 0
    warmup_count: int = 0
    memory_mb: Optional[float] = None

    def __len__(self) -> int:
        return len(self.samples)

    def __iter__(self):
        return iter(self.samples)


class SampleCollector:
    """Runs a zero-argument callable repeatedly and records per-call durations.

    Args:
        sample_count: Number of timed runs (N)
        warmup_count: Number of discarded runs before timing; defaults to
            10% of N with a minimum of 3
        clock: Monotonic nanosecond clock, injectable for tests
        record_memory: Capture process RSS after collection via psutil
    """

    def __init__(
        self,
        sample_count: int = 100,
        warmup_count: Optional[int] = None,
        clock: Clock = time.perf_counter_ns,
        record_memory: bool = True,
    ):
        if sample_count < 1:
            raise ConfigurationError("sample_count must be at least 1")
        if warmup_count is None:
            warmup_count = default_warmup_count(sample_count)
        if warmup_count < 0:
            raise ConfigurationError("warmup_count must be non-negative")
        self.sample_count = sample_count
        self.warmup_count = warmup_count
        self.clock = clock
        self.record_memory = record_memory

    def collect(
        self,
        func: Callable[[], Any],
        sink: Optional[Sink] = None,
        name: str = "",
        size: int = 0,
    ) -> SampleSet:
        """Warm up, then time `func` sample_count times.

        Raises:
            CallableFailure: if `func` raises during warm-up or measurement.
        """
        if sink is None:
            sink = Sink()
        consume = sink.consume
        clock = self.clock

        index = 0
        try:
            for index in range(self.warmup_count):
                consume(func())
        except Exception as e:
            raise CallableFailure(name, index, phase="warm-up") from e

        durations = [0] * self.sample_count
        try:
            for index in range(self.sample_count):
                start = clock()
                value = func()
                end = clock()
                consume(value)
                durations[index] = end - start
        except Exception as e:
            raise CallableFailure(name, index, phase="measure") from e

        memory_mb = collect_memory_usage()["memory_mb"] if self.record_memory else None
        logger.debug("Collected %d samples for %s at size %d", self.sample_count, name or "<unnamed>", size)
        return SampleSet(
            samples=tuple(durations),
            name=name,
            size=size,
            warmup_count=self.warmup_count,
            memory_mb=memory_mb,
        )


def collect_samples(
    func: Callable[[], Any],
    sample_count: int = 100,
    warmup_count: Optional[int] = None,
    sink: Optional[Sink] = None,
    clock: Clock = time.perf_counter_ns,
    name: str = "",
    size: int = 0,
) -> SampleSet:
    """Collect a SampleSet for `func` with a one-off SampleCollector."""
    collector = SampleCollector(sample_count, warmup_count, clock=clock)
    return collector.collect(func, sink=sink, name=name, size=size)
