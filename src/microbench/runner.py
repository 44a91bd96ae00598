"""Isolation driver: times only the algorithmic body across a case x size matrix."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Iterable, List, Optional, Union

from .config import BenchmarkConfig
from .errors import CallableFailure, ConfigurationError, InsufficientSamplesError
from .metrics import Clock, SampleCollector, Sink
from .results import CellFailure, ComparisonReport, ComparisonRow, ComparisonRun
from .strategy import BenchmarkCase, CallableInput, InputStrategy
from .summary import Summarizer

logger = logging.getLogger(__name__)

Inputs = Union[InputStrategy, Callable[[int], Any]]


def _bind(function: Callable[[Any], Any], prepared: Any) -> Callable[[], Any]:
    def body():
        return function(prepared)

    return body


class IsolationDriver:
    """Runs every applicable (case, size) cell and ranks the results.

    Inputs are prepared once per size before any case at that size is timed,
    and shared by all cases, so parsing and construction never reach the
    timed region.

    The same prepared object is handed to every warm-up and measured call of
    every case at that size. Case functions must treat it as read-only: a
    case that sorts or mutates its input in place changes what later samples
    and later cases receive. Copy inside the case when mutation is part of
    the algorithm being measured.
    """

    def __init__(
        self,
        config: Optional[BenchmarkConfig] = None,
        clock: Clock = time.perf_counter_ns,
        record_memory: bool = True,
    ):
        self.config = config or BenchmarkConfig()
        self.collector = SampleCollector(
            self.config.sample_count,
            self.config.effective_warmup_count,
            clock=clock,
            record_memory=record_memory,
        )
        self.summarizer = Summarizer(
            resamples=self.config.resamples,
            confidence=self.config.confidence,
            fence=self.config.outlier_fence,
            seed=self.config.seed,
        )

    def run(
        self,
        cases: List[BenchmarkCase],
        sizes: Iterable[int],
        inputs: Inputs,
    ) -> ComparisonRun:
        """Measure every case at every size it applies to.

        Args:
            cases: Variants to compare. Names must be unique.
            sizes: Input sizes. Duplicates are dropped and sizes run in
                ascending order.
            inputs: An InputStrategy, or a plain `size -> input` callable
                that is wrapped in a CallableInput.

        Returns:
            A ComparisonRun holding the ranked report, per-cell failures and
            the raw SampleSet of every cell that was sampled.

        Raises:
            ConfigurationError: for an empty case list, an empty size list,
                a negative size or duplicate case names.
        """
        sizes = sorted(set(sizes))
        self._validate(cases, sizes)
        strategy = inputs if isinstance(inputs, InputStrategy) else CallableInput(inputs)

        if self.config.verbose:
            logger.info(
                "Starting comparison: %d cases x %d sizes, %d samples, %d warm-up runs",
                len(cases),
                len(sizes),
                self.collector.sample_count,
                self.collector.warmup_count,
            )

        rows: List[ComparisonRow] = []
        failures: List[CellFailure] = []
        sample_sets = {}
        failed_cases: set[str] = set()

        strategy.setup()
        try:
            for size in sizes:
                active = [c for c in cases if c.applies_to(size) and c.name not in failed_cases]
                if not active:
                    continue
                if self.config.verbose:
                    logger.info("Preparing input for size %d", size)
                prepared = strategy.prepare(size)

                for case in active:
                    sink = Sink()
                    try:
                        samples = self.collector.collect(
                            _bind(case.function, prepared), sink=sink, name=case.name, size=size
                        )
                    except CallableFailure as e:
                        cause = e.__cause__
                        logger.error("%s; skipping remaining sizes for %s: %r", e, case.name, cause)
                        failed_cases.add(case.name)
                        failures.append(CellFailure(case.name, size, "callable_failure", f"{e}: {cause!r}"))
                        continue
                    sample_sets[(case.name, size)] = samples

                    try:
                        estimate = self.summarizer.summarize(samples.samples)
                    except InsufficientSamplesError as e:
                        logger.warning("No estimate for %s at size %d: %s", case.name, size, e)
                        failures.append(CellFailure(case.name, size, "insufficient_samples", str(e)))
                        continue

                    rows.append(ComparisonRow(case.name, size, estimate))
                    if self.config.verbose:
                        logger.info(
                            "  %s @ %d: %.1fns [%.1f, %.1f] (%d kept, %d outliers)",
                            case.name,
                            size,
                            estimate.central,
                            estimate.lower,
                            estimate.upper,
                            estimate.count,
                            estimate.rejected,
                        )
        finally:
            strategy.teardown()

        report = ComparisonReport.from_rows(rows)
        if self.config.verbose:
            for line in report.summary_lines():
                logger.info(line)
        return ComparisonRun(report=report, failures=failures, sample_sets=sample_sets)

    @staticmethod
    def _validate(cases: List[BenchmarkCase], sizes: List[int]) -> None:
        if not cases:
            raise ConfigurationError("at least one benchmark case is required")
        if not sizes:
            raise ConfigurationError("at least one input size is required")
        if sizes[0] < 0:
            raise ConfigurationError("input sizes must be non-negative")
        names = [case.name for case in cases]
        if len(set(names)) != len(names):
            raise ConfigurationError("benchmark case names must be unique")


def run_comparison(
    cases: List[BenchmarkCase],
    sizes: Iterable[int],
    inputs: Inputs,
    config: Optional[BenchmarkConfig] = None,
) -> ComparisonRun:
    """Run a comparison with a one-off IsolationDriver."""
    return IsolationDriver(config).run(cases, sizes, inputs)
