"""Comparison report: grouping, ranking and speedup ratios."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import math
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from .metrics import SampleSet
from .summary import Estimate

RECORD_FIELDS = ["case", "size", "central", "low", "high", "samples", "outliers", "speedup"]


@dataclass(frozen=True)
class ComparisonRow:
    """One measured cell of the variant x size matrix.

    `speedup` is None until the row has been ranked by a ComparisonReport.
    """

    name: str
    size: int
    estimate: Estimate
    speedup: Optional[float] = None

    @property
    def central(self) -> float:
        return self.estimate.central

    def to_record(self) -> Dict[str, Any]:
        """Flat dict with RECORD_FIELDS keys, times in nanoseconds."""
        return {
            "case": self.name,
            "size": self.size,
            "central": self.estimate.central,
            "low": self.estimate.lower,
            "high": self.estimate.upper,
            "samples": self.estimate.count,
            "outliers": self.estimate.rejected,
            "speedup": self.speedup,
        }


@dataclass(frozen=True)
class CellFailure:
    """A (case, size) cell that produced no row."""

    name: str
    size: int
    kind: str
    message: str


def _speedup(central: float, fastest: float) -> float:
    if fastest == 0:
        return 1.0 if central == 0 else math.inf
    return central / fastest


class ComparisonReport:
    """Rows grouped by input size, fastest first within each group."""

    def __init__(self, groups: Dict[int, List[ComparisonRow]]):
        self.groups = groups

    @classmethod
    def from_rows(cls, rows: List[ComparisonRow]) -> ComparisonReport:
        """Group rows by size and rank each group.

        Args:
            rows: Rows in driver emission order. Ties keep this order.

        Returns:
            A report whose sizes ascend and whose rows carry speedups
            relative to the fastest row of their size.
        """
        by_size: Dict[int, List[ComparisonRow]] = {}
        for row in rows:
            by_size.setdefault(row.size, []).append(row)

        groups: Dict[int, List[ComparisonRow]] = {}
        for size in sorted(by_size):
            ranked = sorted(by_size[size], key=lambda r: r.central)
            fastest = ranked[0].central
            groups[size] = [replace(r, speedup=_speedup(r.central, fastest)) for r in ranked]
        return cls(groups)

    @property
    def rows(self) -> List[ComparisonRow]:
        """All rows, ordered by size and then by rank."""
        return [row for group in self.groups.values() for row in group]

    def __len__(self) -> int:
        return sum(len(group) for group in self.groups.values())

    def sizes(self) -> List[int]:
        """Measured input sizes.

        Returns:
            Sizes with at least one row, in ascending order.
        """
        return list(self.groups)

    def names(self) -> List[str]:
        """Case names that produced at least one row.

        Returns:
            Names in order of first appearance across the report.
        """
        seen: Dict[str, None] = {}
        for row in self.rows:
            seen.setdefault(row.name, None)
        return list(seen)

    def winner(self, size: int) -> ComparisonRow:
        """Fastest row at one size.

        Args:
            size: A size present in the report.

        Returns:
            The first-ranked row of that size's group.

        Raises:
            KeyError: if nothing was measured at `size`.
        """
        return self.groups[size][0]

    def get(self, name: str, size: int) -> Optional[ComparisonRow]:
        """Look up one cell.

        Args:
            name: Case name.
            size: Input size.

        Returns:
            The matching row, or None when that cell has no measurement.
        """
        for row in self.groups.get(size, []):
            if row.name == name:
                return row
        return None

    def speedup(self, name: str, size: int) -> float:
        """Speedup of `name` relative to the fastest case at `size`."""
        row = self.get(name, size)
        if row is None:
            raise KeyError(f"no row for {name!r} at size {size}")
        return row.speedup

    def ratio(self, numerator: str, denominator: str, size: int) -> float:
        """central(numerator) / central(denominator) at `size`."""
        top = self.get(numerator, size)
        bottom = self.get(denominator, size)
        if top is None or bottom is None:
            raise KeyError(f"missing {numerator!r} or {denominator!r} at size {size}")
        return _speedup(top.central, bottom.central)

    def scaling_exponent(self, name: str) -> float:
        """Slope of log(central) over log(size) for one case.

        Roughly 1 for linear algorithms and 2 for quadratic ones.
        """
        points = [
            (row.size, row.central)
            for row in self.rows
            if row.name == name and row.size > 0 and row.central > 0
        ]
        if len({size for size, _ in points}) < 2:
            raise ValueError(f"need at least two positive sizes to fit scaling for {name!r}")
        sizes = np.log([size for size, _ in points])
        times = np.log([central for _, central in points])
        slope, _intercept = np.polyfit(sizes, times, 1)
        return float(slope)

    def to_records(self) -> List[Dict[str, Any]]:
        """Flatten the report for export.

        Returns:
            One dict per row, keyed by RECORD_FIELDS.
        """
        return [row.to_record() for row in self.rows]

    def to_dataframe(self) -> pd.DataFrame:
        """Report as a pandas DataFrame.

        Returns:
            The records with RECORD_FIELDS columns. The frame is empty but
            keeps its columns when nothing was measured.
        """
        return pd.DataFrame(self.to_records(), columns=RECORD_FIELDS)

    def summary_lines(self) -> List[str]:
        """Human-readable table lines, times in microseconds."""
        lines = []
        for size, group in self.groups.items():
            lines.append(f"Size {size}:")
            for row in group:
                est = row.estimate
                lines.append(
                    f"  {row.name}: {est.central / 1000.0:.2f}us "
                    f"[{est.lower / 1000.0:.2f}, {est.upper / 1000.0:.2f}] "
                    f"{row.speedup:.1f}x"
                )
        return lines


@dataclass
class ComparisonRun:
    """Everything produced by one driver invocation."""

    report: ComparisonReport
    failures: List[CellFailure] = field(default_factory=list)
    sample_sets: Dict[Tuple[str, int], SampleSet] = field(default_factory=dict)

    @property
    def rows(self) -> List[ComparisonRow]:
        return self.report.rows

    @property
    def ok(self) -> bool:
        """True when every applicable cell produced a row."""
        return not self.failures
