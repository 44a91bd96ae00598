"""Benchmark cases and input preparation strategies."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .synthetic import DataProfile, SyntheticDataset, generate


@dataclass(frozen=True)
class BenchmarkCase:
    """One named implementation variant under test.

    Attributes:
        name: Label used in reports, e.g. "hashmap-functional"
        function: Callable receiving the prepared input and running only the algorithm
        sizes: Input sizes this case applies to (None means every size)
    """

    name: str
    function: Callable[[Any], Any]
    sizes: Optional[frozenset[int]] = None

    def __post_init__(self):
        if self.sizes is not None and not isinstance(self.sizes, frozenset):
            object.__setattr__(self, "sizes", frozenset(self.sizes))

    def applies_to(self, size: int) -> bool:
        """Whether this case is measured at `size`.

        Args:
            size: Input size of a matrix column.

        Returns:
            True when `sizes` is None or contains `size`.
        """
        return self.sizes is None or size in self.sizes


class InputStrategy(ABC):
    """Abstract base class for input preparation.

    The driver calls setup() once, prepare() once per input size, and
    teardown() once. Nothing here runs inside a timed region.
    """

    def setup(self) -> None:
        """One-time setup before any input is prepared."""

    @abstractmethod
    def prepare(self, size: int) -> Any:
        """Build the fully parsed input for `size`.

        Args:
            size: Input size tag of the current matrix column.

        Returns:
            The object passed to every BenchmarkCase function at this size.
        """

    def teardown(self) -> None:
        """Cleanup after all sizes are measured."""


class CallableInput(InputStrategy):
    """Adapts a plain `size -> input` function."""

    def __init__(self, build: Callable[[int], Any]):
        self.build = build

    def prepare(self, size: int) -> Any:
        return self.build(size)


class SyntheticInput(InputStrategy):
    """Generates profile-matched data and optionally parses its text form.

    Args:
        profile: Reference profile to match
        seed: Generator seed shared by every size
        parse: Optional parser applied to the dataset's text rendering; when
            given, cases receive the parser's output instead of the dataset
    """

    def __init__(
        self,
        profile: DataProfile,
        seed: int = 0,
        parse: Optional[Callable[[str], Any]] = None,
    ):
        self.profile = profile
        self.seed = seed
        self.parse = parse

    def prepare(self, size: int) -> Any:
        dataset: SyntheticDataset = generate(self.profile, size, self.seed)
        if self.parse is None:
            return dataset
        return self.parse(dataset.to_text())
