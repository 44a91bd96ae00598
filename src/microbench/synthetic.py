"""Synthetic input generation matched to a reference data profile.

Generated datasets are two integer columns, the shape of the two-list puzzle
inputs the harness was built around. Every random decision is a SplitMix64
hash of (seed, stream, counter) scaled into its target range, so element
position never leaks into the value distribution and the relative shape of
the data is the same at every size.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Optional

from .errors import ConfigurationError

MASK64 = (1 << 64) - 1

DEFAULT_TOLERANCE = 0.02

# Independent hash streams, one per decision.
_LEFT_VALUES = 0x01
_LEFT_SLOTS = 0x02
_LEFT_ORDER = 0x03
_SHARED_PICK = 0x11
_SHARED_SLOTS = 0x12
_FRESH_VALUES = 0x13
_FRESH_SLOTS = 0x14
_RIGHT_ORDER = 0x15


def splitmix64(x: int) -> int:
    """SplitMix64 finalizer over a 64-bit integer."""
    x = (x + 0x9E3779B97F4A7C15) & MASK64
    x = ((x ^ (x >> 30)) * 0xBF58476D1CE4E5B9) & MASK64
    x = ((x ^ (x >> 27)) * 0x94D049BB133111EB) & MASK64
    return x ^ (x >> 31)


def counter_hash(seed: int, stream: int, counter: int) -> int:
    """Stateless 64-bit hash of one (seed, stream, counter) triple.

    Args:
        seed: Dataset seed. Only the low 64 bits are used.
        stream: Constant that separates independent uses of the same seed.
        counter: Position within the stream.

    Returns:
        An integer in [0, 2**64).
    """
    return splitmix64(splitmix64(splitmix64(seed & MASK64) ^ stream) ^ (counter & MASK64))


def _scale(h: int, n: int) -> int:
    # Multiply-shift maps a 64-bit hash uniformly onto [0, n)
    return (h * n) >> 64


def _duplicate_ratio(values: Sequence[int]) -> float:
    if not values:
        return 0.0
    return 1.0 - len(set(values)) / len(values)


@dataclass(frozen=True)
class DataProfile:
    """Descriptive statistics of a reference dataset.

    Attributes:
        low: Smallest value (inclusive)
        high: Largest value (inclusive)
        duplicate_ratio: 1 - distinct/length, averaged over both columns
        overlap_ratio: Fraction of right-column elements whose value occurs in the left column
        size: Length of the reference columns
    """

    low: int
    high: int
    duplicate_ratio: float
    overlap_ratio: float
    size: int = 0

    def __post_init__(self):
        if self.low > self.high:
            raise ConfigurationError("low must not exceed high")
        if not 0.0 <= self.duplicate_ratio < 1.0:
            raise ConfigurationError("duplicate_ratio must be in [0, 1)")
        if not 0.0 <= self.overlap_ratio <= 1.0:
            raise ConfigurationError("overlap_ratio must be in [0, 1]")
        if self.size < 0:
            raise ConfigurationError("size must be non-negative")

    @property
    def span(self) -> int:
        return self.high - self.low + 1

    @classmethod
    def from_reference(cls, left: Iterable[int], right: Iterable[int]) -> DataProfile:
        """Profile a real two-column dataset."""
        left = list(left)
        right = list(right)
        if not left or not right:
            raise ConfigurationError("reference columns must not be empty")
        left_values = set(left)
        overlap = sum(1 for value in right if value in left_values) / len(right)
        return cls(
            low=min(min(left), min(right)),
            high=max(max(left), max(right)),
            duplicate_ratio=(_duplicate_ratio(left) + _duplicate_ratio(right)) / 2.0,
            overlap_ratio=overlap,
            size=len(left),
        )

    def matches(self, other: DataProfile, tolerance: float = DEFAULT_TOLERANCE) -> bool:
        """True when `other` is representative of this profile.

        Both ratios must be within `tolerance` (absolute) and `other`'s values
        must fall inside this profile's range.
        """
        return (
            abs(self.duplicate_ratio - other.duplicate_ratio) <= tolerance
            and abs(self.overlap_ratio - other.overlap_ratio) <= tolerance
            and self.low <= other.low
            and other.high <= self.high
        )


@dataclass(frozen=True)
class SyntheticDataset:
    left: tuple[int, ...]
    right: tuple[int, ...]

    def __len__(self) -> int:
        return len(self.left)

    def pairs(self) -> list[tuple[int, int]]:
        """(left, right) tuples, one per row."""
        return list(zip(self.left, self.right))

    def to_text(self, separator: str = "   ") -> str:
        """Render as one 'left<separator>right' line per element."""
        return "\n".join(f"{a}{separator}{b}" for a, b in zip(self.left, self.right))


def measure_profile(dataset: SyntheticDataset) -> DataProfile:
    """Profile a generated dataset the same way reference data is profiled.

    Args:
        dataset: A non-empty dataset.

    Returns:
        The dataset's measured DataProfile.

    Raises:
        ConfigurationError: if the dataset is empty.
    """
    return DataProfile.from_reference(dataset.left, dataset.right)


def _distinct_values(
    seed: int,
    stream: int,
    count: int,
    low: int,
    high: int,
    exclude: Optional[set[int]] = None,
) -> list[int]:
    """Pick `count` distinct values in [low, high], none of them in `exclude`.

    Smaller counts always yield a prefix of larger ones for the same seed.
    """
    exclude = exclude or set()
    span = high - low + 1
    if count > span - len(exclude):
        raise ConfigurationError(
            f"value range [{low}, {high}] cannot hold {count} distinct values"
        )
    if count == 0:
        return []

    if span <= 4 * (count + len(exclude)):
        candidates = [v for v in range(low, high + 1) if v not in exclude]
        candidates.sort(key=lambda v: counter_hash(seed, stream, v))
        return candidates[:count]

    chosen: list[int] = []
    seen: set[int] = set()
    counter = 0
    while len(chosen) < count:
        value = low + _scale(counter_hash(seed, stream, counter), span)
        counter += 1
        if value in exclude or value in seen:
            continue
        seen.add(value)
        chosen.append(value)
    return chosen


def _fill(seed: int, stream: int, distinct: Sequence[int], length: int) -> list[int]:
    """Every distinct value once, then hashed repeats up to `length`."""
    column = list(distinct[:length])
    k = len(distinct)
    for i in range(len(column), length):
        column.append(distinct[_scale(counter_hash(seed, stream, i), k)])
    return column


def _hash_order(seed: int, stream: int, column: list[int]) -> list[int]:
    order = sorted(range(len(column)), key=lambda i: counter_hash(seed, stream, i))
    return [column[i] for i in order]


def _distinct_count(size: int, duplicate_ratio: float) -> int:
    return min(size, max(1, round(size * (1.0 - duplicate_ratio))))


def generate(profile: DataProfile, size: int, seed: int = 0) -> SyntheticDataset:
    """Deterministically generate a two-column dataset of `size` elements.

    The left column has round(size * (1 - duplicate_ratio)) distinct values.
    round(size * overlap_ratio) right-column elements reuse left-column
    values; the rest come from values absent from the left column.

    Raises:
        ConfigurationError: for a negative size, or a profile range too
            narrow for the distinct values required at this size.
    """
    if size < 0:
        raise ConfigurationError("size must be non-negative")
    if size == 0:
        return SyntheticDataset((), ())

    distinct = _distinct_count(size, profile.duplicate_ratio)
    left_distinct = _distinct_values(seed, _LEFT_VALUES, distinct, profile.low, profile.high)
    left = _hash_order(seed, _LEFT_ORDER, _fill(seed, _LEFT_SLOTS, left_distinct, size))

    shared_len = round(size * profile.overlap_ratio)
    fresh_len = size - shared_len
    shared_distinct = round(distinct * profile.overlap_ratio)
    shared_distinct = min(max(shared_distinct, 1), shared_len, distinct) if shared_len else 0
    fresh_distinct = distinct - shared_distinct
    fresh_distinct = min(max(fresh_distinct, 1), fresh_len) if fresh_len else 0

    shared_pool = sorted(left_distinct, key=lambda v: counter_hash(seed, _SHARED_PICK, v))
    fresh_pool = _distinct_values(
        seed, _FRESH_VALUES, fresh_distinct, profile.low, profile.high, exclude=set(left_distinct)
    )
    right = _fill(seed, _SHARED_SLOTS, shared_pool[:shared_distinct], shared_len)
    right += _fill(seed, _FRESH_SLOTS, fresh_pool, fresh_len)
    right = _hash_order(seed, _RIGHT_ORDER, right)

    return SyntheticDataset(tuple(left), tuple(right))
