#!/usr/bin/env python3
"""Compare similarity-score implementations on profile-matched synthetic input."""

import argparse
from collections import Counter
import logging
from pathlib import Path
import sys

# Add src to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

from microbench import (  # noqa: E402
    BenchmarkCase,
    BenchmarkConfig,
    ConfigurationError,
    DataProfile,
    IsolationDriver,
    SyntheticInput,
)

DEFAULT_SIZES = [500, 1000, 2000, 5000, 8000, 12000]

# Shape of a typical two-column puzzle input: five-digit values, almost no
# repeats on the left, a small share of right values found on the left.
DEFAULT_PROFILE = DataProfile(low=10_000, high=99_999, duplicate_ratio=0.05, overlap_ratio=0.1)


def parse_pairs(text):
    left, right = [], []
    for line in text.splitlines():
        parts = line.split()
        if not parts:
            continue
        if len(parts) != 2:
            raise ValueError(f"Line must contain exactly two numbers: {line!r}")
        left.append(int(parts[0]))
        right.append(int(parts[1]))
    return left, right


def similarity_counter(columns):
    left, right = columns
    counts = Counter(right)
    return sum(value * counts[value] for value in left)


def similarity_loop(columns):
    left, right = columns
    counts = {}
    for value in right:
        counts[value] = counts.get(value, 0) + 1
    total = 0
    for value in left:
        total += value * counts.get(value, 0)
    return total


def similarity_naive(columns):
    left, right = columns
    return sum(a for a in left for b in right if a == b)


def main(argv=None):
    """Run the similarity-score comparison."""
    parser = argparse.ArgumentParser(description="Compare similarity-score implementations.")
    parser.add_argument(
        "--reference",
        type=Path,
        default=None,
        help="Two-column reference input to profile (default: built-in profile).",
    )
    parser.add_argument(
        "--sizes",
        default=",".join(str(s) for s in DEFAULT_SIZES),
        help="Comma-separated input sizes.",
    )
    parser.add_argument("--samples", type=int, default=None, help="Timed runs per cell.")
    parser.add_argument("--seed", type=int, default=0, help="Synthetic data seed.")
    parser.add_argument(
        "--naive-max-size",
        type=int,
        default=5000,
        help="Largest size the quadratic variant is run at.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("./results/similarity_comparison.csv"),
        help="CSV file for the comparison records.",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(message)s")

    sizes = [int(s) for s in args.sizes.split(",") if s.strip()]
    naive_sizes = [s for s in sizes if s <= args.naive_max_size]
    cases = [
        BenchmarkCase("hashmap-counter", similarity_counter),
        BenchmarkCase("hashmap-loop", similarity_loop),
        BenchmarkCase("naive", similarity_naive, sizes=naive_sizes),
    ]

    try:
        env_config = BenchmarkConfig.from_env()
        config = BenchmarkConfig(
            sample_count=args.samples if args.samples is not None else env_config.sample_count,
            warmup_count=env_config.warmup_count,
            resamples=env_config.resamples,
            confidence=env_config.confidence,
            outlier_fence=env_config.outlier_fence,
            seed=env_config.seed,
            verbose=True,
        )

        if args.reference is not None:
            left, right = parse_pairs(args.reference.read_text())
            profile = DataProfile.from_reference(left, right)
            print(f"Reference profile from {args.reference}: {profile}")
        else:
            profile = DEFAULT_PROFILE

        driver = IsolationDriver(config)
        run = driver.run(cases, sizes, SyntheticInput(profile, seed=args.seed, parse=parse_pairs))
    except ConfigurationError as e:
        print(f"Configuration error: {e}")
        return 2

    for failure in run.failures:
        print(f"  ✗ {failure.name} @ {failure.size}: {failure.kind}: {failure.message}")

    for name in run.report.names():
        measured_sizes = {row.size for row in run.rows if row.name == name and row.size > 0}
        if len(measured_sizes) >= 2:
            print(f"  {name}: scaling exponent {run.report.scaling_exponent(name):.2f}")

    args.output.parent.mkdir(parents=True, exist_ok=True)
    run.report.to_dataframe().to_csv(args.output, index=False)
    print(f"\nResults exported to: {args.output}")
    return 0 if run.ok else 1


if __name__ == "__main__":
    sys.exit(main())
