"""Tests for the isolation driver."""

import time

import pytest

from microbench import (
    BenchmarkCase,
    BenchmarkConfig,
    ConfigurationError,
    DataProfile,
    InputStrategy,
    IsolationDriver,
    SyntheticInput,
    collect_samples,
    run_comparison,
    summarize,
)

PARSE_DELAY_S = 0.02


class FakeClock:
    """Nanosecond clock advanced by the code under test."""

    def __init__(self):
        self.now = 0

    def __call__(self):
        return self.now

    def advance(self, ns):
        self.now += ns


class CountingInput(InputStrategy):
    """Input strategy that records its lifecycle."""

    def __init__(self):
        self.setup_called = False
        self.teardown_called = False
        self.prepared = []

    def setup(self):
        self.setup_called = True

    def prepare(self, size):
        self.prepared.append(size)
        return list(range(size))

    def teardown(self):
        self.teardown_called = True


class FailingInput(CountingInput):
    def prepare(self, size):
        raise OSError("reference data unavailable")


def _fixed_cost_case(name, clock, cost):
    def body(data):
        clock.advance(cost)
        return data

    return BenchmarkCase(name, body)


def _slow_parse(text):
    time.sleep(PARSE_DELAY_S)
    return [int(token) for token in text.split()]


def test_ranking_with_fixed_costs():
    clock = FakeClock()
    cases = [
        _fixed_cost_case("thirty", clock, 30),
        _fixed_cost_case("ten", clock, 10),
        _fixed_cost_case("twenty", clock, 20),
    ]
    driver = IsolationDriver(BenchmarkConfig(sample_count=20), clock=clock, record_memory=False)

    run = driver.run(cases, [100, 10, 1000], CountingInput())

    assert run.ok
    assert run.report.sizes() == [10, 100, 1000]
    for size in (10, 100, 1000):
        group = run.report.groups[size]
        assert [row.name for row in group] == ["ten", "twenty", "thirty"]
        assert [row.central for row in group] == [10.0, 20.0, 30.0]
        assert [row.speedup for row in group] == [1.0, 2.0, 3.0]
        assert run.report.winner(size).name == "ten"


def test_two_way_comparison():
    clock = FakeClock()
    cases = [_fixed_cost_case("naive", clock, 400), _fixed_cost_case("hashmap", clock, 100)]
    driver = IsolationDriver(BenchmarkConfig(sample_count=10), clock=clock, record_memory=False)

    run = driver.run(cases, [500], lambda size: size)

    assert [row.name for row in run.rows] == ["hashmap", "naive"]
    assert run.report.ratio("naive", "hashmap", 500) == 4.0


def test_input_is_prepared_once_per_size():
    strategy = CountingInput()
    cases = [BenchmarkCase(name, len) for name in ("a", "b", "c")]

    run_comparison(cases, [5, 50, 5], strategy, BenchmarkConfig(sample_count=5))

    assert strategy.prepared == [5, 50]
    assert strategy.setup_called
    assert strategy.teardown_called


def test_teardown_runs_when_preparation_fails():
    strategy = FailingInput()
    with pytest.raises(OSError, match="reference data unavailable"):
        run_comparison([BenchmarkCase("a", len)], [5], strategy, BenchmarkConfig(sample_count=5))
    assert strategy.teardown_called


def test_parsing_cost_is_excluded():
    profile = DataProfile(low=1, high=100_000, duplicate_ratio=0.2, overlap_ratio=0.3)
    config = BenchmarkConfig(sample_count=200)
    size = 1_000

    cheap = run_comparison([BenchmarkCase("len", len)], [size], lambda n: list(range(2 * n)), config)
    expensive = run_comparison(
        [BenchmarkCase("len", len)], [size], SyntheticInput(profile, seed=1, parse=_slow_parse), config
    )

    cheap_ns = cheap.report.get("len", size).central
    expensive_ns = expensive.report.get("len", size).central
    assert expensive_ns < PARSE_DELAY_S * 1e9 / 100
    assert abs(expensive_ns - cheap_ns) < 50_000


def test_noop_body_matches_collector_floor():
    config = BenchmarkConfig(sample_count=200)
    run = run_comparison(
        [BenchmarkCase("noop", lambda data: None)],
        [10_000],
        SyntheticInput(
            DataProfile(low=1, high=1_000_000, duplicate_ratio=0.0, overlap_ratio=0.0),
            parse=_slow_parse,
        ),
        config,
    )
    floor = summarize(collect_samples(lambda: None, sample_count=200))

    measured = run.report.get("noop", 10_000).central
    assert abs(measured - floor.central) < 50_000


def test_prepared_input_is_shared_by_every_call():
    seen = set()

    def record(data):
        seen.add(id(data))
        return len(data)

    cases = [BenchmarkCase("first", record), BenchmarkCase("second", record)]
    run_comparison(cases, [25], CountingInput(), BenchmarkConfig(sample_count=5, warmup_count=2))

    assert len(seen) == 1


def test_synthetic_input_without_parser_passes_dataset():
    profile = DataProfile(low=1, high=1_000, duplicate_ratio=0.1, overlap_ratio=0.1)
    seen = []

    def record(dataset):
        seen.append(len(dataset))
        return dataset

    run_comparison([BenchmarkCase("rec", record)], [20], SyntheticInput(profile), BenchmarkConfig(sample_count=3))

    assert set(seen) == {20}


def test_failing_case_stops_but_others_continue():
    def fragile(data):
        if len(data) > 50:
            raise ValueError("too big")
        return len(data)

    cases = [BenchmarkCase("fragile", fragile), BenchmarkCase("sturdy", len)]
    run = run_comparison(cases, [10, 100, 1000], CountingInput(), BenchmarkConfig(sample_count=10))

    assert [(row.name, row.size) for row in run.rows if row.name == "fragile"] == [("fragile", 10)]
    assert [row.size for row in run.rows if row.name == "sturdy"] == [10, 100, 1000]
    assert len(run.failures) == 1
    failure = run.failures[0]
    assert (failure.name, failure.size, failure.kind) == ("fragile", 100, "callable_failure")
    assert "too big" in failure.message
    assert not run.ok


def test_insufficient_samples_are_recorded_not_zeroed():
    cases = [BenchmarkCase("a", len), BenchmarkCase("b", sum)]
    run = run_comparison(cases, [3, 30], CountingInput(), BenchmarkConfig(sample_count=2))

    assert len(run.report) == 0
    assert len(run.failures) == 4
    assert {f.kind for f in run.failures} == {"insufficient_samples"}
    assert len(run.sample_sets) == 4


def test_zero_samples_is_a_configuration_error():
    strategy = CountingInput()
    with pytest.raises(ConfigurationError, match="sample_count must be at least 1"):
        run_comparison([BenchmarkCase("a", len)], [10], strategy, BenchmarkConfig(sample_count=0))
    assert strategy.prepared == []


def test_invalid_matrix_is_rejected_before_timing():
    strategy = CountingInput()
    driver = IsolationDriver(BenchmarkConfig(sample_count=5))

    with pytest.raises(ConfigurationError, match="at least one benchmark case"):
        driver.run([], [10], strategy)
    with pytest.raises(ConfigurationError, match="at least one input size"):
        driver.run([BenchmarkCase("a", len)], [], strategy)
    with pytest.raises(ConfigurationError, match="non-negative"):
        driver.run([BenchmarkCase("a", len)], [-1, 10], strategy)
    with pytest.raises(ConfigurationError, match="unique"):
        driver.run([BenchmarkCase("a", len), BenchmarkCase("a", sum)], [10], strategy)

    assert strategy.prepared == []
    assert not strategy.setup_called


def test_cases_restricted_to_sizes():
    cases = [
        BenchmarkCase("linear", len),
        BenchmarkCase("quadratic", len, sizes=[10]),
    ]
    strategy = CountingInput()
    run = run_comparison(cases, [10, 10_000], strategy, BenchmarkConfig(sample_count=5))

    assert [row.name for row in run.report.groups[10_000]] == ["linear"]
    assert {row.name for row in run.report.groups[10]} == {"linear", "quadratic"}
    assert cases[1].sizes == frozenset({10})


def test_sample_sets_are_kept_per_cell():
    cases = [BenchmarkCase("a", len), BenchmarkCase("b", sum)]
    run = run_comparison(cases, [4, 8], CountingInput(), BenchmarkConfig(sample_count=7, warmup_count=1))

    assert set(run.sample_sets) == {("a", 4), ("a", 8), ("b", 4), ("b", 8)}
    samples = run.sample_sets[("b", 8)]
    assert len(samples) == 7
    assert samples.warmup_count == 1
    assert samples.name == "b"


def test_verbose_run_logs_progress(caplog):
    caplog.set_level("INFO", logger="microbench.runner")
    run_comparison([BenchmarkCase("a", len)], [4], CountingInput(), BenchmarkConfig(sample_count=5, verbose=True))

    assert "Starting comparison" in caplog.text
    assert "Size 4:" in caplog.text
