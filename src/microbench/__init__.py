"""Micro-benchmark harness for isolating and comparing algorithm variants."""

from .config import BenchmarkConfig
from .errors import CallableFailure, ConfigurationError, InsufficientSamplesError, MicrobenchError
from .metrics import SampleCollector, SampleSet, Sink, collect_memory_usage, collect_samples, time_execution
from .results import CellFailure, ComparisonReport, ComparisonRow, ComparisonRun
from .runner import IsolationDriver, run_comparison
from .strategy import BenchmarkCase, CallableInput, InputStrategy, SyntheticInput
from .summary import Estimate, Summarizer, summarize
from .synthetic import DataProfile, SyntheticDataset, generate, measure_profile

__all__ = [
    "BenchmarkCase",
    "BenchmarkConfig",
    "CallableFailure",
    "CallableInput",
    "CellFailure",
    "ComparisonReport",
    "ComparisonRow",
    "ComparisonRun",
    "ConfigurationError",
    "DataProfile",
    "Estimate",
    "InputStrategy",
    "InsufficientSamplesError",
    "IsolationDriver",
    "MicrobenchError",
    "SampleCollector",
    "SampleSet",
    "Sink",
    "Summarizer",
    "SyntheticDataset",
    "SyntheticInput",
    "collect_memory_usage",
    "collect_samples",
    "generate",
    "measure_profile",
    "run_comparison",
    "summarize",
    "time_execution",
]

__version__ = "0.1.0"
