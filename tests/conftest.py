"""Test configuration for microbench."""

from __future__ import annotations

from pathlib import Path
import sys


def pytest_sessionstart():
    repo_root = Path(__file__).resolve().parents[1]
    src_path = repo_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))
