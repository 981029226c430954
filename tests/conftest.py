"""Shared test fixtures for covhistory tests."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from covhistory.config import HistoryConfig
from covhistory.coverage.models import CoverageData, FileCoverage, PackageCoverage, Statement
from covhistory.history.models import Entry
from covhistory.history.store import EntryStore
from covhistory.history.tracker import Tracker

FIXED_NOW = datetime(2025, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


def pytest_addoption(parser):
    """Add --run-slow option for slow tests."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="run slow tests",
    )


def pytest_configure(config):
    """Configure slow marker."""
    config.addinivalue_line("markers", "slow: mark test as slow to run")


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless --run-slow is given."""
    if config.getoption("--run-slow"):
        return
    skip_slow = pytest.mark.skip(reason="need --run-slow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


def build_coverage(percentage=75.0, packages=None):
    """Coverage snapshot; ``packages`` maps name -> (total, covered)."""
    pkgs = {}
    for name, (total, covered) in (packages or {}).items():
        path = f"{name}/file.go"
        pkgs[name] = PackageCoverage(
            name=name,
            files={
                path: FileCoverage(
                    path=path,
                    statements=[Statement(1, 1, 3, 2, 2, 1 if covered else 0)],
                    total_lines=total,
                    covered_lines=covered,
                    percentage=covered / total * 100 if total else 0.0,
                )
            },
            total_lines=total,
            covered_lines=covered,
            percentage=covered / total * 100 if total else 0.0,
        )
    return CoverageData(
        mode="set",
        packages=pkgs,
        total_lines=1000,
        covered_lines=int(percentage * 10),
        percentage=percentage,
    )


@pytest.fixture
def now():
    """Fixed reference time used as the tracker clock."""
    return FIXED_NOW


@pytest.fixture
def make_entry(now):
    """Factory for entries placed ``days_ago`` before ``now``."""

    def _make(percentage=75.0, days_ago=0.0, branch="main", commit_sha=None, **kwargs):
        ts = now - timedelta(days=days_ago)
        sha = commit_sha if commit_sha is not None else uuid.uuid4().hex
        return Entry(
            timestamp=ts,
            branch=branch,
            commit_sha=sha,
            coverage=kwargs.pop("coverage", None) or build_coverage(percentage),
            **kwargs,
        )

    return _make


@pytest.fixture
def storage_dir(tmp_path):
    return tmp_path / "history"


@pytest.fixture
def store(storage_dir):
    return EntryStore(storage_dir)


@pytest.fixture
def make_tracker(storage_dir, now):
    """Factory for trackers on ``storage_dir`` with a fixed clock."""

    def _make(**config_kwargs):
        config = HistoryConfig(storage_path=str(storage_dir), **config_kwargs)
        return Tracker(config, clock=lambda: now)

    return _make
