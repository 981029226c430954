"""
covhistory - coverage history and trend analysis for CI pipelines

Records one coverage snapshot per CI run into a directory of JSON files,
then answers questions about it: the latest coverage on a branch, how it
moved over the last week/month/quarter, where it is heading, and how much
history is stored.
"""

__version__ = "0.1.0"

from .config import HistoryConfig, load_config
from .coverage import CoverageData, FileCoverage, PackageCoverage, Statement
from .exceptions import CovHistoryError, NoEntriesFoundError
from .history import CancelToken, Entry, EntryStore, Statistics, Tracker, TrendData

__all__ = [
    "Tracker",  # Main entry point
    "HistoryConfig",
    "load_config",
    "EntryStore",
    "CancelToken",
    "Entry",
    "TrendData",
    "Statistics",
    "CoverageData",
    "PackageCoverage",
    "FileCoverage",
    "Statement",
    "CovHistoryError",
    "NoEntriesFoundError",
]
