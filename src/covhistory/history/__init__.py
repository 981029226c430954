"""Coverage history: entry store, tracker, trend analysis and retention."""

from .context import CancelToken
from .models import (
    BuildInfo,
    DateRange,
    Entry,
    LoadResult,
    PackageHistoryStats,
    PeriodAnalysis,
    Prediction,
    PredictionPoint,
    Range,
    SkippedFile,
    Statistics,
    StoredEntry,
    TrendAnalysis,
    TrendData,
    TrendSummary,
)
from .store import EntryStore
from .tracker import Tracker

__all__ = [
    "Tracker",
    "EntryStore",
    "CancelToken",
    "Entry",
    "BuildInfo",
    "PackageHistoryStats",
    "StoredEntry",
    "SkippedFile",
    "LoadResult",
    "TrendData",
    "TrendSummary",
    "TrendAnalysis",
    "PeriodAnalysis",
    "DateRange",
    "Prediction",
    "PredictionPoint",
    "Range",
    "Statistics",
]
