"""Data models for coverage history: persisted entries and derived trend views.

``Entry`` is the only record written to disk. Everything else here is
computed on demand from loaded entries and never persisted. Field names
in ``to_dict`` are the on-disk/JSON names and must stay stable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..coverage.models import CoverageData, expect_object
from ..timestamps import format_timestamp, parse_optional_timestamp, parse_timestamp

TREND_UP = "up"
TREND_DOWN = "down"
TREND_STABLE = "stable"


def _ts(value: Optional[datetime]) -> Optional[str]:
    return format_timestamp(value) if value is not None else None


@dataclass
class BuildInfo:
    """Toolchain, platform and CI workflow identifiers for one run."""

    go_version: str = ""
    platform: str = ""
    architecture: str = ""
    build_time: str = ""
    build_number: str = ""
    pull_request: str = ""
    workflow_id: str = ""

    def to_dict(self) -> Dict[str, str]:
        data = {
            "go_version": self.go_version,
            "platform": self.platform,
            "architecture": self.architecture,
            "build_time": self.build_time,
        }
        for key in ("build_number", "pull_request", "workflow_id"):
            value = getattr(self, key)
            if value:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BuildInfo":
        data = expect_object(data, "build_info")
        return cls(**{k: str(data.get(k, "")) for k in cls.__dataclass_fields__})


@dataclass
class PackageHistoryStats:
    """Package coverage compared with the previous entry on the same branch."""

    previous_percentage: float = 0.0
    trend: str = TREND_STABLE
    trend_percentage: float = 0.0
    first_seen: Optional[datetime] = None
    last_modified: Optional[datetime] = None
    file_count: int = 0
    lines_added: int = 0
    lines_removed: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "previous_percentage": self.previous_percentage,
            "trend": self.trend,
            "trend_percentage": self.trend_percentage,
            "first_seen": _ts(self.first_seen),
            "last_modified": _ts(self.last_modified),
            "file_count": self.file_count,
            "lines_added": self.lines_added,
            "lines_removed": self.lines_removed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PackageHistoryStats":
        data = expect_object(data, "package stats")
        return cls(
            previous_percentage=float(data.get("previous_percentage", 0.0)),
            trend=str(data.get("trend") or TREND_STABLE),
            trend_percentage=float(data.get("trend_percentage", 0.0)),
            first_seen=parse_optional_timestamp(data.get("first_seen")),
            last_modified=parse_optional_timestamp(data.get("last_modified")),
            file_count=int(data.get("file_count", 0)),
            lines_added=int(data.get("lines_added", 0)),
            lines_removed=int(data.get("lines_removed", 0)),
        )


@dataclass
class Entry:
    """One immutable coverage snapshot for a branch/commit."""

    timestamp: datetime
    branch: str
    commit_sha: str
    coverage: CoverageData = field(default_factory=CoverageData)
    commit_url: str = ""
    metadata: Dict[str, str] = field(default_factory=dict)
    build_info: Optional[BuildInfo] = None
    file_hashes: Dict[str, str] = field(default_factory=dict)
    package_stats: Dict[str, PackageHistoryStats] = field(default_factory=dict)

    @property
    def percentage(self) -> float:
        """Overall coverage percentage of the snapshot."""
        return self.coverage.percentage

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "timestamp": format_timestamp(self.timestamp),
            "branch": self.branch,
            "commit_sha": self.commit_sha,
        }
        if self.commit_url:
            data["commit_url"] = self.commit_url
        data["coverage"] = self.coverage.to_dict()
        if self.metadata:
            data["metadata"] = dict(self.metadata)
        if self.build_info is not None:
            data["build_info"] = self.build_info.to_dict()
        if self.file_hashes:
            data["file_hashes"] = dict(self.file_hashes)
        if self.package_stats:
            data["package_stats"] = {
                name: stats.to_dict() for name, stats in self.package_stats.items()
            }
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Entry":
        """Build an entry from its JSON form.

        Raises:
            ValueError: If the timestamp is malformed or a field has the
                wrong JSON type.
            KeyError: If the timestamp is missing.
        """
        data = expect_object(data, "entry")
        build_info = data.get("build_info")
        metadata = expect_object(data.get("metadata"), "metadata")
        file_hashes = expect_object(data.get("file_hashes"), "file_hashes")
        package_stats = expect_object(data.get("package_stats"), "package_stats")
        return cls(
            timestamp=parse_timestamp(data["timestamp"]),
            branch=str(data.get("branch") or "main"),
            commit_sha=str(data.get("commit_sha") or ""),
            coverage=CoverageData.from_dict(data.get("coverage")),
            commit_url=str(data.get("commit_url") or ""),
            metadata={str(k): str(v) for k, v in metadata.items()},
            build_info=BuildInfo.from_dict(build_info) if build_info is not None else None,
            file_hashes={str(k): str(v) for k, v in file_hashes.items()},
            package_stats={
                name: PackageHistoryStats.from_dict(stats) for name, stats in package_stats.items()
            },
        )


# ── Store results ─────────────────────────────────────────────────


@dataclass
class StoredEntry:
    """An entry together with the file it was read from."""

    entry: Entry
    path: Path


@dataclass
class SkippedFile:
    """An entry file that could not be read or decoded."""

    path: Path
    reason: str


@dataclass
class LoadResult:
    """Best-effort read of the store: parsed entries plus skip diagnostics.

    ``records`` are ordered newest first.
    """

    records: List[StoredEntry] = field(default_factory=list)
    skipped: List[SkippedFile] = field(default_factory=list)

    @property
    def entries(self) -> List[Entry]:
        return [r.entry for r in self.records]


# ── Trend views (never persisted) ─────────────────────────────────


@dataclass
class DateRange:
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"start": _ts(self.start), "end": _ts(self.end)}


@dataclass
class TrendSummary:
    """Aggregate statistics over a filtered entry set."""

    total_entries: int = 0
    date_range: DateRange = field(default_factory=DateRange)
    average_percentage: float = 0.0
    min_percentage: float = 0.0
    max_percentage: float = 0.0
    current_trend: str = ""
    trend_strength: str = ""
    stability_score: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_entries": self.total_entries,
            "date_range": self.date_range.to_dict(),
            "average_percentage": self.average_percentage,
            "min_percentage": self.min_percentage,
            "max_percentage": self.max_percentage,
            "current_trend": self.current_trend,
            "trend_strength": self.trend_strength,
            "stability_score": self.stability_score,
        }


@dataclass
class PeriodAnalysis:
    """Change in coverage across one trailing window."""

    period: str
    start_coverage: float = 0.0
    end_coverage: float = 0.0
    change: float = 0.0
    change_percent: float = 0.0
    direction: str = ""
    confidence: float = 0.0
    data_points: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "period": self.period,
            "start_coverage": self.start_coverage,
            "end_coverage": self.end_coverage,
            "change": self.change,
            "change_percent": self.change_percent,
            "direction": self.direction,
            "confidence": self.confidence,
            "data_points": self.data_points,
        }


@dataclass
class Range:
    min: float = 0.0
    max: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {"min": self.min, "max": self.max}


@dataclass
class PredictionPoint:
    percentage: float
    date: datetime
    range: Range = field(default_factory=Range)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "percentage": self.percentage,
            "date": format_timestamp(self.date),
            "range": self.range.to_dict(),
        }


@dataclass
class Prediction:
    next_week: Optional[PredictionPoint] = None
    next_month: Optional[PredictionPoint] = None
    confidence: float = 0.0
    model: str = ""
    factors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"confidence": self.confidence, "model": self.model}
        if self.next_week is not None:
            data["next_week"] = self.next_week.to_dict()
        if self.next_month is not None:
            data["next_month"] = self.next_month.to_dict()
        if self.factors:
            data["factors"] = list(self.factors)
        return data


@dataclass
class TrendAnalysis:
    """Short/medium/long windows plus whole-set volatility and momentum."""

    short_term_trend: Optional[PeriodAnalysis] = None
    medium_term_trend: Optional[PeriodAnalysis] = None
    long_term_trend: Optional[PeriodAnalysis] = None
    volatility: float = 0.0
    momentum: float = 0.0
    prediction: Optional[Prediction] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        for key in ("short_term_trend", "medium_term_trend", "long_term_trend"):
            period = getattr(self, key)
            data[key] = period.to_dict() if period is not None else None
        data["volatility"] = self.volatility
        data["momentum"] = self.momentum
        if self.prediction is not None:
            data["prediction"] = self.prediction.to_dict()
        return data


@dataclass
class TrendData:
    """Result of ``Tracker.get_trend``. Empty history gives empty entries, not an error."""

    entries: List[Entry] = field(default_factory=list)
    summary: TrendSummary = field(default_factory=TrendSummary)
    analysis: TrendAnalysis = field(default_factory=TrendAnalysis)
    generated_at: Optional[datetime] = None

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entries": [e.to_dict() for e in self.entries],
            "summary": self.summary.to_dict(),
            "analysis": self.analysis.to_dict(),
            "generated_at": _ts(self.generated_at),
        }


@dataclass
class Statistics:
    """Corpus-wide aggregate over every stored entry."""

    total_entries: int = 0
    oldest_entry: Optional[datetime] = None
    newest_entry: Optional[datetime] = None
    unique_projects: Dict[str, int] = field(default_factory=dict)
    unique_branches: Dict[str, int] = field(default_factory=dict)
    storage_size: int = 0
    generated_at: Optional[datetime] = None
    skipped_files: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_entries": self.total_entries,
            "oldest_entry": _ts(self.oldest_entry),
            "newest_entry": _ts(self.newest_entry),
            "unique_projects": dict(self.unique_projects),
            "unique_branches": dict(self.unique_branches),
            "storage_size": self.storage_size,
            "generated_at": _ts(self.generated_at),
            "skipped_files": self.skipped_files,
        }
