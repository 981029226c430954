"""Public API for recording coverage history and reading trends back.

A ``Tracker`` holds only an immutable ``HistoryConfig``; all state lives in
the storage directory, and every call reloads what it needs from there.

Usage::

    tracker = Tracker(load_config())
    tracker.record(coverage, branch="main", commit_sha=sha)
    trend = tracker.get_trend(branch="main", days=30)
    if trend.is_empty:
        ...
"""

from __future__ import annotations

import time
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from ..config import DEFAULT_CONFIG, HistoryConfig
from ..coverage.models import CoverageData
from ..exceptions import NoEntriesFoundError, UnsupportedDataTypeError
from ..logging_config import get_logger
from ..timestamps import ensure_utc, utcnow
from .context import CancelToken, check_cancelled
from .derive import calculate_file_hashes, calculate_package_stats
from .models import BuildInfo, Entry, Statistics, TrendData
from .retention import plan_retention
from .store import DEFAULT_BRANCH, EntryStore
from .trend import build_trend

logger = get_logger(__name__)

LATEST_ENTRY_WINDOW_DAYS = 7
DEFAULT_TREND_DAYS = 30
DEFAULT_MAX_POINTS = 100


class Tracker:
    """Coverage history tracker backed by an :class:`EntryStore`."""

    def __init__(
        self,
        config: Optional[HistoryConfig] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.config: HistoryConfig = config or DEFAULT_CONFIG
        self.store = EntryStore(self.config.storage_dir)
        self._clock = clock

    def _now(self) -> datetime:
        return ensure_utc(self._clock())

    # ── writes ────────────────────────────────────────────────────

    def record(
        self,
        coverage: CoverageData,
        *,
        branch: str = DEFAULT_BRANCH,
        commit_sha: str = "",
        commit_url: str = "",
        metadata: Optional[Dict[str, str]] = None,
        build_info: Optional[BuildInfo] = None,
        ctx: Optional[CancelToken] = None,
    ) -> Entry:
        """Persist a new entry for ``coverage`` and return it.

        A missing commit SHA is replaced by ``auto_<nanoseconds>`` so that
        entries recorded outside a git checkout still get distinct files.

        Raises:
            StorageError: If the entry cannot be written.
            OperationCancelledError: If ``ctx`` fires first.
        """
        check_cancelled(ctx)

        branch = branch or DEFAULT_BRANCH
        if not commit_sha:
            commit_sha = f"auto_{time.time_ns()}"

        now = self._now()
        previous = self.store.load_entries(branch, max_points=1, ctx=ctx)

        entry = Entry(
            timestamp=now,
            branch=branch,
            commit_sha=commit_sha,
            commit_url=commit_url,
            coverage=coverage,
            metadata=dict(metadata or {}),
            build_info=build_info,
            file_hashes=calculate_file_hashes(coverage),
            package_stats=calculate_package_stats(
                coverage, previous[0] if previous else None, now
            ),
        )

        path = self.store.save_entry(entry, ctx)
        logger.info(
            "Recorded %.2f%% coverage for %s@%s in %s",
            coverage.percentage,
            branch,
            commit_sha[:8],
            path.name,
        )
        return entry

    def add(self, branch: str, commit: str, data: Any) -> Entry:
        """Older entry point: record ``data`` if it is a ``CoverageData``."""
        if isinstance(data, CoverageData):
            return self.record(data, branch=branch, commit_sha=commit)
        raise UnsupportedDataTypeError(type(data).__name__)

    def cleanup(self, ctx: Optional[CancelToken] = None) -> int:
        """Apply the retention policy and return how many entries were removed.

        Does nothing when ``auto_cleanup`` is disabled. Only files of dropped
        entries are deleted, so entries recorded concurrently survive.
        """
        check_cancelled(ctx)
        if not self.config.auto_cleanup:
            logger.debug("Auto cleanup disabled; skipping retention")
            return 0

        current = self.store.load_all_entries(ctx)
        plan = plan_retention(
            current.entries,
            self.config.retention_days,
            self.config.max_entries,
            now=self._now(),
        )
        if not plan.has_changes:
            return 0

        removed = self.store.save_all_entries(plan.keep, current=current, ctx=ctx)
        logger.info(
            "Cleanup kept %d entries, removed %d (cutoff %s)",
            len(plan.keep),
            removed,
            plan.cutoff.date().isoformat(),
        )
        return removed

    # ── reads ─────────────────────────────────────────────────────

    def get_trend(
        self,
        *,
        branch: str = DEFAULT_BRANCH,
        days: int = DEFAULT_TREND_DAYS,
        max_points: int = DEFAULT_MAX_POINTS,
        ctx: Optional[CancelToken] = None,
    ) -> TrendData:
        """Summary, period analysis and prediction for recent entries.

        No matching entries is not an error: the result has
        ``is_empty == True`` and zero-valued summary/analysis.
        """
        check_cancelled(ctx)
        now = self._now()
        entries = self.store.load_entries(branch, days, max_points, now=now, ctx=ctx)
        return build_trend(entries, now)

    def get_latest_entry(
        self, branch: str = DEFAULT_BRANCH, ctx: Optional[CancelToken] = None
    ) -> Entry:
        """Newest entry for ``branch`` within the last seven days.

        Raises:
            NoEntriesFoundError: If the branch has no entry in that window,
                even when older history exists.
        """
        check_cancelled(ctx)
        entries = self.store.load_entries(
            branch, LATEST_ENTRY_WINDOW_DAYS, 1, now=self._now(), ctx=ctx
        )
        if not entries:
            raise NoEntriesFoundError(branch, LATEST_ENTRY_WINDOW_DAYS)
        return entries[0]

    def get_statistics(self, ctx: Optional[CancelToken] = None) -> Statistics:
        """Counts by project and branch, date range and on-disk size."""
        check_cancelled(ctx)
        result = self.store.load_all_entries(ctx)
        entries = result.entries

        stats = Statistics(
            total_entries=len(entries),
            storage_size=self.store.storage_size(ctx),
            generated_at=self._now(),
            skipped_files=len(result.skipped),
        )

        if entries:
            stats.oldest_entry = entries[-1].timestamp
            stats.newest_entry = entries[0].timestamp
            for entry in entries:
                project = entry.metadata.get("project")
                if project is not None:
                    stats.unique_projects[project] = stats.unique_projects.get(project, 0) + 1
                stats.unique_branches[entry.branch] = stats.unique_branches.get(entry.branch, 0) + 1

        return stats
