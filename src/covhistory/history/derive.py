"""Fields derived from a coverage snapshot when an entry is recorded."""

from __future__ import annotations

import hashlib
import json
from datetime import datetime
from typing import Dict, Optional

from ..coverage.models import CoverageData, FileCoverage
from .analysis import DIRECTION_THRESHOLD
from .models import TREND_DOWN, TREND_STABLE, TREND_UP, Entry, PackageHistoryStats

HASH_LENGTH = 16


def _file_fingerprint(file_cov: FileCoverage) -> str:
    """SHA-256[:16] over the file's coverage record, stable across runs."""
    payload = json.dumps(
        {
            "path": file_cov.path,
            "total_lines": file_cov.total_lines,
            "covered_lines": file_cov.covered_lines,
            "statements": [s.to_dict() for s in file_cov.statements],
        },
        sort_keys=True,
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:HASH_LENGTH]


def calculate_file_hashes(coverage: CoverageData) -> Dict[str, str]:
    """Map every covered file path to its coverage fingerprint.

    Two entries with equal hashes for a path had identical coverage for it.
    """
    hashes: Dict[str, str] = {}
    for pkg in coverage.packages.values():
        for path, file_cov in pkg.files.items():
            hashes[path] = _file_fingerprint(file_cov)
    return hashes


def calculate_package_stats(
    coverage: CoverageData,
    previous: Optional[Entry],
    now: datetime,
) -> Dict[str, PackageHistoryStats]:
    """Per-package deltas against ``previous`` (the last entry on the branch).

    Packages absent from ``previous`` start with ``first_seen = now`` and a
    stable trend.
    """
    stats: Dict[str, PackageHistoryStats] = {}
    prev_packages = previous.coverage.packages if previous is not None else {}
    prev_stats = previous.package_stats if previous is not None else {}

    for name, pkg in coverage.packages.items():
        before = prev_packages.get(name)
        first_seen = now
        earlier = prev_stats.get(name)
        if earlier is not None and earlier.first_seen is not None:
            first_seen = earlier.first_seen

        if before is None:
            stats[name] = PackageHistoryStats(
                first_seen=first_seen,
                last_modified=now,
                file_count=len(pkg.files),
                lines_added=pkg.total_lines,
            )
            continue

        delta = pkg.percentage - before.percentage
        trend = TREND_STABLE
        if delta > DIRECTION_THRESHOLD:
            trend = TREND_UP
        elif delta < -DIRECTION_THRESHOLD:
            trend = TREND_DOWN

        line_delta = pkg.total_lines - before.total_lines
        unchanged = line_delta == 0 and pkg.covered_lines == before.covered_lines
        last_modified = now
        if unchanged and earlier is not None and earlier.last_modified is not None:
            last_modified = earlier.last_modified

        stats[name] = PackageHistoryStats(
            previous_percentage=before.percentage,
            trend=trend,
            trend_percentage=delta,
            first_seen=first_seen,
            last_modified=last_modified,
            file_count=len(pkg.files),
            lines_added=max(line_delta, 0),
            lines_removed=max(-line_delta, 0),
        )

    return stats
