"""Retention policy: which entries cleanup keeps and which it drops.

The plan is recomputed from scratch on every run. An entry is kept only
if it is newer than the cutoff *and* among the first ``max_entries``
such entries by recency, so the age and count limits apply jointly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from ..timestamps import ensure_utc, utcnow
from .models import Entry


@dataclass
class RetentionPlan:
    cutoff: datetime
    keep: List[Entry] = field(default_factory=list)
    drop: List[Entry] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.drop)


def plan_retention(
    entries: Sequence[Entry],
    retention_days: int,
    max_entries: int,
    now: Optional[datetime] = None,
) -> RetentionPlan:
    """Split newest-first ``entries`` into keep and drop sets."""
    cutoff = ensure_utc(now or utcnow()) - timedelta(days=retention_days)
    plan = RetentionPlan(cutoff=cutoff)

    for entry in entries:
        if ensure_utc(entry.timestamp) > cutoff and len(plan.keep) < max_entries:
            plan.keep.append(entry)
        else:
            plan.drop.append(entry)

    return plan
