"""Trend statistics over an already-loaded, newest-first entry list.

All functions are pure. Index 0 is the most recent entry and the last
index the oldest one; callers get that ordering from ``EntryStore``.
Too few data points never raise: results fall back to zero values or
a zero-confidence placeholder.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import List, Optional, Sequence

import numpy as np

from ..timestamps import ensure_utc, utcnow
from .models import (
    TREND_DOWN,
    TREND_STABLE,
    TREND_UP,
    DateRange,
    Entry,
    PeriodAnalysis,
    TrendSummary,
)

# Fixed scores, not derived from the data. Badge and comment templates
# key off these values.
DEFAULT_TREND_STRENGTH = "moderate"
DEFAULT_STABILITY_SCORE = 85.0
PERIOD_CONFIDENCE = 85.0

# Percentage-point change below which a period counts as stable.
DIRECTION_THRESHOLD = 0.1


def _percentages(entries: Sequence[Entry]) -> List[float]:
    return [e.percentage for e in entries]


def calculate_summary(entries: Sequence[Entry]) -> TrendSummary:
    """Average/min/max and overall direction (newest vs oldest)."""
    if not entries:
        return TrendSummary()

    values = _percentages(entries)

    trend = TREND_STABLE
    if len(values) >= 2:
        recent, older = values[0], values[-1]
        if recent > older:
            trend = TREND_UP
        elif recent < older:
            trend = TREND_DOWN

    return TrendSummary(
        total_entries=len(entries),
        date_range=DateRange(start=entries[-1].timestamp, end=entries[0].timestamp),
        average_percentage=float(np.mean(values)),
        min_percentage=min(values),
        max_percentage=max(values),
        current_trend=trend,
        trend_strength=DEFAULT_TREND_STRENGTH,
        stability_score=DEFAULT_STABILITY_SCORE,
    )


def analyze_period(
    entries: Sequence[Entry], days: int, now: Optional[datetime] = None
) -> PeriodAnalysis:
    """Coverage change over the trailing ``days`` window.

    Fewer than two points in the window gives a placeholder with
    ``confidence == 0``.
    """
    cutoff = ensure_utc(now or utcnow()) - timedelta(days=days)
    window = [e for e in entries if ensure_utc(e.timestamp) > cutoff]
    period = f"{days} days"

    if len(window) < 2:
        return PeriodAnalysis(period=period, data_points=len(window), confidence=0.0)

    start = window[-1].percentage
    end = window[0].percentage
    change = end - start
    # A window starting at 0% has no relative change to report.
    change_percent = (change / start) * 100 if start != 0 else 0.0

    direction = TREND_STABLE
    if change > DIRECTION_THRESHOLD:
        direction = TREND_UP
    elif change < -DIRECTION_THRESHOLD:
        direction = TREND_DOWN

    return PeriodAnalysis(
        period=period,
        start_coverage=start,
        end_coverage=end,
        change=change,
        change_percent=change_percent,
        direction=direction,
        confidence=PERIOD_CONFIDENCE,
        data_points=len(window),
    )


def calculate_volatility(entries: Sequence[Entry]) -> float:
    """Population variance of coverage percentages (0 for fewer than 2 entries)."""
    if len(entries) < 2:
        return 0.0
    return float(np.var(_percentages(entries)))


def calculate_momentum(entries: Sequence[Entry]) -> float:
    """Recent-half change minus older-half change.

    With ``recent = entries[0]``, ``middle = entries[n // 2]`` and
    ``old = entries[-1]`` this is ``(recent - middle) - (middle - old)``,
    a coarse second-difference. Returns 0 for fewer than 3 entries.
    """
    if len(entries) < 3:
        return 0.0

    recent = entries[0].percentage
    middle = entries[len(entries) // 2].percentage
    old = entries[-1].percentage

    return (recent - middle) - (middle - old)
