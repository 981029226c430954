"""Linear momentum extrapolation of coverage one week and one month out."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional, Sequence

from ..timestamps import ensure_utc, utcnow
from .analysis import calculate_momentum
from .models import Entry, Prediction, PredictionPoint, Range

MIN_PREDICTION_ENTRIES = 5
PREDICTION_MODEL = "linear_trend"
PREDICTION_CONFIDENCE = 65.0
PREDICTION_FACTORS = ("historical_trend", "recent_momentum")

# (days ahead, +/- band in percentage points)
NEXT_WEEK = (7, 2.0)
NEXT_MONTH = (30, 5.0)


def _point(current: float, momentum: float, horizon: tuple, now: datetime) -> PredictionPoint:
    days, band = horizon
    value = current + momentum * days
    return PredictionPoint(
        percentage=value,
        date=now + timedelta(days=days),
        range=Range(min=value - band, max=value + band),
    )


def generate_prediction(
    entries: Sequence[Entry], now: Optional[datetime] = None
) -> Optional[Prediction]:
    """Project ``current + momentum * days`` for the next week and month.

    Returns ``None`` when fewer than five entries are available; callers
    treat a missing prediction as normal.
    """
    if len(entries) < MIN_PREDICTION_ENTRIES:
        return None

    now = ensure_utc(now or utcnow())
    momentum = calculate_momentum(entries)
    current = entries[0].percentage

    return Prediction(
        next_week=_point(current, momentum, NEXT_WEEK, now),
        next_month=_point(current, momentum, NEXT_MONTH, now),
        confidence=PREDICTION_CONFIDENCE,
        model=PREDICTION_MODEL,
        factors=list(PREDICTION_FACTORS),
    )
