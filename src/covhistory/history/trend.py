"""Assemble ``TrendData`` from a filtered entry list."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..timestamps import ensure_utc, utcnow
from .analysis import analyze_period, calculate_momentum, calculate_summary, calculate_volatility
from .models import Entry, TrendAnalysis, TrendData
from .prediction import generate_prediction

SHORT_TERM_DAYS = 7
MEDIUM_TERM_DAYS = 30
LONG_TERM_DAYS = 90


def analyze_entries(entries: Sequence[Entry], now: Optional[datetime] = None) -> TrendAnalysis:
    """Period windows, volatility, momentum and prediction for ``entries``."""
    now = ensure_utc(now or utcnow())
    return TrendAnalysis(
        short_term_trend=analyze_period(entries, SHORT_TERM_DAYS, now),
        medium_term_trend=analyze_period(entries, MEDIUM_TERM_DAYS, now),
        long_term_trend=analyze_period(entries, LONG_TERM_DAYS, now),
        volatility=calculate_volatility(entries),
        momentum=calculate_momentum(entries),
        prediction=generate_prediction(entries, now),
    )


def build_trend(entries: Sequence[Entry], now: Optional[datetime] = None) -> TrendData:
    """Full trend view; an empty list gives a zero-valued ``TrendData``."""
    now = ensure_utc(now or utcnow())
    if not entries:
        return TrendData(generated_at=now)

    return TrendData(
        entries=list(entries),
        summary=calculate_summary(entries),
        analysis=analyze_entries(entries, now),
        generated_at=now,
    )
