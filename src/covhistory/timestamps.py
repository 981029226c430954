"""UTC timestamp helpers shared by the models and the entry store."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Optional

# RFC 3339 with an optional fraction of any length (earlier tools wrote nanoseconds).
_RFC3339 = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<frac>\d+))?"
    r"(?P<tz>Z|[+-]\d{2}:\d{2})?$"
)


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Serialise an aware datetime as ISO-8601 with microseconds."""
    return ensure_utc(value).isoformat(timespec="microseconds")


def parse_timestamp(text: str) -> datetime:
    """Parse an RFC 3339 timestamp into an aware UTC datetime.

    Fractions longer than microseconds are truncated, ``Z`` means UTC and a
    missing offset is read as UTC.

    Raises:
        ValueError: If ``text`` is not a timestamp.
    """
    if not isinstance(text, str):
        raise ValueError(f"timestamp must be a string, got {type(text).__name__}")
    match = _RFC3339.match(text.strip())
    if match is None:
        raise ValueError(f"invalid timestamp: {text!r}")

    frac = (match.group("frac") or "0")[:6].ljust(6, "0")
    tz = match.group("tz") or "+00:00"
    if tz == "Z":
        tz = "+00:00"

    base = match.group("base").replace(" ", "T")
    return datetime.fromisoformat(f"{base}.{frac}{tz}").astimezone(timezone.utc)


def parse_optional_timestamp(text: Optional[str]) -> Optional[datetime]:
    """Like :func:`parse_timestamp` but maps empty/None and Go's zero time to None."""
    if not text or (isinstance(text, str) and text.startswith("0001-01-01")):
        return None
    return parse_timestamp(text)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
