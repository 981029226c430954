"""Tests for UTC timestamp parsing and formatting."""

from datetime import datetime, timedelta, timezone

import pytest

from covhistory.timestamps import (
    ensure_utc,
    format_timestamp,
    parse_optional_timestamp,
    parse_timestamp,
)


class TestParseTimestamp:
    def test_roundtrip(self):
        value = datetime(2025, 3, 1, 9, 30, 15, 123456, tzinfo=timezone.utc)
        assert parse_timestamp(format_timestamp(value)) == value

    def test_nanoseconds_are_truncated(self):
        parsed = parse_timestamp("2025-03-01T09:30:15.987654321Z")
        assert parsed.microsecond == 987654

    def test_offset_is_normalised_to_utc(self):
        parsed = parse_timestamp("2025-03-01T11:30:15+02:00")
        assert parsed == datetime(2025, 3, 1, 9, 30, 15, tzinfo=timezone.utc)
        assert parsed.utcoffset() == timedelta(0)

    def test_missing_offset_is_utc(self):
        assert parse_timestamp("2025-03-01 09:30:15").tzinfo == timezone.utc

    @pytest.mark.parametrize("text", ["", "yesterday", "2025-03-01", "2025-13-01T00:00:00Z"])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_timestamp(text)

    @pytest.mark.parametrize("value", [123, 1.5, ["2025-03-01T00:00:00Z"], {"t": 1}])
    def test_non_string_is_value_error(self, value):
        with pytest.raises(ValueError, match="must be a string"):
            parse_timestamp(value)
        with pytest.raises(ValueError):
            parse_optional_timestamp(value)

    def test_optional_zero_time(self):
        assert parse_optional_timestamp("0001-01-01T00:00:00Z") is None
        assert parse_optional_timestamp(None) is None
        assert parse_optional_timestamp("") is None


class TestEnsureUtc:
    def test_naive_gets_utc(self):
        assert ensure_utc(datetime(2025, 1, 1)).tzinfo == timezone.utc

    def test_format_naive_as_utc(self):
        assert format_timestamp(datetime(2025, 1, 1)) == "2025-01-01T00:00:00.000000+00:00"
