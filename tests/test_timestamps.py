"""Tests for timestamp parsing and the ingestion-time fallback."""

import logging
from datetime import datetime, timezone

import pytest

from log_ingest.errors import DateParseError
from log_ingest.timestamps import parse_timestamp, resolve_timestamp

NOW = datetime(2025, 5, 14, 10, 23, 45, tzinfo=timezone.utc)
LAYOUT = "%Y-%m-%d %H:%M"


class TestParseTimestamp:
    def test_naive_value_is_utc(self):
        assert parse_timestamp("2024-01-01 10:00", LAYOUT) == 1704103200

    def test_value_with_offset(self):
        ts = parse_timestamp("2024-01-01 12:00 +0200", "%Y-%m-%d %H:%M %z")
        assert ts == 1704103200

    def test_invalid_date(self):
        with pytest.raises(DateParseError):
            parse_timestamp("2024-99-99 10:00", LAYOUT)

    def test_wrong_layout(self):
        with pytest.raises(DateParseError):
            parse_timestamp("01/01/2024", LAYOUT)


class TestResolveTimestamp:
    def test_uses_parsed_datetime(self):
        ts, parsed = resolve_timestamp({"datetime": "2024-01-01 10:00"}, LAYOUT, NOW)
        assert ts == 1704103200
        assert parsed is True

    def test_no_datetime_field_uses_now(self, caplog):
        with caplog.at_level(logging.WARNING):
            ts, parsed = resolve_timestamp({"msg": "hi"}, LAYOUT, NOW)
        assert ts == int(NOW.timestamp())
        assert parsed is True
        assert caplog.records == []

    def test_unparseable_falls_back_and_warns(self, caplog):
        with caplog.at_level(logging.WARNING):
            ts, parsed = resolve_timestamp({"datetime": "2024-99-99 10:00"}, LAYOUT, NOW)
        assert ts == int(NOW.timestamp())
        assert parsed is False
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert "2024-99-99 10:00" in warnings[0].getMessage()
