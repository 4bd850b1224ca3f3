"""
Tests for time utilities.

Covers timestamp parsing, epoch/ISO conversion, calendar keys and windows.
"""

from datetime import datetime, timedelta, timezone

import pytest

from analyzer.utils.time_utils import (
    day_key,
    day_window,
    iso_from_millis,
    local_hour,
    millis_from_iso,
    minutes_between,
    month_key,
    month_window,
    parse_datetime,
    parse_epoch_millis,
    to_epoch_millis,
    utc_weekday_abbrev,
    whole_days_ceil,
    whole_days_rounded,
)

DAY_MILLIS = 24 * 60 * 60 * 1000


class TestParseDatetime:
    """Tests for parse_datetime."""

    def test_iso_with_zone(self):
        dt = parse_datetime("2024-01-15T14:30:00Z")
        assert dt == datetime(2024, 1, 15, 14, 30, tzinfo=timezone.utc)

    def test_naive_is_utc(self):
        """Naive timestamps are interpreted as UTC."""
        dt = parse_datetime("2024-01-15 14:30:00")
        assert dt.tzinfo is not None
        assert dt == datetime(2024, 1, 15, 14, 30, tzinfo=timezone.utc)

    def test_offset_preserved(self):
        dt = parse_datetime("2024-01-15T14:30:00+02:00")
        assert to_epoch_millis(dt) == to_epoch_millis(
            datetime(2024, 1, 15, 12, 30, tzinfo=timezone.utc)
        )

    def test_unix_seconds(self):
        assert parse_datetime("1705329000") == datetime(2024, 1, 15, 14, 30, tzinfo=timezone.utc)

    def test_unix_milliseconds(self):
        assert parse_datetime("1705329000000") == datetime(2024, 1, 15, 14, 30, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", [None, "", "   ", "invalid", "nan"])
    def test_invalid_returns_default(self, value):
        assert parse_datetime(value) is None

    def test_custom_default(self):
        fallback = datetime(2000, 1, 1, tzinfo=timezone.utc)
        assert parse_datetime("garbage", default=fallback) is fallback


class TestEpochConversion:
    """Tests for epoch millisecond and ISO conversion."""

    def test_epoch_zero(self):
        assert iso_from_millis(0) == "1970-01-01T00:00:00.000Z"

    def test_iso_keeps_milliseconds(self):
        assert iso_from_millis(1705329000123) == "2024-01-15T14:30:00.123Z"

    def test_iso_round_trip(self):
        assert millis_from_iso(iso_from_millis(1705329000123)) == 1705329000123

    def test_to_epoch_millis_naive_is_utc(self):
        assert to_epoch_millis(datetime(1970, 1, 2)) == DAY_MILLIS

    def test_parse_epoch_millis(self):
        assert parse_epoch_millis("1970-01-01T00:00:01.500Z") == 1500
        assert parse_epoch_millis("not a date") is None


class TestCalendarKeys:
    """Tests for month/day keys, weekdays and hours."""

    def test_month_and_day_keys_are_utc(self):
        millis = parse_epoch_millis("2024-03-31T23:30:00-02:00")  # 2024-04-01T01:30Z
        assert month_key(millis) == "2024-04"
        assert day_key(millis) == "2024-04-01"

    @pytest.mark.parametrize("day,expected", [
        ("2024-03-03", "Sun"),
        ("2024-03-04", "Mon"),
        ("2024-03-09", "Sat"),
    ])
    def test_utc_weekday_abbrev(self, day, expected):
        assert utc_weekday_abbrev(parse_epoch_millis(day)) == expected

    def test_local_hour_with_explicit_zone(self):
        millis = parse_epoch_millis("2024-03-04T08:15:00Z")
        assert local_hour(millis, timezone.utc) == 8
        assert local_hour(millis, timezone(timedelta(hours=3))) == 11

    def test_local_hour_default_zone(self):
        millis = parse_epoch_millis("2024-03-04T08:15:00Z")
        assert local_hour(millis) == datetime.fromtimestamp(millis / 1000).hour


class TestDurations:
    """Tests for minute and day spans."""

    def test_minutes_between(self):
        assert minutes_between(0, 90 * 1000) == 1.5

    def test_whole_days_rounded_half_up(self):
        assert whole_days_rounded(0, DAY_MILLIS // 2) == 1
        assert whole_days_rounded(0, DAY_MILLIS // 2 - 1) == 0
        assert whole_days_rounded(0, 3 * DAY_MILLIS) == 3

    def test_whole_days_ceil(self):
        assert whole_days_ceil(0, DAY_MILLIS - 1) == 1
        assert whole_days_ceil(0, DAY_MILLIS + 1) == 2
        assert whole_days_ceil(0, 0) == 0


class TestWindows:
    """Tests for month and day windows."""

    def test_month_window_leap_february(self):
        start, end = month_window("2024-02")
        assert start == datetime(2024, 2, 1, tzinfo=timezone.utc)
        assert end.isoformat() == "2024-02-29T23:59:59.999000+00:00"

    def test_month_window_december(self):
        start, end = month_window("2023-12")
        assert end == datetime(2024, 1, 1, tzinfo=timezone.utc) - timedelta(milliseconds=1)

    def test_day_window(self):
        start, end = day_window("2024-03-04")
        assert start == datetime(2024, 3, 4, tzinfo=timezone.utc)
        assert to_epoch_millis(end) - to_epoch_millis(start) == DAY_MILLIS - 1
