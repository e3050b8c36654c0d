"""
Unit tests for datetime utilities.

Tests local-to-UTC conversion, minute-of-day arithmetic and range overlap.
"""

import math
import pytest
from datetime import datetime, date, time, timezone

from core.exceptions import InvalidInputError
from utils.datetime_utils import (
    utc_now, ensure_utc, parse_date_string, parse_time_string,
    to_absolute_instant, minutes_since_midnight, ranges_overlap, iso_weekday,
)


class TestToAbsoluteInstant:
    """Test to_absolute_instant function."""

    def test_zero_offset_keeps_wall_clock(self):
        result = to_absolute_instant("2025-03-10", "10:30", 0)

        assert result == datetime(2025, 3, 10, 10, 30, tzinfo=timezone.utc)

    def test_positive_offset_is_west_of_utc(self):
        """UTC-6 sends 360: 10:00 local is 16:00 UTC."""
        result = to_absolute_instant("2025-03-10", "10:00", 360)

        assert result == datetime(2025, 3, 10, 16, 0, tzinfo=timezone.utc)

    def test_negative_offset_is_east_of_utc(self):
        """UTC+2 sends -120: 01:00 local is 23:00 UTC the previous day."""
        result = to_absolute_instant("2025-03-10", "01:00", -120)

        assert result == datetime(2025, 3, 9, 23, 0, tzinfo=timezone.utc)

    def test_accepts_date_and_time_objects(self):
        result = to_absolute_instant(date(2025, 3, 10), time(8, 15), "60")

        assert result == datetime(2025, 3, 10, 9, 15, tzinfo=timezone.utc)

    def test_result_is_timezone_aware(self):
        assert to_absolute_instant("2025-03-10", "10:00", 0).tzinfo is not None

    @pytest.mark.parametrize("offset", [None, "abc", math.nan, math.inf, True])
    def test_invalid_offset_rejected(self, offset):
        with pytest.raises(InvalidInputError):
            to_absolute_instant("2025-03-10", "10:00", offset)

    @pytest.mark.parametrize("date_value,time_value", [
        ("2025-13-01", "10:00"),
        ("not-a-date", "10:00"),
        ("2025-03-10", "25:00"),
        ("2025-03-10", "ten"),
        ("", "10:00"),
    ])
    def test_invalid_date_or_time_rejected(self, date_value, time_value):
        with pytest.raises(InvalidInputError) as exc_info:
            to_absolute_instant(date_value, time_value, 0)

        assert exc_info.value.kind == "invalid"


class TestMinutesSinceMidnight:
    """Test minutes_since_midnight function."""

    @pytest.mark.parametrize("value,expected", [
        ("00:00", 0),
        ("09:30", 570),
        ("23:59", 1439),
        ("12:00:45", 720),
        (time(17, 15), 1035),
    ])
    def test_valid_values(self, value, expected):
        assert minutes_since_midnight(value) == expected

    @pytest.mark.parametrize("value", ["", "9", "aa:bb", "24:00", None])
    def test_invalid_values(self, value):
        with pytest.raises(InvalidInputError):
            minutes_since_midnight(value)


class TestRangesOverlap:
    """Test ranges_overlap function."""

    def test_overlapping_ranges(self):
        assert ranges_overlap(600, 660, 630, 690) is True

    def test_contained_range(self):
        assert ranges_overlap(600, 720, 630, 660) is True

    def test_touching_boundaries_do_not_overlap(self):
        assert ranges_overlap(600, 660, 660, 720) is False
        assert ranges_overlap(660, 720, 600, 660) is False

    def test_disjoint_ranges(self):
        assert ranges_overlap(600, 630, 700, 730) is False


class TestParsing:
    """Test date and time string parsing."""

    def test_parse_date_with_slashes_and_single_digits(self):
        assert parse_date_string("2025/1/6") == date(2025, 1, 6)

    def test_parse_date_ignores_time_part(self):
        assert parse_date_string("2025-01-06T00:00:00") == date(2025, 1, 6)

    def test_parse_date_empty_raises_value_error(self):
        with pytest.raises(ValueError):
            parse_date_string("  ")

    def test_parse_time_with_seconds(self):
        assert parse_time_string("08:05:30") == time(8, 5, 30)

    def test_parse_time_without_minutes_raises_value_error(self):
        with pytest.raises(ValueError):
            parse_time_string("8")


class TestUtcHelpers:
    """Test utc_now, ensure_utc and iso_weekday."""

    def test_utc_now_is_aware(self):
        assert utc_now().tzinfo == timezone.utc

    def test_ensure_utc_treats_naive_as_utc(self):
        result = ensure_utc(datetime(2025, 1, 1, 10, 0))

        assert result == datetime(2025, 1, 1, 10, 0, tzinfo=timezone.utc)

    def test_ensure_utc_converts_other_zones(self):
        from datetime import timedelta
        aware = datetime(2025, 1, 1, 10, 0, tzinfo=timezone(timedelta(hours=-6)))

        assert ensure_utc(aware) == datetime(2025, 1, 1, 16, 0, tzinfo=timezone.utc)

    def test_ensure_utc_none(self):
        assert ensure_utc(None) is None

    def test_iso_weekday_monday_is_one_sunday_is_seven(self):
        assert iso_weekday(date(2025, 3, 10)) == 1
        assert iso_weekday(date(2025, 3, 16)) == 7
