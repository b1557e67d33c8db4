"""Tests for half-open interval helpers."""

from datetime import datetime, time

import pytest

from lensbook.scheduling.time_interval import (
    duration_hours,
    duration_minutes,
    format_clock,
    format_time_of_day,
    minutes_since_midnight,
    overlaps,
    parse_time_of_day,
    round_up,
    time_from_minutes,
)
from tests.conftest import dt, t


class TestOverlaps:
    @pytest.mark.parametrize("a,b,expected", [
        (("09:00", "10:00"), ("09:30", "10:30"), True),
        (("09:00", "10:00"), ("10:00", "11:00"), False),
        (("09:00", "12:00"), ("10:00", "11:00"), True),
        (("09:00", "10:00"), ("11:00", "12:00"), False),
        (("09:00", "10:00"), ("09:00", "10:00"), True),
    ])
    def test_overlap_is_symmetric(self, a, b, expected):
        a_start, a_end = t(a[0]), t(a[1])
        b_start, b_end = t(b[0]), t(b[1])
        assert overlaps(a_start, a_end, b_start, b_end) is expected
        assert overlaps(b_start, b_end, a_start, a_end) is expected

    def test_touching_intervals_do_not_overlap(self):
        assert not overlaps(t("00:00"), t("01:00"), t("01:00"), t("02:00"))

    def test_works_for_datetimes(self):
        assert overlaps(dt(17, "13:00"), dt(17, "15:00"), dt(17, "14:00"), dt(17, "16:00"))
        assert not overlaps(dt(17, "13:00"), dt(17, "15:00"), dt(18, "13:00"), dt(18, "15:00"))


class TestDurations:
    def test_minutes(self):
        assert duration_minutes(t("09:00"), t("10:30")) == 90

    def test_hours_is_fractional(self):
        assert duration_hours(dt(17, "13:00"), dt(17, "14:30")) == 1.5

    def test_reversed_interval_clamps_to_zero(self):
        assert duration_minutes(t("10:00"), t("09:00")) == 0
        assert duration_hours(dt(17, "10:00"), dt(17, "09:00")) == 0.0

    def test_mixed_types_rejected(self):
        with pytest.raises(TypeError):
            duration_minutes(t("09:00"), dt(17, "10:00"))


class TestParsing:
    def test_hh_mm(self):
        assert parse_time_of_day("09:30") == time(9, 30)

    def test_hh_mm_ss(self):
        assert parse_time_of_day("09:30:15") == time(9, 30, 15)

    def test_time_passthrough(self):
        assert parse_time_of_day(time(8, 0)) == time(8, 0)

    @pytest.mark.parametrize("raw", [None, "", "9am", "25:00", "12:60"])
    def test_malformed_returns_none(self, raw):
        assert parse_time_of_day(raw) is None

    def test_formats(self):
        assert format_time_of_day(time(9, 5)) == "09:05:00"
        assert format_clock(time(9, 5, 59)) == "09:05"


class TestMinuteConversion:
    def test_round_trip(self):
        assert time_from_minutes(minutes_since_midnight(time(13, 45))) == time(13, 45)

    def test_end_of_day_clamps(self):
        assert time_from_minutes(24 * 60) == time(23, 59, 59)


class TestRoundUp:
    def test_rounds_to_next_boundary(self):
        assert round_up(dt(17, "14:21"), 5) == dt(17, "14:25")

    def test_boundary_unchanged(self):
        assert round_up(dt(17, "14:25"), 5) == dt(17, "14:25")

    def test_seconds_push_to_next_boundary(self):
        value = datetime(2025, 3, 17, 14, 25, 1)
        assert round_up(value, 5) == dt(17, "14:30")

    def test_invalid_granularity(self):
        with pytest.raises(ValueError):
            round_up(dt(17, "14:00"), 0)
