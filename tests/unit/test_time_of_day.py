"""Test minutes-since-midnight helpers."""

from datetime import date, datetime

import pytest

from salon_booking.utils.time_of_day import (
    combine,
    format_12h,
    format_hhmm,
    parse_hhmm,
    round_up_to_interval,
    sunday_based_weekday,
)


class TestParseAndFormat:
    @pytest.mark.parametrize(
        "value,expected", [("00:00", 0), ("08:30", 510), ("21:00", 1260), ("23:59", 1439)]
    )
    def test_parse_hhmm(self, value, expected):
        assert parse_hhmm(value) == expected

    @pytest.mark.parametrize("value", ["24:00", "8:30", "08:60", "noon", "", None])
    def test_parse_hhmm_rejects_invalid(self, value):
        with pytest.raises(ValueError):
            parse_hhmm(value)

    def test_format_hhmm(self):
        assert format_hhmm(510) == "08:30"
        assert format_hhmm(0) == "00:00"

    def test_format_hhmm_out_of_range(self):
        with pytest.raises(ValueError):
            format_hhmm(24 * 60)

    def test_format_12h(self):
        assert format_12h(870) == "2:30 PM"
        assert format_12h(0) == "12:00 AM"
        assert format_12h(12 * 60) == "12:00 PM"
        assert format_12h(9 * 60 + 15) == "9:15 AM"


class TestRounding:
    def test_already_on_mark_is_unchanged(self):
        assert round_up_to_interval(datetime(2025, 6, 2, 10, 0)) == datetime(
            2025, 6, 2, 10, 0
        )

    def test_seconds_are_dropped(self):
        assert round_up_to_interval(datetime(2025, 6, 2, 10, 0, 40)) == datetime(
            2025, 6, 2, 10, 0
        )

    def test_rounds_up_to_next_quarter(self):
        assert round_up_to_interval(datetime(2025, 6, 2, 10, 1)) == datetime(
            2025, 6, 2, 10, 15
        )

    def test_rounds_past_midnight(self):
        assert round_up_to_interval(datetime(2025, 6, 2, 23, 50)) == datetime(
            2025, 6, 3, 0, 0
        )


def test_combine():
    assert combine(date(2025, 6, 2), 615) == datetime(2025, 6, 2, 10, 15)


def test_sunday_based_weekday():
    assert sunday_based_weekday(date(2025, 6, 1)) == 0  # Sunday
    assert sunday_based_weekday(date(2025, 6, 3)) == 2  # Tuesday
    assert sunday_based_weekday(date(2025, 6, 7)) == 6  # Saturday
