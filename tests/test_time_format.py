"""Tests for src.core.time_format — 12-hour time parsing and arithmetic."""

from datetime import date

import pytest

from src.core.time_format import (
    FormatError,
    add_minutes,
    compact_time,
    format_time,
    minute_difference,
    parse_time,
    weekday_tag,
)


# ---------------------------------------------------------------------------
# parse_time
# ---------------------------------------------------------------------------


class TestParseTime:
    def test_morning(self):
        assert parse_time("오전 09 : 30") == (9, 30)

    def test_afternoon(self):
        assert parse_time("오후 03 : 05") == (15, 5)

    def test_noon_is_12(self):
        assert parse_time("오후 12 : 00") == (12, 0)

    def test_midnight_is_0(self):
        assert parse_time("오전 12 : 15") == (0, 15)

    def test_flexible_whitespace(self):
        assert parse_time("  오후   7:45 ") == (19, 45)
        assert parse_time("오전 7 :   5") == (7, 5)

    def test_english_markers(self):
        assert parse_time("PM 01 : 00") == (13, 0)
        assert parse_time("am 12 : 00") == (0, 0)

    @pytest.mark.parametrize("text", [
        "",
        "오전",
        "오전 09",
        "09 : 30",
        "저녁 09 : 30",
        "오전 aa : 30",
        "오전 09 : xx",
        "오전 13 : 00",
        "오전 00 : 00",
        "오전 09 : 60",
        "오전 09 : 30 : 00",
    ])
    def test_malformed_raises(self, text):
        with pytest.raises(FormatError):
            parse_time(text)

    def test_non_string_raises(self):
        with pytest.raises(FormatError):
            parse_time(None)

    def test_format_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_time("bad")


# ---------------------------------------------------------------------------
# format_time
# ---------------------------------------------------------------------------


class TestFormatTime:
    def test_zero_pads(self):
        assert format_time(9, 5) == "오전 09 : 05"

    def test_afternoon(self):
        assert format_time(15, 30) == "오후 03 : 30"

    def test_midnight_and_noon(self):
        assert format_time(0, 0) == "오전 12 : 00"
        assert format_time(12, 0) == "오후 12 : 00"

    @pytest.mark.parametrize("text", [
        "오전 09 : 30", "오후 12 : 00", "오전 12 : 59", "PM 11 : 01", "오후 1:7",
    ])
    def test_round_trip_on_numeric_value(self, text):
        parsed = parse_time(text)
        assert parse_time(format_time(*parsed)) == parsed


# ---------------------------------------------------------------------------
# minute_difference / add_minutes
# ---------------------------------------------------------------------------


class TestMinuteDifference:
    def test_absolute(self):
        assert minute_difference("오전 08 : 00", "오전 08 : 02") == 2
        assert minute_difference("오전 08 : 02", "오전 08 : 00") == 2

    def test_across_meridiem(self):
        assert minute_difference("오전 11 : 59", "오후 12 : 01") == 2

    def test_no_midnight_wraparound(self):
        assert minute_difference("오후 11 : 59", "오전 12 : 00") == 1439

    def test_accepts_tuples(self):
        assert minute_difference((8, 0), "오전 08 : 05") == 5

    def test_malformed_raises(self):
        with pytest.raises(FormatError):
            minute_difference("oops", "오전 08 : 00")


class TestAddMinutes:
    def test_thirty_minutes(self):
        assert add_minutes("오전 09 : 00", 30) == "오전 09 : 30"

    def test_crosses_noon(self):
        assert add_minutes("오전 11 : 45", 30) == "오후 12 : 15"

    def test_wraps_past_midnight(self):
        assert add_minutes("오후 11 : 45", 30) == "오전 12 : 15"

    def test_negative_delta(self):
        assert add_minutes("오전 12 : 10", -20) == "오후 11 : 50"


# ---------------------------------------------------------------------------
# weekday_tag / compact_time
# ---------------------------------------------------------------------------


class TestWeekdayTag:
    def test_monday(self):
        assert weekday_tag(date(2026, 10, 19)) == "월"

    def test_sunday(self):
        assert weekday_tag(date(2026, 10, 25)) == "일"


class TestCompactTime:
    def test_strips_marker(self):
        assert compact_time("오전 09 : 05") == "09:05"
        assert compact_time("오후 12 : 30") == "12:30"

    def test_leaves_other_text(self):
        assert compact_time("soon") == "soon"
