"""
Nutrient Reminder — Time/Format Utilities.

Alarm times are stored as localized 12-hour strings such as "오전 09 : 30".
This module converts between that representation and (hour, minute) pairs
on a 24-hour scale.

No I/O: this module only transforms data.
"""

from __future__ import annotations

import re
from datetime import date

AM_MARKER = "오전"
PM_MARKER = "오후"

# Monday..Sunday, matching date.weekday()
WEEKDAY_TAGS = ("월", "화", "수", "목", "금", "토", "일")

_MERIDIEMS = {
    AM_MARKER: "AM",
    PM_MARKER: "PM",
    "AM": "AM",
    "PM": "PM",
}

_SPLIT_RE = re.compile(r"[:\s]+")

_MINUTES_PER_DAY = 24 * 60


class FormatError(ValueError):
    """Raised when a time string cannot be parsed."""


def parse_time(text: str) -> tuple[int, int]:
    """Parse "<meridiem> <hour> : <minute>" into (hour 0-23, minute).

    Whitespace around the colon is flexible. Raises FormatError on
    malformed input.
    """
    if not isinstance(text, str):
        raise FormatError(f"Time must be a string, got {type(text).__name__}")

    parts = [p for p in _SPLIT_RE.split(text.strip()) if p]
    if len(parts) != 3:
        raise FormatError(f"Expected '<meridiem> <hour> : <minute>': {text!r}")

    marker, hour_raw, minute_raw = parts
    meridiem = _MERIDIEMS.get(marker) or _MERIDIEMS.get(marker.upper())
    if meridiem is None:
        raise FormatError(f"Unknown meridiem marker {marker!r} in {text!r}")

    try:
        hour = int(hour_raw)
        minute = int(minute_raw)
    except ValueError as exc:
        raise FormatError(f"Non-numeric hour/minute in {text!r}") from exc

    if not 1 <= hour <= 12:
        raise FormatError(f"Hour out of range 1-12: {hour}")
    if not 0 <= minute <= 59:
        raise FormatError(f"Minute out of range 0-59: {minute}")

    if meridiem == "PM" and hour != 12:
        hour += 12
    elif meridiem == "AM" and hour == 12:
        hour = 0
    return hour, minute


def format_time(hour: int, minute: int) -> str:
    """Format a 24-hour (hour, minute) as "오전 HH : MM" / "오후 HH : MM"."""
    marker = AM_MARKER if hour < 12 else PM_MARKER
    display_hour = hour % 12 or 12
    return f"{marker} {display_hour:02d} : {minute:02d}"


def _to_minutes(value: str | tuple[int, int]) -> int:
    hour, minute = parse_time(value) if isinstance(value, str) else value
    return hour * 60 + minute


def minute_difference(t1: str | tuple[int, int], t2: str | tuple[int, int]) -> int:
    """Absolute difference in minutes between two times of the same day.

    Accepts time strings or (hour, minute) pairs. No midnight wraparound:
    "오후 11 : 59" and "오전 12 : 00" are 1439 minutes apart.
    """
    return abs(_to_minutes(t1) - _to_minutes(t2))


def add_minutes(time_str: str, delta: int) -> str:
    """Shift a time string by delta minutes, wrapping within a 24-hour day."""
    total = (_to_minutes(time_str) + delta) % _MINUTES_PER_DAY
    return format_time(total // 60, total % 60)


def weekday_tag(day: date) -> str:
    """Return the weekday tag ("월".."일") for a calendar date."""
    return WEEKDAY_TAGS[day.weekday()]


def compact_time(time_str: str) -> str:
    """Strip the meridiem marker and collapse " : " for list display.

    "오전 09 : 05" -> "09:05". Leaves unparseable input trimmed but intact.
    """
    text = time_str
    for marker in (AM_MARKER, PM_MARKER):
        text = text.replace(marker, "")
    return text.strip().replace(" : ", ":")
