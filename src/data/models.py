"""
Nutrient Reminder — Data Models.

An AlarmRecord is one scheduled reminder for a nutrient or medication dose.
Records live in the AlarmStore and are persisted as a JSON list.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class AlarmStatus(str, Enum):
    """Lifecycle status of an alarm. COMPLETED and SNOOZED reset daily."""

    ACTIVE = "ACTIVE"
    SNOOZED = "SNOOZED"
    COMPLETED = "COMPLETED"

    @property
    def triggerable(self) -> bool:
        return self in (AlarmStatus.ACTIVE, AlarmStatus.SNOOZED)


@dataclass
class AlarmRecord:
    """A dosage alarm owned by a single user.

    scheduled_time is the current fire time and may be shifted by a snooze;
    original_time is the repeat-schedule baseline restored at the next
    daily reset. An empty repeat_days list means the alarm is due every day.
    """

    id: str
    owner_id: str
    name: str
    scheduled_time: str               # e.g. "오전 09 : 00"
    original_time: str | None = None
    repeat_days: list[str] = field(default_factory=list)   # ["월", "수", ...]
    status: AlarmStatus = AlarmStatus.ACTIVE
    last_taken_date: str | None = None  # ISO date YYYY-MM-DD

    def is_due_on(self, day_tag: str) -> bool:
        return not self.repeat_days or day_tag in self.repeat_days


@dataclass(frozen=True)
class AlarmFired:
    """Event raised when an alarm's scheduled minute arrives."""

    alarm_id: str
    name: str
    scheduled_time: str


@dataclass
class AlarmView:
    """Display-ready summary of an alarm for the presentation layer."""

    alarm_id: str
    name: str
    repeat_text: str       # "반복 없음" or "월, 수요일 (매주 반복)"
    time_text: str         # "09:00"
    scheduled_time: str
    status: AlarmStatus
    is_today: bool
