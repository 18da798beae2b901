"""
Nutrient Reminder — Alarm Scheduler.

A background thread ticks once per second and, on every tick:

1. Daily boundary: when the local date changes, every alarm gets its
   baseline time back and COMPLETED/SNOOZED alarms return to ACTIVE.
   Observers receive one date-changed signal for a bulk refresh.
2. Trigger check: for the current user's alarms, fire those whose
   scheduled time equals the current minute, that are due today and in
   a triggerable status. Each alarm fires at most once per minute.

The tick takes the current time as an argument so the rules can be
exercised without waiting on the wall clock.
"""

from __future__ import annotations

import logging
import threading
import time
from datetime import date, datetime
from typing import TYPE_CHECKING, Callable

from src.core.time_format import format_time, weekday_tag
from src.data.models import AlarmFired, AlarmRecord, AlarmStatus

if TYPE_CHECKING:
    from src.core.events import AlarmEventBus
    from src.data.store import AlarmStore
    from src.ports.notification_port import SessionPort

logger = logging.getLogger(__name__)

# Land each tick just past a wall-clock second boundary
_TICK_OFFSET = 0.01


def reset_for_new_day(record: AlarmRecord) -> bool:
    """Restore the baseline time and ACTIVE status. Returns True if changed."""
    changed = False
    if record.original_time and record.scheduled_time != record.original_time:
        record.scheduled_time = record.original_time
        changed = True
    if record.status in (AlarmStatus.COMPLETED, AlarmStatus.SNOOZED):
        record.status = AlarmStatus.ACTIVE
        changed = True
    return changed


class AlarmScheduler:
    """Fixed-period tick loop over the alarm store."""

    def __init__(
        self,
        store: AlarmStore,
        bus: AlarmEventBus,
        session: SessionPort,
        persist: Callable[[], None],
        clock: Callable[[], datetime] = datetime.now,
        tick_seconds: float = 1.0,
    ) -> None:
        self._store = store
        self._bus = bus
        self._session = session
        self._persist = persist
        self._clock = clock
        self._tick_seconds = tick_seconds

        self._last_date: date = clock().date()
        self._fired: set[tuple[str, str]] = set()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def last_date(self) -> date:
        return self._last_date

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._last_date = self._clock().date()
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._loop, name="alarm-scheduler", daemon=True,
        )
        self._thread.start()
        logger.info("Alarm scheduler started (tick=%.2fs)", self._tick_seconds)

    def stop(self) -> None:
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=2)
        self._thread = None
        logger.info("Alarm scheduler stopped")

    def _loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.tick(self._clock())
            except Exception:
                logger.error("Alarm tick failed", exc_info=True)
            self._stop_event.wait(self._next_delay())

    def _next_delay(self) -> float:
        return self._tick_seconds - (time.time() % self._tick_seconds) + _TICK_OFFSET

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def tick(self, now: datetime) -> list[AlarmFired]:
        """Run one scheduler pass at wall-clock time now.

        Returns the fire events raised during this pass.
        """
        today = now.date()
        if today != self._last_date:
            self._roll_over(today)

        user_id = self._session.current_user_id()
        if user_id is None:
            return []

        current_time = format_time(now.hour, now.minute)
        day_tag = weekday_tag(today)
        today_iso = today.isoformat()
        dirty = False
        fired: list[AlarmFired] = []

        for record in self._store.snapshot():
            if record.owner_id != user_id:
                continue
            try:
                if (
                    record.status == AlarmStatus.COMPLETED
                    and record.last_taken_date != today_iso
                ):
                    # Missed day-boundary reset (e.g. process was suspended)
                    reactivated = self._store.mutate(record.id, _reactivate)
                    if reactivated is not None:
                        record = reactivated
                        dirty = True

                event = self._check_trigger(record, current_time, day_tag, now)
            except Exception:
                logger.error("Skipping alarm %s during tick", record.id, exc_info=True)
                continue
            if event is not None:
                fired.append(event)

        if dirty:
            self._persist()
        for event in fired:
            logger.info("Alarm fired: %s '%s' at %s", event.alarm_id, event.name, event.scheduled_time)
            self._bus.alarm_fired(event)
        return fired

    def _check_trigger(
        self, record: AlarmRecord, current_time: str, day_tag: str, now: datetime,
    ) -> AlarmFired | None:
        if record.scheduled_time != current_time:
            return None
        if not record.status.triggerable or not record.is_due_on(day_tag):
            return None
        if now.second != 0:
            return None

        key = (record.id, now.strftime("%Y-%m-%dT%H:%M"))
        if key in self._fired:
            return None
        self._fired.add(key)
        return AlarmFired(
            alarm_id=record.id,
            name=record.name,
            scheduled_time=record.scheduled_time,
        )

    def _roll_over(self, today: date) -> None:
        changed = self._store.mutate_all(reset_for_new_day)
        logger.info(
            "Date changed %s -> %s, reset %d alarms", self._last_date, today, changed,
        )
        self._last_date = today
        self._fired.clear()
        self._persist()
        self._bus.date_changed()


def _reactivate(record: AlarmRecord) -> None:
    record.status = AlarmStatus.ACTIVE
