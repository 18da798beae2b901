"""
Nutrient Reminder — Alarm Lifecycle Service.

The API the presentation layer calls to register, edit, delete, complete
and snooze alarms, and to ask for an interaction warning before saving.
Owns the store, the event bus and the background scheduler; built
explicitly (see create_alarm_service) and started/stopped by the caller.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import TYPE_CHECKING, Callable

from src.core.conflict_checker import ConflictKnowledgeBase, check_conflict
from src.core.events import DELETED, UPDATED, AlarmEventBus, Subscription
from src.core.scheduler import AlarmScheduler
from src.core.time_format import (
    FormatError,
    add_minutes,
    compact_time,
    parse_time,
    weekday_tag,
)
from src.data.models import AlarmFired, AlarmRecord, AlarmStatus, AlarmView
from src.data.store import AlarmStore, PersistenceError, copy_record

if TYPE_CHECKING:
    from src.ports.notification_port import AlarmListener, Dispatcher, SessionPort

logger = logging.getLogger(__name__)

# Popup button labels → target status
ACTION_TAKEN = "먹었습니다"
ACTION_SNOOZE = "30분 뒤 다시 울림"

_ACTIONS = {
    ACTION_TAKEN: AlarmStatus.COMPLETED,
    ACTION_SNOOZE: AlarmStatus.SNOOZED,
}

NO_REPEAT_TEXT = "반복 없음"


def describe_alarm(record: AlarmRecord, today: date) -> AlarmView:
    """Build the list-row summary shown for an alarm."""
    if record.repeat_days:
        repeat_text = ", ".join(record.repeat_days) + "요일 (매주 반복)"
    else:
        repeat_text = NO_REPEAT_TEXT
    return AlarmView(
        alarm_id=record.id,
        name=record.name,
        repeat_text=repeat_text,
        time_text=compact_time(record.scheduled_time),
        scheduled_time=record.scheduled_time,
        status=record.status,
        is_today=record.is_due_on(weekday_tag(today)),
    )


class AlarmService:
    """Alarm lifecycle API plus the scheduler that fires alarms."""

    def __init__(
        self,
        store: AlarmStore,
        knowledge_base: ConflictKnowledgeBase,
        session: SessionPort,
        bus: AlarmEventBus | None = None,
        clock: Callable[[], datetime] = datetime.now,
        tick_seconds: float = 1.0,
        snooze_minutes: int = 30,
        conflict_window_minutes: int = 2,
    ) -> None:
        self._store = store
        self._knowledge_base = knowledge_base
        self._session = session
        self._bus = bus or AlarmEventBus()
        self._clock = clock
        self._snooze_minutes = snooze_minutes
        self._conflict_window = conflict_window_minutes
        self._scheduler = AlarmScheduler(
            store=store,
            bus=self._bus,
            session=session,
            persist=self._persist,
            clock=clock,
            tick_seconds=tick_seconds,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Load persisted alarms and start the background scheduler."""
        self.load()
        self._scheduler.start()

    def stop(self) -> None:
        self._scheduler.stop()

    def load(self) -> None:
        try:
            self._store.load()
        except PersistenceError as exc:
            logger.error("Starting with an empty alarm list: %s", exc)

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def subscribe(self, listener: AlarmListener) -> Subscription:
        return self._bus.subscribe(listener)

    def tick(self, now: datetime | None = None) -> list[AlarmFired]:
        """Run a single scheduler pass (defaults to the service clock)."""
        return self._scheduler.tick(now or self._clock())

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_alarm(self, alarm_id: str) -> AlarmRecord | None:
        return self._store.get(alarm_id)

    def list_alarms(self, owner_id: str | None = None) -> list[AlarmRecord]:
        """Alarms in store order, filtered to owner_id when given."""
        return [
            copy_record(r) for r in self._store.snapshot()
            if owner_id is None or r.owner_id == owner_id
        ]

    def describe_alarms(self, owner_id: str | None = None) -> list[AlarmView]:
        today = self._clock().date()
        return [describe_alarm(r, today) for r in self.list_alarms(owner_id)]

    def today_tag(self) -> str:
        return weekday_tag(self._clock().date())

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def register_alarm(
        self,
        owner_id: str,
        name: str,
        time: str,
        days: list[str] | None = None,
        alarm_id: str | None = None,
    ) -> AlarmRecord:
        """Create, store and persist a new ACTIVE alarm."""
        _warn_if_unparseable(time)
        record = AlarmRecord(
            id=alarm_id or self._new_id(),
            owner_id=owner_id,
            name=name,
            scheduled_time=time,
            original_time=time,
            repeat_days=list(days or []),
            status=AlarmStatus.ACTIVE,
        )
        self._store.add(record)
        self._persist()
        logger.info("Alarm registered: %s '%s' at %s", record.id, name, time)
        return copy_record(record)

    def update_alarm(self, record: AlarmRecord) -> None:
        """Replace the stored alarm with the same id.

        The edited time becomes the new baseline. Unknown ids are ignored.
        The caller's record is not modified or retained.
        """
        _warn_if_unparseable(record.scheduled_time)
        record = copy_record(record)
        record.original_time = record.scheduled_time
        if not self._store.replace(record):
            logger.debug("update_alarm: no alarm with id %s", record.id)
            return
        self._persist()
        logger.info("Alarm updated: %s '%s' at %s", record.id, record.name, record.scheduled_time)
        self._bus.status_changed(record.id, UPDATED)

    def delete_alarm(self, alarm_id: str) -> None:
        """Remove the alarm permanently. Unknown ids are ignored."""
        if not self._store.remove(alarm_id):
            logger.debug("delete_alarm: no alarm with id %s", alarm_id)
            return
        self._persist()
        logger.info("Alarm deleted: %s", alarm_id)
        self._bus.status_changed(alarm_id, DELETED)

    def update_alarm_status(self, alarm_id: str, status: AlarmStatus | str) -> None:
        """Mark an alarm taken (COMPLETED), snoozed, or ACTIVE again.

        Snoozing shifts the scheduled time by the snooze offset relative to
        the current scheduled time; the baseline time is kept. Unknown ids
        are ignored.
        """
        new_status = AlarmStatus(status)
        today_iso = self._clock().date().isoformat()

        def apply(record: AlarmRecord) -> None:
            if new_status == AlarmStatus.COMPLETED:
                record.status = AlarmStatus.COMPLETED
                record.last_taken_date = today_iso
            elif new_status == AlarmStatus.SNOOZED:
                if record.original_time is None:
                    record.original_time = record.scheduled_time
                try:
                    record.scheduled_time = add_minutes(
                        record.scheduled_time, self._snooze_minutes,
                    )
                except FormatError as exc:
                    logger.warning("Cannot shift time of alarm %s: %s", record.id, exc)
                record.status = AlarmStatus.SNOOZED
            else:
                record.status = AlarmStatus.ACTIVE

        updated = self._store.mutate(alarm_id, apply)
        if updated is None:
            logger.debug("update_alarm_status: no alarm with id %s", alarm_id)
            return
        self._persist()
        logger.info(
            "Alarm %s -> %s (scheduled %s)", alarm_id, new_status.value, updated.scheduled_time,
        )
        self._bus.status_changed(alarm_id, new_status.value)

    # ------------------------------------------------------------------
    # Presentation-facing routing
    # ------------------------------------------------------------------

    def save_alarm(
        self,
        owner_id: str,
        name: str,
        days: list[str],
        time: str,
        edit_id: str | None = None,
    ) -> AlarmRecord:
        """Route a save request from the edit form to register or update."""
        if edit_id is None:
            return self.register_alarm(owner_id, name, time, days)

        record = AlarmRecord(
            id=edit_id,
            owner_id=owner_id,
            name=name,
            scheduled_time=time,
            repeat_days=list(days),
            status=AlarmStatus.ACTIVE,
        )
        self.update_alarm(record)
        return self.get_alarm(edit_id) or record

    def handle_action(self, alarm_id: str, label: str) -> None:
        """Apply a popup button press ("먹었습니다" / "30분 뒤 다시 울림")."""
        status = _ACTIONS.get(label)
        if status is None:
            logger.warning("Ignoring unknown alarm action %r for %s", label, alarm_id)
            return
        self.update_alarm_status(alarm_id, status)

    def check_conflict(
        self, name: str, time: str, exclude_id: str | None = None,
    ) -> str | None:
        """Warning text if a nearby active alarm interacts with name, else None."""
        try:
            parse_time(time)
        except FormatError as exc:
            logger.warning("Conflict check skipped, bad candidate time: %s", exc)
            return None
        return check_conflict(
            self._store.snapshot(),
            name,
            time,
            self._knowledge_base,
            window_minutes=self._conflict_window,
            exclude_id=exclude_id,
        )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _new_id(self) -> str:
        stamp = int(self._clock().timestamp() * 1000)
        alarm_id = f"alarm_{stamp}"
        while self._store.get(alarm_id) is not None:
            stamp += 1
            alarm_id = f"alarm_{stamp}"
        return alarm_id

    def _persist(self) -> None:
        try:
            self._store.save()
        except PersistenceError as exc:
            logger.error("Alarm changes kept in memory only: %s", exc)


def _warn_if_unparseable(time: str) -> None:
    try:
        parse_time(time)
    except FormatError as exc:
        logger.warning("Alarm time will never match the clock: %s", exc)


def create_alarm_service(
    session: SessionPort,
    dispatch: Dispatcher | None = None,
    alarms_file: str | None = None,
) -> AlarmService:
    """Build an AlarmService wired from settings."""
    from src.config import settings

    return AlarmService(
        store=AlarmStore(alarms_file or settings.ALARMS_FILE),
        knowledge_base=ConflictKnowledgeBase.load(settings.CONFLICT_DATA_PATH or None),
        session=session,
        bus=AlarmEventBus(dispatch),
        tick_seconds=settings.TICK_SECONDS,
        snooze_minutes=settings.SNOOZE_MINUTES,
        conflict_window_minutes=settings.CONFLICT_WINDOW_MINUTES,
    )
