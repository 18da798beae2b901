"""
Nutrient Reminder — Alarm Record Store.

Single owner of all alarm records. Readers take an immutable snapshot
(a tuple) and iterate it without holding the lock; writers build a new
tuple under a short critical section and swap it in.

Persistence is whole-file JSON: every save serializes the full list to a
temp file and replaces the target.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Callable

from pydantic import AliasChoices, BaseModel, Field, ValidationError

from src.data.models import AlarmRecord, AlarmStatus

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """Raised when the alarm file cannot be read or written."""


class StoredAlarm(BaseModel):
    """On-disk shape of one alarm record.

    Accepts the legacy keys (userId, time, days) written by older versions.

    JSON example:
    {
        "id": "alarm_1718000000000",
        "ownerId": "user1",
        "name": "Vitamin C",
        "scheduledTime": "오전 09 : 00",
        "originalTime": "오전 09 : 00",
        "repeatDays": ["월", "수"],
        "status": "ACTIVE",
        "lastTakenDate": null
    }
    """
    id: str
    owner_id: str = Field(validation_alias=AliasChoices("ownerId", "userId"))
    name: str
    scheduled_time: str = Field(validation_alias=AliasChoices("scheduledTime", "time"))
    original_time: str | None = Field(
        default=None, validation_alias=AliasChoices("originalTime"),
    )
    repeat_days: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("repeatDays", "days"),
    )
    status: AlarmStatus = AlarmStatus.ACTIVE
    last_taken_date: str | None = Field(
        default=None, validation_alias=AliasChoices("lastTakenDate"),
    )

    def to_record(self) -> AlarmRecord:
        return AlarmRecord(
            id=self.id,
            owner_id=self.owner_id,
            name=self.name,
            scheduled_time=self.scheduled_time,
            # Backfill: every loaded record gets a baseline time
            original_time=self.original_time or self.scheduled_time,
            repeat_days=list(self.repeat_days),
            status=self.status,
            last_taken_date=self.last_taken_date,
        )


def copy_record(record: AlarmRecord) -> AlarmRecord:
    return dataclasses.replace(record, repeat_days=list(record.repeat_days))


def record_to_dict(record: AlarmRecord) -> dict:
    return {
        "id": record.id,
        "ownerId": record.owner_id,
        "name": record.name,
        "scheduledTime": record.scheduled_time,
        "originalTime": record.original_time,
        "repeatDays": list(record.repeat_days),
        "status": record.status.value,
        "lastTakenDate": record.last_taken_date,
    }


class AlarmStore:
    """Snapshot-isolated in-memory alarm list backed by a JSON file."""

    def __init__(self, path: str | Path | None = None) -> None:
        if path is None:
            from src.config import settings
            path = settings.ALARMS_FILE

        self._path = Path(path)
        self._records: tuple[AlarmRecord, ...] = ()
        self._lock = threading.Lock()
        self._save_lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    # -- reads ---------------------------------------------------------------

    def snapshot(self) -> tuple[AlarmRecord, ...]:
        """Return the current immutable sequence of records.

        The records are the store's own; callers must treat them as read-only.
        """
        return self._records

    def get(self, alarm_id: str) -> AlarmRecord | None:
        for record in self._records:
            if record.id == alarm_id:
                return copy_record(record)
        return None

    def __len__(self) -> int:
        return len(self._records)

    # -- writes --------------------------------------------------------------

    def add(self, record: AlarmRecord) -> None:
        with self._lock:
            if any(r.id == record.id for r in self._records):
                raise ValueError(f"Duplicate alarm id: {record.id}")
            self._records = self._records + (copy_record(record),)

    def replace(self, record: AlarmRecord) -> bool:
        """Swap in record for the stored one with the same id.

        Returns False (and changes nothing) when the id is unknown.
        """
        with self._lock:
            for i, existing in enumerate(self._records):
                if existing.id == record.id:
                    self._records = self._records[:i] + (copy_record(record),) + self._records[i + 1:]
                    return True
        return False

    def remove(self, alarm_id: str) -> bool:
        """Drop every record with alarm_id. Returns False if none matched."""
        with self._lock:
            kept = tuple(r for r in self._records if r.id != alarm_id)
            if len(kept) == len(self._records):
                return False
            self._records = kept
        return True

    def mutate(
        self, alarm_id: str, change: Callable[[AlarmRecord], None],
    ) -> AlarmRecord | None:
        """Apply change to a copy of the record and swap the copy in.

        Returns a copy of the updated record, or None when the id is unknown.
        """
        with self._lock:
            for i, existing in enumerate(self._records):
                if existing.id == alarm_id:
                    updated = copy_record(existing)
                    change(updated)
                    self._records = self._records[:i] + (updated,) + self._records[i + 1:]
                    return copy_record(updated)
        return None

    def mutate_all(self, change: Callable[[AlarmRecord], bool]) -> int:
        """Apply change to a copy of every record; keep copies that changed.

        change returns True when it modified the record. Returns the number
        of records changed.
        """
        changed = 0
        with self._lock:
            new_records: list[AlarmRecord] = []
            for existing in self._records:
                candidate = copy_record(existing)
                if change(candidate):
                    new_records.append(candidate)
                    changed += 1
                else:
                    new_records.append(existing)
            if changed:
                self._records = tuple(new_records)
        return changed

    # -- persistence ---------------------------------------------------------

    def load(self) -> int:
        """Replace the in-memory list with the file contents.

        A missing file leaves the store empty. Entries that fail validation
        are skipped. Raises PersistenceError if the file is unreadable or
        not a JSON list.
        """
        if not self._path.exists():
            logger.info("No alarm file at %s, starting empty", self._path)
            with self._lock:
                self._records = ()
            return 0

        try:
            with self._path.open("r", encoding="utf-8") as f:
                payload = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise PersistenceError(f"Failed to load alarms from {self._path}: {exc}") from exc

        if payload is None:
            payload = []
        if not isinstance(payload, list):
            raise PersistenceError(f"Alarm file {self._path} does not contain a list")

        records: list[AlarmRecord] = []
        seen: set[str] = set()
        for item in payload:
            try:
                record = StoredAlarm.model_validate(item).to_record()
            except ValidationError as exc:
                logger.warning("Skipping alarm entry due to parse error: %s", exc)
                continue
            if record.id in seen:
                logger.warning("Skipping duplicate alarm id %s", record.id)
                continue
            seen.add(record.id)
            records.append(record)

        with self._lock:
            self._records = tuple(records)
        logger.info("Loaded %d alarms from %s", len(records), self._path)
        return len(records)

    def save(self) -> None:
        """Overwrite the alarm file with the full current list.

        Saves are serialized; the snapshot is taken inside the save lock so
        the last writer always persists the newest list.
        """
        with self._save_lock:
            serializable = [record_to_dict(r) for r in self._records]
            tmp_name = None
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                with tempfile.NamedTemporaryFile(
                    "w", encoding="utf-8", dir=self._path.parent,
                    prefix=self._path.name + ".", suffix=".tmp", delete=False,
                ) as f:
                    tmp_name = f.name
                    json.dump(serializable, f, ensure_ascii=False, indent=2)
                os.replace(tmp_name, self._path)
            except OSError as exc:
                if tmp_name is not None and os.path.exists(tmp_name):
                    os.remove(tmp_name)
                raise PersistenceError(f"Failed to save alarms to {self._path}: {exc}") from exc
        logger.debug("Saved %d alarms to %s", len(serializable), self._path)
