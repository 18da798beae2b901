"""Shared test fixtures and configuration.

Points the alarm file at a throwaway path so importing src.config never
touches a real alarms_data.json, and provides a fixed clock, a temp store,
the bundled conflict table and a recording listener.
"""

import os

# Patch env vars BEFORE any src imports
os.environ.setdefault("ALARMS_FILE", os.path.join("build", "test_alarms.json"))
os.environ.setdefault("LOG_LEVEL", "DEBUG")

import pytest
from datetime import datetime


class FakeClock:
    """Callable clock whose time the test controls."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class RecordingListener:
    """AlarmListener that records every event it receives."""

    def __init__(self) -> None:
        self.status_changes: list[tuple[str, str]] = []
        self.date_changes = 0
        self.fired = []

    def on_status_changed(self, alarm_id: str, status: str) -> None:
        self.status_changes.append((alarm_id, status))

    def on_date_changed(self) -> None:
        self.date_changes += 1

    def on_alarm_fired(self, event) -> None:
        self.fired.append(event)


@pytest.fixture
def clock():
    """Monday 2026-10-19, 08:59:00."""
    return FakeClock(datetime(2026, 10, 19, 8, 59, 0))


@pytest.fixture
def alarms_path(tmp_path):
    return tmp_path / "alarms_data.json"


@pytest.fixture
def store(alarms_path):
    from src.data.store import AlarmStore
    return AlarmStore(alarms_path)


@pytest.fixture
def knowledge_base():
    from src.core.conflict_checker import ConflictKnowledgeBase, DEFAULT_CONFLICT_DATA
    return ConflictKnowledgeBase.load(DEFAULT_CONFLICT_DATA)


@pytest.fixture
def session():
    from src.adapters.static_session import StaticSession
    return StaticSession("user1")


@pytest.fixture
def listener():
    return RecordingListener()


@pytest.fixture
def service(store, knowledge_base, session, clock, listener):
    """AlarmService on a temp store and fixed clock, scheduler not started."""
    from src.core.alarm_service import AlarmService
    svc = AlarmService(
        store=store,
        knowledge_base=knowledge_base,
        session=session,
        clock=clock,
    )
    svc.subscribe(listener)
    return svc
