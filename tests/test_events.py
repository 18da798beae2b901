"""Tests for src.core.events — AlarmEventBus subscription and delivery."""

from unittest.mock import MagicMock

from src.core.events import AlarmEventBus
from src.data.models import AlarmFired


class TestAlarmEventBus:
    def test_delivers_in_subscription_order(self):
        calls = []
        first, second = MagicMock(), MagicMock()
        first.on_status_changed.side_effect = lambda *a: calls.append("first")
        second.on_status_changed.side_effect = lambda *a: calls.append("second")

        bus = AlarmEventBus()
        bus.subscribe(first)
        bus.subscribe(second)
        bus.status_changed("alarm_1", "SNOOZED")

        assert calls == ["first", "second"]
        first.on_status_changed.assert_called_once_with("alarm_1", "SNOOZED")

    def test_date_changed(self):
        listener = MagicMock()
        bus = AlarmEventBus()
        bus.subscribe(listener)
        bus.date_changed()
        listener.on_date_changed.assert_called_once_with()
        listener.on_status_changed.assert_not_called()

    def test_alarm_fired(self):
        listener = MagicMock()
        bus = AlarmEventBus()
        bus.subscribe(listener)
        event = AlarmFired("alarm_1", "Iron", "오전 09 : 00")
        bus.alarm_fired(event)
        listener.on_alarm_fired.assert_called_once_with(event)

    def test_unsubscribe_stops_delivery(self):
        listener = MagicMock()
        bus = AlarmEventBus()
        sub = bus.subscribe(listener)
        sub.unsubscribe()
        bus.date_changed()
        listener.on_date_changed.assert_not_called()
        assert not sub.active
        assert bus.listener_count == 0

    def test_unsubscribe_twice_is_harmless(self):
        bus = AlarmEventBus()
        sub = bus.subscribe(MagicMock())
        sub.unsubscribe()
        sub.unsubscribe()
        assert bus.listener_count == 0

    def test_failing_listener_does_not_block_others(self):
        bad, good = MagicMock(), MagicMock()
        bad.on_date_changed.side_effect = RuntimeError("boom")
        bus = AlarmEventBus()
        bus.subscribe(bad)
        bus.subscribe(good)
        bus.date_changed()
        good.on_date_changed.assert_called_once()

    def test_dispatch_marshals_delivery(self):
        queued = []
        listener = MagicMock()
        bus = AlarmEventBus(dispatch=queued.append)
        bus.subscribe(listener)

        bus.status_changed("alarm_1", "DELETED")
        listener.on_status_changed.assert_not_called()

        for job in queued:
            job()
        listener.on_status_changed.assert_called_once_with("alarm_1", "DELETED")

    def test_failing_dispatcher_is_contained(self):
        def broken(job):
            raise RuntimeError("ui thread gone")

        bus = AlarmEventBus(dispatch=broken)
        bus.subscribe(MagicMock())
        bus.date_changed()  # does not raise
