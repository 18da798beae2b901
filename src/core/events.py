"""
Nutrient Reminder — Alarm event bus.

Broadcasts status changes, date rollovers and fire events to subscribed
listeners in subscription order. Delivery goes through a dispatcher so a
UI can marshal callbacks onto its own thread.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from src.data.models import AlarmFired

if TYPE_CHECKING:
    from src.ports.notification_port import AlarmListener, Dispatcher

logger = logging.getLogger(__name__)

UPDATED = "UPDATED"
DELETED = "DELETED"


def call_inline(fn) -> None:
    fn()


class Subscription:
    """Handle returned by subscribe(); call unsubscribe() to stop delivery."""

    def __init__(self, bus: AlarmEventBus, listener: AlarmListener) -> None:
        self._bus = bus
        self._listener = listener
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if self._active:
            self._bus._remove(self._listener)
            self._active = False


class AlarmEventBus:
    """Observer list with explicit unsubscribe handles."""

    def __init__(self, dispatch: Dispatcher | None = None) -> None:
        self._dispatch = dispatch or call_inline
        self._listeners: tuple[AlarmListener, ...] = ()
        self._lock = threading.Lock()

    def subscribe(self, listener: AlarmListener) -> Subscription:
        with self._lock:
            self._listeners = self._listeners + (listener,)
        return Subscription(self, listener)

    def _remove(self, listener: AlarmListener) -> None:
        with self._lock:
            self._listeners = tuple(
                existing for existing in self._listeners if existing is not listener
            )

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def status_changed(self, alarm_id: str, status: str) -> None:
        self._publish("on_status_changed", alarm_id, status)

    def date_changed(self) -> None:
        self._publish("on_date_changed")

    def alarm_fired(self, event: AlarmFired) -> None:
        self._publish("on_alarm_fired", event)

    def _publish(self, method: str, *args) -> None:
        listeners = self._listeners

        def deliver() -> None:
            for listener in listeners:
                try:
                    getattr(listener, method)(*args)
                except Exception:
                    logger.error("Listener %r failed in %s", listener, method, exc_info=True)

        try:
            self._dispatch(deliver)
        except Exception:
            logger.error("Dispatcher failed to deliver %s", method, exc_info=True)
