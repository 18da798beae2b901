"""Logging listener adapter — implements AlarmListener.

Writes every alarm event to the log. Used by the headless entry point in
place of a UI.
"""

from __future__ import annotations

import logging

from src.data.models import AlarmFired

logger = logging.getLogger(__name__)


class LoggingListener:
    """AlarmListener that logs events instead of showing popups."""

    def on_status_changed(self, alarm_id: str, status: str) -> None:
        logger.info("Alarm %s status changed: %s", alarm_id, status)

    def on_date_changed(self) -> None:
        logger.info("Date changed, alarm list refreshed")

    def on_alarm_fired(self, event: AlarmFired) -> None:
        logger.warning("⏰ %s: time to take '%s' (%s)", event.alarm_id, event.name, event.scheduled_time)
