"""Notification port — interfaces between the alarm core and its collaborators.

Core modules depend on these protocols, never on a specific UI toolkit or
session implementation.
"""

from __future__ import annotations

from typing import Callable, Protocol

from src.data.models import AlarmFired

# Runs a zero-argument callable on the presentation layer's thread.
Dispatcher = Callable[[Callable[[], None]], None]


class AlarmListener(Protocol):
    """Receives alarm events from the service and scheduler."""

    def on_status_changed(self, alarm_id: str, status: str) -> None: ...

    def on_date_changed(self) -> None: ...

    def on_alarm_fired(self, event: AlarmFired) -> None: ...


class SessionPort(Protocol):
    """Supplies the currently logged-in user, if any."""

    def current_user_id(self) -> str | None: ...
