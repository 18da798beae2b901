"""Static session adapter — implements SessionPort."""

from __future__ import annotations


class StaticSession:
    """Session provider with a settable current user."""

    def __init__(self, user_id: str | None = None) -> None:
        self._user_id = user_id

    def current_user_id(self) -> str | None:
        return self._user_id

    def login(self, user_id: str) -> None:
        self._user_id = user_id

    def logout(self) -> None:
        self._user_id = None
