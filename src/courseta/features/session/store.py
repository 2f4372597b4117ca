from __future__ import annotations

import threading
from typing import Protocol

from ...core.models import Course

__all__ = ["InMemorySessionStore", "SessionStore"]


class SessionStore(Protocol):
    def get(self, user_id: str) -> Course | None: ...

    def set(self, user_id: str, course: Course) -> None: ...


class InMemorySessionStore:
    """Per-user course selection that lives as long as the process.

    Each key holds at most one course; a new ``set`` replaces the previous
    value outright.  There is no expiry and no versioning.
    """

    def __init__(self) -> None:
        self._selections: dict[str, Course] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str) -> Course | None:
        with self._lock:
            return self._selections.get(user_id)

    def set(self, user_id: str, course: Course) -> None:
        with self._lock:
            self._selections[user_id] = course

    def __len__(self) -> int:
        with self._lock:
            return len(self._selections)
