from __future__ import annotations

import threading
from typing import Protocol

from eldercare_core.models import SessionState

from .time_utils import utc_now


class SessionStore(Protocol):
    def get(self, session_key: str) -> SessionState | None: ...

    def get_or_create(self, session_key: str) -> SessionState: ...

    def set(self, session_key: str, state: SessionState) -> None: ...


class InMemorySessionStore:
    """Process-lifetime session map. Nothing is ever evicted."""

    def __init__(self) -> None:
        self._sessions: dict[str, SessionState] = {}
        self._lock = threading.Lock()

    def get(self, session_key: str) -> SessionState | None:
        with self._lock:
            return self._sessions.get(session_key)

    def get_or_create(self, session_key: str) -> SessionState:
        with self._lock:
            state = self._sessions.get(session_key)
            if state is None:
                state = SessionState(session_key=session_key, created_at=utc_now())
                self._sessions[session_key] = state
            return state

    def set(self, session_key: str, state: SessionState) -> None:
        with self._lock:
            self._sessions[session_key] = state

    def __contains__(self, session_key: object) -> bool:
        with self._lock:
            return session_key in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
