from __future__ import annotations

import secrets
import string

from .time_utils import epoch_millis

MAX_SESSION_KEY_LENGTH = 128
_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


class SessionPolicyError(Exception):
    pass


class SessionPolicyGuard:
    def ensure_session_scope(self, session_key: str) -> None:
        if not session_key or len(session_key) > MAX_SESSION_KEY_LENGTH:
            raise SessionPolicyError("Invalid session scope.")

    def clean_session_key(self, session_key: str | None) -> str | None:
        if session_key is None:
            return None
        cleaned = session_key.strip()
        if not cleaned:
            return None
        self.ensure_session_scope(cleaned)
        return cleaned

    def synthesize_session_key(self) -> str:
        suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(5))
        return f"sess_{epoch_millis()}_{suffix}"
