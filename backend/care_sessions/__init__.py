from .service import CareSessionService, IngestResult
from .session_guard import SessionPolicyError, SessionPolicyGuard
from .store import InMemorySessionStore, SessionStore

__all__ = [
    "CareSessionService",
    "InMemorySessionStore",
    "IngestResult",
    "SessionPolicyError",
    "SessionPolicyGuard",
    "SessionStore",
]
