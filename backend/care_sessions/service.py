from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from eldercare_core import (
    DocumentKind,
    EmergencyNotification,
    FitnessRecommendation,
    HealthSummary,
    MedicineRecommendation,
    ParsedDocument,
    SessionState,
    UploadMetadata,
    extract,
    normalize,
    recommend_fitness,
    recommend_medicines,
)

from .session_guard import SessionPolicyError, SessionPolicyGuard
from .store import InMemorySessionStore, SessionStore
from .time_utils import to_iso, utc_now

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class IngestResult:
    session_key: str
    document: ParsedDocument


class CareSessionService:
    def __init__(self, store: SessionStore | None = None, guard: SessionPolicyGuard | None = None) -> None:
        self.store = store if store is not None else InMemorySessionStore()
        self.guard = guard or SessionPolicyGuard()

    def resolve_session_key(self, session_key: str | None) -> str:
        cleaned = self.guard.clean_session_key(session_key)
        return cleaned or self.guard.synthesize_session_key()

    def _existing(self, session_key: str | None) -> SessionState | None:
        try:
            cleaned = self.guard.clean_session_key(session_key)
        except SessionPolicyError:
            # No session can be stored under an out-of-scope key.
            return None
        if cleaned is None:
            return None
        return self.store.get(cleaned)

    def ingest(
        self,
        session_key: str | None,
        document_bytes: bytes,
        kind: DocumentKind,
        metadata: UploadMetadata,
    ) -> IngestResult:
        key = self.resolve_session_key(session_key)
        document = normalize(document_bytes, kind, mimetype=metadata.mimetype)
        state = self.store.get_or_create(key)
        state.uploaded = metadata
        state.parsed_data = document
        state.medicines = None
        state.fitness = None
        self.store.set(key, state)
        log.info(
            "ingested document for session %s: kind=%s sections=%d raw_chars=%d",
            key,
            kind.value,
            len(document.sections),
            len(document.raw),
        )
        return IngestResult(session_key=key, document=document)

    def document(self, session_key: str | None) -> ParsedDocument | None:
        state = self._existing(session_key)
        return state.parsed_data if state else None

    def summarize(self, session_key: str | None) -> HealthSummary | None:
        document = self.document(session_key)
        if document is None:
            log.info("no document for session %s; summary unavailable", session_key)
            return None
        summary = extract(document)
        log.info("summarized session %s: sections=%d", session_key, summary.sections_count)
        return summary

    def recommend_medicines(self, session_key: str | None) -> list[MedicineRecommendation]:
        state = self._existing(session_key)
        if state is None or state.parsed_data is None:
            return []
        if state.medicines is None:
            state.medicines = recommend_medicines(state.parsed_data)
            self.store.set(state.session_key, state)
        log.info("medicines for session %s: %d items", state.session_key, len(state.medicines))
        return list(state.medicines)

    def recommend_fitness(self, session_key: str | None) -> list[FitnessRecommendation]:
        state = self._existing(session_key)
        if state is None or state.parsed_data is None:
            return []
        if state.fitness is None:
            state.fitness = recommend_fitness(state.parsed_data)
            self.store.set(state.session_key, state)
        log.info("fitness for session %s: %d exercises", state.session_key, len(state.fitness))
        return list(state.fitness)

    def set_fall_monitor(self, session_key: str | None, running: bool) -> bool:
        key = self.resolve_session_key(session_key)
        state = self.store.get_or_create(key)
        state.fall.running = bool(running)
        self.store.set(key, state)
        log.info("fall monitor for session %s running=%s", key, state.fall.running)
        return state.fall.running

    def request_emergency_notification(
        self,
        session_key: str | None,
        *,
        mode: str = "sms",
        message: str = "Emergency alert",
        contacts: Iterable[str] = (),
    ) -> EmergencyNotification:
        key = self.resolve_session_key(session_key)
        notification = EmergencyNotification(
            mode=mode,
            message=message,
            contacts=tuple(contacts),
            requested_at=to_iso(utc_now()),
        )
        state = self.store.get_or_create(key)
        state.emergency = notification
        self.store.set(key, state)
        # Delivery is handled outside this service; only the request is recorded.
        log.warning(
            "emergency notification requested for session %s: mode=%s contacts=%d",
            key,
            notification.mode,
            len(notification.contacts),
        )
        return notification
