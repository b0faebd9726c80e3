from __future__ import annotations

import re

import pytest

from care_sessions import CareSessionService, InMemorySessionStore, SessionPolicyError
from eldercare_core import DocumentKind, UploadMetadata


def _metadata(size: int = 0) -> UploadMetadata:
    return UploadMetadata(filename="report.txt", mimetype="text/plain", size=size)


@pytest.fixture
def store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def service(store) -> CareSessionService:
    return CareSessionService(store)


def test_ingest_stores_document_and_metadata(service, store):
    payload = b"Heart Rate: 101 bpm\n"
    result = service.ingest("session-a", payload, DocumentKind.PAGE_TEXT, _metadata(len(payload)))

    assert result.session_key == "session-a"
    state = store.get("session-a")
    assert state is not None
    assert state.parsed_data == result.document
    assert state.uploaded == _metadata(len(payload))
    assert state.has_document


def test_ingest_synthesizes_session_key_when_absent(service, store):
    result = service.ingest(None, b"BP: 120/80", DocumentKind.PAGE_TEXT, _metadata())
    assert re.fullmatch(r"sess_\d+_[a-z0-9]{5}", result.session_key)
    assert result.session_key in store


def test_reads_against_unknown_or_missing_session_return_no_data(service, store):
    assert service.summarize("never-seen") is None
    assert service.summarize(None) is None
    assert service.recommend_medicines("never-seen") == []
    assert service.recommend_fitness(None) == []
    assert len(store) == 0


def test_session_without_document_returns_empty_recommendations(service):
    service.set_fall_monitor("session-a", True)
    assert service.summarize("session-a") is None
    assert service.recommend_medicines("session-a") == []
    assert service.recommend_fitness("session-a") == []


def test_summary_always_has_presentable_numbers_after_ingest(service):
    service.ingest("session-a", b"Patient: Jane Doe", DocumentKind.PAGE_TEXT, _metadata())
    summary = service.summarize("session-a")
    assert summary is not None
    assert summary.vital_signs.heart_rate
    assert summary.metrics.steps
    assert summary.metrics.vitality_score
    assert summary.metrics.steps_change


def test_empty_upload_still_counts_as_document(service):
    service.ingest("session-a", b"", DocumentKind.UNSUPPORTED, _metadata())
    summary = service.summarize("session-a")
    assert summary is not None
    assert summary.sections_count == 0
    assert [item.name for item in service.recommend_medicines("session-a")] == ["Wellness Tablet"]
    assert service.recommend_fitness("session-a") == []


def test_recommendations_are_cached_until_next_ingest(service, store):
    service.ingest("session-a", b"Diagnosis: hypertension", DocumentKind.PAGE_TEXT, _metadata())
    first = service.recommend_fitness("session-a")
    assert store.get("session-a").fitness == first
    assert service.recommend_fitness("session-a") == first

    service.ingest("session-a", b"Diagnosis: diabetes", DocumentKind.PAGE_TEXT, _metadata())
    state = store.get("session-a")
    assert state.fitness is None
    assert state.medicines is None
    assert [item.name for item in service.recommend_fitness("session-a")] == ["Wall Push-ups", "Chair Squats"]


def test_sessions_are_isolated(service):
    service.ingest("session-a", b"Note: hypertension", DocumentKind.PAGE_TEXT, _metadata())
    service.ingest("session-b", b"Note: high ldl", DocumentKind.PAGE_TEXT, _metadata())
    assert [item.name for item in service.recommend_medicines("session-a")] == ["Lisinopril"]
    assert [item.name for item in service.recommend_medicines("session-b")] == ["Atorvastatin"]


def test_fall_monitor_toggles_without_prior_state(service, store):
    assert service.set_fall_monitor("fresh", True) is True
    assert service.set_fall_monitor("fresh", False) is False
    assert service.set_fall_monitor("fresh", False) is False
    assert store.get("fresh").fall.running is False
    assert store.get("fresh").parsed_data is None


def test_emergency_request_is_recorded_and_echoed(service, store):
    notification = service.request_emergency_notification(
        "session-a", mode="call", message="Fall detected", contacts=["+15555550100"]
    )
    assert notification.as_details() == {"mode": "call", "message": "Fall detected", "contacts": ["+15555550100"]}
    assert notification.requested_at is not None
    assert store.get("session-a").emergency == notification


def test_oversized_session_key_reads_as_unknown_session(service):
    assert service.summarize("x" * 129) is None
    assert service.document("x" * 129) is None
    assert service.recommend_medicines("x" * 129) == []
    assert service.recommend_fitness("x" * 129) == []


def test_oversized_session_key_is_rejected_on_write(service):
    with pytest.raises(SessionPolicyError):
        service.ingest("x" * 129, b"BP: 120/80", DocumentKind.PAGE_TEXT, _metadata())


def test_blank_session_key_is_treated_as_absent(service):
    assert service.summarize("   ") is None
    key = service.resolve_session_key("  ")
    assert key.startswith("sess_")
