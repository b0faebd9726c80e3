from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any

from fastapi import Body, FastAPI, File, Form, Header, HTTPException, Query, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from care_sessions import CareSessionService, InMemorySessionStore, SessionPolicyError
from care_sessions.session_guard import MAX_SESSION_KEY_LENGTH
from eldercare_core import UploadMetadata, resolve_document_kind

_ENV_KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _load_local_env_file(path: Path) -> None:
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError:
        return
    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        if not _ENV_KEY_RE.fullmatch(key):
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
            value = value[1:-1]
        os.environ.setdefault(key, value)


def _bootstrap_local_env() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    for candidate in [repo_root / ".env", repo_root / "backend/.env"]:
        if candidate.exists():
            _load_local_env_file(candidate)


_bootstrap_local_env()

logging.basicConfig(
    level=os.getenv("CARE_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
log = logging.getLogger("eldercare.api")

API_VERSION = "1.0.0"
_MAX_DOCUMENT_BYTES = int(os.getenv("CARE_MAX_DOCUMENT_BYTES", str(10 * 1024 * 1024)))


class SessionPayload(BaseModel):
    sessionId: str | None = None
    session_key: str | None = None


class EmergencyNotifyRequest(SessionPayload):
    mode: str = "sms"
    message: str = "Emergency alert"
    contacts: list[str] = Field(default_factory=list)


class ElderCareApp:
    def __init__(self) -> None:
        self.store = InMemorySessionStore()
        self.sessions = CareSessionService(self.store)


container = ElderCareApp()
app = FastAPI(title="Elderly Care Backend", version=API_VERSION)

allowed_origins = os.getenv("ALLOWED_ORIGINS", "http://localhost:5173").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in allowed_origins],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def resolve_session_key(*candidates: str | None) -> str | None:
    """First non-blank candidate wins.

    Routes pass candidates in a fixed order: the ``X-Session-Id`` header, then
    the ``sessionId`` query parameter, then a ``sessionId``/``session_key``
    field from the JSON body or multipart form. A winning key longer than
    ``MAX_SESSION_KEY_LENGTH`` is a 400.
    """
    for candidate in candidates:
        if candidate is not None and candidate.strip():
            key = candidate.strip()
            if len(key) > MAX_SESSION_KEY_LENGTH:
                raise HTTPException(status_code=400, detail="Invalid session key.")
            return key
    return None


def _body_session_candidates(payload: SessionPayload | None) -> tuple[str | None, str | None]:
    if payload is None:
        return None, None
    return payload.sessionId, payload.session_key


def _session_error(exc: SessionPolicyError) -> HTTPException:
    return HTTPException(status_code=400, detail=str(exc))


def _normalize_upload_filename(upload: UploadFile | None, fallback_name: str) -> str:
    file_name = (upload.filename or "").strip() if upload else ""
    return file_name or fallback_name


async def _read_upload_bytes(upload: UploadFile, *, max_bytes: int, too_large_detail: str) -> bytes:
    raw = await upload.read(max_bytes + 1)
    if len(raw) > max_bytes:
        raise HTTPException(status_code=413, detail=too_large_detail)
    return raw


@app.get("/")
def root() -> dict[str, Any]:
    return {"message": "Elderly Care API is running", "version": API_VERSION}


@app.post("/api/reports/upload")
async def reports_upload(
    file: UploadFile | None = File(default=None),
    sessionId_form: str | None = Form(default=None, alias="sessionId"),
    session_key: str | None = Form(default=None),
    sessionId: str | None = Query(default=None),
    x_session_id: str | None = Header(default=None),
):
    if file is None:
        raise HTTPException(status_code=400, detail="No file uploaded")

    file_name = _normalize_upload_filename(file, "report-upload")
    mime_type = (file.content_type or "").lower().strip()
    document_bytes = await _read_upload_bytes(
        file,
        max_bytes=_MAX_DOCUMENT_BYTES,
        too_large_detail=f"Document file exceeds {_MAX_DOCUMENT_BYTES // (1024 * 1024)}MB limit.",
    )
    kind = resolve_document_kind(mime_type, file_name)
    metadata = UploadMetadata(filename=file_name, mimetype=mime_type, size=len(document_bytes))

    requested_key = resolve_session_key(x_session_id, sessionId, sessionId_form, session_key)
    try:
        result = container.sessions.ingest(requested_key, document_bytes, kind, metadata)
    except SessionPolicyError as exc:
        raise _session_error(exc) from exc

    return {"ok": True, "session": result.session_key, "parsedData": result.document.as_dict()}


@app.get("/api/reports/summary")
def reports_summary(
    sessionId: str | None = Query(default=None),
    x_session_id: str | None = Header(default=None),
):
    requested_key = resolve_session_key(x_session_id, sessionId)
    document = container.sessions.document(requested_key)
    summary = container.sessions.summarize(requested_key)

    if summary is None or document is None:
        return {"ok": True, "session": requested_key, "summary": None, "parsedData": None}
    return {
        "ok": True,
        "session": requested_key,
        "summary": summary.as_dict(),
        "parsedData": document.as_dict(),
    }


@app.post("/api/medicines/generate")
def medicines_generate(
    payload: SessionPayload | None = Body(default=None),
    sessionId: str | None = Query(default=None),
    x_session_id: str | None = Header(default=None),
):
    requested_key = resolve_session_key(x_session_id, sessionId, *_body_session_candidates(payload))
    items = container.sessions.recommend_medicines(requested_key)
    return {"ok": True, "session": requested_key, "items": [item.as_dict() for item in items]}


@app.post("/api/fitness/generate")
def fitness_generate(
    payload: SessionPayload | None = Body(default=None),
    sessionId: str | None = Query(default=None),
    x_session_id: str | None = Header(default=None),
):
    requested_key = resolve_session_key(x_session_id, sessionId, *_body_session_candidates(payload))
    exercises = container.sessions.recommend_fitness(requested_key)
    return {"ok": True, "session": requested_key, "exercises": [item.as_dict() for item in exercises]}


@app.post("/api/emergency/notify")
def emergency_notify(
    payload: EmergencyNotifyRequest | None = Body(default=None),
    sessionId: str | None = Query(default=None),
    x_session_id: str | None = Header(default=None),
):
    request = payload or EmergencyNotifyRequest()
    requested_key = resolve_session_key(x_session_id, sessionId, *_body_session_candidates(request))
    try:
        notification = container.sessions.request_emergency_notification(
            requested_key,
            mode=request.mode,
            message=request.message,
            contacts=request.contacts,
        )
    except SessionPolicyError as exc:
        raise _session_error(exc) from exc
    return {"ok": True, "status": "notified", "details": notification.as_details()}


def _set_fall_monitor(
    running: bool,
    payload: SessionPayload | None,
    query_session: str | None,
    header_session: str | None,
) -> dict[str, Any]:
    requested_key = resolve_session_key(header_session, query_session, *_body_session_candidates(payload))
    try:
        state = container.sessions.set_fall_monitor(requested_key, running)
    except SessionPolicyError as exc:
        raise _session_error(exc) from exc
    return {"ok": True, "running": state}


@app.post("/api/fall-detection/start")
def fall_detection_start(
    payload: SessionPayload | None = Body(default=None),
    sessionId: str | None = Query(default=None),
    x_session_id: str | None = Header(default=None),
):
    return _set_fall_monitor(True, payload, sessionId, x_session_id)


@app.post("/api/fall-detection/stop")
def fall_detection_stop(
    payload: SessionPayload | None = Body(default=None),
    sessionId: str | None = Query(default=None),
    x_session_id: str | None = Header(default=None),
):
    return _set_fall_monitor(False, payload, sessionId, x_session_id)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "5000")))
