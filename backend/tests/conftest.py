from __future__ import annotations

import importlib
import io
import sys
from pathlib import Path
from typing import Any, Callable

import pytest
from fastapi.testclient import TestClient

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))


@pytest.fixture
def backend_module(monkeypatch):
    monkeypatch.setenv("CARE_LOG_LEVEL", "WARNING")
    monkeypatch.setenv("CARE_MAX_DOCUMENT_BYTES", str(64 * 1024))

    # Reload so every test starts with an empty in-memory session store.
    if "main" in sys.modules:
        module = importlib.reload(sys.modules["main"])
    else:
        module = importlib.import_module("main")
    return module


@pytest.fixture
def client(backend_module):
    with TestClient(backend_module.app) as test_client:
        yield test_client


@pytest.fixture
def session_headers() -> Callable[[str], dict[str, str]]:
    def _make(session_key: str) -> dict[str, str]:
        return {"X-Session-Id": session_key}

    return _make


@pytest.fixture
def workbook_bytes() -> Callable[..., bytes]:
    from openpyxl import Workbook

    def _make(*sheets: list[list[Any]]) -> bytes:
        workbook = Workbook()
        workbook.remove(workbook.active)
        for idx, rows in enumerate(sheets):
            worksheet = workbook.create_sheet(title=f"Sheet{idx + 1}")
            for row in rows:
                worksheet.append(row)
        buffer = io.BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()

    return _make
