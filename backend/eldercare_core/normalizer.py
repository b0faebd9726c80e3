from __future__ import annotations

import csv
import io
import logging
import re
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Iterable, Iterator, Sequence

from .models import EMPTY_DOCUMENT, DocumentKind, ParsedDocument, Section

log = logging.getLogger(__name__)

_LINE_SPLIT_RE = re.compile(r"\r?\n")
_SECTION_SEPARATOR = ":"

_PAGE_TEXT_MIME_TYPES = {"application/pdf", "text/plain"}
_TABULAR_MIME_TYPES = {
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-excel",
    "text/csv",
}
_PAGE_TEXT_EXTENSIONS = {".pdf", ".txt"}
_TABULAR_EXTENSIONS = {".xlsx", ".xls", ".csv"}


def resolve_document_kind(mimetype: str | None, filename: str | None = None) -> DocumentKind:
    normalized_mime = (mimetype or "").split(";", 1)[0].strip().lower()
    if normalized_mime in _PAGE_TEXT_MIME_TYPES:
        return DocumentKind.PAGE_TEXT
    if normalized_mime in _TABULAR_MIME_TYPES:
        return DocumentKind.TABULAR
    ext = Path(filename or "").suffix.lower().strip()
    if ext in _PAGE_TEXT_EXTENSIONS:
        return DocumentKind.PAGE_TEXT
    if ext in _TABULAR_EXTENSIONS:
        return DocumentKind.TABULAR
    return DocumentKind.UNSUPPORTED


def _looks_like_pdf(document_bytes: bytes) -> bool:
    return document_bytes.lstrip()[:5] == b"%PDF-"


def _declared_pdf(mimetype: str | None) -> bool:
    return (mimetype or "").split(";", 1)[0].strip().lower() == "application/pdf"


def _looks_like_zip(document_bytes: bytes) -> bool:
    return document_bytes[:4] == b"PK\x03\x04"


def _read_pdf_text(document_bytes: bytes) -> str:
    from pypdf import PdfReader

    reader = PdfReader(io.BytesIO(document_bytes))
    return "\n".join((page.extract_text() or "") for page in reader.pages)


def _read_page_text(document_bytes: bytes) -> str:
    if _looks_like_pdf(document_bytes):
        return _read_pdf_text(document_bytes)
    return document_bytes.decode("utf-8-sig")


def sections_from_text(text: str) -> list[Section]:
    sections: list[Section] = []
    for line in _LINE_SPLIT_RE.split(text):
        idx = line.find(_SECTION_SEPARATOR)
        if idx < 0:
            continue
        key = line[:idx].strip()
        if not key:
            continue
        sections.append(Section(key=key, value=line[idx + 1 :].strip()))
    return sections


def cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def _trim_row(row: Sequence[Any]) -> list[Any]:
    cells = list(row)
    while cells and cells[-1] is None:
        cells.pop()
    return cells


def sections_from_rows(rows: Iterable[Sequence[Any]]) -> list[Section]:
    sections: list[Section] = []
    for row in rows:
        cells = _trim_row(row)
        if len(cells) < 2:
            continue
        key = cell_text(cells[0])
        if not key:
            continue
        sections.append(Section(key=key, value=cell_text(cells[1])))
    return sections


def _workbook_rows(document_bytes: bytes) -> Iterator[tuple[Any, ...]]:
    from openpyxl import load_workbook

    workbook = load_workbook(io.BytesIO(document_bytes), read_only=True, data_only=True)
    try:
        for worksheet in workbook.worksheets:
            for row in worksheet.iter_rows(values_only=True):
                yield row
    finally:
        workbook.close()


def _csv_rows(document_bytes: bytes) -> Iterator[list[str]]:
    text = document_bytes.decode("utf-8-sig")
    yield from csv.reader(io.StringIO(text))


def _read_tabular_sections(document_bytes: bytes) -> list[Section]:
    if _looks_like_zip(document_bytes):
        return sections_from_rows(_workbook_rows(document_bytes))
    return sections_from_rows(_csv_rows(document_bytes))


def normalize(document_bytes: bytes, kind: DocumentKind, mimetype: str | None = None) -> ParsedDocument:
    if kind == DocumentKind.PAGE_TEXT:
        if _declared_pdf(mimetype) and not _looks_like_pdf(document_bytes):
            log.warning("document declared as PDF has no PDF header; nothing to normalize")
            return EMPTY_DOCUMENT
        try:
            text = _read_page_text(document_bytes)
        except Exception as exc:
            log.warning("page document could not be decoded: %s", exc.__class__.__name__)
            return EMPTY_DOCUMENT
        return ParsedDocument(sections=tuple(sections_from_text(text)), raw=text)

    if kind == DocumentKind.TABULAR:
        try:
            sections = _read_tabular_sections(document_bytes)
        except Exception as exc:
            log.warning("tabular document could not be decoded: %s", exc.__class__.__name__)
            return EMPTY_DOCUMENT
        return ParsedDocument(sections=tuple(sections), raw="")

    log.info("unsupported document kind; nothing to normalize")
    return EMPTY_DOCUMENT
