from __future__ import annotations

import sys
from types import SimpleNamespace

from eldercare_core import DocumentKind, ParsedDocument, Section, normalize, resolve_document_kind


def test_page_text_lines_with_separator_become_trimmed_sections():
    text = "Patient: Jane Doe\n  Heart Rate :  101 bpm \nno separator here\n: orphan value\r\nBP: 130/85: repeat"
    document = normalize(text.encode("utf-8"), DocumentKind.PAGE_TEXT)

    assert document.sections == (
        Section("Patient", "Jane Doe"),
        Section("Heart Rate", "101 bpm"),
        Section("BP", "130/85: repeat"),
    )
    assert document.raw == text


def test_page_text_preserves_duplicate_keys_in_document_order():
    document = normalize(b"Pulse: 70\nPulse: 88\n", DocumentKind.PAGE_TEXT)
    assert [section.value for section in document.sections] == ["70", "88"]


def test_pdf_pages_are_read_with_pypdf(monkeypatch):
    class _FakePage:
        def __init__(self, text):
            self._text = text

        def extract_text(self):
            return self._text

    class _FakeReader:
        def __init__(self, stream):
            self.pages = [_FakePage("Heart Rate: 64"), _FakePage(None), _FakePage("Cholesterol: high")]

    monkeypatch.setitem(sys.modules, "pypdf", SimpleNamespace(PdfReader=_FakeReader))
    document = normalize(b"%PDF-1.4 fake", DocumentKind.PAGE_TEXT)

    assert [section.key for section in document.sections] == ["Heart Rate", "Cholesterol"]
    assert "Cholesterol: high" in document.raw


def test_pdf_decode_failure_degrades_to_empty_document(monkeypatch):
    class _BrokenReader:
        def __init__(self, stream):
            raise ValueError("EOF marker not found")

    monkeypatch.setitem(sys.modules, "pypdf", SimpleNamespace(PdfReader=_BrokenReader))
    document = normalize(b"%PDF-1.7 truncated", DocumentKind.PAGE_TEXT)
    assert document == ParsedDocument(sections=(), raw="")


def test_binary_page_document_degrades_to_empty_document():
    document = normalize(b"\xff\xfe\x00\x81garbage", DocumentKind.PAGE_TEXT)
    assert document.sections == ()
    assert document.raw == ""


def test_workbook_rows_become_sections_across_sheets(workbook_bytes):
    payload = workbook_bytes(
        [
            ["Blood Pressure", "130/85"],
            ["Notes"],
            [None, "orphan"],
            ["Heart Rate", 72, "ignored third cell"],
        ],
        [
            ["Temperature", 98.6],
            ["Steps", 5000.0],
        ],
    )
    document = normalize(payload, DocumentKind.TABULAR)

    assert document.sections == (
        Section("Blood Pressure", "130/85"),
        Section("Heart Rate", "72"),
        Section("Temperature", "98.6"),
        Section("Steps", "5000"),
    )
    assert document.raw == ""


def test_csv_rows_become_sections():
    payload = b"Glucose,140\nlonely\n,missing key\nLDL,160,mg/dL\n"
    document = normalize(payload, DocumentKind.TABULAR)
    assert document.sections == (Section("Glucose", "140"), Section("LDL", "160"))
    assert document.raw == ""

    blank_value = normalize(b"BP,\nPulse,70\n", DocumentKind.TABULAR)
    assert blank_value.sections == (Section("BP", ""), Section("Pulse", "70"))


def test_pdf_upload_without_pdf_header_degrades_to_empty_document():
    document = normalize(b"Heart Rate: 90", DocumentKind.PAGE_TEXT, mimetype="application/pdf")
    assert document == ParsedDocument()

    plain = normalize(b"Heart Rate: 90", DocumentKind.PAGE_TEXT, mimetype="text/plain")
    assert plain.sections == (Section("Heart Rate", "90"),)


def test_corrupt_workbook_degrades_to_empty_document():
    document = normalize(b"PK\x03\x04not really a zip", DocumentKind.TABULAR)
    assert document == ParsedDocument()


def test_unsupported_kind_normalizes_to_empty_document():
    document = normalize(b"Heart Rate: 90", DocumentKind.UNSUPPORTED)
    assert document.sections == ()
    assert not document.has_content


def test_normalizing_same_bytes_twice_is_identical(workbook_bytes):
    text = b"Heart Rate: 101 bpm\nBP: 120/80\n"
    assert normalize(text, DocumentKind.PAGE_TEXT) == normalize(text, DocumentKind.PAGE_TEXT)
    sheet = workbook_bytes([["Pulse", 80], ["SpO2", "97%"]])
    assert normalize(sheet, DocumentKind.TABULAR) == normalize(sheet, DocumentKind.TABULAR)


def test_resolve_document_kind_prefers_mime_type_over_extension():
    assert resolve_document_kind("application/pdf", "report.xlsx") == DocumentKind.PAGE_TEXT
    assert resolve_document_kind(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", "vitals.pdf"
    ) == DocumentKind.TABULAR
    assert resolve_document_kind("application/vnd.ms-excel", None) == DocumentKind.TABULAR
    assert resolve_document_kind("text/plain; charset=utf-8", None) == DocumentKind.PAGE_TEXT
    assert resolve_document_kind("application/octet-stream", "labs.csv") == DocumentKind.TABULAR
    assert resolve_document_kind("", "scan.PDF") == DocumentKind.PAGE_TEXT
    assert resolve_document_kind("image/png", "scan.png") == DocumentKind.UNSUPPORTED
