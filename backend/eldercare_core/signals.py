from __future__ import annotations

import re

from .models import HealthMetrics, HealthSummary, ParsedDocument, VitalSigns

_HEART_RATE_KEY_RE = re.compile(r"heart rate|pulse|bpm|hr")
_BLOOD_PRESSURE_KEY_RE = re.compile(r"blood pressure|bp|systolic|diastolic")
_TEMPERATURE_KEY_RE = re.compile(r"temperature|temp")
_SPO2_KEY_RE = re.compile(r"spo2|oxygen saturation|o2 sat")
_STEPS_KEY_RE = re.compile(r"steps|walking|activity")
_VITALITY_KEY_RE = re.compile(r"vitality|health|score|fitness")
_DIGITS_RE = re.compile(r"\d+")

_RAW_HEART_RATE_RE = re.compile(r"(heart rate|pulse|bpm|hr)[:\s]*(\d+)")
_RAW_BLOOD_PRESSURE_RE = re.compile(r"(blood pressure|bp)[:\s]*(\d+/\d+)")
_RAW_TEMPERATURE_RE = re.compile(r"(temperature|temp)[:\s]*(\d+(?:\.\d+)?)")
_RAW_SPO2_RE = re.compile(r"(spo2|oxygen saturation)[:\s]*(\d+)")

# Placeholder values shown once any document exists; not measurements.
DEFAULT_HEART_RATE = "72"
DEFAULT_STEPS = "4,281"
DEFAULT_VITALITY_SCORE = "88"
DEFAULT_STEPS_CHANGE = "+12%"

SAMPLE_SIZE = 5


def _first_digits(text: str) -> str | None:
    match = _DIGITS_RE.search(text)
    return match.group(0) if match else None


def _scan_sections(document: ParsedDocument, vitals: VitalSigns, metrics: HealthMetrics) -> None:
    # Full pass: a later matching section overwrites an earlier one.
    for section in document.sections:
        key = section.key.lower()
        value = section.value.lower()

        if _HEART_RATE_KEY_RE.search(key):
            vitals.heart_rate = _first_digits(section.value) or section.value
        if _BLOOD_PRESSURE_KEY_RE.search(key):
            vitals.bp = section.value
        if _TEMPERATURE_KEY_RE.search(key):
            vitals.temp = section.value
        if _SPO2_KEY_RE.search(key):
            vitals.spo2 = _first_digits(section.value) or section.value
        if _STEPS_KEY_RE.search(key):
            metrics.steps = section.value
        if _VITALITY_KEY_RE.search(key) or "score" in value:
            score = _first_digits(f"{section.value} {section.key}")
            if score:
                metrics.vitality_score = score


def _scan_raw(document: ParsedDocument, vitals: VitalSigns) -> None:
    raw = document.raw.lower()
    if not raw:
        return
    if not vitals.heart_rate:
        match = _RAW_HEART_RATE_RE.search(raw)
        if match:
            vitals.heart_rate = match.group(2)
    if not vitals.bp:
        match = _RAW_BLOOD_PRESSURE_RE.search(raw)
        if match:
            vitals.bp = match.group(2)
    if not vitals.temp:
        match = _RAW_TEMPERATURE_RE.search(raw)
        if match:
            vitals.temp = match.group(2)
    if not vitals.spo2:
        match = _RAW_SPO2_RE.search(raw)
        if match:
            vitals.spo2 = match.group(2)


def _apply_placeholders(vitals: VitalSigns, metrics: HealthMetrics) -> list[str]:
    filled: list[str] = []
    if not vitals.heart_rate:
        vitals.heart_rate = DEFAULT_HEART_RATE
        filled.append("heartRate")
    if not metrics.steps:
        metrics.steps = DEFAULT_STEPS
        filled.append("steps")
    if not metrics.vitality_score:
        metrics.vitality_score = DEFAULT_VITALITY_SCORE
        filled.append("vitalityScore")
    if not metrics.steps_change:
        metrics.steps_change = DEFAULT_STEPS_CHANGE
        filled.append("stepsChange")
    return filled


def extract(document: ParsedDocument) -> HealthSummary:
    vitals = VitalSigns()
    metrics = HealthMetrics()
    _scan_sections(document, vitals, metrics)
    _scan_raw(document, vitals)
    placeholders = _apply_placeholders(vitals, metrics)
    return HealthSummary(
        sections_count=len(document.sections),
        vital_signs=vitals,
        metrics=metrics,
        sample=list(document.sections[:SAMPLE_SIZE]),
        placeholders=placeholders,
    )
