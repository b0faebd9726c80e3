from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class DocumentKind(str, Enum):
    PAGE_TEXT = "page_text"
    TABULAR = "tabular"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class Section:
    key: str
    value: str

    def as_dict(self) -> dict[str, str]:
        return {"key": self.key, "value": self.value}


@dataclass(frozen=True)
class ParsedDocument:
    sections: tuple[Section, ...] = ()
    raw: str = ""

    @property
    def has_content(self) -> bool:
        return bool(self.sections) or bool(self.raw)

    def as_dict(self) -> dict[str, Any]:
        return {"sections": [section.as_dict() for section in self.sections], "raw": self.raw}


EMPTY_DOCUMENT = ParsedDocument()


@dataclass
class VitalSigns:
    heart_rate: str | None = None
    bp: str | None = None
    temp: str | None = None
    spo2: str | None = None

    def as_dict(self) -> dict[str, str | None]:
        return {"heartRate": self.heart_rate, "bp": self.bp, "temp": self.temp, "spo2": self.spo2}


@dataclass
class HealthMetrics:
    vitality_score: str | None = None
    steps: str | None = None
    steps_change: str | None = None

    def as_dict(self) -> dict[str, str | None]:
        return {"vitalityScore": self.vitality_score, "steps": self.steps, "stepsChange": self.steps_change}


@dataclass
class HealthSummary:
    sections_count: int
    vital_signs: VitalSigns
    metrics: HealthMetrics
    sample: list[Section] = field(default_factory=list)
    placeholders: list[str] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return {
            "sectionsCount": self.sections_count,
            "vitalSigns": self.vital_signs.as_dict(),
            "metrics": self.metrics.as_dict(),
            "sample": [section.as_dict() for section in self.sample],
            "placeholders": list(self.placeholders),
        }


@dataclass(frozen=True)
class MedicineRecommendation:
    name: str
    form: str
    usage: str
    time: str
    ml: int
    rationale: str

    def as_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "form": self.form,
            "usage": self.usage,
            "time": self.time,
            "ml": self.ml,
            "rationale": self.rationale,
        }


@dataclass(frozen=True)
class FitnessRecommendation:
    name: str
    sets_or_duration: str
    timer: str
    video_url: str
    rationale: str

    def as_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "setsOrDuration": self.sets_or_duration,
            "timer": self.timer,
            "videoUrl": self.video_url,
            "rationale": self.rationale,
        }


@dataclass(frozen=True)
class UploadMetadata:
    filename: str
    mimetype: str
    size: int

    def as_dict(self) -> dict[str, Any]:
        return {"filename": self.filename, "mimetype": self.mimetype, "size": self.size}


@dataclass(frozen=True)
class EmergencyNotification:
    mode: str = "sms"
    message: str = "Emergency alert"
    contacts: tuple[str, ...] = ()
    requested_at: str | None = None

    def as_details(self) -> dict[str, Any]:
        return {"mode": self.mode, "message": self.message, "contacts": list(self.contacts)}


@dataclass
class FallMonitorState:
    running: bool = False


@dataclass
class SessionState:
    session_key: str
    created_at: datetime
    uploaded: UploadMetadata | None = None
    parsed_data: ParsedDocument | None = None
    medicines: list[MedicineRecommendation] | None = None
    fitness: list[FitnessRecommendation] | None = None
    emergency: EmergencyNotification | None = None
    fall: FallMonitorState = field(default_factory=FallMonitorState)

    @property
    def has_document(self) -> bool:
        return self.parsed_data is not None
