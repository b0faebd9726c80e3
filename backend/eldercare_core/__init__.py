from .engines import recommend_fitness, recommend_medicines, unique_by_name
from .models import (
    EMPTY_DOCUMENT,
    DocumentKind,
    EmergencyNotification,
    FallMonitorState,
    FitnessRecommendation,
    HealthMetrics,
    HealthSummary,
    MedicineRecommendation,
    ParsedDocument,
    Section,
    SessionState,
    UploadMetadata,
    VitalSigns,
)
from .normalizer import normalize, resolve_document_kind
from .rules import KeywordRule, RuleTable, build_corpus, default_fitness_rules, default_medicine_rules
from .signals import extract

__all__ = [
    "EMPTY_DOCUMENT",
    "DocumentKind",
    "EmergencyNotification",
    "FallMonitorState",
    "FitnessRecommendation",
    "HealthMetrics",
    "HealthSummary",
    "KeywordRule",
    "MedicineRecommendation",
    "ParsedDocument",
    "RuleTable",
    "Section",
    "SessionState",
    "UploadMetadata",
    "VitalSigns",
    "build_corpus",
    "default_fitness_rules",
    "default_medicine_rules",
    "extract",
    "normalize",
    "recommend_fitness",
    "recommend_medicines",
    "resolve_document_kind",
    "unique_by_name",
]
