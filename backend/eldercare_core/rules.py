from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Iterator, TypeVar

from .models import FitnessRecommendation, MedicineRecommendation, ParsedDocument

T = TypeVar("T")


HYPERTENSION_KEYWORDS = ("blood pressure", "bp", "hypertension")
LIPID_KEYWORDS = ("cholesterol", "lipid", "ldl")
DIABETES_KEYWORDS = ("glucose", "diabetes", "sugar")


def build_corpus(document: ParsedDocument) -> str:
    rendered = " ".join(f"{section.key} {section.value}" for section in document.sections)
    return (document.raw + rendered).lower()


@dataclass(frozen=True)
class KeywordRule(Generic[T]):
    name: str
    keywords: tuple[str, ...]
    recommendation: T

    def matches(self, corpus: str) -> bool:
        return any(keyword in corpus for keyword in self.keywords)


class RuleTable(Generic[T]):
    def __init__(self, rules: list[KeywordRule[T]] | None = None) -> None:
        self._rules: list[KeywordRule[T]] = []
        for rule in rules or []:
            self.register(rule)

    def register(self, rule: KeywordRule[T]) -> None:
        if any(existing.name == rule.name for existing in self._rules):
            raise ValueError(f"Rule already registered: {rule.name}")
        self._rules.append(rule)

    def __iter__(self) -> Iterator[KeywordRule[T]]:
        return iter(self._rules)

    def list_names(self) -> list[str]:
        return [rule.name for rule in self._rules]

    def evaluate(self, corpus: str) -> list[T]:
        return [rule.recommendation for rule in self._rules if rule.matches(corpus)]


LISINOPRIL = MedicineRecommendation(
    name="Lisinopril",
    form="Tablet",
    usage="Oral ingestion daily",
    time="08:00 AM",
    ml=10,
    rationale="Management of hypertension detected in report.",
)
ATORVASTATIN = MedicineRecommendation(
    name="Atorvastatin",
    form="Tablet",
    usage="Take before bedtime",
    time="09:00 PM",
    ml=20,
    rationale="Lipid-lowering therapy suggested by cholesterol profile.",
)
WELLNESS_TABLET = MedicineRecommendation(
    name="Wellness Tablet",
    form="Supplement",
    usage="Once daily",
    time="09:00 AM",
    ml=0,
    rationale="General wellness support based on your health profile.",
)

SEATED_MARCHING = FitnessRecommendation(
    name="Seated Marching",
    sets_or_duration="3 sets x 1 min",
    timer="60s",
    video_url="https://www.youtube.com/watch?v=KZ7w7mG5q2o",
    rationale="Improves circulation safely for hypertension management.",
)
WALL_PUSH_UPS = FitnessRecommendation(
    name="Wall Push-ups",
    sets_or_duration="2 sets x 12 reps",
    timer="45s",
    video_url="https://www.youtube.com/watch?v=a6YITB1YFf0",
    rationale="Resistance training helps improve insulin sensitivity.",
)
CHAIR_SQUATS = FitnessRecommendation(
    name="Chair Squats",
    sets_or_duration="2 sets x 10 reps",
    timer="60s",
    video_url="https://www.youtube.com/watch?v=1PZ_n-T8Ksg",
    rationale="Builds functional leg strength for mobility.",
)
BRISK_WALKING = FitnessRecommendation(
    name="Brisk Walking",
    sets_or_duration="20 minutes",
    timer="1200s",
    video_url="https://www.youtube.com/watch?v=3kYzeh6m5I0",
    rationale="Aerobic activity helps maintain healthy lipid levels.",
)
ANKLE_CIRCLES = FitnessRecommendation(
    name="Ankle Circles",
    sets_or_duration="1 min per foot",
    timer="30s",
    video_url="https://www.youtube.com/watch?v=0_u6eCHtSBA",
    rationale="Improves joint mobility and prevents stiffness.",
)


def default_medicine_rules() -> RuleTable[MedicineRecommendation]:
    return RuleTable(
        [
            KeywordRule("hypertension", HYPERTENSION_KEYWORDS, LISINOPRIL),
            KeywordRule("lipids", LIPID_KEYWORDS, ATORVASTATIN),
        ]
    )


def default_fitness_rules() -> RuleTable[FitnessRecommendation]:
    return RuleTable(
        [
            KeywordRule("hypertension", HYPERTENSION_KEYWORDS, SEATED_MARCHING),
            KeywordRule("diabetes", DIABETES_KEYWORDS, WALL_PUSH_UPS),
        ]
    )
