from __future__ import annotations

from typing import Iterable, Protocol, TypeVar

from .models import FitnessRecommendation, MedicineRecommendation, ParsedDocument
from .rules import (
    ANKLE_CIRCLES,
    BRISK_WALKING,
    CHAIR_SQUATS,
    WELLNESS_TABLET,
    RuleTable,
    build_corpus,
    default_fitness_rules,
    default_medicine_rules,
)


class _Named(Protocol):
    name: str


N = TypeVar("N", bound=_Named)

MINIMUM_FITNESS_ITEMS = 2


def unique_by_name(items: Iterable[N]) -> list[N]:
    seen: set[str] = set()
    unique: list[N] = []
    for item in items:
        if item.name in seen:
            continue
        seen.add(item.name)
        unique.append(item)
    return unique


def recommend_medicines(
    document: ParsedDocument | None,
    rules: RuleTable[MedicineRecommendation] | None = None,
) -> list[MedicineRecommendation]:
    if document is None:
        return []
    table = rules if rules is not None else default_medicine_rules()
    items: list[MedicineRecommendation] = []
    if document.has_content:
        items.extend(table.evaluate(build_corpus(document)))
    if not items:
        items.append(WELLNESS_TABLET)
    return unique_by_name(items)


def recommend_fitness(
    document: ParsedDocument | None,
    rules: RuleTable[FitnessRecommendation] | None = None,
) -> list[FitnessRecommendation]:
    if document is None or not document.has_content:
        return []
    table = rules if rules is not None else default_fitness_rules()
    exercises = table.evaluate(build_corpus(document))
    exercises.append(CHAIR_SQUATS)
    # Unreachable while the baseline above is appended unconditionally.
    if not exercises:
        exercises.append(BRISK_WALKING)
    if len(exercises) < MINIMUM_FITNESS_ITEMS:
        exercises.append(ANKLE_CIRCLES)
    return unique_by_name(exercises)
