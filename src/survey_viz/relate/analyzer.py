from __future__ import annotations

import logging
from itertools import combinations
from typing import Optional, Sequence

from ..config import EngineConfig
from ..dataset import Dataset
from ..models import (
    CorrelationStat,
    CrossTabStat,
    GroupedStat,
    Question,
    RelationshipDescriptor,
    RelationshipKind,
    SemanticType,
    Strength,
    ThematicGroup,
)
from ..vocab import DEFAULT_VOCABULARY, Vocabulary
from .correlation import correlate
from .crosstab import cross_tabulate
from .grouped import group_numeric_by_category
from .themes import group_by_theme

logger = logging.getLogger(__name__)

_CATEGORICAL_TYPES = {SemanticType.MULTIPLE_CHOICE, SemanticType.CATEGORICAL}


class RelationshipAnalyzer:
    """Pairs compatible questions and computes one descriptor per pair."""

    def __init__(self, config: EngineConfig | None = None, vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> None:
        self.config = config or EngineConfig()
        self.vocabulary = vocabulary

    def is_numeric_side(self, q: Question) -> bool:
        if q.type is SemanticType.NUMERIC:
            return True
        return q.type is SemanticType.RATING and q.summary.stats is not None

    def is_categorical_side(self, q: Question) -> bool:
        return q.type in _CATEGORICAL_TYPES and len(q.unique_values) <= self.config.categorical_pair_max_distinct

    def analyze(self, dataset: Dataset, questions: Sequence[Question]) -> list[RelationshipDescriptor]:
        candidates = [q for q in questions if q.response_count >= self.config.min_responses]
        out: list[RelationshipDescriptor] = []
        for a, b in combinations(candidates, 2):
            rel = self.relate(dataset, a, b)
            if rel is not None:
                out.append(rel)
        logger.info("relationships: %d pairs from %d candidate questions", len(out), len(candidates))
        return out

    def relate(self, dataset: Dataset, a: Question, b: Question) -> Optional[RelationshipDescriptor]:
        """Descriptor for one pair, or None when the types are not compatible."""
        bands = self.config.strength_bands

        if self.is_numeric_side(a) and self.is_numeric_side(b):
            stat, strength = correlate(dataset, a, b, bands)
            return self._descriptor(RelationshipKind.NUMERIC_NUMERIC, a, b, stat, strength)

        if self.is_categorical_side(a) and self.is_categorical_side(b):
            ct, strength = cross_tabulate(dataset, a, b, bands)
            return self._descriptor(RelationshipKind.CATEGORICAL_CATEGORICAL, a, b, ct, strength)

        if self.is_categorical_side(a) and self.is_numeric_side(b):
            cat, num = a, b
        elif self.is_numeric_side(a) and self.is_categorical_side(b):
            cat, num = b, a
        else:
            return None

        grouped, strength = group_numeric_by_category(dataset, cat, num, self.config)
        return self._descriptor(RelationshipKind.CATEGORICAL_NUMERIC, cat, num, grouped, strength)

    def themes(self, questions: Sequence[Question]) -> tuple[list[ThematicGroup], list[str]]:
        return group_by_theme(questions, self.config, self.vocabulary)

    def _descriptor(self, kind, a: Question, b: Question, stat, strength: Strength) -> RelationshipDescriptor:
        return RelationshipDescriptor(
            id=f"rel_{a.id}__{b.id}",
            kind=kind,
            a_id=a.id,
            b_id=b.id,
            stat=stat,
            strength=strength,
            description=describe(a, b, stat, strength),
        )


def describe(a: Question, b: Question, stat, strength: Strength) -> str:
    if isinstance(stat, CorrelationStat):
        if stat.r is None:
            return f"No measurable correlation between '{a.text}' and '{b.text}' ({stat.n} paired responses)."
        return (
            f"{strength.value.capitalize()} {stat.direction} correlation between '{a.text}' and "
            f"'{b.text}' (r = {stat.r:.2f}, n = {stat.n})."
        )
    if isinstance(stat, CrossTabStat):
        if stat.most_common is None:
            return f"No co-occurring responses for '{a.text}' and '{b.text}'."
        mc = stat.most_common
        return f"Most common combination: '{mc.a}' with '{mc.b}' ({mc.count} responses)."
    if isinstance(stat, GroupedStat):
        if not stat.groups:
            return f"No group of '{a.text}' has enough '{b.text}' values for a distribution."
        return f"Distribution of '{b.text}' across {len(stat.groups)} groups of '{a.text}'."
    return ""
