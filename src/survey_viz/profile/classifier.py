from __future__ import annotations

import logging
import re
from collections import Counter
from typing import Sequence

from ..config import EngineConfig
from ..dataset import Cell, CellKind
from ..models import SemanticType
from ..vocab import DEFAULT_VOCABULARY, Vocabulary

logger = logging.getLogger(__name__)

_RATING_PHRASE_RE = re.compile(r"rating:\s*\S+", re.IGNORECASE)


class QuestionClassifier:
    """Ordered policy deciding the semantic type of one column.

    numeric > multiple_choice > rating > text > categorical. The order matters:
    a fully numeric column never reaches the rating test, and rating detection
    only sees columns that failed the multiple-choice test.
    """

    def __init__(self, config: EngineConfig | None = None, vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> None:
        self.config = config or EngineConfig()
        self.vocabulary = vocabulary

    def should_skip(self, column: str) -> bool:
        name = column.lower()
        return any(s in name for s in self.vocabulary.skip_column_substrings)

    def classify(self, cells: Sequence[Cell]) -> SemanticType:
        values = [c for c in cells if not c.is_missing]
        if not values:
            # Callers drop empty columns before classifying.
            return SemanticType.CATEGORICAL

        if all(c.kind is CellKind.NUMBER for c in values):
            return SemanticType.NUMERIC

        counts = Counter(c.text for c in values)
        if self._is_multiple_choice(counts, len(values)):
            return SemanticType.MULTIPLE_CHOICE

        if self._is_rating(counts):
            return SemanticType.RATING

        if any(len(c.text) > self.config.long_text_length for c in values):
            return SemanticType.TEXT

        return SemanticType.CATEGORICAL

    def _is_multiple_choice(self, counts: Counter[str], responses: int) -> bool:
        cfg = self.config
        distinct = len(counts)
        if distinct > cfg.mc_max_distinct:
            return False
        if any(len(v) >= cfg.mc_max_value_length for v in counts):
            return False
        if responses >= cfg.mc_ratio_min_responses:
            return distinct < cfg.mc_max_distinct_ratio * responses
        # Too few responses for the ratio to mean anything: require repeats instead.
        return all(n >= 2 for n in counts.values())

    def _is_rating(self, counts: Counter[str]) -> bool:
        tokens = set(self.vocabulary.rating_tokens)
        lowered = {v.lower() for v in counts}
        if lowered & tokens:
            return True
        return any(_RATING_PHRASE_RE.search(v) for v in counts)
