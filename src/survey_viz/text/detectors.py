from __future__ import annotations

import random
import re
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Type

from ..config import EngineConfig
from ..models import ChartFamily, SeriesPoint, TextAnalysis
from ..vocab import Vocabulary, terms_pattern

Pair = Tuple[str, float]

_NUM = r"\d+(?:\.\d+)?"
# Sentence breaks: semicolons, newlines, and periods that are not decimal points.
_SENTENCE_SPLIT_RE = re.compile(r"[;\n]+|\.(?!\d)")
_LABEL_STRIP = " \t•-*\"'“”,:;"


def split_sentences(text: str) -> list[str]:
    return [s.strip() for s in _SENTENCE_SPLIT_RE.split(text) if s.strip()]


def clean_label(label: str) -> str:
    return " ".join(label.strip(_LABEL_STRIP).split())


def dedupe(pairs: Iterable[Pair]) -> list[Pair]:
    """Drop empty labels; a repeated label keeps its first value."""
    seen: set[str] = set()
    out: list[Pair] = []
    for label, value in pairs:
        key = label.casefold()
        if not label or key in seen:
            continue
        seen.add(key)
        out.append((label, value))
    return out


class Detector:
    """One rule of the text pattern cascade.

    `try_match` returns None when the evidence threshold is not met or when
    extraction yields too few pairs; the analyzer then moves on.
    """

    name: str = ""

    def __init__(self, config: EngineConfig, vocabulary: Vocabulary, rng: random.Random) -> None:
        self.config = config
        self.vocabulary = vocabulary
        self.rng = rng

    def try_match(self, text: str) -> Optional[TextAnalysis]:  # pragma: no cover - interface
        raise NotImplementedError

    def _result(self, chart: ChartFamily, pairs: Sequence[Pair]) -> TextAnalysis:
        return TextAnalysis(
            detector=self.name,
            chart=chart,
            series=[SeriesPoint(label=label, value=value) for label, value in pairs],
        )

    def _enough(self, pairs: Sequence[Pair]) -> bool:
        return len(pairs) >= self.config.min_series_points

    def _pie_or_ranked_bar(self, pairs: list[Pair]) -> TextAnalysis:
        if len(pairs) <= self.config.pie_max_slices:
            return self._result(ChartFamily.PIE, pairs)
        return self._result(ChartFamily.BAR, sorted(pairs, key=lambda p: -p[1]))


class MetricsDetector(Detector):
    """"Label: 45%", "Label is 45%" and "45% of label" statements."""

    name = "metrics"

    _EVIDENCE = re.compile(
        rf"\w+\s*:\s*{_NUM}%?|\bis\s+{_NUM}%?|{_NUM}%\s+of\s+\w+",
        re.IGNORECASE,
    )
    _COLON = re.compile(rf"^(?P<label>[^:]+?)\s*:\s*(?P<value>{_NUM})%?", re.IGNORECASE)
    _IS = re.compile(rf"^(?P<label>.+?)\s+is\s+(?P<value>{_NUM})%?", re.IGNORECASE)
    _PCT_OF = re.compile(rf"(?P<value>{_NUM})%\s+of\s+(?P<label>.+)$", re.IGNORECASE)

    def try_match(self, text: str) -> Optional[TextAnalysis]:
        if len(self._EVIDENCE.findall(text)) < self.config.metrics_min_evidence:
            return None

        pairs: list[Pair] = []
        for sentence in split_sentences(text):
            m = self._COLON.search(sentence) or self._IS.search(sentence) or self._PCT_OF.search(sentence)
            if m:
                pairs.append((clean_label(m.group("label")), float(m.group("value"))))

        pairs = dedupe(pairs)
        if not self._enough(pairs):
            return None
        return self._pie_or_ranked_bar(pairs)


class ComparisonDetector(Detector):
    """Comparative phrasing ("A is 20% higher than B") or bulleted "label: number" lists."""

    name = "comparison"

    _BULLET_EVIDENCE = re.compile(r"^\s*[•\-*]\s*.*?\d", re.MULTILINE)
    _BULLET = re.compile(rf"^\s*[•\-*]\s*(?P<label>[^:\n]+?)\s*:\s*(?P<value>{_NUM})", re.MULTILINE)

    def __init__(self, config: EngineConfig, vocabulary: Vocabulary, rng: random.Random) -> None:
        super().__init__(config, vocabulary, rng)
        self._connectives = terms_pattern(vocabulary.comparison_connectives, whole_word=True)
        self._up = {w.lower() for w in vocabulary.comparison_up_words}
        directions = "|".join(
            re.escape(w) for w in (*vocabulary.comparison_up_words, *vocabulary.comparison_down_words)
        )
        self._relative = re.compile(
            rf"^(?P<a>.+?)\s+is\s+(?:(?P<delta>{_NUM})%?\s+)?(?P<dir>{directions})\s+than\s+(?P<b>.+)$",
            re.IGNORECASE,
        )

    def try_match(self, text: str) -> Optional[TextAnalysis]:
        cfg = self.config
        connectives = len(self._connectives.findall(text))
        bullets = len(self._BULLET_EVIDENCE.findall(text))
        if connectives < cfg.comparison_min_connectives and bullets < cfg.comparison_min_bullets:
            return None

        pairs = [
            (clean_label(m.group("label")), float(m.group("value")))
            for m in self._BULLET.finditer(text)
        ]
        if not pairs:
            pairs = self._relative_pairs(text)

        pairs = dedupe(pairs)
        if not self._enough(pairs):
            return None
        return self._result(ChartFamily.BAR, sorted(pairs, key=lambda p: -p[1]))

    def _relative_pairs(self, text: str) -> list[Pair]:
        pairs: list[Pair] = []
        for sentence in split_sentences(text):
            m = self._relative.search(sentence)
            if not m:
                continue
            delta = float(m.group("delta")) if m.group("delta") else self.config.comparison_default_delta
            sign = 1.0 if m.group("dir").lower() in self._up else -1.0
            pairs.append((clean_label(m.group("a")), 100.0 + sign * delta))
            pairs.append((clean_label(m.group("b")), 100.0))
        return pairs


class TimeSeriesDetector(Detector):
    """Year mentions paired with the next figure that follows them."""

    name = "time_series"

    _YEAR = re.compile(r"\b(?:19|20)\d{2}\b")
    _NUMBER = re.compile(rf"(?<![\w.]){_NUM}%?")

    def __init__(self, config: EngineConfig, vocabulary: Vocabulary, rng: random.Random) -> None:
        super().__init__(config, vocabulary, rng)
        self._trend = terms_pattern(vocabulary.trend_words)

    def try_match(self, text: str) -> Optional[TextAnalysis]:
        cfg = self.config
        years = len(self._YEAR.findall(text))
        trend = len(self._trend.findall(text))
        if years < cfg.time_min_years and not (years >= 1 and trend >= cfg.time_min_trend_words):
            return None

        pairs: list[Pair] = []
        for sentence in split_sentences(text):
            pairs.extend(self._year_value_pairs(sentence))

        pairs = dedupe(pairs)
        if not self._enough(pairs):
            return None
        return self._result(ChartFamily.LINE, sorted(pairs, key=lambda p: p[0]))

    def _year_value_pairs(self, sentence: str) -> list[Pair]:
        out: list[Pair] = []
        pending: Optional[str] = None
        for m in self._NUMBER.finditer(sentence):
            token = m.group(0)
            if self._YEAR.fullmatch(token):
                pending = token
            elif pending is not None:
                out.append((pending, float(token.rstrip("%"))))
                pending = None
        return out


class CategoricalDetector(Detector):
    """"40% of respondents selected X" statements."""

    name = "categorical"

    def __init__(self, config: EngineConfig, vocabulary: Vocabulary, rng: random.Random) -> None:
        super().__init__(config, vocabulary, rng)
        nouns = "|".join(re.escape(w) for w in vocabulary.respondent_nouns)
        verbs = "|".join(re.escape(w) for w in vocabulary.response_verbs)
        self._pattern = re.compile(
            rf"(?P<value>{_NUM})%\s+of\s+(?:{nouns})\s+(?:{verbs})\s+[\"'“]?(?P<label>[^\"'”,.;\n]+)",
            re.IGNORECASE,
        )

    def try_match(self, text: str) -> Optional[TextAnalysis]:
        matches = list(self._pattern.finditer(text))
        if len(matches) < self.config.categorical_min_evidence:
            return None

        pairs = dedupe((clean_label(m.group("label")), float(m.group("value"))) for m in matches)
        if not self._enough(pairs):
            return None
        return self._pie_or_ranked_bar(pairs)


class RankingDetector(Detector):
    """Numbered lists ("1. Speed 2. Cost") or "X is the top ..." phrasing."""

    name = "ranking"

    _NUMBERED = re.compile(r"(?<![\d.])(?P<rank>\d{1,2})\.\s+(?P<item>[^.\d\n]+)")

    def __init__(self, config: EngineConfig, vocabulary: Vocabulary, rng: random.Random) -> None:
        super().__init__(config, vocabulary, rng)
        self._ranking_words = terms_pattern(vocabulary.ranking_words, whole_word=True)
        tops = "|".join(re.escape(w) for w in vocabulary.top_phrases)
        self._top = re.compile(rf"^(?P<item>.+?)\s+is\s+(?:the\s+)?(?:{tops})\b", re.IGNORECASE)

    def try_match(self, text: str) -> Optional[TextAnalysis]:
        cfg = self.config
        numbered = list(self._NUMBERED.finditer(text))
        words = len(self._ranking_words.findall(text))
        if words < cfg.ranking_min_words and len(numbered) < cfg.ranking_min_items:
            return None

        pairs = dedupe(
            (clean_label(m.group("item")), 100.0 - int(m.group("rank")) * 10.0) for m in numbered
        )
        if len(pairs) < cfg.min_series_points:
            pairs = dedupe(self._top_pairs(text))

        if not self._enough(pairs):
            return None
        return self._result(ChartFamily.HORIZONTAL_BAR, sorted(pairs, key=lambda p: -p[1]))

    def _top_pairs(self, text: str) -> list[Pair]:
        pairs: list[Pair] = []
        for sentence in split_sentences(text):
            m = self._top.search(sentence)
            if m:
                # Jitter separates otherwise tied "top" items.
                pairs.append((clean_label(m.group("item")), 90.0 + self.rng.random() * 10.0))
        return pairs


# Priority order; the first detector that returns a result wins.
_DETECTORS: Dict[str, Type[Detector]] = {
    MetricsDetector.name: MetricsDetector,
    ComparisonDetector.name: ComparisonDetector,
    TimeSeriesDetector.name: TimeSeriesDetector,
    CategoricalDetector.name: CategoricalDetector,
    RankingDetector.name: RankingDetector,
}


def detector_names() -> List[str]:
    return list(_DETECTORS)


def default_detectors(config: EngineConfig, vocabulary: Vocabulary, rng: random.Random) -> List[Detector]:
    return [cls(config, vocabulary, rng) for cls in _DETECTORS.values()]
