from __future__ import annotations

import random

import pytest

from survey_viz.config import EngineConfig
from survey_viz.models import ChartFamily
from survey_viz.text import TextPatternAnalyzer, detector_names
from survey_viz.text.detectors import RankingDetector, split_sentences
from survey_viz.text.wordfreq import word_frequencies
from survey_viz.vocab import DEFAULT_VOCABULARY


def _analyzer(seed: int = 7) -> TextPatternAnalyzer:
    return TextPatternAnalyzer(rng=random.Random(seed))


def _pairs(result) -> list[tuple[str, float]]:
    return [(p.label, p.value) for p in result.series]


def test_detector_priority_order() -> None:
    assert detector_names() == ["metrics", "comparison", "time_series", "categorical", "ranking"]


def test_metrics_scenario_three_features_is_pie() -> None:
    result = _analyzer().analyze("Feature A: 45%. Feature B: 30%. Feature C: 25%.")
    assert result.detector == "metrics"
    assert result.chart is ChartFamily.PIE
    assert _pairs(result) == [("Feature A", 45.0), ("Feature B", 30.0), ("Feature C", 25.0)]


def test_metrics_with_many_pairs_is_ranked_bar() -> None:
    text = "\n".join(f"Region {c}: {v}%" for c, v in zip("ABCDEF", [10, 30, 5, 20, 25, 10]))
    result = _analyzer().analyze(text)
    assert result.detector == "metrics"
    assert result.chart is ChartFamily.BAR
    values = [p.value for p in result.series]
    assert values == sorted(values, reverse=True)


def test_ranking_scenario_numbered_list() -> None:
    result = _analyzer().analyze("1. Speed 2. Reliability 3. Cost")
    assert result.detector == "ranking"
    assert result.chart is ChartFamily.HORIZONTAL_BAR
    assert _pairs(result) == [("Speed", 90.0), ("Reliability", 80.0), ("Cost", 70.0)]


def test_metrics_wins_over_ranking() -> None:
    text = "1. Speed: 90 2. Reliability: 80 3. Cost: 70"
    # Both detectors accept this text on their own; the cascade order decides.
    ranking = RankingDetector(EngineConfig(), DEFAULT_VOCABULARY, random.Random(1)).try_match(text)
    assert ranking is not None
    assert ranking.detector == "ranking"

    result = _analyzer().analyze(text)
    assert result.detector == "metrics"
    assert _pairs(result) == [("Speed", 90.0), ("Reliability", 80.0), ("Cost", 70.0)]


def test_comparison_relative_phrasing() -> None:
    text = "Mobile is 20% higher than Desktop. Tablet is lower than Desktop."
    result = _analyzer().analyze(text)
    assert result.detector == "comparison"
    assert result.chart is ChartFamily.BAR
    # Desktop keeps its first value; the second phrase has no number so the default delta applies.
    assert _pairs(result) == [("Mobile", 120.0), ("Desktop", 100.0), ("Tablet", 90.0)]


def test_time_series_is_sorted_by_year() -> None:
    text = "In 2019 revenue was 120. In 2021 it reached 180. In 2020 it was 150."
    result = _analyzer().analyze(text)
    assert result.detector == "time_series"
    assert result.chart is ChartFamily.LINE
    assert _pairs(result) == [("2019", 120.0), ("2020", 150.0), ("2021", 180.0)]


def test_categorical_mentions() -> None:
    text = "45% of respondents selected Email, while 30% of users chose Phone."
    result = _analyzer().analyze(text)
    assert result.detector == "categorical"
    assert result.chart is ChartFamily.PIE
    assert _pairs(result) == [("Email", 45.0), ("Phone", 30.0)]


def test_top_phrasing_uses_injected_jitter() -> None:
    text = "Price is the top concern. Quality is the highest priority. Speed is the most requested feature."
    first = _analyzer(seed=3).analyze(text)
    again = _analyzer(seed=3).analyze(text)
    assert first.detector == "ranking"
    assert {p.label for p in first.series} == {"Price", "Quality", "Speed"}
    assert all(90.0 <= p.value < 100.0 for p in first.series)
    assert _pairs(first) == _pairs(again)
    values = [p.value for p in first.series]
    assert values == sorted(values, reverse=True)


def test_detector_that_extracts_too_little_declines() -> None:
    # Three "label: number" hits in one sentence give a single pair.
    result = _analyzer().analyze("scores a:1 b:2 c:3")
    assert result.detector != "metrics"


def test_fallback_word_cloud_is_deterministic_under_seed() -> None:
    text = "The coffee was great and the coffee shop staff were great too"
    a = _analyzer(seed=11).analyze(text)
    b = _analyzer(seed=11).analyze(text)
    assert a.detector == "word_frequency"
    assert a.chart is ChartFamily.WORD_CLOUD
    assert _pairs(a)[:2] == [("coffee", 2.0), ("great", 2.0)]
    assert a.layout == b.layout
    assert [w.bold for w in a.layout] == [True] * len(a.layout)
    assert a.layout[0].font_size == pytest.approx(12 + 2 * 2 ** 0.5, abs=0.01)


def test_word_cloud_layout_limits_and_bolds_top_five() -> None:
    words = " ".join(f"word{i:02d} " * (30 - i) for i in range(30))
    result = _analyzer().analyze(words)
    assert len(result.series) == 30
    assert len(result.layout) == 25
    assert sum(w.bold for w in result.layout) == 5
    for w in result.layout:
        assert 12 <= w.font_size <= 30
        assert 0 <= w.x <= 500 and 60 <= w.y <= 400


def test_word_frequencies_drop_stop_words_and_short_tokens() -> None:
    freqs = dict(word_frequencies("This app is really, really useful! Its UI is okay."))
    assert freqs == {"really": 2, "useful": 1, "okay": 1}


def test_word_frequencies_drop_contracted_stop_words() -> None:
    freqs = dict(word_frequencies("I didn't like it. They're slow and we don't wait, they\u2019re rude. Slow service."))
    assert "didnt" not in freqs
    assert "dont" not in freqs
    assert "theyre" not in freqs
    assert freqs == {"slow": 2, "like": 1, "wait": 1, "rude": 1, "service": 1}


def test_analyzer_never_fails() -> None:
    for text in ["", "   ", "!!!", "1.", "2024"]:
        result = _analyzer().analyze(text)
        assert result.chart is not None
    assert TextPatternAnalyzer(detectors=[]).analyze("1. A 2. B 3. C").detector == "word_frequency"


def test_sentence_split_keeps_decimals() -> None:
    assert split_sentences("Growth was 2.5 points. Next; third\nfourth") == [
        "Growth was 2.5 points",
        "Next",
        "third",
        "fourth",
    ]
