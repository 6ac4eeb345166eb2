from __future__ import annotations

import math

import pytest

from survey_viz.dataset import coerce_cell
from survey_viz.models import SemanticType
from survey_viz.profile import Summarizer
from survey_viz.profile.summarize import frequency_table, histogram_bins


def _cells(values: list[str]):
    return [coerce_cell(v) for v in values]


def test_numeric_scenario_mean_median_population_std() -> None:
    summary = Summarizer().summarize(_cells(["1", "2", "3", "4", "5", "4", "3"]), SemanticType.NUMERIC)
    stats = summary.stats
    assert stats is not None
    assert stats.count == 7
    assert stats.mean == pytest.approx(22 / 7)
    assert stats.median == 3
    assert stats.min == 1 and stats.max == 5
    # Population standard deviation: sum of squares / n.
    assert stats.std == pytest.approx(math.sqrt(76) / 7)


def test_yes_no_frequencies() -> None:
    summary = Summarizer().summarize(_cells(["Yes", "No", "Yes", "Yes", "No"]), SemanticType.MULTIPLE_CHOICE)
    assert [(f.value, f.count, f.percentage) for f in summary.frequencies] == [
        ("Yes", 3, pytest.approx(60.0)),
        ("No", 2, pytest.approx(40.0)),
    ]
    assert summary.stats is None


def test_even_sample_median_averages_middle_pair() -> None:
    stats = Summarizer().summarize(_cells(["10", "1", "4", "3"]), SemanticType.NUMERIC).stats
    assert stats is not None
    assert stats.median == pytest.approx(3.5)


def test_percentages_sum_to_100_and_ties_keep_first_seen_order() -> None:
    table = frequency_table(_cells(["b", "a", " a ", "b", "c", "", "d"]))
    assert [f.value for f in table] == ["b", "a", "c", "d"]
    assert sum(f.percentage for f in table) == pytest.approx(100.0)
    assert sum(f.count for f in table) == 6


def test_rating_stats_drop_non_numeric_values() -> None:
    summary = Summarizer().summarize(_cells(["5", "4", "N/A", "2", "rating: 3"]), SemanticType.RATING)
    assert summary.stats is not None
    assert summary.stats.count == 3
    assert summary.stats.mean == pytest.approx(11 / 3)
    assert len(summary.frequencies) == 5


def test_rating_without_any_number_has_no_stats() -> None:
    summary = Summarizer().summarize(_cells(["rating: 4", "rating: 5"]), SemanticType.RATING)
    assert summary.stats is None


@pytest.mark.parametrize(
    "values",
    [[3.0], [1.0, 1.0, 1.0], [-5.0, 0.0, 2.5, 100.0], [7.0, 7.5, 8.0, 100.0, -3.0, 4.0]],
)
def test_numeric_stats_are_ordered(values: list[float]) -> None:
    stats = Summarizer().summarize(_cells([str(v) for v in values]), SemanticType.NUMERIC).stats
    assert stats is not None
    assert stats.min <= stats.median <= stats.max
    assert stats.min <= stats.mean <= stats.max


def test_histogram_bin_count_follows_square_root_rule() -> None:
    bins = histogram_bins([float(v) for v in range(12)])
    assert len(bins) == 4
    assert sum(b.value for b in bins) == 12

    bins = histogram_bins([float(v) for v in range(500)], max_bins=10)
    assert len(bins) == 10
    assert histogram_bins([]) == []
