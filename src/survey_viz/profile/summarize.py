from __future__ import annotations

import math
from collections import Counter
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from ..config import EngineConfig
from ..dataset import Cell
from ..models import FrequencyEntry, NumericStats, SemanticType, SeriesPoint, Summary
from ..utils import render_number

_NUMERIC_TYPES = {SemanticType.NUMERIC, SemanticType.RATING}


class Summarizer:
    def __init__(self, config: EngineConfig | None = None) -> None:
        self.config = config or EngineConfig()

    def summarize(self, cells: Sequence[Cell], semantic_type: SemanticType) -> Summary:
        values = [c for c in cells if not c.is_missing]
        stats = None
        if semantic_type in _NUMERIC_TYPES:
            stats = numeric_stats(numbers_of(values))
        return Summary(frequencies=frequency_table(values), stats=stats)

    def histogram(self, cells: Sequence[Cell]) -> list[SeriesPoint]:
        return histogram_bins(numbers_of(cells), max_bins=self.config.histogram_max_bins)


def numbers_of(cells: Sequence[Cell]) -> list[float]:
    """Numeric values of the cells; cells that did not coerce are dropped."""
    return [c.number for c in cells if c.number is not None]


def frequency_table(values: Sequence[Cell]) -> list[FrequencyEntry]:
    """Counts per trimmed value, descending; ties keep first-seen order."""
    counts = Counter(c.text for c in values if not c.is_missing)
    total = sum(counts.values())
    if total == 0:
        return []
    # Counter preserves insertion order and sorted() is stable.
    ordered = sorted(counts.items(), key=lambda kv: -kv[1])
    return [
        FrequencyEntry(value=v, count=n, percentage=n / total * 100.0)
        for v, n in ordered
    ]


def numeric_stats(numbers: Sequence[float]) -> Optional[NumericStats]:
    if not numbers:
        return None
    s = pd.Series(sorted(numbers), dtype="float64")
    return NumericStats(
        count=int(s.shape[0]),
        min=float(s.iloc[0]),
        max=float(s.iloc[-1]),
        mean=float(s.mean()),
        median=float(s.median()),
        # Population standard deviation.
        std=float(s.std(ddof=0)),
    )


def histogram_bins(numbers: Sequence[float], *, max_bins: int = 10) -> list[SeriesPoint]:
    """Equal-width bins, `min(max_bins, ceil(sqrt(n)))` of them."""
    if not numbers:
        return []
    arr = np.asarray(numbers, dtype=float)
    bins = max(1, min(max_bins, math.ceil(math.sqrt(arr.size))))
    counts, edges = np.histogram(arr, bins=bins)
    out: list[SeriesPoint] = []
    for i, n in enumerate(counts):
        lo, hi = round(float(edges[i]), 4), round(float(edges[i + 1]), 4)
        out.append(SeriesPoint(label=f"{render_number(lo)}-{render_number(hi)}", value=float(n)))
    return out
