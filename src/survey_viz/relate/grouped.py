from __future__ import annotations

import math
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from ..config import EngineConfig
from ..dataset import Dataset
from ..models import GroupedStat, GroupStats, Question, Strength
from .correlation import band_strength


def box_stats(category: str, values: Sequence[float], tukey: float = 1.5) -> GroupStats:
    """Quartiles (linear interpolation), Tukey fences and clipped whiskers for one group."""
    s = pd.Series(sorted(values), dtype="float64")
    q1, median, q3 = (float(v) for v in s.quantile([0.25, 0.5, 0.75], interpolation="linear"))
    iqr = q3 - q1
    low_fence, high_fence = q1 - tukey * iqr, q3 + tukey * iqr
    inside = s[(s >= low_fence) & (s <= high_fence)]
    outliers = s[(s < low_fence) | (s > high_fence)]
    return GroupStats(
        category=category,
        count=int(s.shape[0]),
        mean=float(s.mean()),
        q1=q1,
        median=median,
        q3=q3,
        # Whiskers end at the most extreme values still inside the fences.
        whisker_low=float(inside.min()),
        whisker_high=float(inside.max()),
        outliers=[float(v) for v in outliers],
    )


def correlation_ratio(groups: Sequence[Sequence[float]]) -> Optional[float]:
    """η: square root of between-group over total sum of squares."""
    if len(groups) < 2:
        return None
    everything = np.concatenate([np.asarray(g, dtype=float) for g in groups])
    grand = everything.mean()
    ss_total = float(np.sum((everything - grand) ** 2))
    if ss_total == 0.0:
        return None
    ss_between = float(sum(len(g) * (np.mean(g) - grand) ** 2 for g in groups))
    return math.sqrt(min(1.0, ss_between / ss_total))


def group_numeric_by_category(
    dataset: Dataset,
    categorical: Question,
    numeric: Question,
    config: EngineConfig,
) -> tuple[GroupedStat, Strength]:
    """
    Numeric values grouped under the most frequent categories. Only groups
    with enough values get box statistics; no qualifying group means the
    pair is reported with strength none.
    """
    top = [f.value for f in categorical.summary.frequencies[: config.box_top_categories]]
    buckets: dict[str, list[float]] = {c: [] for c in top}
    n = 0
    for rec in dataset.records:
        cat, num = rec[categorical.column], rec[numeric.column]
        if cat.is_missing or num.number is None or cat.text not in buckets:
            continue
        buckets[cat.text].append(num.number)
        n += 1

    qualifying = [(c, vals) for c, vals in buckets.items() if len(vals) >= config.box_min_group_size]
    groups = [box_stats(c, vals, config.tukey_factor) for c, vals in qualifying]
    eta = correlation_ratio([vals for _, vals in qualifying]) if qualifying else None

    stat = GroupedStat(n=n, groups=groups, eta=eta)
    return stat, band_strength(eta, config.strength_bands)
