from __future__ import annotations

import math
from typing import Optional, Sequence

import numpy as np
import pandas as pd
from scipy.stats import chi2_contingency

from ..dataset import Dataset
from ..models import CrossTabCell, CrossTabStat, Question, Strength
from .correlation import band_strength


def cramers_v(table: np.ndarray) -> Optional[float]:
    """Cramér's V from a contingency table (chi-square without continuity correction)."""
    table = table[table.sum(axis=1) > 0][:, table.sum(axis=0) > 0]
    if table.size == 0:
        return None
    r, k = table.shape
    n = float(table.sum())
    if n == 0 or min(r, k) < 2:
        return None
    chi2 = float(chi2_contingency(table, correction=False)[0])
    return math.sqrt(chi2 / (n * (min(r, k) - 1)))


def cross_tabulate(dataset: Dataset, a: Question, b: Question, bands: Sequence[float]) -> tuple[CrossTabStat, Strength]:
    """
    Full value-by-value co-occurrence table. Rows and columns follow each
    question's frequency order; the most common combination is the first
    cell holding the maximum count.
    """
    a_vals: list[str] = []
    b_vals: list[str] = []
    for rec in dataset.records:
        ca, cb = rec[a.column], rec[b.column]
        if ca.is_missing or cb.is_missing:
            continue
        a_vals.append(ca.text)
        b_vals.append(cb.text)

    a_order = [f.value for f in a.summary.frequencies]
    b_order = [f.value for f in b.summary.frequencies]

    if not a_vals:
        stat = CrossTabStat(n=0, a_values=a_order, b_values=b_order, counts=[[0] * len(b_order) for _ in a_order])
        return stat, Strength.NONE

    table = (
        pd.crosstab(pd.Series(a_vals, name="a"), pd.Series(b_vals, name="b"))
        .reindex(index=a_order, columns=b_order, fill_value=0)
    )
    counts = table.to_numpy(dtype=int)

    most_common = None
    if counts.size and counts.max() > 0:
        i, j = np.unravel_index(int(np.argmax(counts)), counts.shape)
        most_common = CrossTabCell(a=a_order[i], b=b_order[j], count=int(counts[i, j]))

    v = cramers_v(counts.astype(float))
    stat = CrossTabStat(
        n=len(a_vals),
        a_values=a_order,
        b_values=b_order,
        counts=counts.tolist(),
        most_common=most_common,
        cramers_v=v,
    )
    return stat, band_strength(v, bands)
