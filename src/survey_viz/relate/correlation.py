from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from ..dataset import Dataset
from ..models import CorrelationStat, Question, ScatterPoint, Strength

_BANDED = (Strength.WEAK, Strength.MODERATE, Strength.SUBSTANTIAL, Strength.STRONG)


def band_strength(value: Optional[float], bands: Sequence[float]) -> Strength:
    """Map |value| onto none/weak/moderate/substantial/strong using ascending cut points."""
    if value is None or np.isnan(value):
        return Strength.NONE
    v = abs(value)
    if v < bands[0]:
        return Strength.NONE
    label = Strength.NONE
    for cut, strength in zip(bands, _BANDED):
        if v >= cut:
            label = strength
    return label


def paired_numbers(dataset: Dataset, a: Question, b: Question) -> tuple[list[float], list[float]]:
    """Values from records where both columns hold numbers."""
    xs: list[float] = []
    ys: list[float] = []
    for rec in dataset.records:
        x, y = rec[a.column].number, rec[b.column].number
        if x is not None and y is not None:
            xs.append(x)
            ys.append(y)
    return xs, ys


def pearson(xs: Sequence[float], ys: Sequence[float]) -> Optional[float]:
    """Pearson r; None for fewer than two points or a constant side."""
    if len(xs) < 2 or len(xs) != len(ys):
        return None
    x = np.asarray(xs, dtype=float)
    y = np.asarray(ys, dtype=float)
    if np.ptp(x) == 0 or np.ptp(y) == 0:
        return None
    r = float(np.corrcoef(x, y)[0, 1])
    return max(-1.0, min(1.0, r))


def correlate(dataset: Dataset, a: Question, b: Question, bands: Sequence[float]) -> tuple[CorrelationStat, Strength]:
    xs, ys = paired_numbers(dataset, a, b)
    r = pearson(xs, ys)
    slope = intercept = None
    if r is not None:
        slope_v, intercept_v = np.polyfit(np.asarray(xs), np.asarray(ys), 1)
        slope, intercept = float(slope_v), float(intercept_v)

    direction = "none"
    if r is not None and r > 0:
        direction = "positive"
    elif r is not None and r < 0:
        direction = "negative"

    stat = CorrelationStat(
        n=len(xs),
        r=r,
        direction=direction,
        slope=slope,
        intercept=intercept,
        points=[ScatterPoint(x=x, y=y) for x, y in zip(xs, ys)],
    )
    return stat, band_strength(r, bands)
