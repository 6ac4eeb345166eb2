from __future__ import annotations

import math
import random
import re
import string
from collections import Counter
from typing import Sequence

from ..models import WordPlacement
from ..vocab import STOP_WORDS

_PUNCT_RE = re.compile(r"[^\w\s]")
_EDGE_PUNCT = string.punctuation + "\u201c\u201d\u2018\u2019"

# Canvas the layout is computed for; renderers scale it.
CANVAS_WIDTH = 500
CANVAS_HEIGHT = 400
_TITLE_BAND = 60


def word_frequencies(
    text: str,
    *,
    stop_words: frozenset[str] = STOP_WORDS,
    min_length: int = 4,
    top_n: int = 50,
) -> list[tuple[str, int]]:
    """Top tokens by count after lowercasing and stripping punctuation.

    Ties keep first-seen order.
    """
    words: list[str] = []
    for raw in text.lower().replace("\u2019", "'").split():
        # Contractions are matched against the stop list before their apostrophe goes.
        if raw.strip(_EDGE_PUNCT) in stop_words:
            continue
        word = _PUNCT_RE.sub("", raw)
        if len(word) >= min_length and word not in stop_words:
            words.append(word)
    counts = Counter(words)
    return sorted(counts.items(), key=lambda kv: -kv[1])[:top_n]


def word_cloud_layout(
    frequencies: Sequence[tuple[str, int]],
    rng: random.Random,
    *,
    max_words: int = 25,
    width: float = CANVAS_WIDTH,
    height: float = CANVAS_HEIGHT,
    bold_top: int = 5,
) -> list[WordPlacement]:
    """
    Place the most frequent words on a shuffled square grid with a little
    jitter. All randomness comes from `rng`, so a seeded generator gives the
    same layout every time.
    """
    words = list(frequencies[:max_words])
    if not words:
        return []

    grid = math.ceil(math.sqrt(len(words)))
    cell_w = width / (grid + 1)
    cell_h = (height - _TITLE_BAND) / (grid + 1)
    start_x = cell_w / 2
    start_y = _TITLE_BAND + cell_h / 2

    positions = [
        (start_x + j * cell_w, start_y + i * cell_h)
        for i in range(grid)
        for j in range(grid)
    ]
    rng.shuffle(positions)

    out: list[WordPlacement] = []
    for rank, ((word, count), (x, y)) in enumerate(zip(words, positions)):
        jitter_x = (rng.random() - 0.5) * (cell_w * 0.3)
        jitter_y = (rng.random() - 0.5) * (cell_h * 0.3)
        font_size = max(12.0, min(30.0, 12 + math.sqrt(count) * 2))
        out.append(
            WordPlacement(
                text=word,
                count=count,
                x=round(x + jitter_x, 2),
                y=round(y + jitter_y, 2),
                font_size=round(font_size, 2),
                bold=rank < bold_top,
            )
        )
    return out
