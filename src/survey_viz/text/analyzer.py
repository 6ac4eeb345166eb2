from __future__ import annotations

import logging
import random
from typing import Optional, Sequence

from ..config import EngineConfig
from ..dataset import Cell
from ..models import ChartFamily, SeriesPoint, TextAnalysis
from ..vocab import DEFAULT_VOCABULARY, Vocabulary
from .detectors import Detector, default_detectors
from .wordfreq import word_cloud_layout, word_frequencies

logger = logging.getLogger(__name__)

WORD_FREQUENCY = "word_frequency"


class TextPatternAnalyzer:
    """
    Runs the detector cascade over a block of prose and falls back to a word
    cloud when no detector fires. Never raises for any input string.

    The random source is only consulted for ranking tie-break jitter and the
    word-cloud layout; pass a seeded `random.Random` for reproducible output.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        vocabulary: Vocabulary = DEFAULT_VOCABULARY,
        rng: Optional[random.Random] = None,
        detectors: Optional[Sequence[Detector]] = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.vocabulary = vocabulary
        self.rng = rng or random.Random(self.config.seed)
        self.detectors = list(detectors) if detectors is not None else default_detectors(
            self.config, self.vocabulary, self.rng
        )

    def analyze(self, text: str) -> TextAnalysis:
        for detector in self.detectors:
            result = detector.try_match(text)
            if result is not None:
                logger.debug("text detector %s fired with %d points", detector.name, len(result.series))
                return result
        return self.word_cloud(text)

    def analyze_responses(self, cells: Sequence[Cell]) -> TextAnalysis:
        """Analyze a free-text column; each response is treated as its own line."""
        return self.analyze("\n".join(c.text for c in cells if not c.is_missing))

    def word_cloud(self, text: str) -> TextAnalysis:
        cfg = self.config
        freqs = word_frequencies(
            text,
            stop_words=self.vocabulary.stop_words,
            min_length=cfg.word_min_length,
            top_n=cfg.word_top_n,
        )
        return TextAnalysis(
            detector=WORD_FREQUENCY,
            chart=ChartFamily.WORD_CLOUD,
            series=[SeriesPoint(label=w, value=float(n)) for w, n in freqs],
            layout=word_cloud_layout(freqs, self.rng, max_words=cfg.word_cloud_max_words),
        )
