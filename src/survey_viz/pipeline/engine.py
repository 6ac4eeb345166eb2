from __future__ import annotations

import logging
import random
from typing import Optional

from ..config import EngineConfig
from ..dataset import Dataset
from ..models import EngineResult, SemanticType, TextAnalysis, VisualizationRecommendation
from ..profile import QuestionClassifier, Summarizer, build_questions
from ..relate import RelationshipAnalyzer
from ..text import TextPatternAnalyzer
from ..viz.context import DataContext
from ..viz.selector import VisualizationSelector
from ..vocab import DEFAULT_VOCABULARY, Vocabulary

logger = logging.getLogger(__name__)


class SurveyEngine:
    """
    Normalized dataset in, questions/relationships/visualizations/themes out.

    Stages run strictly downstream and each consumes only the immutable output
    of the previous one. The only randomness is the injected `rng`, shared by
    the text analyzer for ranking jitter and word-cloud layout.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        vocabulary: Vocabulary = DEFAULT_VOCABULARY,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.vocabulary = vocabulary
        self.rng = rng or random.Random(self.config.seed)
        self.classifier = QuestionClassifier(self.config, vocabulary)
        self.summarizer = Summarizer(self.config)
        self.text_analyzer = TextPatternAnalyzer(self.config, vocabulary, self.rng)
        self.relationships = RelationshipAnalyzer(self.config, vocabulary)
        self.selector = VisualizationSelector(self.config, vocabulary)

    def analyze_text(self, text: str) -> TextAnalysis:
        return self.text_analyzer.analyze(text)

    def analyze(self, dataset: Dataset) -> EngineResult:
        cfg = self.config
        questions, skipped = build_questions(dataset, self.classifier, self.summarizer)
        logger.info("classified %d questions (%d columns skipped)", len(questions), len(skipped))

        eligible = [q for q in questions if q.response_count >= cfg.min_responses]
        text_analyses: dict[str, TextAnalysis] = {}
        for q in eligible:
            if q.type is SemanticType.TEXT:
                text_analyses[q.id] = self.text_analyzer.analyze_responses(dataset.present_cells(q.column))

        relationships = self.relationships.analyze(dataset, questions)
        themes, repeated = self.relationships.themes(questions)

        ctx = DataContext.create(
            total_rows=len(dataset),
            questions=questions,
            text_analyses=text_analyses,
            repeated_terms=repeated,
        )

        visualizations: list[VisualizationRecommendation] = [self.selector.select(q, ctx) for q in eligible]
        visualizations.extend(self.selector.select_relationship(rel, ctx) for rel in relationships)
        for group in themes:
            rec = self.selector.select_theme(group, ctx)
            if rec is not None:
                visualizations.append(rec)
        terms_rec = self.selector.select_repeated_terms(ctx)
        if terms_rec is not None:
            visualizations.append(terms_rec)

        logger.info(
            "selected %d visualizations (%d relationships, %d themes)",
            len(visualizations),
            len(relationships),
            len(themes),
        )
        return EngineResult(
            total_rows=len(dataset),
            questions=questions,
            relationships=relationships,
            visualizations=visualizations,
            themes=themes,
            repeated_terms=repeated,
            skipped_columns=skipped,
        )
