from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..config import EngineConfig
from ..dataset import coerce_cell
from ..models import (
    ChartFamily,
    CorrelationStat,
    CrossTabStat,
    GroupedStat,
    Question,
    RelationshipDescriptor,
    SemanticType,
    SeriesPoint,
    ThematicGroup,
    VisualizationRecommendation,
)
from ..profile.summarize import histogram_bins
from ..relate.themes import theme_terms
from ..vocab import DEFAULT_VOCABULARY, Vocabulary, terms_pattern
from .context import DataContext

logger = logging.getLogger(__name__)

_TREEMAP_MAX_NODES = 20


def frequency_series(q: Question, limit: Optional[int] = None) -> list[SeriesPoint]:
    entries = q.summary.frequencies if limit is None else q.summary.frequencies[:limit]
    return [SeriesPoint(label=f.value, value=float(f.count)) for f in entries]


def _numeric_values(q: Question) -> list[tuple[float, str, int]]:
    out: list[tuple[float, str, int]] = []
    for f in q.summary.frequencies:
        n = coerce_cell(f.value).number
        if n is not None:
            out.append((n, f.value, f.count))
    return out


def numeric_line_series(q: Question) -> list[SeriesPoint]:
    """Response counts ordered by the numeric value of each label."""
    return [SeriesPoint(label=label, value=float(count)) for _, label, count in sorted(_numeric_values(q))]


def first_seen_series(q: Question) -> list[SeriesPoint]:
    counts = {f.value: f.count for f in q.summary.frequencies}
    return [SeriesPoint(label=v, value=float(counts.get(v, 0))) for v in q.unique_values]


class VisualizationSelector:
    """
    Picks one chart family per question, relationship and theme.

    Question phrasing is consulted before the semantic type: ranking,
    comparison, time, distribution and proportion wording each force a chart
    family, in that order. `select` is pure; the same question and context
    always give the same recommendation.
    """

    def __init__(self, config: EngineConfig | None = None, vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> None:
        self.config = config or EngineConfig()
        self.vocabulary = vocabulary
        v = vocabulary
        self._ranking = terms_pattern(v.ranking_keywords)
        self._comparison = terms_pattern(v.comparison_keywords)
        self._time = terms_pattern(v.time_keywords)
        self._distribution = terms_pattern(v.distribution_keywords)
        self._proportion = terms_pattern(v.proportion_keywords)
        self._sentiment = terms_pattern(v.sentiment_keywords)
        self._temporal_numeric = terms_pattern(v.temporal_numeric_keywords)

    # ---- questions ----

    def select(self, q: Question, ctx: DataContext) -> VisualizationRecommendation:
        cfg = self.config
        phrasing = q.text
        distinct = len(q.unique_values)

        if q.response_count <= cfg.small_sample_responses:
            return self._question_rec(q, ChartFamily.BAR, f"only {q.response_count} responses", frequency_series(q))

        if self._ranking.search(phrasing):
            return self._question_rec(q, ChartFamily.HORIZONTAL_BAR, "ranking or preference wording", frequency_series(q))

        if self._comparison.search(phrasing):
            return self._question_rec(q, ChartFamily.GROUPED_BAR, "comparison wording", frequency_series(q))

        if self._time.search(phrasing):
            series = numeric_line_series(q) if q.type is SemanticType.NUMERIC else first_seen_series(q)
            return self._question_rec(q, ChartFamily.LINE, "time-related wording", series, source="ordered")

        if q.type is SemanticType.NUMERIC and self._distribution.search(phrasing):
            return self._histogram(q, "distribution wording on a numeric question")

        if self._proportion.search(phrasing):
            if distinct <= cfg.proportion_pie_max_categories:
                return self._question_rec(q, ChartFamily.PIE, "proportion wording with few categories", frequency_series(q))
            return self._treemap(q, "proportion wording with many categories")

        return self._by_type(q, ctx, distinct)

    def _by_type(self, q: Question, ctx: DataContext, distinct: int) -> VisualizationRecommendation:
        cfg = self.config
        t = q.type

        if t in (SemanticType.MULTIPLE_CHOICE, SemanticType.CATEGORICAL):
            if distinct <= cfg.pie_max_categories:
                return self._question_rec(q, ChartFamily.PIE, f"{t.value} with {distinct} options", frequency_series(q))
            if distinct <= cfg.ranked_bar_max_categories:
                return self._question_rec(q, ChartFamily.BAR, f"{t.value} with {distinct} options", frequency_series(q))
            return self._treemap(q, f"{t.value} with {distinct} options")

        if t is SemanticType.RATING:
            if self._sentiment.search(q.text) or q.summary.stats is None:
                return self._question_rec(q, ChartFamily.BAR, "rating scale, satisfaction or opinion", frequency_series(q))
            return self._histogram(q, "rating scale")

        if t is SemanticType.NUMERIC:
            if self._temporal_numeric.search(q.text):
                return self._question_rec(q, ChartFamily.LINE, "numeric series over time", numeric_line_series(q), source="ordered")
            return self._histogram(q, "numeric values")

        analysis = ctx.text_analyses.get(q.id)
        if analysis is None:
            # No analysis was handed in; summarize the answers by frequency.
            return self._question_rec(q, ChartFamily.BAR, "free text without a pattern analysis", frequency_series(q))
        return VisualizationRecommendation(
            id=f"viz_{q.id}",
            scope="question",
            subject_ids=[q.id],
            chart=analysis.chart,
            title=q.text,
            reason=f"free text, {analysis.detector.replace('_', ' ')} pattern",
            source=f"text:{analysis.detector}",
            series=list(analysis.series),
            layout=list(analysis.layout),
        )

    def _histogram(self, q: Question, reason: str) -> VisualizationRecommendation:
        numbers: list[float] = []
        for value, _, count in _numeric_values(q):
            numbers.extend([value] * count)
        bins = histogram_bins(numbers, max_bins=self.config.histogram_max_bins)
        return self._question_rec(q, ChartFamily.HISTOGRAM, reason, bins, source="histogram")

    def _treemap(self, q: Question, reason: str) -> VisualizationRecommendation:
        return self._question_rec(q, ChartFamily.TREEMAP, reason, frequency_series(q, _TREEMAP_MAX_NODES))

    def _question_rec(
        self,
        q: Question,
        chart: ChartFamily,
        reason: str,
        series: Sequence[SeriesPoint],
        *,
        source: str = "frequency",
    ) -> VisualizationRecommendation:
        logger.debug("question %s -> %s (%s)", q.id, chart.value, reason)
        return VisualizationRecommendation(
            id=f"viz_{q.id}",
            scope="question",
            subject_ids=[q.id],
            chart=chart,
            title=q.text,
            reason=reason,
            source=source,
            series=list(series),
        )

    # ---- relationships and themes ----

    def select_relationship(self, rel: RelationshipDescriptor, ctx: DataContext) -> VisualizationRecommendation:
        a, b = ctx.question(rel.a_id), ctx.question(rel.b_id)
        title = f"{a.text} vs {b.text}"
        base = dict(id=f"viz_{rel.id}", scope="relationship", subject_ids=[a.id, b.id], title=title)

        stat = rel.stat
        if isinstance(stat, CorrelationStat):
            return VisualizationRecommendation(
                **base, chart=ChartFamily.SCATTER, reason=rel.description, source="pairs", points=list(stat.points)
            )

        if isinstance(stat, CrossTabStat):
            return VisualizationRecommendation(
                **base, chart=ChartFamily.STACKED_BAR, reason=rel.description, source="crosstab"
            )

        if isinstance(stat, GroupedStat) and stat.groups:
            series = [SeriesPoint(label=g.category, value=g.median) for g in stat.groups]
            return VisualizationRecommendation(
                **base, chart=ChartFamily.BOX_PLOT, reason=rel.description, source="groups", series=series
            )
        # No group is large enough for quartiles; show the categorical side alone.
        return VisualizationRecommendation(
            **base,
            chart=ChartFamily.BAR,
            reason=f"too few values per group; showing '{a.text}' responses",
            source="frequency",
            series=frequency_series(a),
        )

    def select_theme(self, group: ThematicGroup, ctx: DataContext) -> Optional[VisualizationRecommendation]:
        if len(group.question_ids) < self.config.theme_min_group_size:
            return None
        members = [ctx.question(qid) for qid in group.question_ids]
        terms = ", ".join(group.shared_terms) or ", ".join(ctx.repeated_terms)
        return VisualizationRecommendation(
            id=f"viz_{group.id}",
            scope="theme",
            subject_ids=list(group.question_ids),
            chart=ChartFamily.THEMATIC,
            title=f"Theme: {terms}" if terms else "Related questions",
            reason=f"{len(members)} questions share the terms {terms}",
            source="theme",
            series=[SeriesPoint(label=q.text, value=float(q.response_count)) for q in members],
        )

    def select_repeated_terms(self, ctx: DataContext) -> Optional[VisualizationRecommendation]:
        """One chart over the terms repeated across question texts, or None when there are none."""
        terms = list(ctx.repeated_terms)
        if not terms:
            return None
        min_length = self.config.theme_min_term_length
        per_question = {q.id: set(theme_terms(q.text, self.vocabulary, min_length)) for q in ctx.questions}
        subjects = [q.id for q in ctx.questions if per_question[q.id].intersection(terms)]
        series = [
            SeriesPoint(label=term, value=float(sum(term in words for words in per_question.values())))
            for term in terms
        ]
        return VisualizationRecommendation(
            id="viz_thematic_terms",
            scope="theme",
            subject_ids=subjects,
            chart=ChartFamily.THEMATIC,
            title=f"Recurring terms: {', '.join(terms)}",
            reason=f"{len(terms)} terms recur across {len(subjects)} questions",
            source="repeated_terms",
            series=series,
        )
