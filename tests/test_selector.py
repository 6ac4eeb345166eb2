from __future__ import annotations

from survey_viz.dataset import coerce_cell
from survey_viz.models import (
    ChartFamily,
    GroupedStat,
    Question,
    RelationshipDescriptor,
    RelationshipKind,
    SemanticType,
    SeriesPoint,
    TextAnalysis,
    ThematicGroup,
)
from survey_viz.profile import Summarizer
from survey_viz.viz import DataContext, VisualizationSelector


def _q(text: str, values: list[str], semantic_type: SemanticType, qid: str = "q_x") -> Question:
    cells = [coerce_cell(v) for v in values]
    return Question(
        id=qid,
        column=text,
        text=text,
        type=semantic_type,
        response_count=len(cells),
        unique_values=list(dict.fromkeys(c.text for c in cells)),
        summary=Summarizer().summarize(cells, semantic_type),
    )


def _select(q: Question, **ctx_kwargs):
    ctx = DataContext.create(total_rows=q.response_count, questions=[q], **ctx_kwargs)
    return VisualizationSelector().select(q, ctx)


NUMBERS = ["3", "7", "4", "9", "5", "6", "8"]
OPTIONS = ["Red", "Blue", "Red", "Green", "Blue", "Red"]


def test_three_or_fewer_responses_force_bar() -> None:
    rec = _select(_q("Rank these features", ["A", "B", "A"], SemanticType.MULTIPLE_CHOICE))
    assert rec.chart is ChartFamily.BAR


def test_phrasing_rules_apply_in_order() -> None:
    assert _select(_q("Rank your favourite snacks", NUMBERS, SemanticType.NUMERIC)).chart is ChartFamily.HORIZONTAL_BAR
    # Ranking wording beats comparison wording.
    assert _select(_q("Order of preference versus last year", OPTIONS, SemanticType.MULTIPLE_CHOICE)).chart is ChartFamily.HORIZONTAL_BAR
    assert _select(_q("Compare plan A and plan B", OPTIONS, SemanticType.MULTIPLE_CHOICE)).chart is ChartFamily.GROUPED_BAR
    assert _select(_q("Usage trend", OPTIONS, SemanticType.MULTIPLE_CHOICE)).chart is ChartFamily.LINE
    assert _select(_q("Distribution of commute length", NUMBERS, SemanticType.NUMERIC)).chart is ChartFamily.HISTOGRAM


def test_distribution_wording_needs_a_numeric_question() -> None:
    rec = _select(_q("Distribution of favourite colours", OPTIONS, SemanticType.MULTIPLE_CHOICE))
    assert rec.chart is ChartFamily.PIE


def test_proportion_wording_pie_or_treemap() -> None:
    few = _select(_q("Percentage of spend by team", OPTIONS, SemanticType.MULTIPLE_CHOICE))
    assert few.chart is ChartFamily.PIE

    many_values = [f"Team {i}" for i in range(8)] * 2
    many = _select(_q("Percentage of spend by team", many_values, SemanticType.CATEGORICAL))
    assert many.chart is ChartFamily.TREEMAP


def test_type_dispatch_for_choice_questions() -> None:
    assert _select(_q("Favourite colour", OPTIONS, SemanticType.MULTIPLE_CHOICE)).chart is ChartFamily.PIE

    ten = [f"City {i}" for i in range(10)] * 2
    rec = _select(_q("Home city", ten, SemanticType.CATEGORICAL))
    assert rec.chart is ChartFamily.BAR
    assert len(rec.series) == 10

    thirty = [f"Town {i}" for i in range(30)]
    rec = _select(_q("Home town", thirty, SemanticType.CATEGORICAL))
    assert rec.chart is ChartFamily.TREEMAP
    assert len(rec.series) == 20


def test_rating_and_numeric_dispatch() -> None:
    ratings = ["5", "4", "N/A", "3", "4", "2"]
    assert _select(_q("Overall satisfaction", ratings, SemanticType.RATING)).chart is ChartFamily.BAR
    hist = _select(_q("Ease of setup", ratings, SemanticType.RATING))
    assert hist.chart is ChartFamily.HISTOGRAM
    assert sum(p.value for p in hist.series) == 5

    line = _select(_q("Year joined", ["2019", "2021", "2020", "2019", "2022"], SemanticType.NUMERIC))
    assert line.chart is ChartFamily.LINE
    assert [p.label for p in line.series] == ["2019", "2020", "2021", "2022"]

    assert _select(_q("Height", NUMBERS, SemanticType.NUMERIC)).chart is ChartFamily.HISTOGRAM


def test_text_questions_use_the_pattern_analysis() -> None:
    q = _q("Any other comments?", ["a", "b", "c", "d"], SemanticType.TEXT)
    analysis = TextAnalysis(
        detector="ranking",
        chart=ChartFamily.HORIZONTAL_BAR,
        series=[SeriesPoint(label="Speed", value=90.0), SeriesPoint(label="Cost", value=80.0)],
    )
    rec = _select(q, text_analyses={q.id: analysis})
    assert rec.chart is ChartFamily.HORIZONTAL_BAR
    assert rec.source == "text:ranking"
    assert [p.label for p in rec.series] == ["Speed", "Cost"]


def test_select_is_pure() -> None:
    q = _q("Favourite colour", OPTIONS, SemanticType.MULTIPLE_CHOICE)
    ctx = DataContext.create(total_rows=6, questions=[q])
    selector = VisualizationSelector()
    assert selector.select(q, ctx) == selector.select(q, ctx)


def test_grouped_relationship_without_groups_falls_back_to_bar() -> None:
    region = _q("Region", ["North", "South", "North", "South"], SemanticType.MULTIPLE_CHOICE, "q_region")
    spend = _q("Spend", ["1", "2", "3", "4"], SemanticType.NUMERIC, "q_spend")
    rel = RelationshipDescriptor(
        id="rel_q_region__q_spend",
        kind=RelationshipKind.CATEGORICAL_NUMERIC,
        a_id=region.id,
        b_id=spend.id,
        stat=GroupedStat(n=4),
    )
    ctx = DataContext.create(total_rows=4, questions=[region, spend])
    rec = VisualizationSelector().select_relationship(rel, ctx)
    assert rec.chart is ChartFamily.BAR
    assert [p.label for p in rec.series] == ["North", "South"]
    assert rec.subject_ids == ["q_region", "q_spend"]


def test_theme_needs_three_questions() -> None:
    qs = [_q(f"Support question {i}", OPTIONS, SemanticType.MULTIPLE_CHOICE, f"q_{i}") for i in range(3)]
    ctx = DataContext.create(total_rows=6, questions=qs)
    selector = VisualizationSelector()

    pair = ThematicGroup(id="theme_1", question_ids=["q_0", "q_1"], shared_terms=["support"])
    assert selector.select_theme(pair, ctx) is None

    trio = ThematicGroup(id="theme_1", question_ids=["q_0", "q_1", "q_2"], shared_terms=["question", "support"])
    rec = selector.select_theme(trio, ctx)
    assert rec is not None
    assert rec.chart is ChartFamily.THEMATIC
    assert rec.scope == "theme"
    assert rec.subject_ids == ["q_0", "q_1", "q_2"]


def test_repeated_terms_get_one_combined_chart() -> None:
    questions = [
        _q("How was the coffee experience?", OPTIONS, SemanticType.MULTIPLE_CHOICE, "q_0"),
        _q("Rate the coffee flavour", OPTIONS, SemanticType.MULTIPLE_CHOICE, "q_1"),
        _q("Describe the store experience", OPTIONS, SemanticType.MULTIPLE_CHOICE, "q_2"),
        _q("Favourite colour", OPTIONS, SemanticType.MULTIPLE_CHOICE, "q_3"),
    ]
    selector = VisualizationSelector()

    ctx = DataContext.create(total_rows=6, questions=questions, repeated_terms=["coffee", "experience"])
    rec = selector.select_repeated_terms(ctx)
    assert rec is not None
    assert rec.id == "viz_thematic_terms"
    assert rec.chart is ChartFamily.THEMATIC
    assert rec.subject_ids == ["q_0", "q_1", "q_2"]
    assert [(p.label, p.value) for p in rec.series] == [("coffee", 2.0), ("experience", 2.0)]

    assert selector.select_repeated_terms(DataContext.create(total_rows=6, questions=questions)) is None
