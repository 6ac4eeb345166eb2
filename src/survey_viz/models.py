from __future__ import annotations

from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class _Contract(BaseModel):
    # Engine outputs are never mutated after construction.
    model_config = ConfigDict(frozen=True)


class SemanticType(str, Enum):
    """Inferred response kind of a survey question."""
    NUMERIC = "numeric"
    RATING = "rating"
    MULTIPLE_CHOICE = "multiple_choice"
    CATEGORICAL = "categorical"
    TEXT = "text"


class ValueType(str, Enum):
    NUMBER = "number"
    DATE = "date"
    STRING = "string"


class ChartFamily(str, Enum):
    PIE = "pie"
    BAR = "bar"
    HORIZONTAL_BAR = "horizontal_bar"
    GROUPED_BAR = "grouped_bar"
    LINE = "line"
    HISTOGRAM = "histogram"
    TREEMAP = "treemap"
    WORD_CLOUD = "word_cloud"
    SCATTER = "scatter"
    STACKED_BAR = "stacked_bar"
    BOX_PLOT = "box_plot"
    THEMATIC = "thematic"


class RelationshipKind(str, Enum):
    NUMERIC_NUMERIC = "numeric-numeric"
    CATEGORICAL_CATEGORICAL = "categorical-categorical"
    CATEGORICAL_NUMERIC = "categorical-numeric"


class Strength(str, Enum):
    NONE = "none"
    WEAK = "weak"
    MODERATE = "moderate"
    SUBSTANTIAL = "substantial"
    STRONG = "strong"


class FrequencyEntry(_Contract):
    value: str
    count: int
    percentage: float


class NumericStats(_Contract):
    count: int
    min: float
    max: float
    mean: float
    median: float
    std: float


class Summary(_Contract):
    """
    Frequency table (descending by count, ties in first-seen order) plus
    descriptive statistics for numeric and rating questions.
    """
    frequencies: List[FrequencyEntry] = Field(default_factory=list)
    stats: Optional[NumericStats] = None


class Question(_Contract):
    """
    One survey column with its inferred type and summary.

    id: deterministic slug (`q_<slug>`)
    column: source header, verbatim
    text: display text with boilerplate prefixes ("Q1.") removed
    unique_values: distinct trimmed values in first-seen order
    """
    id: str
    column: str
    text: str
    type: SemanticType
    value_type: ValueType = ValueType.STRING
    response_count: int
    unique_values: List[str] = Field(default_factory=list)
    summary: Summary = Field(default_factory=Summary)


class SeriesPoint(_Contract):
    label: str
    value: float


class ScatterPoint(_Contract):
    x: float
    y: float


class WordPlacement(_Contract):
    text: str
    count: int
    x: float
    y: float
    font_size: float
    bold: bool = False


class TextAnalysis(_Contract):
    """
    Result of the text pattern cascade. `detector` names the rule that fired
    ("word_frequency" when none did); `series` is the exact extracted data.
    """
    detector: str
    chart: ChartFamily
    series: List[SeriesPoint] = Field(default_factory=list)
    layout: List[WordPlacement] = Field(default_factory=list)


class CorrelationStat(_Contract):
    kind: Literal["correlation"] = "correlation"
    n: int
    r: Optional[float] = None
    direction: Literal["positive", "negative", "none"] = "none"
    slope: Optional[float] = None
    intercept: Optional[float] = None
    points: List[ScatterPoint] = Field(default_factory=list)


class CrossTabCell(_Contract):
    a: str
    b: str
    count: int


class CrossTabStat(_Contract):
    """
    counts[i][j] is the number of records answering a_values[i] and b_values[j].
    """
    kind: Literal["crosstab"] = "crosstab"
    n: int
    a_values: List[str] = Field(default_factory=list)
    b_values: List[str] = Field(default_factory=list)
    counts: List[List[int]] = Field(default_factory=list)
    most_common: Optional[CrossTabCell] = None
    cramers_v: Optional[float] = None


class GroupStats(_Contract):
    category: str
    count: int
    mean: float
    q1: float
    median: float
    q3: float
    whisker_low: float
    whisker_high: float
    outliers: List[float] = Field(default_factory=list)


class GroupedStat(_Contract):
    kind: Literal["grouped"] = "grouped"
    n: int
    groups: List[GroupStats] = Field(default_factory=list)
    eta: Optional[float] = None


RelationshipStat = Annotated[Union[CorrelationStat, CrossTabStat, GroupedStat], Field(discriminator="kind")]


class RelationshipDescriptor(_Contract):
    """
    A computed relationship between two questions.

    For categorical-numeric pairs `a_id` is the categorical side.
    """
    id: str
    kind: RelationshipKind
    a_id: str
    b_id: str
    stat: RelationshipStat
    strength: Strength = Strength.NONE
    description: str = ""


class VisualizationRecommendation(_Contract):
    """
    Terminal artifact handed to a renderer.

    scope: what the chart illustrates (one question, a relationship, a theme)
    source: where the series came from ("frequency", "histogram", "text:<detector>", ...)
    """
    id: str
    scope: Literal["question", "relationship", "theme"]
    subject_ids: List[str]
    chart: ChartFamily
    title: str
    reason: str
    source: str = ""
    series: List[SeriesPoint] = Field(default_factory=list)
    points: List[ScatterPoint] = Field(default_factory=list)
    layout: List[WordPlacement] = Field(default_factory=list)


class ThematicGroup(_Contract):
    id: str
    question_ids: List[str]
    shared_terms: List[str] = Field(default_factory=list)


class EngineResult(_Contract):
    """
    Everything the engine emits for one dataset. `model_dump(mode="json")`
    is the contract consumed by rendering and narration layers.
    """
    total_rows: int
    questions: List[Question] = Field(default_factory=list)
    relationships: List[RelationshipDescriptor] = Field(default_factory=list)
    visualizations: List[VisualizationRecommendation] = Field(default_factory=list)
    themes: List[ThematicGroup] = Field(default_factory=list)
    repeated_terms: List[str] = Field(default_factory=list)
    skipped_columns: List[str] = Field(default_factory=list)
