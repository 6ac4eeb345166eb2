from __future__ import annotations

from dataclasses import replace

from survey_viz.config import EngineConfig
from survey_viz.dataset import coerce_cell
from survey_viz.ingest import dataset_from_rows
from survey_viz.models import SemanticType, ValueType
from survey_viz.profile import QuestionClassifier, build_questions
from survey_viz.profile.questions import question_id
from survey_viz.utils import display_text
from survey_viz.vocab import DEFAULT_VOCABULARY


def _classify(values: list[str], classifier: QuestionClassifier | None = None) -> SemanticType:
    classifier = classifier or QuestionClassifier()
    return classifier.classify([coerce_cell(v) for v in values])


def test_all_numbers_is_numeric() -> None:
    assert _classify(["1", "2", "3", "4", "5", "4", "3"]) is SemanticType.NUMERIC
    assert _classify(["2.5", "-1", "1e3"]) is SemanticType.NUMERIC


def test_yes_no_is_multiple_choice() -> None:
    assert _classify(["Yes", "No", "Yes", "Yes", "No"]) is SemanticType.MULTIPLE_CHOICE


def test_multiple_choice_ratio_applies_to_larger_samples() -> None:
    # 3 distinct out of 25 responses: 3 < 0.2 * 25
    values = ["Red"] * 10 + ["Green"] * 10 + ["Blue"] * 5
    assert _classify(values) is SemanticType.MULTIPLE_CHOICE

    # 5 distinct out of 20 responses: 5 is not < 4
    values = ["A1", "B1", "C1", "D1", "E1"] * 4
    assert _classify(values) is SemanticType.CATEGORICAL


def test_long_options_are_not_multiple_choice() -> None:
    long_option = "I would rather not answer this one"
    assert _classify([long_option, "Sure", long_option, "Sure"]) is SemanticType.CATEGORICAL


def test_rating_tokens_and_rating_phrases() -> None:
    assert _classify(["1", "2", "N/A", "4", "5", "3", "Excellent"]) is SemanticType.RATING
    assert _classify(["rating: 4", "rating: 5", "rating: 2"]) is SemanticType.RATING


def test_long_answers_are_text() -> None:
    long_answer = "The onboarding flow was confusing and I could not find the settings page at all."
    assert _classify([long_answer, "Fine", "Great app"]) is SemanticType.TEXT


def test_fallback_is_categorical() -> None:
    assert _classify(["red", "blue", "green", "teal", "pink"]) is SemanticType.CATEGORICAL


def test_classification_is_deterministic() -> None:
    values = ["Yes", "No", "Maybe", "Yes", "No", "Maybe", "Yes"]
    first = _classify(values)
    assert all(_classify(values) is first for _ in range(5))


def test_thresholds_and_vocabulary_are_injectable() -> None:
    strict = QuestionClassifier(EngineConfig(mc_max_distinct=1))
    assert _classify(["Yes", "No", "Yes", "No"], strict) is not SemanticType.MULTIPLE_CHOICE

    vocab = replace(DEFAULT_VOCABULARY, rating_tokens=("excellent",))
    custom = QuestionClassifier(vocabulary=vocab)
    assert _classify(["Excellent", "Poor", "Okay"], custom) is SemanticType.RATING
    assert _classify(["1", "2", "N/A"], custom) is SemanticType.CATEGORICAL


def test_identifier_and_timestamp_columns_are_skipped() -> None:
    c = QuestionClassifier()
    assert c.should_skip("Respondent ID")
    assert c.should_skip("Timestamp")
    assert c.should_skip("submitted_time_stamp")
    assert not c.should_skip("Q1. Age")


def test_question_ids_are_slugged_and_deduplicated() -> None:
    taken: set[str] = set()
    assert question_id("Q1. Age", 1, taken) == "q_q1_age"
    assert question_id("Q1 age", 2, taken) == "q_q1_age_2"
    assert question_id("???", 3, taken) == "q_3"


def test_display_text_strips_question_prefixes() -> None:
    assert display_text("Q1. how old are you?") == "How old are you?"
    assert display_text("Question 3: rate us") == "Rate us"
    assert display_text("q12:Favourite colour") == "Favourite colour"
    assert display_text("Age") == "Age"


def test_build_questions_skips_and_counts() -> None:
    ds = dataset_from_rows(
        ["Respondent ID", "Q1. Age", "Empty", "Q2. Pet"],
        [
            ["1", "21", "", "Cat"],
            ["2", "", "", "Dog"],
            ["3", "40", "", "Cat"],
            ["4", "33", "", "Dog"],
        ],
    )
    questions, skipped = build_questions(ds, QuestionClassifier())
    assert skipped == ["Respondent ID", "Empty"]
    assert [q.id for q in questions] == ["q_q1_age", "q_q2_pet"]

    age, pet = questions
    assert age.text == "Age"
    assert age.type is SemanticType.NUMERIC
    assert age.value_type is ValueType.NUMBER
    assert age.response_count == 3
    assert pet.unique_values == ["Cat", "Dog"]
    assert pet.type is SemanticType.MULTIPLE_CHOICE
    for q in questions:
        assert q.response_count <= len(ds)
        assert len(q.unique_values) <= q.response_count
