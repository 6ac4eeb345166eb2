from __future__ import annotations

import logging
from typing import Optional

from ..dataset import CellKind, Dataset
from ..models import Question, ValueType
from ..utils import display_text, safe_slug
from .classifier import QuestionClassifier
from .summarize import Summarizer

logger = logging.getLogger(__name__)

_VALUE_TYPES = {
    CellKind.NUMBER: ValueType.NUMBER,
    CellKind.DATE: ValueType.DATE,
    CellKind.TEXT: ValueType.STRING,
}


def question_id(column: str, position: int, taken: set[str]) -> str:
    """`q_<slug>`; empty slugs use the 1-based column position; repeats get `_2`, `_3`."""
    base = "q_" + (safe_slug(column) or str(position))
    qid, n = base, 1
    while qid in taken:
        n += 1
        qid = f"{base}_{n}"
    taken.add(qid)
    return qid


def build_questions(
    dataset: Dataset,
    classifier: QuestionClassifier,
    summarizer: Optional[Summarizer] = None,
) -> tuple[list[Question], list[str]]:
    """
    Classify and summarize every column in source order.

    Returns (questions, skipped_columns). Skipped columns are identifier or
    timestamp columns and columns without a single non-empty value.
    """
    summarizer = summarizer or Summarizer(classifier.config)
    questions: list[Question] = []
    skipped: list[str] = []
    taken: set[str] = set()

    for position, column in enumerate(dataset.columns, start=1):
        if classifier.should_skip(column):
            logger.debug("skipping identifier/timestamp column %r", column)
            skipped.append(column)
            continue

        cells = dataset.present_cells(column)
        if not cells:
            logger.debug("skipping empty column %r", column)
            skipped.append(column)
            continue

        semantic_type = classifier.classify(cells)
        unique_values = list(dict.fromkeys(c.text for c in cells))
        q = Question(
            id=question_id(column, position, taken),
            column=column,
            text=display_text(column),
            type=semantic_type,
            value_type=_VALUE_TYPES[cells[0].kind],
            response_count=len(cells),
            unique_values=unique_values,
            summary=summarizer.summarize(cells, semantic_type),
        )
        logger.debug("column %r -> %s (%d responses)", column, semantic_type.value, q.response_count)
        questions.append(q)

    return questions, skipped
