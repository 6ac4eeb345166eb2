from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Sequence

from ..models import Question, TextAnalysis


@dataclass(frozen=True)
class DataContext:
    """Read-only facts the selector may consult besides the question itself."""

    total_rows: int
    questions: tuple[Question, ...] = ()
    text_analyses: Mapping[str, TextAnalysis] = field(default_factory=lambda: MappingProxyType({}))
    repeated_terms: tuple[str, ...] = ()

    @classmethod
    def create(
        cls,
        *,
        total_rows: int,
        questions: Sequence[Question],
        text_analyses: Mapping[str, TextAnalysis] | None = None,
        repeated_terms: Sequence[str] = (),
    ) -> "DataContext":
        return cls(
            total_rows=total_rows,
            questions=tuple(questions),
            text_analyses=MappingProxyType(dict(text_analyses or {})),
            repeated_terms=tuple(repeated_terms),
        )

    def question(self, question_id: str) -> Question:
        for q in self.questions:
            if q.id == question_id:
                return q
        raise KeyError(question_id)
