"""Question classification and statistical summaries."""

from .classifier import QuestionClassifier
from .questions import build_questions
from .summarize import Summarizer

__all__ = ["QuestionClassifier", "Summarizer", "build_questions"]
