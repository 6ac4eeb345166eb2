from .engine import SurveyEngine
from .run import RunResult, run_pipeline

__all__ = ["RunResult", "SurveyEngine", "run_pipeline"]
