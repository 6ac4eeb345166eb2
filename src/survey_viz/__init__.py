"""Survey response classification, summarization and chart selection."""

from .config import EngineConfig
from .dataset import Cell, CellKind, Dataset
from .ingest import IngestError, dataset_from_bytes, dataset_from_frame, dataset_from_rows, load_dataset
from .models import EngineResult, TextAnalysis
from .pipeline import SurveyEngine, run_pipeline
from .vocab import DEFAULT_VOCABULARY, Vocabulary

__all__ = [
    "Cell",
    "CellKind",
    "DEFAULT_VOCABULARY",
    "Dataset",
    "EngineConfig",
    "EngineResult",
    "IngestError",
    "SurveyEngine",
    "TextAnalysis",
    "Vocabulary",
    "dataset_from_bytes",
    "dataset_from_frame",
    "dataset_from_rows",
    "load_dataset",
    "run_pipeline",
]
