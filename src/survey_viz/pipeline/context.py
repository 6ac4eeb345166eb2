from __future__ import annotations

import uuid
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class RunContext:
    """Identifiers and artifact paths for one pipeline run."""

    out_dir: Path
    source: Path
    run_id: str

    @classmethod
    def create(cls, *, out_dir: Path, source: Path, run_id: str | None = None) -> "RunContext":
        return cls(out_dir=Path(out_dir), source=Path(source), run_id=run_id or str(uuid.uuid4()))

    def path(self, filename: str) -> Path:
        return self.out_dir / filename

    def questions_path(self) -> Path:
        return self.path("questions.json")

    def relationships_path(self) -> Path:
        return self.path("relationships.json")

    def visualizations_path(self) -> Path:
        return self.path("visualizations.json")

    def themes_path(self) -> Path:
        return self.path("themes.json")

    def analysis_log_path(self) -> Path:
        return self.path("analysis_log.json")
