from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from ..config import EngineConfig
from ..ingest import IngestError, load_dataset
from ..models import EngineResult
from ..utils import read_json, write_json
from ..vocab import DEFAULT_VOCABULARY, Vocabulary
from .context import RunContext
from .engine import SurveyEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunResult:
    """Engine output plus the artifact paths written for it."""

    result: EngineResult
    questions_json: Path
    relationships_json: Path
    visualizations_json: Path
    themes_json: Path
    analysis_log_json: Path


def run_pipeline(
    source: Path,
    out_dir: Path,
    config: Optional[EngineConfig] = None,
    *,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
    rng: Optional[random.Random] = None,
) -> RunResult:
    """Ingest `source`, run the engine and write the four contract artifacts.

    Writes (stable key ordering):
      questions.json, relationships.json, visualizations.json, themes.json,
      analysis_log.json

    An `IngestError` is recorded in analysis_log.json and re-raised; nothing
    downstream runs.
    """
    cfg = config or EngineConfig()
    ctx = RunContext.create(out_dir=out_dir, source=source)
    ctx.out_dir.mkdir(parents=True, exist_ok=True)
    log_path = ctx.analysis_log_path()

    _start_analysis_log(ctx, cfg)

    t0 = time.perf_counter()
    try:
        dataset = load_dataset(ctx.source)
    except IngestError as e:
        logger.error("ingest failed for %s: %s", ctx.source, e)
        _append_analysis_log(log_path, errors=[{"stage": "ingest", "error": str(e)}])
        raise
    _append_analysis_log(
        log_path,
        stages=[{"stage": "ingest", "rows": len(dataset), "columns": len(dataset.columns), "seconds": _since(t0)}],
    )

    t1 = time.perf_counter()
    engine = SurveyEngine(cfg, vocabulary, rng)
    result = engine.analyze(dataset)

    payload = result.model_dump(mode="json")
    write_json(ctx.questions_path(), {"total_rows": payload["total_rows"], "questions": payload["questions"]})
    write_json(ctx.relationships_path(), {"relationships": payload["relationships"]})
    write_json(ctx.visualizations_path(), {"visualizations": payload["visualizations"]})
    write_json(ctx.themes_path(), {"themes": payload["themes"], "repeated_terms": payload["repeated_terms"]})

    _append_analysis_log(
        log_path,
        stages=_engine_stages(result, _since(t1)),
        warnings=_warnings(result, cfg),
    )
    logger.info("wrote artifacts to %s", ctx.out_dir)

    return RunResult(
        result=result,
        questions_json=ctx.questions_path(),
        relationships_json=ctx.relationships_path(),
        visualizations_json=ctx.visualizations_path(),
        themes_json=ctx.themes_path(),
        analysis_log_json=log_path,
    )


def _since(t0: float) -> float:
    return round(time.perf_counter() - t0, 4)


def _engine_stages(result: EngineResult, seconds: float) -> list[dict[str, Any]]:
    by_type: dict[str, int] = {}
    for q in result.questions:
        by_type[q.type.value] = by_type.get(q.type.value, 0) + 1
    charts: dict[str, int] = {}
    for v in result.visualizations:
        charts[v.chart.value] = charts.get(v.chart.value, 0) + 1
    return [
        {"stage": "classify", "questions": len(result.questions), "by_type": by_type},
        {"stage": "relate", "relationships": len(result.relationships), "themes": len(result.themes)},
        {"stage": "select", "visualizations": len(result.visualizations), "charts": charts, "seconds": seconds},
    ]


def _warnings(result: EngineResult, cfg: EngineConfig) -> list[str]:
    out = [f"Skipped column '{c}' (identifier, timestamp or empty)." for c in result.skipped_columns]
    for q in result.questions:
        if q.response_count < cfg.min_responses:
            out.append(f"Question '{q.id}' has {q.response_count} responses; no visualization selected.")
    return out


def _start_analysis_log(ctx: RunContext, cfg: EngineConfig) -> None:
    """Best-effort: a log that cannot be written never fails the run."""
    payload = {
        "_schema": "survey_viz.analysis_log.v1",
        "run_id": ctx.run_id,
        "created_at": datetime.now(timezone.utc).isoformat(),
        "source": str(ctx.source),
        "config": cfg.as_dict(),
        "stages": [],
        "warnings": [],
        "errors": [],
    }
    try:
        write_json(ctx.analysis_log_path(), payload)
    except Exception:  # noqa: BLE001
        logger.warning("could not write %s", ctx.analysis_log_path())


def _append_analysis_log(path: Path, **lists: list[Any]) -> None:
    """Best-effort append to the list-valued keys of analysis_log.json."""
    try:
        existing = read_json(path) if path.exists() else {}
        if not isinstance(existing, dict):
            existing = {}
        for key, items in lists.items():
            current = existing.get(key)
            if not isinstance(current, list):
                current = []
            current.extend(items)
            existing[key] = current
        write_json(path, existing)
    except Exception:  # noqa: BLE001
        logger.warning("could not update %s", path)
