from __future__ import annotations

import json
import random
from pathlib import Path
from typing import Optional

import typer

from .config import EngineConfig
from .ingest import IngestError
from .log import setup_logging
from .pipeline import SurveyEngine, run_pipeline

app = typer.Typer(add_completion=False, help="Survey Viz: classify survey columns and pick a chart for each.")


def _config(seed: Optional[int], log_level: Optional[str]) -> EngineConfig:
    cfg = EngineConfig.from_env().with_overrides(seed=seed, log_level=log_level.upper() if log_level else None)
    setup_logging(cfg.log_level, cfg.log_json)
    return cfg


@app.command()
def analyze(
    data: Path = typer.Option(..., "--data", help="CSV, TSV or Excel file of survey responses"),
    out: Path = typer.Option(Path("survey_viz_out"), "--out", help="Directory for the JSON artifacts"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for ranking jitter and word-cloud layout"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG|INFO|WARNING|ERROR"),
):
    """
    Classify every question, summarize it, relate question pairs and select a
    visualization for each.

    Always writes:
      questions.json, relationships.json, visualizations.json, themes.json,
      analysis_log.json
    """
    try:
        cfg = _config(seed, log_level)
        res = run_pipeline(data, out, cfg)
    except (IngestError, FileNotFoundError) as e:
        typer.echo(f"ERROR: {e}")
        raise typer.Exit(code=2)
    except Exception as e:  # noqa: BLE001
        typer.echo(f"ERROR: {type(e).__name__}: {e}")
        raise typer.Exit(code=1)

    r = res.result
    typer.echo(f"Rows: {r.total_rows}")
    typer.echo(f"Questions: {len(r.questions)} (skipped columns: {len(r.skipped_columns)})")
    typer.echo(f"Relationships: {len(r.relationships)}")
    typer.echo(f"Themes: {len(r.themes)}")
    typer.echo(f"Visualizations: {len(r.visualizations)}")
    typer.echo("Artifacts:")
    typer.echo(f"  questions: {res.questions_json}")
    typer.echo(f"  relationships: {res.relationships_json}")
    typer.echo(f"  visualizations: {res.visualizations_json}")
    typer.echo(f"  themes: {res.themes_json}")
    typer.echo(f"  analysis log: {res.analysis_log_json}")


@app.command()
def text(
    text_: Optional[str] = typer.Option(None, "--text", help="Prose to analyze"),
    file: Optional[Path] = typer.Option(None, "--file", help="Read the prose from a file"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for ranking jitter and word-cloud layout"),
):
    """
    Run the text pattern detectors over a block of prose and print the chosen
    chart family and extracted series as JSON.
    """
    if (text_ is None) == (file is None):
        typer.echo("ERROR: pass exactly one of --text or --file")
        raise typer.Exit(code=2)

    try:
        content = text_ if text_ is not None else file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        typer.echo(f"ERROR: {e}")
        raise typer.Exit(code=2)

    cfg = _config(seed, None)
    engine = SurveyEngine(cfg, rng=random.Random(cfg.seed))
    analysis = engine.analyze_text(content)
    typer.echo(json.dumps(analysis.model_dump(mode="json"), indent=2, sort_keys=True, ensure_ascii=False))


@app.command("config")
def show_config(
    seed: Optional[int] = typer.Option(None, "--seed", help="Override the seed shown"),
):
    """Print the effective configuration (defaults plus SURVEY_VIZ_* overrides) as JSON."""
    cfg = EngineConfig.from_env().with_overrides(seed=seed)
    typer.echo(json.dumps(cfg.as_dict(), indent=2, sort_keys=True))


if __name__ == "__main__":
    app()
