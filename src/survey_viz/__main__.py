"""`python -m survey_viz` runs the same CLI as the `survey-viz` script."""

from __future__ import annotations

from .cli import app

if __name__ == "__main__":
    app()
