from __future__ import annotations

from pathlib import Path

import pytest

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def survey_csv() -> Path:
    return FIXTURES / "survey_small.csv"
