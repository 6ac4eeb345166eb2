from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any

_QUESTION_PREFIX_RE = re.compile(r"^(?:q|question)\s*\d+\s*[.:]\s*", re.IGNORECASE)


def safe_slug(name: str) -> str:
    """Lowercase slug; runs of anything outside [a-z0-9] collapse to `_`."""
    s = name.strip().lower()
    s = re.sub(r"[^a-z0-9]+", "_", s)
    return s.strip("_")


def display_text(column: str) -> str:
    """Strip "Q1." / "Question 3:" style prefixes and capitalize the first character."""
    text = _QUESTION_PREFIX_RE.sub("", column.strip()).strip()
    if not text:
        text = column.strip()
    return text[:1].upper() + text[1:]


def render_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def read_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def write_json(path: Path, obj: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(obj, indent=2, sort_keys=True, ensure_ascii=False) + "\n", encoding="utf-8")
