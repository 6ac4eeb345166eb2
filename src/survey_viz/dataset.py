from __future__ import annotations

import math
import numbers
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Sequence

from .utils import render_number

_NUMBER_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{1,2}-\d{1,2}(?:[ T]\d{1,2}:\d{2}(?::\d{2}(?:\.\d+)?)?(?:Z|[+-]\d{2}:?\d{2})?)?$")
_SLASH_DATE_RE = re.compile(r"^\d{1,2}/\d{1,2}/\d{2,4}$")


class CellKind(str, Enum):
    NUMBER = "number"
    DATE = "date"
    TEXT = "text"
    MISSING = "missing"


@dataclass(frozen=True)
class Cell:
    """A tagged cell value.

    `text` is the trimmed source rendering for every kind except MISSING, so
    frequency tables always count what the respondent actually wrote.
    """

    kind: CellKind
    text: str = ""
    number: Optional[float] = None

    @property
    def is_missing(self) -> bool:
        return self.kind is CellKind.MISSING


MISSING = Cell(CellKind.MISSING)


def coerce_cell(raw: Any) -> Cell:
    """Coerce one raw cell once, at the ingest boundary. Never raises."""
    if raw is None:
        return MISSING
    if isinstance(raw, bool):
        return Cell(CellKind.TEXT, str(raw))
    if isinstance(raw, numbers.Real):
        value = float(raw)
        if math.isnan(value):
            return MISSING
        if math.isinf(value):
            return Cell(CellKind.TEXT, str(raw))
        return Cell(CellKind.NUMBER, render_number(value), value)
    if isinstance(raw, datetime):
        text = raw.date().isoformat() if raw.time() == datetime.min.time() else raw.isoformat()
        return Cell(CellKind.DATE, text)
    if isinstance(raw, date):
        return Cell(CellKind.DATE, raw.isoformat())

    text = str(raw).strip()
    if not text or text.lower() == "nan":
        return MISSING
    if _NUMBER_RE.match(text):
        return Cell(CellKind.NUMBER, text, float(text))
    if _ISO_DATE_RE.match(text) or _SLASH_DATE_RE.match(text):
        return Cell(CellKind.DATE, text)
    return Cell(CellKind.TEXT, text)


@dataclass(frozen=True)
class Dataset:
    """Ordered records keyed by the ordered column names.

    Every record carries every column; absent values are MISSING cells.
    """

    columns: tuple[str, ...]
    records: tuple[Mapping[str, Cell], ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.records)

    def column_cells(self, column: str) -> list[Cell]:
        return [rec[column] for rec in self.records]

    def present_cells(self, column: str) -> list[Cell]:
        return [c for c in self.column_cells(column) if not c.is_missing]

    @classmethod
    def build(cls, columns: Sequence[str], rows: Iterable[Sequence[Any]]) -> "Dataset":
        """Coerce raw rows and drop the ones whose cells are all missing."""
        cols = tuple(columns)
        records: list[Mapping[str, Cell]] = []
        for row in rows:
            values = list(row)
            cells = {
                col: coerce_cell(values[i]) if i < len(values) else MISSING
                for i, col in enumerate(cols)
            }
            if all(c.is_missing for c in cells.values()):
                continue
            records.append(MappingProxyType(cells))
        return cls(columns=cols, records=tuple(records))
