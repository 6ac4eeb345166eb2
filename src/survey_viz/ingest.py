from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import Any, Iterable, Sequence

import pandas as pd

from .dataset import Dataset

logger = logging.getLogger(__name__)

_DELIMITED_SUFFIXES = {".csv", ".tsv", ".txt"}
# .xls is the legacy OLE2 format; pandas reads it through xlrd.
_SPREADSHEET_ENGINES = {".xlsx": "openpyxl", ".xls": "xlrd"}
_DELIMITER_CANDIDATES = (",", "\t", ";", "|")


class IngestError(ValueError):
    """Structural failure of a tabular source; nothing downstream runs."""


def load_dataset(path: Path) -> Dataset:
    """Read a delimited or spreadsheet file from disk into a Dataset."""
    path = Path(path)
    if not path.exists():
        raise IngestError(f"Data file not found: {path}")
    try:
        data = path.read_bytes()
    except OSError as e:
        raise IngestError(f"Unable to read {path}: {e}") from e
    return dataset_from_bytes(data, path.name)


def dataset_from_bytes(data: bytes, filename: str) -> Dataset:
    """
    Parse an uploaded byte source. The extension picks the reader; unknown
    extensions are treated as delimited text only when they are absent.
    """
    suffix = Path(filename).suffix.lower()
    if suffix in _SPREADSHEET_ENGINES:
        df = _read_spreadsheet(data, filename)
    elif suffix in _DELIMITED_SUFFIXES or suffix == "":
        df = _read_delimited(data, filename)
    else:
        raise IngestError(f"Unsupported file type '{suffix}' for {filename}; expected csv, tsv, txt, xlsx or xls.")

    ds = dataset_from_frame(df)
    logger.info("ingested %s: %d rows x %d columns", filename, len(ds), len(ds.columns))
    return ds


def dataset_from_frame(df: pd.DataFrame) -> Dataset:
    """Build a Dataset from an in-memory frame. The frame is not modified."""
    columns = [str(c) for c in df.columns]
    check_columns(columns)
    clean = df.astype(object).where(pd.notna(df), None)
    return dataset_from_rows(columns, clean.itertuples(index=False, name=None))


def check_columns(columns: Sequence[str]) -> None:
    """Reject a header that cannot key a record: empty, blank names or repeats."""
    if not columns:
        raise IngestError("Source has no header row (zero columns).")
    if any(not str(c).strip() for c in columns):
        raise IngestError("Source has a blank column name.")
    dupes = sorted({c for c in columns if list(columns).count(c) > 1})
    if dupes:
        raise IngestError(f"Source has duplicate column names: {', '.join(dupes)}")


def dataset_from_rows(columns: Sequence[str], rows: Iterable[Sequence[Any]]) -> Dataset:
    check_columns(columns)
    ds = Dataset.build(columns, rows)
    if len(ds) == 0:
        raise IngestError("Source has a header but no non-empty data rows.")
    return ds


def decode_text(data: bytes) -> str:
    """UTF-8 (BOM stripped) first, latin-1 as the last resort."""
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        logger.debug("utf-8 decode failed; falling back to latin-1")
        return data.decode("latin-1")


def detect_delimiter(sample: str) -> str:
    """Sniff the delimiter; fall back to the candidate giving the most columns."""
    try:
        delim = csv.Sniffer().sniff(sample, delimiters="".join(_DELIMITER_CANDIDATES)).delimiter
        if delim and delim.strip(" ") and delim in _DELIMITER_CANDIDATES:
            return delim
    except csv.Error:
        pass

    lines = [line for line in sample.splitlines() if line.strip()][:20]
    if not lines:
        return ","
    best, best_score = ",", -1.0
    for d in _DELIMITER_CANDIDATES:
        counts = [len(line.split(d)) for line in lines]
        # More columns wins; ragged splits are penalised.
        score = (sum(counts) / len(counts)) - (max(counts) - min(counts)) * 0.1
        if score > best_score:
            best, best_score = d, score
    return best


def _split_header(raw: pd.DataFrame, filename: str) -> pd.DataFrame:
    """
    Row 0 is the header, taken verbatim. A blank-header column is dropped when
    it holds no data and rejected otherwise.
    """
    if raw.empty:
        raise IngestError(f"{filename} has no header row.")
    header = ["" if pd.isna(v) else str(v) for v in raw.iloc[0]]
    body = raw.iloc[1:]

    keep: list[int] = []
    for pos, name in enumerate(header):
        if name.strip():
            keep.append(pos)
            continue
        if any(str(v).strip() for v in body.iloc[:, pos] if not pd.isna(v)):
            raise IngestError(f"{filename}: column {pos + 1} has values but a blank header.")
        logger.debug("dropping empty blank-header column %d of %s", pos + 1, filename)

    columns = [header[pos] for pos in keep]
    check_columns(columns)
    return body.iloc[:, keep].set_axis(columns, axis=1)


def _read_delimited(data: bytes, filename: str) -> pd.DataFrame:
    text = decode_text(data)
    if not text.strip():
        raise IngestError(f"{filename} is empty.")
    delim = detect_delimiter(text[:16384])
    logger.debug("delimiter for %s: %r", filename, delim)

    width = next((len(row) for row in csv.reader(io.StringIO(text), delimiter=delim) if row), 0)
    overlong: list[int] = []

    def _truncate(bad_line: list[str]) -> list[str]:
        overlong.append(len(bad_line))
        return bad_line[:width]

    # header=None: row 0 arrives as data, so pandas neither renames headers nor
    # turns the first column into an index when rows are wider than the header.
    try:
        raw = pd.read_csv(
            io.StringIO(text),
            sep=delim,
            header=None,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            engine="python",
            on_bad_lines=_truncate,
        )
    except pd.errors.EmptyDataError as e:
        raise IngestError(f"{filename} has no header row.") from e
    except (pd.errors.ParserError, csv.Error, ValueError) as e:
        raise IngestError(f"Failed to parse {filename}: {e}") from e

    if overlong:
        logger.warning(
            "%s: %d rows had more fields than the %d header columns; extra fields dropped",
            filename,
            len(overlong),
            width,
        )
    return _split_header(raw, filename)


def _read_spreadsheet(data: bytes, filename: str) -> pd.DataFrame:
    if not data:
        raise IngestError(f"{filename} is empty.")
    engine = _SPREADSHEET_ENGINES[Path(filename).suffix.lower()]
    try:
        raw = pd.read_excel(io.BytesIO(data), sheet_name=0, header=None, dtype=str, engine=engine)
    except Exception as e:
        raise IngestError(f"Failed to read spreadsheet {filename}: {e}") from e
    return _split_header(raw, filename)
