"""Utility functions supporting report ingestion and normalization."""
from __future__ import annotations

import csv
import io
import logging
import re
from pathlib import Path
from typing import Any, BinaryIO, Dict, Iterable, List, Tuple, Union

import numpy as np
import pandas as pd
import yaml


LOGGER_NAME = "ppcrecon.ingestion"

ReportSource = Union[str, Path, bytes, BinaryIO]

DELIMITED_EXTENSIONS = (".csv", ".tsv", ".txt")
SPREADSHEET_EXTENSIONS = (".xlsx", ".xlsm")

_NUMBER_STRIP = re.compile(r"[^0-9.\-]+")
_LEADING_FLOAT = re.compile(r"^-?(\d+\.?\d*|\.\d+)")

SNIFF_DELIMITERS = ",\t;|"
SNIFF_LINES = 20
SNIFF_BYTES = 65536
_MALFORMED = "\x00malformed:"


def load_config(path: str | Path | None) -> Dict:
    """Load a YAML configuration file. A missing file yields an empty mapping."""

    if not path:
        return {}
    p = Path(path)
    if not p.exists():
        logging.getLogger(LOGGER_NAME).debug("Config %s not found; using defaults", p)
        return {}
    with open(p, "r", encoding="utf-8") as stream:
        return yaml.safe_load(stream) or {}


def ensure_directory(directory: str | Path) -> Path:
    """Ensure that the directory exists."""

    path = Path(directory)
    path.mkdir(parents=True, exist_ok=True)
    return path


def validate_extension(path: Path, allowed: Iterable[str]) -> None:
    """Ensure the file extension is allowed."""

    suffix = path.suffix.lower()
    if suffix not in {ext.lower() for ext in allowed}:
        raise ValueError(f"Unsupported file extension: {suffix}. Allowed: {list(allowed)}")


def normalize_headers(df: pd.DataFrame) -> pd.DataFrame:
    """Strip header whitespace and de-duplicate repeated names with an index suffix."""

    df = df.copy()
    raw_cols = [str(col).strip() for col in df.columns]
    seen: Dict[str, int] = {}
    fixed: List[str] = []
    for col in raw_cols:
        if col in seen:
            seen[col] += 1
            fixed.append(f"{col}.{seen[col]}")
        else:
            seen[col] = 0
            fixed.append(col)
    df.columns = fixed
    return df


def cell_text(value: Any) -> str:
    """Return the trimmed text of a cell; None and NaN become ''."""

    if value is None:
        return ""
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        pass
    return str(value).strip()


def clean_number(value: Any) -> float:
    """Coerce a report cell to float, defaulting to 0.0.

    Everything except digits, '.' and '-' is stripped, then the leading
    numeric prefix is parsed: '$1,234.50' -> 1234.5, '10%' -> 10.0.
    """

    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float, np.integer, np.floating)):
        return 0.0 if pd.isna(value) else float(value)
    text = _NUMBER_STRIP.sub("", cell_text(value))
    match = _LEADING_FLOAT.match(text)
    if not match:
        return 0.0
    try:
        return float(match.group(0))
    except ValueError:
        return 0.0


def clean_count(value: Any) -> int:
    """Like :func:`clean_number` but truncated to an int for counts."""

    return int(clean_number(value))


def _to_buffer(source: ReportSource) -> Union[Path, io.BytesIO]:
    if isinstance(source, (str, Path)):
        p = Path(source)
        if not p.exists():
            raise FileNotFoundError(f"Input not found: {p}")
        return p
    if isinstance(source, (bytes, bytearray)):
        return io.BytesIO(bytes(source))
    return io.BytesIO(source.read())


def _read_bytes(source: ReportSource) -> bytes:
    buffer = _to_buffer(source)
    if isinstance(buffer, Path):
        return buffer.read_bytes()
    return buffer.getvalue()


def sniff_delimiter(text: str) -> str:
    """Pick the delimiter from the first non-blank lines of ``text``.

    When the lines disagree (a malformed row, say) the header line alone
    decides. Comma when neither is conclusive.
    """

    lines = [line for line in text.splitlines() if line.strip()][:SNIFF_LINES]
    sniffer = csv.Sniffer()
    for sample in ("\n".join(lines), lines[0] if lines else ""):
        if not sample:
            continue
        try:
            return sniffer.sniff(sample, delimiters=SNIFF_DELIMITERS).delimiter
        except csv.Error:
            continue
    return ","


def read_delimited_rows(source: ReportSource) -> Tuple[pd.DataFrame, Dict[int, str]]:
    """Read a delimited text report with every cell kept as text.

    - Delimiter is sniffed among comma, tab, semicolon and pipe, comma as fallback
    - Undecodable bytes become U+FFFD instead of failing the file
    - Blank lines are skipped; empty cells and missing trailing cells stay ''
    - Rows with more fields than the header keep their position but are
      blanked; the second return value maps their row index to a message
    """

    raw = _read_bytes(source)
    delimiter = sniff_delimiter(raw[:SNIFF_BYTES].decode("utf-8-sig", errors="replace"))
    kwargs = dict(
        sep=delimiter,
        engine="python",
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
        encoding="utf-8-sig",
        encoding_errors="replace",
    )
    try:
        width = len(pd.read_csv(io.BytesIO(raw), nrows=0, **kwargs).columns)
        df = pd.read_csv(
            io.BytesIO(raw),
            on_bad_lines=lambda fields: [f"{_MALFORMED}{len(fields)}"] + [""] * (width - 1),
            **kwargs,
        )
    except Exception as exc:
        raise ValueError(f"Failed to read delimited file: {exc}") from exc
    df = normalize_headers(df).fillna("")

    malformed: Dict[int, str] = {}
    if not df.empty:
        first = df.iloc[:, 0].astype(str)
        for idx in df.index[first.str.startswith(_MALFORMED)]:
            seen = first[idx][len(_MALFORMED):]
            malformed[int(idx)] = f"Expected {width} fields, saw {seen}"
            df.loc[idx, :] = ""
    if malformed:
        logging.getLogger(LOGGER_NAME).debug("Malformed delimited rows: %s", malformed)
    return df, malformed


def read_delimited(source: ReportSource) -> pd.DataFrame:
    """Like :func:`read_delimited_rows` with malformed rows dropped."""

    df, malformed = read_delimited_rows(source)
    if malformed:
        df = df.drop(index=list(malformed)).reset_index(drop=True)
    return df


def read_first_sheet(source: ReportSource) -> List[List[Any]]:
    """Decode the first worksheet into a grid of rows; row 0 is the header row."""

    buffer = _to_buffer(source)
    try:
        frame = pd.read_excel(buffer, sheet_name=0, header=None, dtype=object)
    except Exception as exc:
        raise ValueError(f"Failed to read Excel file: {exc}") from exc
    return frame.values.tolist()
