"""Convert report date cells of unknown shape into ISO calendar-day strings."""
from __future__ import annotations

import re
import warnings
from datetime import date, datetime, timedelta
from typing import Any, Optional

import numpy as np
import pandas as pd


# Excel 1900 date system. Starting one day before 1899-12-31 absorbs the
# fictitious 1900-02-29 for every serial above 59.
EXCEL_EPOCH = date(1899, 12, 30)
EXCEL_SERIAL_MIN = 59
MIN_YEAR = 1900

_PARTS_SPLIT = re.compile(r"[/-]")


def excel_serial_to_date(serial: float) -> Optional[date]:
    """Return the calendar day for an Excel serial, or None when out of range."""

    if serial is None or not np.isfinite(serial) or serial <= EXCEL_SERIAL_MIN:
        return None
    try:
        return EXCEL_EPOCH + timedelta(days=int(serial))
    except OverflowError:
        return None


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, np.integer, np.floating)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def _parse_native(text: str) -> Optional[date]:
    # Bare words such as "Jan" parse to year 1.
    if not any(ch.isdigit() for ch in text):
        return None
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        parsed = pd.to_datetime(text, errors="coerce")
    if parsed is None or pd.isna(parsed) or parsed.year < MIN_YEAR:
        return None
    return parsed.date()


def _parse_parts(text: str) -> Optional[date]:
    """Split on '/' or '-' and guess the field order.

    A part above 1900 is the year wherever it sits; otherwise month-day-year
    is assumed. Two-digit trailing years are read as 20xx.
    """

    parts = _PARTS_SPLIT.split(text)
    if len(parts) != 3:
        return None
    try:
        a, b, c = (int(p.strip()) for p in parts)
    except ValueError:
        return None
    try:
        if c > 1900:
            return date(c, a, b)
        if a > 1900:
            return date(a, b, c)
        year = c + 2000 if c < 100 else c
        return date(year, a, b)
    except ValueError:
        return None


def normalize_date(value: Any) -> str:
    """Return ``YYYY-MM-DD`` for ``value`` or '' when it cannot be read as a date.

    Resolution order:
      1) datetime-like objects are truncated to their day
      2) numbers (or numeric strings) above 59 are Excel serials
      3) native string parsing (month-first when ambiguous)
      4) three-part split heuristic
    Never raises.
    """

    try:
        if value is None or value is pd.NaT:
            return ""
        if isinstance(value, datetime):
            return value.date().isoformat()
        if isinstance(value, date):
            return value.isoformat()
        if isinstance(value, float) and np.isnan(value):
            return ""

        number = _as_number(value)
        if number is not None:
            day = excel_serial_to_date(number)
            return day.isoformat() if day else ""

        text = str(value).strip()
        if not text:
            return ""
        day = _parse_native(text) or _parse_parts(text)
        return day.isoformat() if day else ""
    except Exception:
        return ""
