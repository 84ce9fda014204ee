"""Business Report (CSV) parser.

Business Reports carry no date column; every record is stamped with the
report date supplied by the caller. Redistribution across real dates happens
later in :mod:`ppcrecon.ingestion.date_reconciler`.
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Dict, List, Mapping, Optional, Sequence

import pandas as pd

from ..ingestion_utils import ReportSource, cell_text, clean_count, clean_number, read_delimited_rows
from ..standards.column_resolver import (
    BUSINESS_REPORT_FALLBACKS,
    BUSINESS_REPORT_OPTIONAL,
    BUSINESS_REPORT_SYNONYMS,
    resolve_columns,
)
from ..standards.schemas import BusinessRecord, MissingColumnsError, ParseResult


LOGGER = logging.getLogger("ppcrecon.ingestion.business_report")


def resolve_business_columns(
    headers: Sequence[object],
    synonyms: Optional[Mapping[str, Sequence[str]]] = None,
) -> Dict[str, object]:
    """Map canonical Business Report fields to observed headers (raises MissingColumnsError)."""

    return resolve_columns(
        headers,
        synonyms or BUSINESS_REPORT_SYNONYMS,
        optional=BUSINESS_REPORT_OPTIONAL,
        fallbacks=BUSINESS_REPORT_FALLBACKS,
    )


def _parse_percent(value: object) -> float:
    text = cell_text(value)
    if text.endswith("%"):
        text = text[:-1]
    return clean_number(text)


def _optional_text(row: Mapping[str, object], column: Optional[object]) -> Optional[str]:
    if column is None:
        return None
    return cell_text(row.get(column)) or None


def _row_to_record(row: Mapping[str, object], columns: Mapping[str, object], report_date: str) -> BusinessRecord:
    sku = cell_text(row.get(columns["sku"]))
    if not sku:
        raise ValueError("Missing SKU")
    return BusinessRecord(
        date=report_date,
        sku=sku,
        parent_asin=_optional_text(row, columns.get("parent_asin")),
        title=_optional_text(row, columns.get("title")),
        sessions=clean_count(row.get(columns["sessions"])),
        units_ordered=clean_count(row.get(columns["units_ordered"])),
        sales=clean_number(row.get(columns["sales"])),
        conversion_rate_percent=_parse_percent(row.get(columns["conversion_rate"])),
    )


def _format_report_date(report_date: date | str) -> str:
    if isinstance(report_date, datetime):
        return report_date.date().isoformat()
    if isinstance(report_date, date):
        return report_date.isoformat()
    return str(report_date).strip()


def parse_business_frame(
    df: pd.DataFrame,
    report_date: date | str,
    synonyms: Optional[Mapping[str, Sequence[str]]] = None,
    malformed: Optional[Mapping[int, str]] = None,
) -> ParseResult[BusinessRecord]:
    """Parse an already-decoded Business Report table.

    ``malformed`` maps row positions the reader could not split to a reason;
    those rows become row-level errors.
    """

    try:
        columns = resolve_business_columns(list(df.columns), synonyms)
    except MissingColumnsError as exc:
        LOGGER.warning("Business Report rejected: %s", exc)
        return ParseResult.failure(str(exc))
    LOGGER.debug("Resolved Business Report columns: %s", columns)

    stamp = _format_report_date(report_date)
    data: List[BusinessRecord] = []
    errors: List[str] = []
    malformed = malformed or {}
    for index, row in enumerate(df.to_dict(orient="records")):
        if index in malformed:
            errors.append(f"Row {index + 1}: {malformed[index]}")
            continue
        try:
            data.append(_row_to_record(row, columns, stamp))
        except Exception as exc:
            errors.append(f"Row {index + 1}: {exc}")

    if errors:
        LOGGER.warning("Business Report: %d row(s) skipped", len(errors))
    LOGGER.info("Business Report parsed: %d record(s) dated %s", len(data), stamp)
    return ParseResult(data=data, errors=errors)


def parse_business_report(
    source: ReportSource,
    report_date: date | str,
    synonyms: Optional[Mapping[str, Sequence[str]]] = None,
) -> ParseResult[BusinessRecord]:
    """Parse a Business Report file. Never raises; failures come back in ``errors``."""

    try:
        df, malformed = read_delimited_rows(source)
    except Exception as exc:
        LOGGER.error("Business Report unreadable: %s", exc)
        return ParseResult.failure(f"File parsing error: {exc}")
    return parse_business_frame(df, report_date, synonyms, malformed)
