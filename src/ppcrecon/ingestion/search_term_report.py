"""Search Term Report (spreadsheet) parser."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..ingestion_utils import ReportSource, cell_text, clean_count, clean_number, read_first_sheet
from ..standards.column_resolver import SEARCH_TERM_TOKENS, resolve_token_indices
from ..standards.schemas import MATCH_TYPES, MissingColumnsError, ParseResult, SearchTermRecord
from .date_normalizer import normalize_date


LOGGER = logging.getLogger("ppcrecon.ingestion.search_term_report")

EMPTY_REPORT_MESSAGE = "File appears to be empty or has no data rows"

TEXT_FALLBACKS: Dict[str, str] = {
    "campaign": "Unknown Campaign",
    "ad_group": "Unknown Ad Group",
    "search_term": "Unknown Term",
    "match_type": "Unknown",
}

_MATCH_LOOKUP = {m.lower(): m for m in MATCH_TYPES}


def normalize_match_type(value: Any) -> str:
    """Return one of Broad/Phrase/Exact/Auto/Unknown (case-insensitive)."""

    return _MATCH_LOOKUP.get(cell_text(value).lower(), "Unknown")


def _cell(row: Sequence[Any], index: int) -> Any:
    return row[index] if 0 <= index < len(row) else None


def _is_blank_row(row: Sequence[Any]) -> bool:
    return all(cell_text(v) == "" for v in row)


def _row_to_record(row: Sequence[Any], indices: Mapping[str, int]) -> SearchTermRecord:
    raw_date = _cell(row, indices["date"])
    if cell_text(raw_date) == "":
        raise ValueError("Missing date")
    day = normalize_date(raw_date)
    if not day:
        raise ValueError(f"Unrecognized date '{cell_text(raw_date)}'")

    texts = {
        name: cell_text(_cell(row, indices[name])) or fallback
        for name, fallback in TEXT_FALLBACKS.items()
    }
    return SearchTermRecord(
        date=day,
        campaign=texts["campaign"],
        ad_group=texts["ad_group"],
        search_term=texts["search_term"],
        match_type=normalize_match_type(texts["match_type"]),
        impressions=clean_count(_cell(row, indices["impressions"])),
        clicks=clean_count(_cell(row, indices["clicks"])),
        spend=clean_number(_cell(row, indices["spend"])),
        sales=clean_number(_cell(row, indices["sales"])),
        orders=clean_count(_cell(row, indices["orders"])),
    )


def parse_search_term_grid(
    grid: Sequence[Sequence[Any]],
    tokens: Optional[Mapping[str, Sequence[str]]] = None,
) -> ParseResult[SearchTermRecord]:
    """Parse a decoded sheet where ``grid[0]`` is the header row.

    Only a missing/unreadable date fails a row; blank text cells fall back to
    placeholder labels and unreadable numbers become 0.
    """

    if len(grid) < 2:
        return ParseResult.failure(EMPTY_REPORT_MESSAGE)
    try:
        indices = resolve_token_indices(list(grid[0]), tokens or SEARCH_TERM_TOKENS)
    except MissingColumnsError as exc:
        LOGGER.warning("Search Term Report rejected: %s", exc)
        return ParseResult.failure(str(exc))
    LOGGER.debug("Resolved Search Term Report column indices: %s", indices)

    data: List[SearchTermRecord] = []
    errors: List[str] = []
    for i in range(1, len(grid)):
        row = list(grid[i])
        if _is_blank_row(row):
            continue
        try:
            data.append(_row_to_record(row, indices))
        except Exception as exc:
            # Row numbers are 1-based sheet rows; the header is row 1.
            errors.append(f"Row {i + 1}: {exc}")

    if errors:
        LOGGER.warning("Search Term Report: %d row(s) skipped", len(errors))
    LOGGER.info(
        "Search Term Report parsed: %d record(s) across %d date(s)",
        len(data),
        len({r.date for r in data}),
    )
    return ParseResult(data=data, errors=errors)


def parse_search_term_report(
    source: ReportSource,
    tokens: Optional[Mapping[str, Sequence[str]]] = None,
) -> ParseResult[SearchTermRecord]:
    """Parse the first sheet of a Search Term Report workbook. Never raises."""

    try:
        grid = read_first_sheet(source)
    except Exception as exc:
        LOGGER.error("Search Term Report unreadable: %s", exc)
        return ParseResult.failure(f"File parsing error: {exc}")
    return parse_search_term_grid(grid, tokens)
