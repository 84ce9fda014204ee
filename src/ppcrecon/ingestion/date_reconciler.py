"""Align single-dated Business Report rows with the Search Term Report's dates.

A Business Report export has no date column, so every row carries the upload
date. When the Search Term Report spans several days, rows are spread
round-robin over the sorted Search Term dates: row i gets dates[i % N].
This is a display heuristic, not a true attribution.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Sequence

from ..standards.schemas import BusinessRecord, SearchTermRecord


LOGGER = logging.getLogger("ppcrecon.ingestion.date_reconciler")


def distinct_dates(records: Sequence[BusinessRecord | SearchTermRecord]) -> List[str]:
    """Sorted distinct ``date`` values of ``records``."""

    return sorted({r.date for r in records})


def needs_redistribution(
    business: Sequence[BusinessRecord],
    search_terms: Sequence[SearchTermRecord],
) -> bool:
    """True when business rows share one date and search terms span more than one."""

    if not business or not search_terms:
        return False
    return len(distinct_dates(business)) == 1 and len(distinct_dates(search_terms)) > 1


def reconcile_business_dates(
    business: Sequence[BusinessRecord],
    search_terms: Sequence[SearchTermRecord],
) -> List[BusinessRecord]:
    """Return business records with dates redistributed when needed.

    Inputs are never mutated; when the trigger does not hold the records are
    returned unchanged (as a new list).
    """

    if not needs_redistribution(business, search_terms):
        return list(business)
    dates = distinct_dates(search_terms)
    LOGGER.info(
        "Redistributing %d Business Report row(s) across %d Search Term date(s) (%s..%s)",
        len(business),
        len(dates),
        dates[0],
        dates[-1],
    )
    return [replace(record, date=dates[i % len(dates)]) for i, record in enumerate(business)]
