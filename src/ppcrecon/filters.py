from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import FrozenSet, List, Optional, Sequence

from .ingestion.date_normalizer import normalize_date
from .standards.schemas import BusinessRecord, SearchTermRecord


def _as_day(value: Optional[date | str]) -> str:
    if value is None or value == "":
        return ""
    return normalize_date(value)


@dataclass(frozen=True)
class DashboardFilters:
    """Record filters; an empty bound or selection places no constraint."""

    start: Optional[date | str] = None
    end: Optional[date | str] = None
    skus: FrozenSet[str] = field(default_factory=frozenset)
    campaigns: FrozenSet[str] = field(default_factory=frozenset)
    match_types: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        # Accept any iterable for the selections.
        object.__setattr__(self, "skus", frozenset(self.skus))
        object.__setattr__(self, "campaigns", frozenset(self.campaigns))
        object.__setattr__(self, "match_types", frozenset(self.match_types))

    def in_range(self, day: str) -> bool:
        start, end = _as_day(self.start), _as_day(self.end)
        if start and day < start:
            return False
        if end and day > end:
            return False
        return True


def filter_business_records(
    records: Sequence[BusinessRecord], filters: DashboardFilters
) -> List[BusinessRecord]:
    return [
        r
        for r in records
        if filters.in_range(r.date) and (not filters.skus or r.sku in filters.skus)
    ]


def filter_search_term_records(
    records: Sequence[SearchTermRecord], filters: DashboardFilters
) -> List[SearchTermRecord]:
    """Date range, campaign and match-type constraints. SKU selections do not apply here."""

    out = []
    for r in records:
        if not filters.in_range(r.date):
            continue
        if filters.campaigns and r.campaign not in filters.campaigns:
            continue
        if filters.match_types and r.match_type not in filters.match_types:
            continue
        out.append(r)
    return out
