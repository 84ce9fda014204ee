"""Canonical record types shared by the parsers, reconciler and metrics engine."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Dict, Generic, List, Optional, Sequence, TypeVar

import pandas as pd


MATCH_TYPES = ("Broad", "Phrase", "Exact", "Auto", "Unknown")

T = TypeVar("T")


@dataclass(frozen=True)
class BusinessRecord:
    """One Business Report row for one SKU on one calendar day."""

    date: str
    sku: str
    sessions: int
    units_ordered: int
    sales: float
    conversion_rate_percent: float
    parent_asin: Optional[str] = None
    title: Optional[str] = None


@dataclass(frozen=True)
class SearchTermRecord:
    """One Search Term Report row. There is no SKU column in this report."""

    date: str
    campaign: str
    ad_group: str
    search_term: str
    match_type: str
    impressions: int
    clicks: int
    spend: float
    sales: float
    orders: int


@dataclass
class CostEntry:
    sku: str
    sale_price: float = 0.0
    amazon_fees: float = 0.0
    cogs: float = 0.0
    last_updated: str = ""

    @property
    def profit_per_unit(self) -> float:
        return self.sale_price - self.amazon_fees - self.cogs

    @property
    def is_complete(self) -> bool:
        """True when all three unit-economics fields have been filled in."""
        return self.sale_price > 0 and self.amazon_fees > 0 and self.cogs > 0


class MissingColumnsError(ValueError):
    """Raised when required canonical fields cannot be resolved to a header.

    ``missing`` maps each unresolved field to the synonyms that were tried.
    ``with_examples`` controls whether the message lists the synonyms.
    """

    def __init__(self, missing: Dict[str, Sequence[str]], with_examples: bool = True):
        self.missing = {k: list(v) for k, v in missing.items()}
        self.with_examples = with_examples
        super().__init__(self._render())

    def _render(self) -> str:
        if self.with_examples:
            parts = [f"{name} (e.g., {', '.join(syns)})" for name, syns in self.missing.items()]
            return f"Missing required columns: {'; '.join(parts)}"
        return f"Missing required columns: {', '.join(self.missing)}"


@dataclass
class ParseResult(Generic[T]):
    """Outcome of parsing one uploaded report file.

    ``success`` is derived: no row errors and at least one record.
    Callers decide whether to keep partial ``data`` from a failed parse.
    """

    data: List[T] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return len(self.errors) == 0 and len(self.data) > 0

    @classmethod
    def failure(cls, message: str) -> "ParseResult[T]":
        return cls(data=[], errors=[message])

    def to_dict(self) -> Dict[str, object]:
        return {
            "data": [asdict(r) for r in self.data],
            "errors": list(self.errors),
            "success": self.success,
        }


def records_to_frame(records: Sequence[object], columns: Sequence[str]) -> pd.DataFrame:
    """Build a DataFrame from dataclass records, keeping column order stable when empty."""

    if not records:
        return pd.DataFrame(columns=list(columns))
    return pd.DataFrame([asdict(r) for r in records], columns=list(columns))


BUSINESS_COLUMNS = [
    "date",
    "sku",
    "sessions",
    "units_ordered",
    "sales",
    "conversion_rate_percent",
    "parent_asin",
    "title",
]

SEARCH_TERM_COLUMNS = [
    "date",
    "campaign",
    "ad_group",
    "search_term",
    "match_type",
    "impressions",
    "clicks",
    "spend",
    "sales",
    "orders",
]
