"""Report parsers and date handling."""

from .business_report import parse_business_report
from .date_normalizer import normalize_date
from .date_reconciler import reconcile_business_dates
from .search_term_report import parse_search_term_report

__all__ = [
    "normalize_date",
    "parse_business_report",
    "parse_search_term_report",
    "reconcile_business_dates",
]
