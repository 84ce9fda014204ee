"""In-memory state for one user's uploaded reports and cost ledger."""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date
from typing import Callable, Dict, List, Optional, Tuple

import pandas as pd

from .common.config_validator import AppConfig
from .cost_ledger import CostLedger
from .filters import DashboardFilters, filter_business_records, filter_search_term_records
from .ingestion.business_report import parse_business_report
from .ingestion.date_reconciler import reconcile_business_dates
from .ingestion.search_term_report import parse_search_term_report
from .ingestion_utils import ReportSource
from .metrics import aggregations
from .metrics.audit import AuditResult, run_ppc_audit
from .standards.schemas import BusinessRecord, ParseResult, SearchTermRecord


LOGGER = logging.getLogger("ppcrecon.session")

BUSINESS_REPORT = "business_report"
SEARCH_TERM_REPORT = "search_term_report"


@dataclass(frozen=True)
class SessionContext:
    """Identity of the user driving a session, passed explicitly to whoever needs it."""

    user_email: str = ""
    is_admin: bool = False


@dataclass(frozen=True)
class ParseEvent:
    kind: str
    source: ReportSource
    result: ParseResult
    context: SessionContext


Observer = Callable[[ParseEvent], None]


class ReportSession:
    """Owns the Business Report and Search Term Report collections plus the cost ledger.

    Business Report uploads re-sync the ledger; whenever both collections are
    populated the business dates are reconciled against the search term dates.
    A parse with row errors only replaces the stored data when
    ``accept_partial`` is set.
    """

    def __init__(
        self,
        context: Optional[SessionContext] = None,
        config: Optional[AppConfig] = None,
        ledger: Optional[CostLedger] = None,
    ):
        self.context = context or SessionContext()
        self.config = config or AppConfig()
        self.ledger = ledger if ledger is not None else CostLedger()
        self._observers: List[Observer] = []
        self._business_raw: List[BusinessRecord] = []
        self._business: List[BusinessRecord] = []
        self._search_terms: List[SearchTermRecord] = []

    @property
    def business_records(self) -> Tuple[BusinessRecord, ...]:
        return tuple(self._business)

    @property
    def search_term_records(self) -> Tuple[SearchTermRecord, ...]:
        return tuple(self._search_terms)

    def add_observer(self, observer: Observer) -> None:
        self._observers.append(observer)

    def _notify(self, kind: str, source: ReportSource, result: ParseResult) -> None:
        if not result.success:
            return
        event = ParseEvent(kind=kind, source=source, result=result, context=self.context)
        for observer in list(self._observers):
            try:
                observer(event)
            except Exception:
                LOGGER.exception("Observer %r failed for %s upload", observer, kind)

    def _reconcile(self) -> None:
        self._business = reconcile_business_dates(self._business_raw, self._search_terms)

    def _accept(self, result: ParseResult, accept_partial: bool) -> bool:
        return bool(result.data) and (result.success or accept_partial)

    def _parse_business(self, source: ReportSource, report_date: date | str) -> ParseResult[BusinessRecord]:
        return parse_business_report(source, report_date, self.config.columns.business_synonyms())

    def _parse_search_terms(self, source: ReportSource) -> ParseResult[SearchTermRecord]:
        return parse_search_term_report(source, self.config.columns.search_term_tokens())

    def _apply_business(self, source, result: ParseResult[BusinessRecord], accept_partial: bool) -> None:
        if self._accept(result, accept_partial):
            self._business_raw = list(result.data)
            self.ledger.sync_with_skus(r.sku for r in self._business_raw)
        self._notify(BUSINESS_REPORT, source, result)

    def _apply_search_terms(self, source, result: ParseResult[SearchTermRecord], accept_partial: bool) -> None:
        if self._accept(result, accept_partial):
            self._search_terms = list(result.data)
        self._notify(SEARCH_TERM_REPORT, source, result)

    def load_business_report(
        self,
        source: ReportSource,
        report_date: Optional[date | str] = None,
        accept_partial: bool = False,
    ) -> ParseResult[BusinessRecord]:
        result = self._parse_business(source, report_date or date.today())
        self._apply_business(source, result, accept_partial)
        self._reconcile()
        return result

    def load_search_term_report(
        self, source: ReportSource, accept_partial: bool = False
    ) -> ParseResult[SearchTermRecord]:
        result = self._parse_search_terms(source)
        self._apply_search_terms(source, result, accept_partial)
        self._reconcile()
        return result

    def load_reports(
        self,
        business_source: ReportSource,
        search_term_source: ReportSource,
        report_date: Optional[date | str] = None,
        accept_partial: bool = False,
    ) -> Tuple[ParseResult[BusinessRecord], ParseResult[SearchTermRecord]]:
        """Parse both reports concurrently, then store them and reconcile once."""

        with ThreadPoolExecutor(max_workers=2) as executor:
            business_future = executor.submit(self._parse_business, business_source, report_date or date.today())
            search_future = executor.submit(self._parse_search_terms, search_term_source)
            business_result = business_future.result()
            search_result = search_future.result()

        self._apply_business(business_source, business_result, accept_partial)
        self._apply_search_terms(search_term_source, search_result, accept_partial)
        self._reconcile()
        return business_result, search_result

    def clear_business_reports(self) -> None:
        self._business_raw = []
        self._business = []

    def clear_search_term_reports(self) -> None:
        self._search_terms = []
        self._reconcile()

    def _filtered(
        self, filters: Optional[DashboardFilters]
    ) -> Tuple[List[BusinessRecord], List[SearchTermRecord]]:
        if filters is None:
            return list(self._business), list(self._search_terms)
        return (
            filter_business_records(self._business, filters),
            filter_search_term_records(self._search_terms, filters),
        )

    def overall_summary(self, filters: Optional[DashboardFilters] = None) -> Dict[str, float]:
        business, search_terms = self._filtered(filters)
        return aggregations.overall_summary(business, search_terms, self.ledger)

    def sku_economics(self, filters: Optional[DashboardFilters] = None) -> pd.DataFrame:
        business, search_terms = self._filtered(filters)
        return aggregations.sku_economics_frame(business, search_terms, self.ledger)

    def organic_products(self, filters: Optional[DashboardFilters] = None, top_n: Optional[int] = 10) -> pd.DataFrame:
        business, search_terms = self._filtered(filters)
        return aggregations.organic_products(business, search_terms, top_n=top_n)

    def run_audit(self, filters: Optional[DashboardFilters] = None) -> AuditResult:
        _, search_terms = self._filtered(filters)
        return run_ppc_audit(
            search_terms,
            acos_threshold=self.config.audit.acos_threshold,
            spend_threshold=self.config.audit.spend_threshold,
        )

    def orphaned_costs(self) -> List[str]:
        return self.ledger.orphaned(r.sku for r in self._business_raw)
