"""Command line entry point: parse both reports and print the account economics."""
from __future__ import annotations

import argparse
import json
import sys
from datetime import date
from typing import Dict, List, Optional

import pandas as pd

from .common.config_validator import AppConfig, load_and_validate_config
from .cost_ledger import load_cost_file
from .ingestion_utils import load_config
from .logging_utils import end_phase_timer, get_logger, log_error, log_system_event, log_warning, start_phase_timer
from .session import ReportSession


LOGGER_NAME = "ppcrecon"


def _format_summary(summary: Dict[str, float]) -> str:
    lines = []
    for key, value in summary.items():
        if isinstance(value, float):
            lines.append(f"{key:<26} {value:>14,.2f}")
        else:
            lines.append(f"{key:<26} {value:>14,}")
    return "\n".join(lines)


def run_analysis(
    config: AppConfig,
    business_report: str,
    search_terms: str,
    costs: Optional[str] = None,
    report_date: Optional[str] = None,
    logger=None,
) -> Optional[ReportSession]:
    """Load everything into a session. Returns None when a report fails to parse."""

    timings: Dict[str, float] = {}
    session = ReportSession(config=config, ledger=load_cost_file(costs) if costs else None)

    start = start_phase_timer("parse")
    business_result, search_result = session.load_reports(
        business_report, search_terms, report_date or date.today()
    )
    if logger is not None:
        end_phase_timer("parse", start, timings, logger)

    failed = False
    for label, result in (("Business Report", business_result), ("Search Term Report", search_result)):
        if result.success:
            continue
        for error in result.errors[:20]:
            if logger is not None:
                log_error(logger, f"{label}: {error}")
        failed = True
    if failed:
        return None

    orphans = session.orphaned_costs()
    if orphans and logger is not None:
        log_warning(logger, f"{len(orphans)} cost entr(ies) have no SKU in the current Business Report")
    return session


def build_arg_parser() -> argparse.ArgumentParser:
    """Create an argument parser for the analysis CLI."""

    parser = argparse.ArgumentParser(description="Reconcile Amazon Business and Search Term reports")
    parser.add_argument("--config", default="config.yaml", help="Path to configuration file")
    parser.add_argument("--business-report", required=True, help="Business Report CSV")
    parser.add_argument("--search-terms", required=True, help="Search Term Report workbook (.xlsx)")
    parser.add_argument("--costs", help="Optional cost sheet (CSV/XLSX) with sku, sale price, amazon fees, cogs")
    parser.add_argument(
        "--report-date",
        default=None,
        help="Date stamped on Business Report rows (YYYY-MM-DD, default today)",
    )
    parser.add_argument("--json", action="store_true", help="Print the overall summary as JSON")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point. Exit code 1 when either report fails to parse."""

    parser = build_arg_parser()
    args = parser.parse_args(argv)
    raw_config = load_config(args.config)
    config = load_and_validate_config(raw_config)
    logger = get_logger(LOGGER_NAME, config.model_dump())
    log_system_event(logger, f"Analyzing {args.business_report} + {args.search_terms}")

    session = run_analysis(
        config,
        args.business_report,
        args.search_terms,
        costs=args.costs,
        report_date=args.report_date,
        logger=logger,
    )
    if session is None:
        return 1

    summary = session.overall_summary()
    if args.json:
        print(json.dumps(summary, indent=2))
    else:
        print(_format_summary(summary))
        print()
        with pd.option_context("display.max_columns", None, "display.width", 160):
            print(session.sku_economics().to_string(index=False))
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI guard
    sys.exit(main())
