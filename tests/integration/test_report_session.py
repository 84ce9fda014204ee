import pytest

from ppcrecon.common.config_validator import load_and_validate_config
from ppcrecon.filters import DashboardFilters
from ppcrecon.session import BUSINESS_REPORT, SEARCH_TERM_REPORT, ReportSession, SessionContext


def test_load_reports_reconciles_and_syncs_ledger(write_business_csv, write_search_terms_xlsx, business_rows, search_term_rows):
    br_path = write_business_csv(business_rows)
    st_path = write_search_terms_xlsx(search_term_rows)
    session = ReportSession(context=SessionContext(user_email="seller@example.com"))

    br_result, st_result = session.load_reports(br_path, st_path, report_date="2024-01-01")

    assert br_result.success and st_result.success
    assert [r.date for r in session.business_records] == ["2024-01-01", "2024-01-02"]
    assert len(session.search_term_records) == 2
    assert set(session.ledger) == {"B001", "B002"}

    summary = session.overall_summary()
    assert summary["total_sales"] == pytest.approx(400.0)
    assert summary["ppc_sales"] == pytest.approx(80.0)
    assert summary["organic_sales"] == pytest.approx(320.0)

    economics = session.sku_economics()
    assert list(economics["sku"]) == ["B001", "B002"]
    assert economics.iloc[0]["allocated_ppc_spend"] == pytest.approx(30.0)


def test_sequential_uploads_and_clear(write_business_csv, write_search_terms_xlsx, business_rows, search_term_rows):
    session = ReportSession()
    session.load_business_report(write_business_csv(business_rows), "2024-01-05")
    assert {r.date for r in session.business_records} == {"2024-01-05"}

    session.load_search_term_report(write_search_terms_xlsx(search_term_rows))
    assert [r.date for r in session.business_records] == ["2024-01-01", "2024-01-02"]

    session.clear_search_term_reports()
    assert session.search_term_records == ()
    assert {r.date for r in session.business_records} == {"2024-01-05"}

    session.clear_business_reports()
    assert session.business_records == ()
    # Costs survive a cleared report and show up as orphans.
    assert set(session.orphaned_costs()) == {"B001", "B002"}


def test_failed_upload_keeps_previous_data(write_business_csv, business_rows):
    session = ReportSession()
    session.load_business_report(write_business_csv(business_rows), "2024-01-01")

    bad = write_business_csv([["X", "1"]], headers=["ASIN", "Sessions"], name="bad.csv")
    result = session.load_business_report(bad, "2024-01-02")

    assert not result.success
    assert [r.sku for r in session.business_records] == ["B001", "B002"]


def test_partial_upload_only_with_accept_partial(write_business_csv, business_rows):
    rows = business_rows + [["", "x", "1", "1", "1", "1%"]]
    path = write_business_csv(rows)

    session = ReportSession()
    session.load_business_report(path, "2024-01-01")
    assert session.business_records == ()

    session.load_business_report(path, "2024-01-01", accept_partial=True)
    assert len(session.business_records) == 2


def test_observers_see_successful_parses_only(write_business_csv, write_search_terms_xlsx, business_rows, search_term_rows):
    context = SessionContext(user_email="admin@example.com", is_admin=True)
    session = ReportSession(context=context)
    events = []

    def broken(event):
        raise RuntimeError("relay down")

    session.add_observer(broken)
    session.add_observer(events.append)

    session.load_reports(write_business_csv(business_rows), write_search_terms_xlsx(search_term_rows), "2024-01-01")
    session.load_business_report(write_business_csv([["X"]], headers=["ASIN"], name="bad.csv"), "2024-01-01")

    assert [e.kind for e in events] == [BUSINESS_REPORT, SEARCH_TERM_REPORT]
    assert all(e.context is context for e in events)
    assert events[0].result.success
    assert len(session.business_records) == 2


def test_filters_and_audit_use_config(write_business_csv, write_search_terms_xlsx, business_rows, search_term_rows):
    config = load_and_validate_config({"audit": {"acos_threshold": 40, "spend_threshold": 25}})
    session = ReportSession(config=config)
    session.load_reports(write_business_csv(business_rows), write_search_terms_xlsx(search_term_rows), "2024-01-01")

    audit = session.run_audit()
    assert set(audit.high_acos["search_term"]) == {"blue widget", "widget"}
    assert list(audit.high_spend["search_term"]) == ["blue widget"]

    only_first_day = session.overall_summary(DashboardFilters(end="2024-01-01"))
    assert only_first_day["ppc_spend"] == pytest.approx(30.0)
    assert only_first_day["total_sales"] == pytest.approx(300.0)

    organic = session.organic_products()
    assert list(organic["sku"]) == ["B001", "B002"]
