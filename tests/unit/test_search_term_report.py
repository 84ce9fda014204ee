from datetime import datetime

import pytest

from ppcrecon.ingestion.search_term_report import (
    EMPTY_REPORT_MESSAGE,
    normalize_match_type,
    parse_search_term_grid,
    parse_search_term_report,
)

HEADERS = ["Date", "Campaign Name", "Ad Group Name", "Customer Search Term", "Match Type",
           "Impressions", "Clicks", "Spend", "7 Day Total Sales", "7 Day Total Orders (#)"]


@pytest.mark.parametrize(
    "raw,expected",
    [("exact", "Exact"), ("PHRASE", "Phrase"), (" Broad ", "Broad"), ("auto", "Auto"), ("negative", "Unknown"), (None, "Unknown")],
)
def test_normalize_match_type(raw, expected):
    assert normalize_match_type(raw) == expected


def test_parse_workbook(write_search_terms_xlsx, search_term_rows):
    path = write_search_terms_xlsx(search_term_rows)

    result = parse_search_term_report(path)

    assert result.success
    first, second = result.data
    assert first.date == "2024-01-01"
    assert first.campaign == "Brand"
    assert first.ad_group == "Core"
    assert first.search_term == "blue widget"
    assert first.match_type == "Exact"
    assert (first.impressions, first.clicks, first.orders) == (1000, 20, 3)
    assert first.spend == pytest.approx(30.0)
    assert first.sales == pytest.approx(60.0)
    assert second.match_type == "Broad"


def test_excel_serial_and_datetime_cells(write_search_terms_xlsx):
    rows = [
        [45000, "C", "G", "t1", "Exact", 1, 1, 1.0, 0.0, 0],
        [datetime(2024, 1, 2), "C", "G", "t2", "Exact", 1, 1, 1.0, 0.0, 0],
    ]
    path = write_search_terms_xlsx(rows)

    result = parse_search_term_report(path)

    assert [r.date for r in result.data] == ["2023-03-15", "2024-01-02"]


def test_row_errors_use_sheet_row_numbers():
    grid = [
        HEADERS,
        ["2024-01-01", "C1", "AG1", "shoes", "exact", 100, 10, 5.0, 20.0, 2],
        ["", "C1", "AG1", "boots", "exact", 100, 10, 5.0, 20.0, 2],
        ["garbage", "C1", "AG1", "socks", "exact", 100, 10, 5.0, 20.0, 2],
    ]

    result = parse_search_term_grid(grid)

    assert not result.success
    assert len(result.data) == 1
    assert result.errors == ["Row 3: Missing date", "Row 4: Unrecognized date 'garbage'"]


def test_blank_text_cells_fall_back_and_numbers_default_to_zero():
    grid = [
        HEADERS,
        ["2024-01-01", "", None, "", "", "n/a", "", "$1,200.50", "", None],
        [None] * 10,
    ]

    result = parse_search_term_grid(grid)

    assert result.success
    (rec,) = result.data
    assert rec.campaign == "Unknown Campaign"
    assert rec.ad_group == "Unknown Ad Group"
    assert rec.search_term == "Unknown Term"
    assert rec.match_type == "Unknown"
    assert (rec.impressions, rec.clicks, rec.orders) == (0, 0, 0)
    assert rec.spend == pytest.approx(1200.5)
    assert rec.sales == 0.0


def test_missing_headers_and_empty_grid():
    result = parse_search_term_grid([["Date", "Campaign"], ["2024-01-01", "C"]])
    assert not result.success
    assert result.errors[0].startswith("Missing required columns: ad_group")

    assert parse_search_term_grid([HEADERS]).errors == [EMPTY_REPORT_MESSAGE]
    assert parse_search_term_grid([]).errors == [EMPTY_REPORT_MESSAGE]


def test_unreadable_workbook(tmp_path):
    bogus = tmp_path / "report.xlsx"
    bogus.write_bytes(b"not a workbook")

    result = parse_search_term_report(bogus)

    assert not result.success
    assert result.errors[0].startswith("File parsing error:")
