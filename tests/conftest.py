import sys
from pathlib import Path

import pandas as pd
import pytest

SRC = Path(__file__).resolve().parents[1] / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


BR_HEADERS = ["ASIN", "Title", "Sessions - Total", "Units Ordered", "Ordered Product Sales", "Unit Session Percentage"]
STR_HEADERS = [
    "Date",
    "Campaign Name",
    "Ad Group Name",
    "Customer Search Term",
    "Match Type",
    "Impressions",
    "Clicks",
    "Spend",
    "7 Day Total Sales",
    "7 Day Total Orders (#)",
]


@pytest.fixture
def write_business_csv(tmp_path):
    def _write(rows, headers=BR_HEADERS, name="business.csv"):
        path = tmp_path / name
        pd.DataFrame(rows, columns=headers).to_csv(path, index=False)
        return path

    return _write


@pytest.fixture
def write_search_terms_xlsx(tmp_path):
    def _write(rows, headers=STR_HEADERS, name="search_terms.xlsx"):
        path = tmp_path / name
        pd.DataFrame(rows, columns=headers).to_excel(path, index=False)
        return path

    return _write


@pytest.fixture
def business_rows():
    return [
        ["B001", "Blue Widget", "100", "10", "$300.00", "10%"],
        ["B002", "", "50", "5", "$100.00", "10%"],
    ]


@pytest.fixture
def search_term_rows():
    return [
        ["2024-01-01", "Brand", "Core", "blue widget", "Exact", 1000, 20, 30.0, 60.0, 3],
        ["2024-01-02", "Generic", "Wide", "widget", "broad", 500, 10, 10.0, 20.0, 1],
    ]
