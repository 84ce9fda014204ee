import pandas as pd
import pytest

from ppcrecon.cost_ledger import CostLedger, load_cost_file, write_cost_file
from ppcrecon.standards.schemas import CostEntry


def test_sync_creates_zero_entries_and_keeps_orphans():
    ledger = CostLedger([CostEntry(sku="OLD", sale_price=10.0, amazon_fees=2.0, cogs=3.0)])

    added = ledger.sync_with_skus(["A", "B", "A", " "])

    assert added == ["A", "B"]
    assert set(ledger) == {"OLD", "A", "B"}
    assert ledger["A"].sale_price == 0.0
    assert ledger["A"].last_updated
    assert ledger["OLD"].sale_price == 10.0
    assert ledger.orphaned(["A", "B"]) == ["OLD"]


def test_add_update_remove():
    ledger = CostLedger()
    assert ledger.add_sku("A")
    assert not ledger.add_sku("A")
    assert not ledger.add_sku("")

    before = ledger["A"].last_updated
    entry = ledger.update("A", sale_price=30, amazon_fees=5.5, cogs=10)
    assert entry.profit_per_unit == pytest.approx(14.5)
    assert entry.is_complete
    assert entry.last_updated >= before

    with pytest.raises(KeyError):
        ledger.update("missing", cogs=1)
    with pytest.raises(ValueError):
        ledger.update("A", cogs=-1)
    with pytest.raises(ValueError):
        ledger.update("A", cogs=float("nan"))
    with pytest.raises(ValueError):
        ledger.update("A", sale_price=12.0, amazon_fees=float("inf"))
    assert ledger["A"].sale_price == 30
    with pytest.raises(TypeError):
        ledger.update("A", margin=1)

    ledger.remove("A")
    assert len(ledger) == 0
    assert ledger.get("A") is None


def test_replace_is_wholesale():
    ledger = CostLedger([CostEntry(sku="A")])
    ledger.replace([CostEntry(sku="B", cogs=1.0)])
    assert list(ledger) == ["B"]

    with pytest.raises(ValueError):
        ledger.replace([CostEntry(sku="C", sale_price=-5.0)])
    with pytest.raises(ValueError):
        ledger.replace([CostEntry(sku="D", cogs=float("nan"))])
    assert list(ledger) == ["B"]


def test_to_frame_columns():
    ledger = CostLedger([CostEntry(sku="A", sale_price=30.0, amazon_fees=5.0, cogs=10.0)])
    df = ledger.to_frame()
    assert list(df.columns) == ["sku", "sale_price", "amazon_fees", "cogs", "profit_per_unit", "last_updated"]
    assert df.loc[0, "profit_per_unit"] == pytest.approx(15.0)


def test_load_cost_csv(tmp_path):
    path = tmp_path / "costs.csv"
    pd.DataFrame(
        {
            "SKU": ["A", "", "B"],
            "Sale Price": ["$30.00", "1", "abc"],
            "Amazon Fees": ["5", "1", "2"],
            "COGS": ["10", "1", "-4"],
        }
    ).to_csv(path, index=False)

    ledger = load_cost_file(path)

    assert list(ledger) == ["A", "B"]
    assert ledger["A"].profit_per_unit == pytest.approx(15.0)
    assert ledger["B"].sale_price == 0.0
    assert ledger["B"].cogs == 0.0


def test_write_then_load_round_trip(tmp_path):
    ledger = CostLedger([CostEntry(sku="A", sale_price=30.0, amazon_fees=5.0, cogs=10.0)])
    for name in ("costs.csv", "costs.xlsx"):
        path = write_cost_file(ledger, tmp_path / "out" / name)
        loaded = load_cost_file(path)
        assert loaded["A"].sale_price == pytest.approx(30.0)
        assert loaded["A"].amazon_fees == pytest.approx(5.0)
        assert loaded["A"].cogs == pytest.approx(10.0)


def test_unsupported_extension(tmp_path):
    with pytest.raises(ValueError):
        load_cost_file(tmp_path / "costs.json")
