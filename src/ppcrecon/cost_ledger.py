"""User-supplied unit costs keyed by SKU.

The ledger only ever grows from Business Report uploads: new SKUs get a
zero-valued entry, and entries whose SKU disappears from the current report
are kept (``orphaned``) until the user removes them explicitly.
"""
from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional

import pandas as pd

from .ingestion_utils import (
    DELIMITED_EXTENSIONS,
    SPREADSHEET_EXTENSIONS,
    cell_text,
    clean_number,
    ensure_directory,
    read_delimited,
    validate_extension,
)
from .standards.column_resolver import resolve_columns
from .standards.schemas import CostEntry


LOGGER = logging.getLogger("ppcrecon.cost_ledger")

COST_FIELDS = ("sale_price", "amazon_fees", "cogs")

COST_FILE_SYNONYMS: Dict[str, List[str]] = {
    "sku": ["sku", "asin"],
    "sale_price": ["sale price", "selling price", "price"],
    "amazon_fees": ["amazon fees", "fba fees", "fees"],
    "cogs": ["cogs", "cost of goods", "unit cost"],
}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _check_value(name: str, value: object) -> float:
    number = float(value)
    if not math.isfinite(number) or number < 0:
        raise ValueError(f"{name} must be a finite number >= 0, got {number}")
    return number


class CostLedger(Mapping):
    """Read-only mapping of SKU -> CostEntry with explicit mutators."""

    def __init__(self, entries: Optional[Iterable[CostEntry]] = None):
        self._entries: Dict[str, CostEntry] = {}
        if entries is not None:
            self.replace(entries)

    def __getitem__(self, sku: str) -> CostEntry:
        return self._entries[sku]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, sku, default=None):
        return self._entries.get(sku, default)

    def entries(self) -> List[CostEntry]:
        return list(self._entries.values())

    def sync_with_skus(self, skus: Iterable[str]) -> List[str]:
        """Create zero entries for SKUs not yet in the ledger; return the SKUs added."""

        added = []
        for sku in skus:
            sku = cell_text(sku)
            if sku and sku not in self._entries:
                self._entries[sku] = CostEntry(sku=sku, last_updated=_now())
                added.append(sku)
        if added:
            LOGGER.info("Cost ledger: added %d new SKU(s)", len(added))
        return added

    def add_sku(self, sku: str) -> bool:
        """Add a blank entry. Blank or already-present SKUs are ignored."""
        return bool(self.sync_with_skus([sku]))

    def update(self, sku: str, **fields: float) -> CostEntry:
        if sku not in self._entries:
            raise KeyError(sku)
        unknown = set(fields) - set(COST_FIELDS)
        if unknown:
            raise TypeError(f"Unknown cost field(s): {sorted(unknown)}")
        values = {name: _check_value(name, value) for name, value in fields.items()}
        entry = self._entries[sku]
        for name, value in values.items():
            setattr(entry, name, value)
        entry.last_updated = _now()
        return entry

    def remove(self, sku: str) -> None:
        del self._entries[sku]

    def replace(self, entries: Iterable[CostEntry]) -> None:
        """Swap in a whole new set of entries. The last entry wins for repeated SKUs."""

        fresh: Dict[str, CostEntry] = {}
        for entry in entries:
            for name in COST_FIELDS:
                _check_value(name, getattr(entry, name))
            fresh[entry.sku] = entry
        self._entries = fresh

    def orphaned(self, skus: Iterable[str]) -> List[str]:
        """Ledger SKUs absent from ``skus`` (e.g. the current Business Report)."""

        current = set(skus)
        return [sku for sku in self._entries if sku not in current]

    def to_frame(self) -> pd.DataFrame:
        columns = ["sku", *COST_FIELDS, "profit_per_unit", "last_updated"]
        rows = [
            {
                "sku": e.sku,
                "sale_price": e.sale_price,
                "amazon_fees": e.amazon_fees,
                "cogs": e.cogs,
                "profit_per_unit": e.profit_per_unit,
                "last_updated": e.last_updated,
            }
            for e in self._entries.values()
        ]
        return pd.DataFrame(rows, columns=columns)


def load_cost_file(path: str | Path) -> CostLedger:
    """Read a CSV/XLSX cost sheet into a new ledger.

    Headers are resolved like Business Report headers; unreadable numbers
    become 0 and rows without a SKU are skipped.
    """

    path = Path(path)
    validate_extension(path, DELIMITED_EXTENSIONS + SPREADSHEET_EXTENSIONS)
    if path.suffix.lower() in SPREADSHEET_EXTENSIONS:
        df = pd.read_excel(path, sheet_name=0, dtype=object)
    else:
        df = read_delimited(path)
    columns = resolve_columns(list(df.columns), COST_FILE_SYNONYMS)

    stamp = _now()
    entries = []
    for row in df.to_dict(orient="records"):
        sku = cell_text(row.get(columns["sku"]))
        if not sku:
            continue
        values = {name: max(0.0, clean_number(row.get(columns[name]))) for name in COST_FIELDS}
        entries.append(CostEntry(sku=sku, last_updated=stamp, **values))
    LOGGER.info("Loaded %d cost entr(ies) from %s", len(entries), path)
    return CostLedger(entries)


def write_cost_file(ledger: CostLedger, path: str | Path) -> Path:
    path = Path(path)
    validate_extension(path, (".csv",) + SPREADSHEET_EXTENSIONS)
    ensure_directory(path.parent)
    df = ledger.to_frame()
    if path.suffix.lower() in SPREADSHEET_EXTENSIONS:
        df.to_excel(path, index=False)
    else:
        df.to_csv(path, index=False)
    return path
