from __future__ import annotations

from typing import Any, Iterable, Optional, Set

import pandas as pd

from .standards.schemas import BusinessRecord


def normalize_asin(x: Any) -> str:
    if x is None or (isinstance(x, float) and pd.isna(x)):
        return ""
    return str(x).strip().upper()


def _parents_of(records: Iterable[BusinessRecord]) -> Set[str]:
    return {normalize_asin(r.parent_asin) for r in records if normalize_asin(r.parent_asin)}


def _own_parent(sku: str, records: Iterable[BusinessRecord]) -> str:
    key = normalize_asin(sku)
    for r in records:
        if normalize_asin(r.sku) == key and normalize_asin(r.parent_asin):
            return normalize_asin(r.parent_asin)
    return ""


def is_parent_asin(sku: str, records: Iterable[BusinessRecord]) -> bool:
    """A SKU is a parent when it lists itself as parent or another row names it as parent."""

    records = list(records)
    key = normalize_asin(sku)
    if not key:
        return False
    return _own_parent(key, records) == key or key in _parents_of(records)


def is_child_asin(sku: str, records: Iterable[BusinessRecord]) -> bool:
    records = list(records)
    key = normalize_asin(sku)
    parent = _own_parent(key, records)
    return bool(parent) and parent != key


def asin_badge(sku: str, records: Iterable[BusinessRecord]) -> Optional[str]:
    """Return the badge letter: P for a parent ASIN, C for a child, None otherwise."""

    records = list(records)
    if is_parent_asin(sku, records):
        return "P"
    if is_child_asin(sku, records):
        return "C"
    return None
