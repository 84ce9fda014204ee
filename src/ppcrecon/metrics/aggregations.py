"""Frame-level summaries built on the scalar metric functions.

Sums raw counts first, then derives ratios, so averages of ratios never leak
into the output. All functions are pure and return new DataFrames/dicts.
"""
from __future__ import annotations

import math
from typing import Dict, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from ..asin_utils import asin_badge
from ..standards.schemas import (
    BUSINESS_COLUMNS,
    SEARCH_TERM_COLUMNS,
    BusinessRecord,
    CostEntry,
    SearchTermRecord,
    records_to_frame,
)
from . import engine


PPC_SUM_COLUMNS = ["impressions", "clicks", "spend", "sales", "orders"]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def business_frame(records: Sequence[BusinessRecord]) -> pd.DataFrame:
    df = records_to_frame(records, BUSINESS_COLUMNS)
    for col in ("sessions", "units_ordered", "sales", "conversion_rate_percent"):
        df[col] = pd.to_numeric(df[col], errors="coerce").fillna(0)
    return df


def search_term_frame(records: Sequence[SearchTermRecord]) -> pd.DataFrame:
    df = records_to_frame(records, SEARCH_TERM_COLUMNS)
    for col in PPC_SUM_COLUMNS:
        df[col] = pd.to_numeric(df[col], errors="coerce").fillna(0)
    return df


def _ratio(numerator: pd.Series, denominator: pd.Series, scale: float = 1.0) -> pd.Series:
    num = numerator.astype(float)
    den = denominator.astype(float)
    with np.errstate(divide="ignore", invalid="ignore"):
        values = np.where(den > 0, num / den * scale, 0.0)
    return pd.Series(values, index=numerator.index, dtype=float)


def add_ppc_ratios(df: pd.DataFrame) -> pd.DataFrame:
    """Add ACoS/ROAS/CTR/CVR columns to a frame holding summed PPC columns."""

    df = df.copy()
    df["acos"] = _ratio(df["spend"], df["sales"], 100.0)
    df["roas"] = _ratio(df["sales"], df["spend"])
    df["ctr"] = _ratio(df["clicks"], df["impressions"], 100.0)
    df["cvr"] = _ratio(df["orders"], df["clicks"], 100.0)
    return df


def _summarize_by(search_terms: Sequence[SearchTermRecord], keys: List[str]) -> pd.DataFrame:
    df = search_term_frame(search_terms)
    if df.empty:
        return add_ppc_ratios(pd.DataFrame(columns=keys + PPC_SUM_COLUMNS))
    grouped = df.groupby(keys, dropna=False, as_index=False)[PPC_SUM_COLUMNS].sum()
    out = add_ppc_ratios(grouped)
    return out.sort_values(["spend"] + keys, ascending=[False] + [True] * len(keys)).reset_index(drop=True)


def campaign_summary(search_terms: Sequence[SearchTermRecord]) -> pd.DataFrame:
    return _summarize_by(search_terms, ["campaign"])


def match_type_summary(search_terms: Sequence[SearchTermRecord]) -> pd.DataFrame:
    return _summarize_by(search_terms, ["match_type"])


def search_term_summary(search_terms: Sequence[SearchTermRecord]) -> pd.DataFrame:
    """One row per (campaign, ad group, search term, match type) across all dates."""
    return _summarize_by(search_terms, ["campaign", "ad_group", "search_term", "match_type"])


def daily_ppc_summary(search_terms: Sequence[SearchTermRecord]) -> pd.DataFrame:
    out = _summarize_by(search_terms, ["date"])
    return out.sort_values("date").reset_index(drop=True)


def overall_summary(
    business: Sequence[BusinessRecord],
    search_terms: Sequence[SearchTermRecord],
    costs: Optional[Mapping[str, CostEntry]] = None,
) -> Dict[str, float]:
    """Account-level KPIs across both reports and the cost ledger.

    Profit figures only include Business Report rows whose SKU has a
    complete cost entry (price, fees and COGS all above zero).
    """

    costs = costs or {}
    total_sales = float(sum(r.sales for r in business))
    sessions = int(sum(r.sessions for r in business))
    units = int(sum(r.units_ordered for r in business))
    ppc_sales = float(sum(r.sales for r in search_terms))
    ppc_spend = float(sum(r.spend for r in search_terms))
    impressions = int(sum(r.impressions for r in search_terms))
    clicks = int(sum(r.clicks for r in search_terms))
    orders = int(sum(r.orders for r in search_terms))
    organic = engine.organic_sales(total_sales, ppc_sales)

    profit_before_ads = 0.0
    costed_units = 0
    unit_costs = 0.0
    for record in business:
        entry = costs.get(record.sku)
        if entry is None or not entry.is_complete:
            continue
        profit_before_ads += entry.profit_per_unit * record.units_ordered
        costed_units += record.units_ordered
        unit_costs += (entry.cogs + entry.amazon_fees) * record.units_ordered

    avg_profit = engine.safe_div(profit_before_ads, costed_units)
    conversion_cost = engine.cost_per_conversion(ppc_spend, units)
    net_profit = total_sales - unit_costs - ppc_spend
    return {
        "total_sales": total_sales,
        "ppc_sales": ppc_sales,
        "organic_sales": organic,
        "organic_share_pct": engine.safe_div(organic, total_sales) * 100,
        "organic_units": _round_half_up(units * engine.safe_div(organic, total_sales)),
        "sessions": sessions,
        "units_ordered": units,
        "ppc_spend": ppc_spend,
        "impressions": impressions,
        "clicks": clicks,
        "orders": orders,
        "acos": engine.acos(ppc_spend, ppc_sales),
        "roas": engine.roas(ppc_sales, ppc_spend),
        "ctr": engine.ctr(clicks, impressions),
        "cvr": engine.cvr(orders, clicks),
        "avg_profit_per_unit": avg_profit,
        "cost_per_conversion": conversion_cost,
        "net_profit_per_unit": engine.net_profit_per_unit(avg_profit, conversion_cost),
        "avg_order_value": engine.safe_div(total_sales, units),
        "session_conversion_rate": engine.safe_div(units, sessions) * 100,
        "sessions_per_order": engine.safe_div(sessions, units),
        "revenue_per_session": engine.safe_div(total_sales, sessions),
        "revenue_per_click": engine.safe_div(total_sales, clicks),
        "cost_per_click": engine.safe_div(ppc_spend, clicks),
        "total_unit_costs": unit_costs,
        "net_profit": net_profit,
        "profit_margin_pct": engine.safe_div(net_profit, total_sales) * 100,
        "unique_skus": len({r.sku for r in business}),
        "unique_campaigns": len({r.campaign for r in search_terms}),
        "unique_search_terms": len({r.search_term for r in search_terms}),
    }


def sku_economics_frame(
    business: Sequence[BusinessRecord],
    search_terms: Sequence[SearchTermRecord],
    costs: Optional[Mapping[str, CostEntry]] = None,
) -> pd.DataFrame:
    """Per-SKU sales, proportional PPC allocation and unit profit, highest sales first."""

    costs = costs or {}
    skus = list(dict.fromkeys(r.sku for r in business))
    rows = []
    for sku in skus:
        econ = engine.sku_economics(sku, business, search_terms, costs.get(sku))
        row = dict(econ.__dict__)
        row["badge"] = asin_badge(sku, business)
        rows.append(row)
    columns = list(engine.SkuEconomics.__dataclass_fields__) + ["badge"]
    if not rows:
        return pd.DataFrame(columns=columns)
    out = pd.DataFrame(rows, columns=columns)
    return out.sort_values(["sales", "sku"], ascending=[False, True]).reset_index(drop=True)


def sku_daily_allocation(
    sku: str,
    business: Sequence[BusinessRecord],
    search_terms: Sequence[SearchTermRecord],
) -> pd.DataFrame:
    """Split a SKU's allocated PPC over its days by each day's share of the SKU's sales."""

    econ = engine.sku_economics(sku, business, search_terms)
    df = business_frame([r for r in business if r.sku == sku])
    columns = ["date", "sales", "units_ordered", "sessions", "ppc_sales", "ppc_spend", "acos"]
    if df.empty:
        return pd.DataFrame(columns=columns)
    daily = df.groupby("date", as_index=False)[["sales", "units_ordered", "sessions"]].sum()
    share = _ratio(daily["sales"], pd.Series(econ.sales, index=daily.index))
    daily["ppc_sales"] = econ.allocated_ppc_sales * share
    daily["ppc_spend"] = econ.allocated_ppc_spend * share
    daily["acos"] = _ratio(daily["ppc_spend"], daily["ppc_sales"], 100.0)
    return daily[columns].sort_values("date").reset_index(drop=True)


def organic_products(
    business: Sequence[BusinessRecord],
    search_terms: Sequence[SearchTermRecord],
    top_n: Optional[int] = 10,
) -> pd.DataFrame:
    """Organic sales per SKU, netting each row against PPC sales of the same date.

    Units are scaled by the row's organic fraction and rounded per row.
    """

    columns = ["sku", "product_name", "organic_sales", "organic_units", "sessions", "cvr"]
    if not business:
        return pd.DataFrame(columns=columns)
    ppc_by_date: Dict[str, float] = {}
    for r in search_terms:
        ppc_by_date[r.date] = ppc_by_date.get(r.date, 0.0) + r.sales

    products: Dict[str, Dict[str, object]] = {}
    for r in business:
        organic = engine.organic_sales(r.sales, ppc_by_date.get(r.date, 0.0))
        fraction = engine.safe_div(organic, r.sales)
        item = products.setdefault(
            r.sku,
            {"sku": r.sku, "product_name": r.title or r.sku, "organic_sales": 0.0, "organic_units": 0, "sessions": 0},
        )
        if item["product_name"] == r.sku and r.title:
            item["product_name"] = r.title
        item["organic_sales"] += organic
        item["organic_units"] += _round_half_up(r.units_ordered * fraction)
        item["sessions"] += r.sessions

    out = pd.DataFrame(list(products.values()))
    out["cvr"] = _ratio(out["organic_units"], out["sessions"], 100.0)
    out = out.sort_values(["organic_sales", "sku"], ascending=[False, True]).reset_index(drop=True)
    if top_n is not None:
        out = out.head(top_n)
    return out[columns]
