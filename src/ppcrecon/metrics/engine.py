"""Deterministic metric calculations: identical inputs always give identical outputs.

Every function is total. A zero denominator yields 0.0, which reads as
"no activity" rather than an error.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from ..standards.schemas import BusinessRecord, CostEntry, SearchTermRecord


def safe_div(numerator: float, denominator: float) -> float:
    if denominator == 0:
        return 0.0
    return float(numerator) / float(denominator)


def organic_sales(total_sales: float, ppc_sales: float) -> float:
    """Sales not attributed to ads, clipped at 0."""
    return max(0.0, float(total_sales) - float(ppc_sales))


def acos(spend: float, sales: float) -> float:
    """Advertising cost of sales, in percent."""
    return safe_div(spend, sales) * 100 if sales > 0 else 0.0


def roas(sales: float, spend: float) -> float:
    return safe_div(sales, spend) if spend > 0 else 0.0


def ctr(clicks: float, impressions: float) -> float:
    return safe_div(clicks, impressions) * 100 if impressions > 0 else 0.0


def cvr(orders: float, clicks: float) -> float:
    return safe_div(orders, clicks) * 100 if clicks > 0 else 0.0


def sku_sales_share(sku_sales: float, all_sku_sales: float) -> float:
    return safe_div(sku_sales, all_sku_sales) if all_sku_sales > 0 else 0.0


def profit_per_unit(sale_price: float, amazon_fees: float, cogs: float) -> float:
    return float(sale_price) - float(amazon_fees) - float(cogs)


def cost_per_conversion(allocated_ppc_spend: float, units_ordered: float) -> float:
    return safe_div(allocated_ppc_spend, units_ordered) if units_ordered > 0 else 0.0


def net_profit_per_unit(unit_profit: float, conversion_cost: float) -> float:
    return float(unit_profit) - float(conversion_cost)


@dataclass(frozen=True)
class PpcAllocation:
    """PPC activity attributed to one SKU by its share of total revenue.

    Search Term rows have no SKU, so this is a proportional estimate:
    it assumes a SKU's share of ad activity equals its share of sales.
    """

    share: float
    ppc_sales: float
    ppc_spend: float


def allocate_ppc(
    sku_sales: float,
    all_sku_sales: float,
    total_ppc_sales: float,
    total_ppc_spend: float,
) -> PpcAllocation:
    share = sku_sales_share(sku_sales, all_sku_sales)
    return PpcAllocation(
        share=share,
        ppc_sales=float(total_ppc_sales) * share,
        ppc_spend=float(total_ppc_spend) * share,
    )


@dataclass(frozen=True)
class SkuEconomics:
    sku: str
    sales: float
    units_ordered: int
    sessions: int
    sales_share: float
    allocated_ppc_sales: float
    allocated_ppc_spend: float
    acos: float
    profit_per_unit: float
    cost_per_conversion: float
    net_profit_per_unit: float


def sku_economics(
    sku: str,
    business: Iterable[BusinessRecord],
    search_terms: Iterable[SearchTermRecord],
    cost: Optional[CostEntry] = None,
) -> SkuEconomics:
    """Unit economics for ``sku`` over the given record collections.

    A SKU without a cost entry has a profit per unit of 0.
    """

    business = list(business)
    search_terms = list(search_terms)
    own = [r for r in business if r.sku == sku]
    sales = sum(r.sales for r in own)
    units = sum(r.units_ordered for r in own)
    allocation = allocate_ppc(
        sales,
        sum(r.sales for r in business),
        sum(r.sales for r in search_terms),
        sum(r.spend for r in search_terms),
    )
    unit_profit = cost.profit_per_unit if cost is not None else 0.0
    conversion_cost = cost_per_conversion(allocation.ppc_spend, units)
    return SkuEconomics(
        sku=sku,
        sales=sales,
        units_ordered=units,
        sessions=sum(r.sessions for r in own),
        sales_share=allocation.share,
        allocated_ppc_sales=allocation.ppc_sales,
        allocated_ppc_spend=allocation.ppc_spend,
        acos=acos(allocation.ppc_spend, allocation.ppc_sales),
        profit_per_unit=unit_profit,
        cost_per_conversion=conversion_cost,
        net_profit_per_unit=net_profit_per_unit(unit_profit, conversion_cost),
    )
