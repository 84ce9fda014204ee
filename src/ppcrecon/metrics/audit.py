"""PPC audit: flag search terms that waste spend or run above the ACoS target."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np
import pandas as pd

from ..standards.schemas import SearchTermRecord
from .aggregations import campaign_summary, search_term_summary


LOGGER = logging.getLogger("ppcrecon.metrics.audit")

DEFAULT_ACOS_THRESHOLD = 25.0
DEFAULT_SPEND_THRESHOLD = 100.0

STATUS_WASTED = "Wasted Spend"
STATUS_HIGH_ACOS = "High ACoS"
STATUS_GOOD = "Good"


@dataclass
class AuditResult:
    terms: pd.DataFrame
    high_acos: pd.DataFrame
    zero_sales: pd.DataFrame
    high_spend: pd.DataFrame
    campaigns: pd.DataFrame
    wasted_spend: float
    acos_threshold: float
    spend_threshold: float

    def summary(self) -> dict:
        return {
            "terms": int(len(self.terms)),
            "high_acos_terms": int(len(self.high_acos)),
            "zero_sale_terms": int(len(self.zero_sales)),
            "high_spend_terms": int(len(self.high_spend)),
            "wasted_spend": self.wasted_spend,
        }


def label_status(df: pd.DataFrame, acos_threshold: float) -> pd.Series:
    """Wasted Spend beats High ACoS; everything else is Good."""

    wasted = (df["sales"] <= 0) & (df["spend"] > 0)
    high = (df["sales"] > 0) & (df["acos"] > acos_threshold)
    values = np.select([wasted, high], [STATUS_WASTED, STATUS_HIGH_ACOS], default=STATUS_GOOD)
    return pd.Series(values, index=df.index, dtype=object)


def run_ppc_audit(
    search_terms: Sequence[SearchTermRecord],
    acos_threshold: float = DEFAULT_ACOS_THRESHOLD,
    spend_threshold: float = DEFAULT_SPEND_THRESHOLD,
) -> AuditResult:
    if acos_threshold < 0 or spend_threshold < 0:
        raise ValueError("Audit thresholds must be non-negative")

    terms = search_term_summary(search_terms)
    terms["status"] = label_status(terms, acos_threshold) if not terms.empty else pd.Series(dtype=object)

    high_acos = terms.loc[(terms["sales"] > 0) & (terms["acos"] > acos_threshold)]
    zero_sales = terms.loc[(terms["sales"] <= 0) & (terms["spend"] > 0)]
    high_spend = terms.loc[terms["spend"] >= spend_threshold]
    wasted = float(zero_sales["spend"].sum()) if not zero_sales.empty else 0.0

    LOGGER.info(
        "PPC audit: %d term(s), %d high ACoS, %d zero-sale, wasted spend %.2f",
        len(terms),
        len(high_acos),
        len(zero_sales),
        wasted,
    )
    return AuditResult(
        terms=terms,
        high_acos=high_acos.sort_values("acos", ascending=False).reset_index(drop=True),
        zero_sales=zero_sales.sort_values("spend", ascending=False).reset_index(drop=True),
        high_spend=high_spend.sort_values("spend", ascending=False).reset_index(drop=True),
        campaigns=campaign_summary(search_terms),
        wasted_spend=wasted,
        acos_threshold=float(acos_threshold),
        spend_threshold=float(spend_threshold),
    )
