"""
ppcrecon: reconcile Amazon Business Reports with Search Term Reports.

Parses both exports into canonical records, aligns their dates and derives
organic/PPC sales split, ACoS/ROAS and per-SKU unit economics.
"""

from .session import ReportSession, SessionContext

__all__ = ["ReportSession", "SessionContext"]
