"""Canonical record types and header resolution."""

from .schemas import BusinessRecord, CostEntry, MissingColumnsError, ParseResult, SearchTermRecord

__all__ = ["BusinessRecord", "CostEntry", "MissingColumnsError", "ParseResult", "SearchTermRecord"]
