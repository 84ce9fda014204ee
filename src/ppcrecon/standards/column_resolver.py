"""Header resolution: map free-form report headers onto canonical fields.

Capabilities:
- Header normalization (case-insensitive, whitespace collapsed)
- Two-way substring matching against ordered synonym lists
- Per-field fallback tokens for unanticipated header variants
- Looser token scanning used by the Search Term Report
"""
from __future__ import annotations

import re
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

import pandas as pd

from .schemas import MissingColumnsError


_WS = re.compile(r"\s+")

BUSINESS_REPORT_SYNONYMS: Dict[str, List[str]] = {
    "sku": ["sku", "asin", "child asin"],
    "parent_asin": ["parent asin", "parent"],
    "title": ["title", "product name", "product title", "name"],
    "sessions": ["sessions", "sessions - total", "session count", "total sessions"],
    "units_ordered": ["units ordered", "units sold", "quantity sold", "ordered units"],
    "sales": ["sales", "ordered product sales", "revenue", "total sales", "product sales"],
    "conversion_rate": [
        "conversion rate",
        "unit session percentage",
        "cvr",
        "conversion %",
        "unit session %",
    ],
}

BUSINESS_REPORT_OPTIONAL = frozenset({"parent_asin", "title"})

# Last-resort substring per field when no synonym matched.
BUSINESS_REPORT_FALLBACKS: Dict[str, str] = {"sales": "sales"}

SEARCH_TERM_TOKENS: Dict[str, List[str]] = {
    "date": ["date"],
    "campaign": ["campaign"],
    "ad_group": ["ad group", "adgroup"],
    "search_term": ["search term", "keyword"],
    "match_type": ["match type", "match"],
    "impressions": ["impressions", "impr"],
    "clicks": ["clicks"],
    "spend": ["spend", "cost"],
    "sales": ["sales", "revenue"],
    "orders": ["orders", "conversions"],
}


def normalize_header(text: object) -> str:
    """Lowercase, strip and collapse inner whitespace. NaN/None become ''."""

    if text is None:
        return ""
    try:
        if pd.isna(text):
            return ""
    except (TypeError, ValueError):
        pass
    return _WS.sub(" ", str(text).strip().lower())


def header_matches(header: str, synonym: str) -> bool:
    """True when either normalized string contains the other."""

    h = normalize_header(header)
    s = normalize_header(synonym)
    if not h or not s:
        return False
    return s in h or h in s


def resolve_column(
    headers: Sequence[object],
    synonyms: Iterable[str],
    fallback_token: Optional[str] = None,
    one_way: Iterable[object] = (),
) -> Optional[str]:
    """Return the observed header that best matches ``synonyms``, else None.

    Synonyms are tried in order; for each, headers are scanned left to right
    and the first match wins. Headers listed in ``one_way`` only match when
    they contain the synonym. ``fallback_token`` is a plain substring checked
    only after every synonym failed.
    """

    one_way = set(one_way)
    observed = [h for h in headers if normalize_header(h)]
    for syn in synonyms:
        for header in observed:
            if header in one_way:
                s = normalize_header(syn)
                if s and s in normalize_header(header):
                    return header
            elif header_matches(header, syn):
                return header
    if fallback_token:
        token = normalize_header(fallback_token)
        for header in observed:
            if token in normalize_header(header):
                return header
    return None


def resolve_columns(
    headers: Sequence[object],
    synonym_map: Mapping[str, Sequence[str]],
    optional: Iterable[str] = (),
    fallbacks: Optional[Mapping[str, str]] = None,
) -> Dict[str, object]:
    """Resolve every canonical field in ``synonym_map``.

    Required fields are resolved independently in mapping order, so one
    header may satisfy several of them. A header already claimed by a
    required field only satisfies an optional field when it contains the
    synonym, so "ASIN" is never its own parent ASIN while "(Parent) ASIN"
    can be both the SKU and the parent ASIN.
    Unresolved required fields are collected and raised together as
    :class:`MissingColumnsError`.
    """

    optional = set(optional)
    fallbacks = fallbacks or {}
    resolved: Dict[str, object] = {}
    missing: Dict[str, Sequence[str]] = {}
    for canonical, synonyms in synonym_map.items():
        if canonical in optional:
            continue
        found = resolve_column(headers, synonyms, fallbacks.get(canonical))
        if found is not None:
            resolved[canonical] = found
        else:
            missing[canonical] = list(synonyms)
    if missing:
        raise MissingColumnsError(missing, with_examples=True)

    claimed = set(resolved.values())
    for canonical, synonyms in synonym_map.items():
        if canonical not in optional:
            continue
        found = resolve_column(headers, synonyms, fallbacks.get(canonical), one_way=claimed)
        if found is not None:
            resolved[canonical] = found
    return resolved


def resolve_token_indices(
    headers: Sequence[object],
    token_map: Mapping[str, Sequence[str]],
) -> Dict[str, int]:
    """Map each field to the index of the first header containing one of its tokens.

    Looser than :func:`resolve_columns`: one-way containment only (header
    contains token), tokens scanned in order. All fields are required.
    """

    normalized = [normalize_header(h) for h in headers]
    indices: Dict[str, int] = {}
    missing: Dict[str, Sequence[str]] = {}
    for canonical, tokens in token_map.items():
        idx = -1
        for token in tokens:
            t = normalize_header(token)
            idx = next((i for i, h in enumerate(normalized) if t and t in h), -1)
            if idx != -1:
                break
        if idx == -1:
            missing[canonical] = list(tokens)
        else:
            indices[canonical] = idx
    if missing:
        raise MissingColumnsError(missing, with_examples=False)
    return indices
