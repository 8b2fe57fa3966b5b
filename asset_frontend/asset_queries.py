"""
asset_frontend/asset_queries.py

Pure helpers the asset store uses before talking to the backend:
- build_asset_query(): filter set -> PostgREST query parameters
- asset_matches_filters(): the same predicates evaluated on a loaded Asset
- sanitize_date_fields(): "" date values -> None so the column is cleared

None of these touch the network.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Tuple

from domains.assets.models.asset import Asset
from domains.assets.models.payloads import DATE_FIELDS, AssetFilters

ASSET_SELECT = "*,category:asset_categories(*)"
NEWEST_FIRST = "created_at.desc"
SEARCH_COLUMNS = ("name", "description", "serial_number")

QueryParams = List[Tuple[str, str]]


LIKE_SPECIALS = ("\\", "%", "_", "*")


def _escape_like(term: str) -> str:
    """Backslash-escape LIKE wildcards so the term matches literally."""
    for char in LIKE_SPECIALS:
        term = term.replace(char, "\\" + char)
    return term


def _quote(term: str) -> str:
    """Double-quote a PostgREST value so commas and parentheses stay literal."""
    escaped = term.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def search_expression(term: str) -> str:
    """OR of case-insensitive substring matches across the searchable columns."""
    pattern = _quote(f"*{_escape_like(term)}*")
    return "(" + ",".join(f"{column}.ilike.{pattern}" for column in SEARCH_COLUMNS) + ")"


def build_asset_query(filters: Optional[AssetFilters] = None) -> QueryParams:
    """
    Translate a filter set into PostgREST query parameters.

    Each populated filter adds one predicate and PostgREST ANDs them.
    Search is a single `or=` group across name, description and serial number.
    An empty or missing filter set only selects and orders (match all).

    Returns:
        List of (key, value) pairs; purchase_date may appear twice (lower and upper bound)
    """
    params: QueryParams = [("select", ASSET_SELECT), ("order", NEWEST_FIRST)]
    if filters is None:
        return params

    if filters.search:
        params.append(("or", search_expression(filters.search)))
    if filters.category:
        params.append(("category_id", f"eq.{filters.category}"))
    if filters.status is not None:
        params.append(("asset_status", f"eq.{filters.status.value}"))
    if filters.condition is not None:
        params.append(("condition_status", f"eq.{filters.condition.value}"))
    if filters.location is not None:
        params.append(("location", f"eq.{filters.location.value}"))
    if filters.date_from is not None:
        params.append(("purchase_date", f"gte.{filters.date_from.isoformat()}"))
    if filters.date_to is not None:
        params.append(("purchase_date", f"lte.{filters.date_to.isoformat()}"))

    return params


def asset_matches_filters(asset: Asset, filters: Optional[AssetFilters] = None) -> bool:
    """In-memory equivalent of build_asset_query's predicates."""
    if filters is None:
        return True

    if filters.search:
        needle = filters.search.lower()
        haystacks = (asset.name, asset.description, asset.serial_number)
        if not any(h and needle in h.lower() for h in haystacks):
            return False
    if filters.category and asset.category_id != filters.category:
        return False
    if filters.status is not None and asset.asset_status != filters.status:
        return False
    if filters.condition is not None and asset.condition_status != filters.condition:
        return False
    if filters.location is not None and asset.location != filters.location:
        return False
    # SQL comparisons against NULL are never true
    if filters.date_from is not None:
        if asset.purchase_date is None or asset.purchase_date < filters.date_from:
            return False
    if filters.date_to is not None:
        if asset.purchase_date is None or asset.purchase_date > filters.date_to:
            return False
    return True


def sanitize_date_fields(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Return a copy of payload with empty-string dates replaced by None.

    An empty string is not a valid date and the store would reject it; None
    is sent as JSON null so the column is cleared. Absent fields stay absent
    and every other field passes through unchanged.
    """
    sanitized = dict(payload)
    for field in DATE_FIELDS:
        if field in sanitized and sanitized[field] == "":
            sanitized[field] = None
    return sanitized
