"""
asset_frontend/asset_views.py

Pure helpers behind the assets table, detail view and dashboard. Everything
here works on already-loaded Asset objects; nothing calls the backend.
"""

from __future__ import annotations

from collections import Counter
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Literal, Optional, Sequence, Tuple

import pandas as pd

from asset_frontend.formatters import format_currency, format_date
from domains.assets.models.asset import Asset, AssetStatus, ConditionStatus

SortField = Literal[
    "name", "category", "purchase_date", "purchase_price", "location", "asset_status", "condition_status"
]
SortDirection = Literal["asc", "desc"]

SORT_FIELDS: Tuple[str, ...] = (
    "name", "category", "location", "purchase_price", "condition_status", "asset_status", "purchase_date"
)

WARRANTY_WARNING_DAYS = 30
RECENT_ASSETS_LIMIT = 5


def _sort_value(asset: Asset, field: str) -> Any:
    if field == "category":
        return asset.category.name if asset.category else ""
    value = getattr(asset, field)
    # Enums compare on their stored value
    return getattr(value, "value", value)


def sort_assets(assets: Iterable[Asset], field: SortField = "name",
                direction: SortDirection = "asc") -> List[Asset]:
    """
    Sort for the table header. Values compare as lower-cased strings; missing
    values go last when ascending and first when descending.
    """
    if field not in SORT_FIELDS:
        raise ValueError(f"Unsupported sort field: {field}")

    present, missing = [], []
    for asset in assets:
        (missing if _sort_value(asset, field) is None else present).append(asset)

    present.sort(key=lambda a: str(_sort_value(a, field)).lower(), reverse=(direction == "desc"))
    return present + missing if direction == "asc" else missing + present


def next_sort(current_field: str, current_direction: SortDirection, clicked: str) -> Tuple[str, SortDirection]:
    """Clicking the active column flips direction; a new column starts ascending."""
    if clicked == current_field:
        return clicked, ("desc" if current_direction == "asc" else "asc")
    return clicked, "asc"


def warranty_state(end_date: Optional[date], today: Optional[date] = None) -> Optional[str]:
    """"expired", "expiring" (within 30 days), "valid", or None without an end date."""
    if end_date is None:
        return None
    today = today or date.today()
    if end_date < today:
        return "expired"
    if end_date <= today + timedelta(days=WARRANTY_WARNING_DAYS):
        return "expiring"
    return "valid"


def summarize_assets(assets: Sequence[Asset], today: Optional[date] = None) -> Dict[str, Any]:
    """Dashboard figures for the loaded asset list."""
    today = today or date.today()
    status_counts = Counter(a.asset_status for a in assets)
    condition_counts = Counter(a.condition_status for a in assets)

    return {
        "total": len(assets),
        "by_status": {s.value: status_counts.get(s, 0) for s in AssetStatus},
        "by_condition": {c.value: condition_counts.get(c, 0) for c in ConditionStatus},
        "total_value": sum(a.purchase_price or 0 for a in assets),
        "warranties_expiring": [
            a for a in assets if warranty_state(a.warranty_end_date, today) == "expiring"
        ],
        "recent": sorted(assets, key=lambda a: a.created_at, reverse=True)[:RECENT_ASSETS_LIMIT],
    }


def assets_dataframe(assets: Sequence[Asset]) -> pd.DataFrame:
    """Display rows for st.dataframe, in the order given."""
    rows = [
        {
            "Name": a.name,
            "Category": a.category_name,
            "Location": a.location.value,
            "Price": format_currency(a.purchase_price) if a.purchase_price is not None else "",
            "Condition": a.condition_status.label,
            "Status": a.asset_status.label,
            "Purchase Date": format_date(a.purchase_date) if a.purchase_date else "",
        }
        for a in assets
    ]
    return pd.DataFrame(rows, columns=["Name", "Category", "Location", "Price", "Condition", "Status", "Purchase Date"])
