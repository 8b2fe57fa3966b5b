# asset_frontend/exports.py
# CSV export of the currently loaded asset list

from __future__ import annotations

import csv
from datetime import date
from typing import Iterable, List, Optional

import pandas as pd

from domains.assets.models.asset import Asset

CSV_COLUMNS = [
    "Name",
    "Category",
    "Serial Number",
    "Brand",
    "Model",
    "Location",
    "Status",
    "Condition",
    "Purchase Date",
    "Purchase Price",
    "Supplier",
]


def _price_text(price: Optional[float]) -> str:
    if price is None:
        return ""
    return str(int(price)) if float(price).is_integer() else str(price)


def _row(asset: Asset) -> List[str]:
    return [
        asset.name,
        asset.category.name if asset.category else "",
        asset.serial_number or "",
        asset.brand or "",
        asset.model or "",
        asset.location.value,
        asset.asset_status.value,
        asset.condition_status.value,
        asset.purchase_date.isoformat() if asset.purchase_date else "",
        _price_text(asset.purchase_price),
        asset.supplier_vendor or "",
    ]


def build_assets_csv(assets: Iterable[Asset]) -> str:
    """
    Header row unquoted, then one row per asset with every value in double
    quotes (embedded quotes doubled). Missing values export as "".
    """
    df = pd.DataFrame([_row(a) for a in assets], columns=CSV_COLUMNS, dtype=str)
    header = ",".join(CSV_COLUMNS) + "\n"
    if df.empty:
        return header
    body = df.to_csv(index=False, header=False, quoting=csv.QUOTE_ALL, lineterminator="\n")
    return header + body


def export_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"assets-{today.isoformat()}.csv"
