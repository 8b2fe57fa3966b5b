# asset_frontend/formatters.py
# Display formatting for the en-ZA locale (ZAR currency, "15 Jan 2024" dates)

from __future__ import annotations

import math
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

PLACEHOLDER = "n/a"
CURRENCY_SYMBOL = "R"

# Fixed table so output does not depend on the process locale
_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

DateLike = Union[str, date, datetime, None]


def _is_missing(value) -> bool:
    return value is None or (isinstance(value, float) and not math.isfinite(value))


def _parse(value: DateLike) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def format_currency(amount: Optional[float]) -> str:
    """1234.5 -> "R1,234.50"; negatives as "-R12.00"."""
    if _is_missing(amount):
        return PLACEHOLDER
    # Halves round away from zero
    cents = Decimal(str(abs(amount))).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if amount < 0 and cents else ""
    return f"{sign}{CURRENCY_SYMBOL}{cents:,.2f}"


def format_date(value: DateLike) -> str:
    """"2024-01-15" -> "15 Jan 2024"."""
    parsed = _parse(value)
    if parsed is None:
        return PLACEHOLDER
    return f"{parsed.day} {_MONTHS[parsed.month - 1]} {parsed.year}"


def format_datetime(value: DateLike) -> str:
    """"2024-01-15T14:30:00Z" -> "15 Jan 2024, 14:30" (wall-clock time as stored)."""
    parsed = _parse(value)
    if parsed is None:
        return PLACEHOLDER
    return f"{format_date(parsed)}, {parsed:%H:%M}"


def format_number(num: Optional[float]) -> str:
    """1234567 -> "1,234,567"; fractions keep up to three decimals."""
    if _is_missing(num):
        return PLACEHOLDER
    if float(num).is_integer():
        return f"{int(num):,}"
    return f"{num:,.3f}".rstrip("0").rstrip(".")
