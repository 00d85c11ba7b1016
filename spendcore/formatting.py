from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

Number = Union[Decimal, float, int]


def round_half_up(value: Optional[Number], ndigits: int = 0) -> Optional[Decimal]:
    if value is None:
        return None
    q = Decimal(10) ** -ndigits
    return Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP)


def format_amount(value: Number) -> str:
    """``1234.5`` -> ``1,234.50``."""
    return f"{round_half_up(value, 2):,.2f}"


def format_currency(value: Number, symbol: str, *, sep: str = "") -> str:
    return f"{symbol}{sep}{format_amount(value)}"


def format_percent(value: Number) -> str:
    return f"{round_half_up(value, 0):.0f}%"


def format_time(occurred_at: Optional[datetime]) -> str:
    """``10 Mar • 09:05``."""
    if occurred_at is None:
        return "Invalid Date"
    return f"{occurred_at.day} {occurred_at.strftime('%b')} • {occurred_at:%H:%M}"
