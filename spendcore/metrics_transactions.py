from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

from spendcore.colors import CategoryColors
from spendcore.config import DEFAULT_COLOR_KEY, DashboardConfig, GroupOrder
from spendcore.errors import DashboardError
from spendcore.formatting import format_currency, format_time
from spendcore.models import DateGroup, Transaction

TODAY = "Today"
YESTERDAY = "Yesterday"
OTHER = "Other"
EMPTY_MESSAGE = "No transactions found."
ERROR_PREFIX = "Failed to load transactions."


def relative_group(occurred_at: Optional[datetime], now: datetime) -> str:
    if occurred_at is None:
        return OTHER
    day = occurred_at.date()
    today = now.date()
    if day == today:
        return TODAY
    if day == today - timedelta(days=1):
        return YESTERDAY
    month = occurred_at.strftime("%b")
    if day.year == today.year:
        return f"{day.day} {month}"
    return f"{day.day} {month} {day.year}"


def _newest_first(transactions: Iterable[Transaction]) -> List[Transaction]:
    dated = [t for t in transactions if t.occurred_at is not None]
    undated = [t for t in transactions if t.occurred_at is None]
    return sorted(dated, key=lambda t: t.occurred_at, reverse=True) + undated


def group_transactions(
    transactions: Iterable[Transaction],
    now: datetime,
    order: GroupOrder = GroupOrder.DATE_DESC,
) -> List[DateGroup]:
    """Cluster transactions under relative date labels.

    Today and Yesterday always lead. ``FIRST_SEEN`` keeps the remaining groups
    in the order they first appear; ``DATE_DESC`` sorts transactions newest
    first and the remaining groups by day descending, with "Other" last.
    """
    items = list(transactions)
    if order is GroupOrder.DATE_DESC:
        items = _newest_first(items)

    buckets: Dict[str, List[Transaction]] = {}
    days: Dict[str, Optional[date]] = {}
    for t in items:
        label = relative_group(t.occurred_at, now)
        buckets.setdefault(label, []).append(t)
        days.setdefault(label, t.occurred_at.date() if t.occurred_at is not None else None)

    leading = [label for label in (TODAY, YESTERDAY) if label in buckets]
    rest = [label for label in buckets if label not in (TODAY, YESTERDAY)]
    if order is GroupOrder.DATE_DESC:
        rest.sort(key=lambda label: (days[label] is None, -(days[label] or date.min).toordinal()))

    return [DateGroup(label=label, day=days[label], transactions=tuple(buckets[label])) for label in leading + rest]


def format_item(transaction: Transaction, colors: CategoryColors, symbol: str) -> Dict[str, str]:
    amount = format_currency(transaction.value, symbol, sep=" ") if transaction.value is not None else f"{symbol} N/A"
    return {
        "name": transaction.name or "N/A",
        "time": format_time(transaction.occurred_at),
        "amount": amount,
        "color": colors.color_of(transaction.category or DEFAULT_COLOR_KEY),
    }


def compute_transaction_list(config: DashboardConfig, ctx: Dict[str, Any], now: datetime) -> Dict[str, Any]:
    transactions: List[Transaction] = ctx.get("transactions", []) or []
    colors = CategoryColors(config.transactions_palette)
    groups = group_transactions(transactions, now, config.group_order)
    return {
        "generated_at": now.isoformat(),
        "count": len(transactions),
        "groups": [
            {
                "label": g.label,
                "transactions": [format_item(t, colors, config.currency_symbol) for t in g.transactions],
            }
            for g in groups
        ],
        "placeholder": None if groups else EMPTY_MESSAGE,
        "error": None,
    }


def transaction_list_error(exc: Optional[DashboardError] = None) -> Dict[str, Any]:
    message = f"{ERROR_PREFIX} {exc}" if exc is not None else ERROR_PREFIX
    return {
        "groups": [],
        "placeholder": message,
        "error": str(exc) if exc is not None else ERROR_PREFIX,
        "type": type(exc).__name__ if exc is not None else None,
    }
