from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from spendcore.charts import (
    DONUT_RADIUS,
    circumference,
    donut_chart,
    donut_segments,
    legend_items,
    limit_ring,
    to_vega_spec,
)
from spendcore.colors import CategoryColors
from spendcore.config import ALERT_COLOR, MISC_CATEGORY, OK_COLOR, DashboardConfig
from spendcore.errors import DashboardError
from spendcore.formatting import format_currency
from spendcore.models import CategoryAggregate, MonthlySummary, Transaction

ERROR_VALUE = "Error"
ERROR_MESSAGE = "Error loading data."
NO_BILLS_MESSAGE = "No pending bills."


def aggregate(
    transactions: Iterable[Transaction],
    now: datetime,
    income_categories: Iterable[str],
) -> MonthlySummary:
    """Sum the current month's income and expenses and bucket expenses by category.

    Rows outside ``now``'s month, with an unparseable date, or with an amount
    that is not a positive number are left out entirely.
    """
    income = set(income_categories)
    total_income = Decimal(0)
    total_expense = Decimal(0)
    buckets: Dict[str, Decimal] = {}

    for t in transactions:
        if not t.in_month_of(now) or t.value is None:
            continue
        if t.category in income:
            total_income += t.value
            continue
        total_expense += t.value
        category = t.category or MISC_CATEGORY
        buckets[category] = buckets.get(category, Decimal(0)) + t.value

    # dict keeps first-seen order and sorted() is stable, so ties keep it too
    ordered = sorted(buckets.items(), key=lambda kv: kv[1], reverse=True)
    return MonthlySummary(
        total_income=total_income,
        total_expense=total_expense,
        categories=tuple(CategoryAggregate(category=c, total=v) for c, v in ordered),
    )


def _pending_bills(config: DashboardConfig) -> Dict[str, Any]:
    items = [
        {"due_day": b.due_day, "name": b.name, "amount": format_currency(b.amount, config.currency_symbol)}
        for b in config.pending_bills
    ]
    return {"items": items, "placeholder": None if items else NO_BILLS_MESSAGE}


def compute_dashboard(config: DashboardConfig, ctx: Dict[str, Any], now: datetime) -> Dict[str, Any]:
    transactions: List[Transaction] = ctx.get("transactions", []) or []
    summary = aggregate(transactions, now, config.income_categories)
    colors = CategoryColors(config.dashboard_palette)
    symbol = config.currency_symbol

    segments = donut_segments(summary.categories, summary.total_expense, colors.color_of)
    chart = donut_chart(segments)
    remaining = summary.remaining

    return {
        "generated_at": now.isoformat(),
        "month": now.strftime("%B %Y"),
        "summary": {
            "total_income": format_currency(summary.total_income, symbol),
            "total_expense": format_currency(summary.total_expense, symbol),
            "remaining": format_currency(remaining, symbol),
            "remaining_negative": remaining < 0,
            "remaining_color": ALERT_COLOR if remaining < 0 else OK_COLOR,
        },
        "totals": {
            "total_income": summary.total_income,
            "total_expense": summary.total_expense,
            "remaining": remaining,
        },
        "categories": [
            {"category": c.category, "total": c.total, "color": colors.color_of(c.category)}
            for c in summary.categories
        ],
        "chart": {
            "total_expense": format_currency(summary.total_expense, symbol),
            "radius": DONUT_RADIUS,
            "circumference": circumference(DONUT_RADIUS),
            "segments": [
                {
                    "category": s.category,
                    "color": s.color,
                    "percentage": s.percentage,
                    "dasharray": s.dasharray,
                    "offset": s.offset,
                }
                for s in segments
            ],
            "vega_spec": to_vega_spec(chart) if chart is not None else None,
        },
        "legend": legend_items(segments, config.legend_size),
        "limit": {
            **limit_ring(summary.total_expense, config.monthly_limit),
            "spent": format_currency(summary.total_expense, symbol),
            "limit": format_currency(config.monthly_limit, symbol),
        },
        "pending_bills": _pending_bills(config),
        "error": None,
    }


def dashboard_error(exc: Optional[DashboardError] = None) -> Dict[str, Any]:
    """Placeholder render model that replaces the dashboard on a user-visible failure."""
    return {
        "summary": {
            "total_income": ERROR_VALUE,
            "total_expense": ERROR_VALUE,
            "remaining": ERROR_VALUE,
            "remaining_negative": False,
            "remaining_color": None,
        },
        "pending_bills": {"items": [], "placeholder": ERROR_MESSAGE},
        "error": str(exc) if exc is not None else ERROR_MESSAGE,
        "type": type(exc).__name__ if exc is not None else None,
    }
