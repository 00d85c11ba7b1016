from __future__ import annotations

import math
from dataclasses import asdict
from typing import Any, Dict, Optional

import pandas as pd

from spendcore.config import DashboardConfig
from spendcore.errors import DashboardError
from spendcore.filters import LedgerFilters
from spendcore.formatting import format_currency

EMPTY_MESSAGE = "No entries found for the selected filters."
ERROR_MESSAGE = "Error loading data. Please check your sheet URL and permissions."


def _row(rec: Dict[str, Any], symbol: str) -> Dict[str, Any]:
    occurred_at = rec.get("occurred_at")
    amount = rec.get("amount")
    has_amount = amount is not None and not pd.isna(amount)
    return {
        "timestamp": rec.get("timestamp"),
        "date": occurred_at.date().isoformat() if occurred_at is not None and not pd.isna(occurred_at) else None,
        "name": rec.get("name"),
        "category": rec.get("category"),
        "kind": rec.get("kind"),
        "amount": format_currency(amount if has_amount else 0, symbol),
    }


def compute_ledger(config: DashboardConfig, ctx: Dict[str, Any]) -> Dict[str, Any]:
    """Paginated, filtered ledger table. Totals cover every filtered row, not only the page."""
    filters: LedgerFilters = ctx["filters"]
    df: pd.DataFrame = ctx.get("filtered_frame", pd.DataFrame())
    symbol = config.currency_symbol

    count = int(len(df))
    income = float(df.loc[df["kind"] == "income", "amount"].sum()) if count else 0.0
    expense = float(df.loc[df["kind"] == "expense", "amount"].sum()) if count else 0.0

    total_pages = max(1, math.ceil(count / filters.rows_per_page))
    page = min(filters.page, total_pages)
    start = (page - 1) * filters.rows_per_page
    page_df = df.iloc[start : start + filters.rows_per_page]

    return {
        "filters": asdict(filters),
        "summary": {
            "entries": count,
            "total_income": format_currency(income, symbol),
            "total_expenses": format_currency(expense, symbol),
        },
        "rows": [_row(rec, symbol) for rec in page_df.to_dict(orient="records")],
        "pagination": {
            "current_page": page,
            "total_pages": total_pages,
            "has_prev": page > 1,
            "has_next": page < total_pages,
        },
        "placeholder": None if count else EMPTY_MESSAGE,
        "error": None,
    }


def ledger_error(exc: Optional[DashboardError] = None) -> Dict[str, Any]:
    return {
        "summary": {"entries": "N/A", "total_income": "N/A", "total_expenses": "N/A"},
        "rows": [],
        "placeholder": ERROR_MESSAGE,
        "error": str(exc) if exc is not None else ERROR_MESSAGE,
        "type": type(exc).__name__ if exc is not None else None,
    }
