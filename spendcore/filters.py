from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional, Tuple

DEFAULT_ROWS_PER_PAGE = 10
KINDS = ("income", "expense")

QUICK_RANGES = {
    "last7Days": 7,
    "last30Days": 30,
    "last90Days": 90,
    "allTime": None,
}


@dataclass(frozen=True)
class LedgerFilters:
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    category_query: str = ""
    kind: str = ""
    page: int = 1
    rows_per_page: int = DEFAULT_ROWS_PER_PAGE


def _as_date(value: object) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None


def _as_int(value: object, default: int) -> int:
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default


def quick_range(label: str, today: date) -> Tuple[Optional[date], date]:
    """Date bounds for the quick buttons: ``(today - N days, today)``; all time has no start."""
    if label not in QUICK_RANGES:
        raise ValueError(f"Unknown quick range: {label!r}")
    days = QUICK_RANGES[label]
    start = today - timedelta(days=days) if days is not None else None
    return start, today


def normalize_filters(raw: Optional[dict], *, today: Optional[date] = None) -> LedgerFilters:
    raw = raw or {}

    start_date = _as_date(raw.get("start_date"))
    end_date = _as_date(raw.get("end_date"))
    quick = raw.get("quick_range")
    if quick in QUICK_RANGES:
        start_date, end_date = quick_range(quick, today or date.today())

    category_query = str(raw.get("category_query") or "").strip()
    kind = str(raw.get("kind") or "").strip().lower()
    if kind not in KINDS:
        kind = ""

    page = max(1, _as_int(raw.get("page", 1), 1))
    rows_per_page = _as_int(raw.get("rows_per_page", DEFAULT_ROWS_PER_PAGE), DEFAULT_ROWS_PER_PAGE)
    rows_per_page = max(1, min(100, rows_per_page))

    return LedgerFilters(
        start_date=start_date,
        end_date=end_date,
        category_query=category_query,
        kind=kind,
        page=page,
        rows_per_page=rows_per_page,
    )
