from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple


DEFAULT_CSV_URL = (
    "https://docs.google.com/spreadsheets/d/e/"
    "2PACX-1vQgMFbI8pivLbRpc2nL2Gyoxw47PmXEVxvUDrjr-t86gj4-J3QM8uV7m8iJN9wxlYo3IY5FQqqUICei/pub?output=csv"
)
DEFAULT_CURRENCY_SYMBOL = "₱"
DEFAULT_MONTHLY_LIMIT = Decimal("10000")
DEFAULT_INCOME_CATEGORIES = ("Salary", "Bonus", "Gifts Received", "Freelance Income", "Investment Gains")
DEFAULT_LEGEND_SIZE = 4

MISC_CATEGORY = "Miscellaneous"
DEFAULT_COLOR_KEY = "Default"
NEUTRAL_COLOR = "#9CA3AF"
ALERT_COLOR = "#EF4444"
OK_COLOR = "#10B981"


class RowPolicy(str, Enum):
    """Which CSV rows count as records."""

    MATCH_HEADER = "match_header"  # value count must equal header count
    REQUIRED_FIELDS = "required_fields"  # Timestamp/Name/Amount/Category all non-empty


class GroupOrder(str, Enum):
    FIRST_SEEN = "first_seen"
    DATE_DESC = "date_desc"


@dataclass(frozen=True)
class KeywordGroup:
    keywords: Tuple[str, ...]
    color_key: str


@dataclass(frozen=True)
class Palette:
    colors: Dict[str, str] = field(default_factory=dict)
    keyword_groups: List[KeywordGroup] = field(default_factory=list)
    scan_table_keys: bool = True

    @property
    def default_color(self) -> str:
        return self.colors.get(DEFAULT_COLOR_KEY, NEUTRAL_COLOR)


DASHBOARD_PALETTE = Palette(
    colors={
        "Food": "#10B981",
        "Medicines": "#EF4444",
        "Shopping": "#F59E0B",
        "Miscellaneous": "#3B82F6",
        "Bills": "#6366F1",
        "Transport": "#8B5CF6",
        "Default": "#9CA3AF",
    },
    keyword_groups=[
        KeywordGroup(("food", "restaurant"), "Food"),
        KeywordGroup(("medicine", "health", "pharmacy"), "Medicines"),
        KeywordGroup(("shop", "store", "apparel", "market"), "Shopping"),
        KeywordGroup(("bill", "utilities", "rent", "subscription"), "Bills"),
        KeywordGroup(("transport", "gas", "taxi", "commute"), "Transport"),
    ],
    scan_table_keys=True,
)

TRANSACTIONS_PALETTE = Palette(
    colors={
        "Food": "#FF6B6B",
        "Groceries": "#FF6B6B",
        "Cafe": "#4D96FF",
        "Coffee": "#4D96FF",
        "Shopping": "#FFD166",
        "Gifts": "#FFD166",
        "Transport": "#06D6A0",
        "Taxi": "#06D6A0",
        "Bills": "#758BFD",
        "Utilities": "#758BFD",
        "Health": "#FF9671",
        "Medicines": "#FF9671",
        "Entertainment": "#C3AED6",
        "Wallet": "#57C4E5",
        "Miscellaneous": "#BDBDBD",
        "Default": "#C7C7CC",
    },
    keyword_groups=[
        KeywordGroup(("food", "restaurant"), "Food"),
        KeywordGroup(("coffee", "cafe"), "Cafe"),
        KeywordGroup(("shop", "store"), "Shopping"),
        KeywordGroup(("transport", "taxi", "bus"), "Transport"),
        KeywordGroup(("bill", "utility"), "Bills"),
        KeywordGroup(("health", "medicine"), "Medicines"),
    ],
    scan_table_keys=False,
)


@dataclass(frozen=True)
class PendingBill:
    name: str
    amount: Decimal
    due_day: str


@dataclass(frozen=True)
class DashboardConfig:
    csv_url: str = DEFAULT_CSV_URL
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL
    monthly_limit: Decimal = DEFAULT_MONTHLY_LIMIT
    income_categories: Tuple[str, ...] = DEFAULT_INCOME_CATEGORIES
    dashboard_palette: Palette = DASHBOARD_PALETTE
    transactions_palette: Palette = TRANSACTIONS_PALETTE
    row_policy: RowPolicy = RowPolicy.REQUIRED_FIELDS
    group_order: GroupOrder = GroupOrder.DATE_DESC
    legend_size: int = DEFAULT_LEGEND_SIZE
    pending_bills: Tuple[PendingBill, ...] = ()
    fetch_timeout: Optional[float] = None


def _as_decimal(value: object, default: Decimal) -> Decimal:
    if value is None or isinstance(value, bool):
        return default
    try:
        out = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return default
    return out if out.is_finite() else default


def _as_enum(enum_cls, value: object, default):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        return default


def _as_str_tuple(values: Optional[Iterable[object]], default: Tuple[str, ...]) -> Tuple[str, ...]:
    if values is None or isinstance(values, (str, bytes)):
        return default
    return tuple(str(v) for v in values if v is not None)


def normalize_palette(raw: Optional[dict], *, base: Palette) -> Palette:
    """Build a palette from a plain dict, keeping ``base`` for anything omitted."""
    if not raw:
        return base
    colors = raw.get("colors")
    colors = {str(k): str(v) for k, v in colors.items()} if isinstance(colors, dict) else dict(base.colors)

    groups_raw = raw.get("keyword_groups")
    if isinstance(groups_raw, list):
        groups: List[KeywordGroup] = []
        for g in groups_raw:
            if not isinstance(g, dict) or not g.get("color"):
                continue
            keywords = tuple(str(k).lower() for k in (g.get("keywords") or []) if k)
            if keywords:
                groups.append(KeywordGroup(keywords, str(g["color"])))
    else:
        groups = list(base.keyword_groups)

    scan = raw.get("scan_table_keys", base.scan_table_keys)
    return Palette(colors=colors, keyword_groups=groups, scan_table_keys=bool(scan))


def _pending_bills(values: object) -> Tuple[PendingBill, ...]:
    if not isinstance(values, list):
        return ()
    bills: List[PendingBill] = []
    for v in values:
        if not isinstance(v, dict) or not v.get("name"):
            continue
        amount = _as_decimal(v.get("amount"), Decimal("NaN"))
        if amount.is_nan():
            continue
        bills.append(PendingBill(name=str(v["name"]), amount=amount, due_day=str(v.get("due_day") or "")))
    return tuple(bills)


def normalize_config(raw: Optional[dict] = None) -> DashboardConfig:
    """Coerce a plain dict (JSON file, API body) into a ``DashboardConfig``.

    Unknown keys are ignored and invalid values fall back to defaults.
    """
    raw = raw or {}
    defaults = DashboardConfig()

    csv_url = str(raw.get("csv_url") or defaults.csv_url).strip()
    symbol = raw.get("currency_symbol")
    symbol = str(symbol) if symbol is not None else defaults.currency_symbol

    limit = _as_decimal(raw.get("monthly_limit"), defaults.monthly_limit)
    if limit <= 0:
        limit = defaults.monthly_limit

    legend_size = raw.get("legend_size", defaults.legend_size)
    try:
        legend_size = int(legend_size)
    except (TypeError, ValueError):
        legend_size = defaults.legend_size
    legend_size = max(1, min(20, legend_size))

    timeout = raw.get("fetch_timeout")
    try:
        timeout = float(timeout) if timeout is not None else None
    except (TypeError, ValueError):
        timeout = None
    if timeout is not None and timeout <= 0:
        timeout = None

    return DashboardConfig(
        csv_url=csv_url,
        currency_symbol=symbol,
        monthly_limit=limit,
        income_categories=_as_str_tuple(raw.get("income_categories"), defaults.income_categories),
        dashboard_palette=normalize_palette(raw.get("dashboard_palette"), base=DASHBOARD_PALETTE),
        transactions_palette=normalize_palette(raw.get("transactions_palette"), base=TRANSACTIONS_PALETTE),
        row_policy=_as_enum(RowPolicy, raw.get("row_policy", defaults.row_policy), defaults.row_policy),
        group_order=_as_enum(GroupOrder, raw.get("group_order", defaults.group_order), defaults.group_order),
        legend_size=legend_size,
        pending_bills=_pending_bills(raw.get("pending_bills")),
        fetch_timeout=timeout,
    )


def load_config_file(path: Path, *, csv_url: Optional[str] = None) -> DashboardConfig:
    """Read a JSON config file; ``csv_url`` (e.g. from the environment) wins over the file."""
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    if not isinstance(raw, dict):
        raise ValueError(f"{path}: expected a JSON object, got {type(raw).__name__}")
    config = normalize_config(raw)
    return replace(config, csv_url=csv_url) if csv_url else config


def config_from_env() -> DashboardConfig:
    """``SPEND_DASHBOARD_CONFIG`` names a JSON config file; ``SPEND_DASHBOARD_CSV_URL`` overrides the endpoint."""
    csv_url = (os.getenv("SPEND_DASHBOARD_CSV_URL") or "").strip() or None
    path = os.getenv("SPEND_DASHBOARD_CONFIG")
    if path:
        return load_config_file(Path(path), csv_url=csv_url)
    return normalize_config({"csv_url": csv_url} if csv_url else {})
