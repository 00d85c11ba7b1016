"""CSV parsing and data loading for the published transactions sheet.

The parser is a naive line/comma splitter: quoted commas and embedded
newlines are not supported. Rows are kept according to a ``RowPolicy``.
"""

from __future__ import annotations

import logging
from datetime import datetime, time
from typing import Any, Dict, Iterable, List, Optional

import httpx
import pandas as pd

from spendcore.config import DashboardConfig, RowPolicy
from spendcore.errors import EmptyDataset
from spendcore.fetch import fetch_csv
from spendcore.filters import LedgerFilters, normalize_filters
from spendcore.models import Transaction

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("Timestamp", "Name", "Amount", "Category")

FRAME_COLUMNS = ["timestamp", "occurred_at", "name", "category", "amount", "kind"]


def _clean(value: str) -> str:
    return value.strip().replace('"', "")


def _split_lines(text: str) -> List[str]:
    return [line for line in (text or "").strip().split("\n") if line.strip()]


def count_data_lines(text: str) -> int:
    return max(0, len(_split_lines(text)) - 1)


def parse_csv(text: str, policy: RowPolicy = RowPolicy.REQUIRED_FIELDS) -> List[Dict[str, str]]:
    """Split raw CSV text into header-keyed records.

    ``RowPolicy.MATCH_HEADER`` keeps a row only when its value count equals
    the header count. ``RowPolicy.REQUIRED_FIELDS`` keeps a row only when
    Timestamp, Name, Amount and Category are all present and non-empty.
    """
    lines = _split_lines(text)
    if len(lines) < 2:
        return []

    headers = [_clean(h) for h in lines[0].split(",")]
    records: List[Dict[str, str]] = []
    dropped = 0
    for line in lines[1:]:
        values = [_clean(v) for v in line.split(",")]
        if policy is RowPolicy.MATCH_HEADER:
            if len(values) != len(headers):
                dropped += 1
                continue
            records.append(dict(zip(headers, values)))
        else:
            record = {h: values[i] for i, h in enumerate(headers) if i < len(values)}
            if not all(record.get(col) for col in REQUIRED_COLUMNS):
                dropped += 1
                continue
            records.append(record)

    if dropped:
        logger.debug("parse_csv dropped %d of %d rows (policy=%s)", dropped, len(lines) - 1, policy.value)
    return records


def to_transactions(rows: Iterable[Dict[str, str]]) -> List[Transaction]:
    return [Transaction.from_row(r) for r in rows]


def classify(transaction: Transaction, income_categories: Iterable[str]) -> str:
    return "income" if transaction.category in set(income_categories) else "expense"


def transactions_frame(transactions: List[Transaction], income_categories: Iterable[str] = ()) -> pd.DataFrame:
    """Tabular view of the records for filtering; unparseable values become NaT/NaN."""
    if not transactions:
        return pd.DataFrame(columns=FRAME_COLUMNS)
    income = set(income_categories)
    df = pd.DataFrame(
        {
            "timestamp": [t.timestamp for t in transactions],
            "occurred_at": [t.occurred_at for t in transactions],
            "name": [t.name for t in transactions],
            "category": [t.category for t in transactions],
            "amount": [float(t.value) if t.value is not None else None for t in transactions],
            "kind": [classify(t, income) for t in transactions],
        }
    )
    df["occurred_at"] = pd.to_datetime(df["occurred_at"], errors="coerce")
    df["amount"] = pd.to_numeric(df["amount"], errors="coerce")
    return df


# ---------------- Public API (Streamlit + FastAPI use) ----------------
def load_dashboard_data(
    config: DashboardConfig,
    *,
    client: Optional[httpx.Client] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Fetch and parse the sheet. Raises ``NetworkError`` or ``EmptyDataset``."""
    now = now or datetime.now()
    text = fetch_csv(config.csv_url, client=client, now=now, timeout=config.fetch_timeout)
    data_lines = count_data_lines(text)
    if data_lines < 1:
        raise EmptyDataset("The sheet has no data rows.")

    rows = parse_csv(text, config.row_policy)
    transactions = to_transactions(rows)
    logger.info("Loaded %d transactions from %d data rows", len(transactions), data_lines)
    return {
        "fetched_at": now,
        "data_lines": data_lines,
        "rows": rows,
        "transactions": transactions,
    }


def prepare_context(
    filters: dict | LedgerFilters,
    data_ctx: Dict[str, Any],
    config: DashboardConfig,
) -> Dict[str, Any]:
    transactions: List[Transaction] = list(data_ctx.get("transactions", []))
    frame = transactions_frame(transactions, config.income_categories)
    filt = filters if isinstance(filters, LedgerFilters) else normalize_filters(filters)

    filtered = frame
    if not filtered.empty:
        if filt.start_date is not None:
            start = pd.Timestamp(datetime.combine(filt.start_date, time.min))
            filtered = filtered[filtered["occurred_at"] >= start]
        if filt.end_date is not None:
            end = pd.Timestamp(datetime.combine(filt.end_date, time.max))
            filtered = filtered[filtered["occurred_at"] <= end]
        if filt.category_query:
            q = filt.category_query.lower()
            filtered = filtered[filtered["category"].str.lower().str.contains(q, regex=False, na=False)]
        if filt.kind:
            filtered = filtered[filtered["kind"] == filt.kind]

    return {
        "filters": filt,
        "transactions": transactions,
        "frame": frame,
        "filtered_frame": filtered.reset_index(drop=True),
    }
