from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Mapping, Optional, Tuple

import pandas as pd

from spendcore.errors import InvalidDate, ParseAmountError

# Sheet timestamps always carry a four-digit year; bare words like "today" or
# "March" would otherwise resolve against the wall clock.
_YEAR_RE = re.compile(r"\d{4}")
MAX_AMOUNT = Decimal("1e15")


def parse_timestamp(value: Optional[str]) -> datetime:
    """Parse a sheet timestamp (ISO or ``M/D/YYYY H:M:S``) into a naive datetime."""
    s = (value or "").strip()
    if not s:
        raise InvalidDate("empty timestamp")
    if not _YEAR_RE.search(s):
        raise InvalidDate(f"no year in timestamp: {s!r}")
    ts = pd.to_datetime(s, errors="coerce")
    if ts is None or pd.isna(ts):
        raise InvalidDate(f"unparseable timestamp: {s!r}")
    if ts.tzinfo is not None:
        ts = ts.tz_localize(None)
    return ts.to_pydatetime()


def parse_amount(value: Optional[str]) -> Decimal:
    """Parse a strictly positive, finite decimal amount."""
    s = (value or "").strip()
    try:
        amount = Decimal(s)
    except (InvalidOperation, ValueError):
        raise ParseAmountError(f"not a number: {s!r}") from None
    if not amount.is_finite() or amount <= 0:
        raise ParseAmountError(f"not a positive amount: {s!r}")
    if amount >= MAX_AMOUNT:
        raise ParseAmountError(f"amount too large: {s!r}")
    return amount


@dataclass(frozen=True)
class Transaction:
    timestamp: str
    name: str
    amount: str
    category: str
    occurred_at: Optional[datetime] = None
    value: Optional[Decimal] = None

    @classmethod
    def from_row(cls, row: Mapping[str, str]) -> "Transaction":
        timestamp = row.get("Timestamp") or ""
        amount = row.get("Amount") or ""
        try:
            occurred_at: Optional[datetime] = parse_timestamp(timestamp)
        except InvalidDate:
            occurred_at = None
        try:
            value: Optional[Decimal] = parse_amount(amount)
        except ParseAmountError:
            value = None
        return cls(
            timestamp=timestamp,
            name=row.get("Name") or "",
            amount=amount,
            category=row.get("Category") or "",
            occurred_at=occurred_at,
            value=value,
        )

    def in_month_of(self, now: datetime) -> bool:
        return self.occurred_at is not None and (
            self.occurred_at.year == now.year and self.occurred_at.month == now.month
        )


@dataclass(frozen=True)
class CategoryAggregate:
    category: str
    total: Decimal


@dataclass(frozen=True)
class MonthlySummary:
    total_income: Decimal
    total_expense: Decimal
    categories: Tuple[CategoryAggregate, ...] = ()

    @property
    def remaining(self) -> Decimal:
        return self.total_income - self.total_expense


@dataclass(frozen=True)
class DateGroup:
    label: str
    day: Optional[date]
    transactions: Tuple[Transaction, ...]
