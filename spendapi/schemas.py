from __future__ import annotations

from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class LedgerFiltersModel(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    quick_range: Optional[Literal["last7Days", "last30Days", "last90Days", "allTime"]] = None
    category_query: str = ""
    kind: Literal["", "income", "expense"] = ""
    page: int = Field(default=1, ge=1)
    rows_per_page: int = Field(default=10, ge=1, le=100)


class MetaListResponse(BaseModel):
    values: List[str]


class ConfigSummaryModel(BaseModel):
    currency_symbol: str
    monthly_limit: float
    income_categories: List[str]
    row_policy: str
    group_order: str
