from __future__ import annotations

from typing import Optional


class DashboardError(Exception):
    """Base class for failures that replace a render with an error placeholder."""


class NetworkError(DashboardError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class EmptyDataset(DashboardError):
    """The CSV payload has no data rows (fewer than two non-empty lines)."""


class ParseAmountError(ValueError):
    """Row-level: amount is not a positive number. Rows are excluded, never surfaced."""


class InvalidDate(ValueError):
    """Row-level: timestamp cannot be parsed. Rows are excluded from month scope."""
