"""One render cycle: fetch -> parse -> aggregate -> format.

``DashboardService`` keeps only the most recent snapshot and lets at most
one fetch run at a time. A non-blocking trigger that arrives while a fetch is
outstanding is dropped; blocking triggers wait their turn.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Any, Dict, Optional

import httpx

from spendcore.config import DashboardConfig
from spendcore.data import load_dashboard_data, prepare_context
from spendcore.errors import DashboardError
from spendcore.filters import normalize_filters
from spendcore.metrics_ledger import compute_ledger, ledger_error
from spendcore.metrics_summary import compute_dashboard, dashboard_error
from spendcore.metrics_transactions import compute_transaction_list, transaction_list_error

logger = logging.getLogger(__name__)


class DashboardService:
    def __init__(self, config: DashboardConfig, *, client: Optional[httpx.Client] = None):
        self.config = config
        self._client = client
        self._lock = threading.Lock()
        self._snapshot: Optional[Dict[str, Any]] = None

    @property
    def snapshot(self) -> Optional[Dict[str, Any]]:
        return self._snapshot

    def refresh(self, now: Optional[datetime] = None, *, block: bool = True) -> Optional[Dict[str, Any]]:
        """Replace the snapshot with a fresh fetch.

        Returns ``None`` when ``block`` is false and another fetch is in
        flight. Failures clear the snapshot and propagate.
        """
        if not self._lock.acquire(blocking=block):
            logger.info("refresh dropped: a fetch is already in flight")
            return None
        try:
            try:
                snapshot = load_dashboard_data(self.config, client=self._client, now=now)
            except DashboardError:
                self._snapshot = None
                raise
            self._snapshot = snapshot
            return snapshot
        finally:
            self._lock.release()

    def dashboard(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or datetime.now()
        try:
            data_ctx = self.refresh(now)
        except DashboardError as exc:
            logger.warning("dashboard render failed: %s", exc)
            return dashboard_error(exc)
        return compute_dashboard(self.config, data_ctx, now)

    def transactions(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or datetime.now()
        try:
            data_ctx = self.refresh(now)
        except DashboardError as exc:
            logger.warning("transaction list render failed: %s", exc)
            return transaction_list_error(exc)
        return compute_transaction_list(self.config, data_ctx, now)

    def ledger(self, filters: Optional[dict] = None, now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or datetime.now()
        try:
            data_ctx = self.refresh(now)
        except DashboardError as exc:
            logger.warning("ledger render failed: %s", exc)
            return ledger_error(exc)
        filt = normalize_filters(filters, today=now.date())
        ctx = prepare_context(filt, data_ctx, self.config)
        return compute_ledger(self.config, ctx)
