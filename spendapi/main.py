from __future__ import annotations

import logging
import math
from datetime import datetime
from decimal import Decimal
from functools import lru_cache
from typing import Any, Callable, Dict, Optional

import numpy as np
import pandas as pd
from fastapi import Depends, FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from spendapi.schemas import ConfigSummaryModel, LedgerFiltersModel, MetaListResponse
from spendcore.config import config_from_env
from spendcore.data import prepare_context
from spendcore.errors import EmptyDataset, NetworkError
from spendcore.filters import normalize_filters
from spendcore.logging_setup import configure_logging
from spendcore.metrics_ledger import compute_ledger, ledger_error
from spendcore.metrics_summary import compute_dashboard, dashboard_error
from spendcore.metrics_transactions import compute_transaction_list, transaction_list_error
from spendcore.service import DashboardService

configure_logging()

app = FastAPI(title="Spend Dashboard API", version="0.1.0")
APP_TARGET = "spendapi.main:app"
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


@lru_cache(maxsize=1)
def get_service() -> DashboardService:
    return DashboardService(config_from_env())


def _json(data: object, status_code: int = 200) -> JSONResponse:
    """Return JSON with safe encoding for Decimal/pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(
            data,
            custom_encoder={
                Decimal: _safe_float,
                type(pd.NaT): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        ),
    )


def _render(
    page: str,
    compute: Callable[[Dict[str, Any]], Dict[str, Any]],
    on_error: Callable[[Exception], Dict[str, Any]],
    service: DashboardService,
    now: Optional[datetime] = None,
):
    try:
        data_ctx = service.refresh(now)
        return _json(compute(data_ctx))
    except NetworkError as exc:
        logger.warning("%s: fetch failed: %s", page, exc)
        return _json(on_error(exc), status_code=502)
    except EmptyDataset as exc:
        logger.warning("%s: %s", page, exc)
        return _json(on_error(exc), status_code=404)
    except Exception as exc:
        logger.exception("%s failed", page)
        return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


@app.get("/meta/config", response_model=ConfigSummaryModel)
def meta_config(service: DashboardService = Depends(get_service)):
    cfg = service.config
    return ConfigSummaryModel(
        currency_symbol=cfg.currency_symbol,
        monthly_limit=float(cfg.monthly_limit),
        income_categories=list(cfg.income_categories),
        row_policy=cfg.row_policy.value,
        group_order=cfg.group_order.value,
    )


@app.get("/meta/categories")
def meta_categories(service: DashboardService = Depends(get_service)):
    def compute(data_ctx: Dict[str, Any]) -> Dict[str, Any]:
        seen = dict.fromkeys(t.category for t in data_ctx.get("transactions", []) if t.category)
        return MetaListResponse(values=sorted(seen)).model_dump()

    return _render("meta_categories", compute, lambda exc: {"values": [], "error": str(exc)}, service)


@app.get("/dashboard")
def dashboard(service: DashboardService = Depends(get_service)):
    now = datetime.now()
    return _render("dashboard", lambda ctx: compute_dashboard(service.config, ctx, now), dashboard_error, service, now)


@app.get("/transactions")
def transactions(service: DashboardService = Depends(get_service)):
    now = datetime.now()
    return _render(
        "transactions",
        lambda ctx: compute_transaction_list(service.config, ctx, now),
        transaction_list_error,
        service,
        now,
    )


@app.post("/ledger")
def ledger(filters: LedgerFiltersModel, service: DashboardService = Depends(get_service)):
    now = datetime.now()
    filt = normalize_filters(filters.model_dump(), today=now.date())

    def compute(data_ctx: Dict[str, Any]) -> Dict[str, Any]:
        return compute_ledger(service.config, prepare_context(filt, data_ctx, service.config))

    return _render("ledger", compute, ledger_error, service, now)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(APP_TARGET, host="127.0.0.1", port=8000, reload=True)
