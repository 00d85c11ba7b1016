"""Shared fixtures: a fixed ``now`` and an httpx client serving canned CSV text."""

from __future__ import annotations

from datetime import datetime
from typing import Callable

import httpx
import pytest

from spendcore.config import DashboardConfig

CSV_URL = "https://sheets.example.test/pub?output=csv"


@pytest.fixture()
def now() -> datetime:
    return datetime(2024, 3, 15, 12, 0)


@pytest.fixture()
def config() -> DashboardConfig:
    return DashboardConfig(csv_url=CSV_URL)


def make_client(body: str = "", status_code: int = 200, *, seen: list | None = None) -> httpx.Client:
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status_code, text=body)

    return httpx.Client(transport=httpx.MockTransport(handler))


@pytest.fixture()
def csv_client() -> Callable[..., httpx.Client]:
    return make_client
