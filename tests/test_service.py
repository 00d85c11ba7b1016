from datetime import datetime

import httpx
import pytest

from spendcore.config import DashboardConfig
from spendcore.errors import EmptyDataset, NetworkError
from spendcore.service import DashboardService

from conftest import CSV_URL, make_client

SHEET = "Timestamp,Name,Amount,Category\n2024-03-10,Coffee,120,Cafe\n2024-03-10,Salary,50000,Salary"


def test_dashboard_render_cycle(now):
    service = DashboardService(DashboardConfig(csv_url=CSV_URL, income_categories=("Salary",)), client=make_client(SHEET))
    model = service.dashboard(now)
    assert model["error"] is None
    assert model["summary"]["remaining"] == "₱49,880.00"
    assert service.snapshot["data_lines"] == 2


def test_refresh_replaces_snapshot_each_time(now):
    bodies = [SHEET, "Timestamp,Name,Amount,Category\n2024-03-11,Tea,80,Cafe"]

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text=bodies.pop(0))

    service = DashboardService(DashboardConfig(csv_url=CSV_URL), client=httpx.Client(transport=httpx.MockTransport(handler)))
    first = service.refresh(now)
    second = service.refresh(now)
    assert len(first["transactions"]) == 2
    assert [t.name for t in second["transactions"]] == ["Tea"]
    assert service.snapshot is second


def test_trigger_while_fetch_in_flight_is_dropped(now):
    nested = []

    def handler(request: httpx.Request) -> httpx.Response:
        nested.append(service.refresh(now, block=False))
        return httpx.Response(200, text=SHEET)

    service = DashboardService(DashboardConfig(csv_url=CSV_URL), client=httpx.Client(transport=httpx.MockTransport(handler)))
    assert service.refresh(now) is not None
    assert nested == [None]


def test_failed_refresh_clears_snapshot(now):
    statuses = [200, 503]

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(statuses.pop(0), text=SHEET)

    service = DashboardService(DashboardConfig(csv_url=CSV_URL), client=httpx.Client(transport=httpx.MockTransport(handler)))
    service.refresh(now)
    with pytest.raises(NetworkError):
        service.refresh(now)
    assert service.snapshot is None


def test_network_error_renders_placeholders(now):
    service = DashboardService(DashboardConfig(csv_url=CSV_URL), client=make_client("", status_code=500))
    assert service.dashboard(now)["summary"]["total_expense"] == "Error"
    assert service.transactions(now)["placeholder"].startswith("Failed to load transactions.")
    assert service.ledger({}, now)["summary"]["entries"] == "N/A"


def test_header_only_sheet_is_empty_dataset(now):
    service = DashboardService(DashboardConfig(csv_url=CSV_URL), client=make_client("Timestamp,Name,Amount,Category\n"))
    with pytest.raises(EmptyDataset):
        service.refresh(now)
    assert service.dashboard(now)["type"] == "EmptyDataset"


def test_ledger_quick_range_is_relative_to_now():
    sheet = "Timestamp,Name,Amount,Category\n2024-03-01,Old,5,Food\n2024-03-14,New,7,Food"
    service = DashboardService(DashboardConfig(csv_url=CSV_URL), client=make_client(sheet))
    model = service.ledger({"quick_range": "last7Days"}, datetime(2024, 3, 15, 8, 0))
    assert [r["name"] for r in model["rows"]] == ["New"]
