from datetime import date

import pytest

from spendcore.config import DashboardConfig
from spendcore.data import parse_csv, prepare_context, to_transactions
from spendcore.filters import normalize_filters, quick_range
from spendcore.metrics_ledger import compute_ledger, ledger_error

SHEET = "\n".join(
    [
        "Timestamp,Name,Amount,Category",
        "2024-03-01 09:00,Salary,50000,Salary",
        "2024-03-02 10:00,Latte,150,Cafe",
        "2024-03-05 12:00,Cafe lunch,420,Cafeteria",
        "2024-03-09 08:00,Bus,13,Transport",
        "2024-03-14 23:59,Power,2100.75,Bills",
        "nope,Mystery,10,Wallet",
    ]
)
CONFIG = DashboardConfig(income_categories=("Salary",))


def _ledger(raw):
    data_ctx = {"transactions": to_transactions(parse_csv(SHEET))}
    ctx = prepare_context(normalize_filters(raw, today=date(2024, 3, 15)), data_ctx, CONFIG)
    return compute_ledger(CONFIG, ctx)


def test_unfiltered_ledger_totals_and_first_page():
    model = _ledger({})
    assert model["summary"] == {"entries": 6, "total_income": "₱50,000.00", "total_expenses": "₱2,693.75"}
    assert len(model["rows"]) == 6
    assert model["rows"][0]["kind"] == "income"
    assert model["rows"][-1]["date"] is None
    assert model["pagination"] == {"current_page": 1, "total_pages": 1, "has_prev": False, "has_next": False}


def test_date_range_is_inclusive_through_end_of_day():
    model = _ledger({"start_date": "2024-03-05", "end_date": "2024-03-14"})
    assert [r["name"] for r in model["rows"]] == ["Cafe lunch", "Bus", "Power"]


def test_category_query_and_kind():
    model = _ledger({"category_query": "CAFE", "kind": "expense"})
    assert [r["name"] for r in model["rows"]] == ["Latte", "Cafe lunch"]
    assert model["summary"]["total_expenses"] == "₱570.00"
    assert model["summary"]["total_income"] == "₱0.00"


def test_pagination_totals_cover_all_filtered_rows():
    model = _ledger({"rows_per_page": 2, "page": 2})
    assert [r["name"] for r in model["rows"]] == ["Cafe lunch", "Bus"]
    assert model["summary"]["entries"] == 6
    assert model["pagination"] == {"current_page": 2, "total_pages": 3, "has_prev": True, "has_next": True}


def test_page_past_the_end_is_clamped():
    model = _ledger({"rows_per_page": 5, "page": 9})
    assert model["pagination"]["current_page"] == 2
    assert [r["name"] for r in model["rows"]] == ["Mystery"]


def test_no_matches_shows_placeholder():
    model = _ledger({"category_query": "yacht"})
    assert model["rows"] == []
    assert model["summary"]["entries"] == 0
    assert model["pagination"]["total_pages"] == 1
    assert model["placeholder"] == "No entries found for the selected filters."


def test_quick_range_sets_bounds():
    model = _ledger({"quick_range": "last7Days"})
    assert model["filters"]["start_date"] == date(2024, 3, 8)
    assert [r["name"] for r in model["rows"]] == ["Bus", "Power"]


@pytest.mark.parametrize(
    "label, start",
    [("last7Days", date(2024, 3, 8)), ("last30Days", date(2024, 2, 14)), ("last90Days", date(2023, 12, 16)), ("allTime", None)],
)
def test_quick_range(label, start):
    assert quick_range(label, date(2024, 3, 15)) == (start, date(2024, 3, 15))


def test_normalize_filters_coerces_bad_values():
    f = normalize_filters({"kind": "Refund", "page": "x", "rows_per_page": 1000, "start_date": "garbage"})
    assert f.kind == ""
    assert f.page == 1
    assert f.rows_per_page == 100
    assert f.start_date is None


def test_ledger_error_placeholder():
    model = ledger_error()
    assert model["summary"]["entries"] == "N/A"
    assert model["placeholder"].startswith("Error loading data.")
