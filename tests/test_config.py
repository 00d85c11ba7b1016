import json
from decimal import Decimal

from spendcore.config import (
    DASHBOARD_PALETTE,
    DashboardConfig,
    GroupOrder,
    RowPolicy,
    config_from_env,
    load_config_file,
    normalize_config,
)


def test_defaults():
    cfg = normalize_config()
    assert cfg == DashboardConfig()
    assert cfg.monthly_limit == Decimal("10000")
    assert "Salary" in cfg.income_categories
    assert cfg.row_policy is RowPolicy.REQUIRED_FIELDS


def test_invalid_values_fall_back():
    cfg = normalize_config(
        {"monthly_limit": "-5", "legend_size": "many", "row_policy": "loose", "fetch_timeout": 0, "income_categories": "Salary"}
    )
    defaults = DashboardConfig()
    assert cfg.monthly_limit == defaults.monthly_limit
    assert cfg.legend_size == defaults.legend_size
    assert cfg.row_policy is defaults.row_policy
    assert cfg.fetch_timeout is None
    assert cfg.income_categories == defaults.income_categories


def test_overrides():
    cfg = normalize_config(
        {
            "currency_symbol": "$",
            "monthly_limit": 2500,
            "income_categories": ["Paycheck"],
            "row_policy": "MATCH_HEADER",
            "group_order": "first_seen",
            "dashboard_palette": {"keyword_groups": [{"keywords": ["Boba"], "color": "Food"}]},
            "pending_bills": [{"name": "Water Bill", "amount": "650.50", "due_day": "15"}, {"name": "Broken"}],
        }
    )
    assert cfg.currency_symbol == "$"
    assert cfg.monthly_limit == Decimal("2500")
    assert cfg.income_categories == ("Paycheck",)
    assert cfg.row_policy is RowPolicy.MATCH_HEADER
    assert cfg.group_order is GroupOrder.FIRST_SEEN
    assert cfg.dashboard_palette.colors == DASHBOARD_PALETTE.colors
    assert cfg.dashboard_palette.keyword_groups[0].keywords == ("boba",)
    assert [(b.name, b.amount) for b in cfg.pending_bills] == [("Water Bill", Decimal("650.50"))]


def test_config_file_and_env(tmp_path, monkeypatch):
    path = tmp_path / "dashboard.json"
    path.write_text(json.dumps({"csv_url": "https://a.test/x.csv", "monthly_limit": 500}), encoding="utf-8")

    assert load_config_file(path).csv_url == "https://a.test/x.csv"

    monkeypatch.setenv("SPEND_DASHBOARD_CONFIG", str(path))
    monkeypatch.setenv("SPEND_DASHBOARD_CSV_URL", "https://b.test/y.csv")
    cfg = config_from_env()
    assert cfg.csv_url == "https://b.test/y.csv"
    assert cfg.monthly_limit == Decimal("500")
