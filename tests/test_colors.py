import pytest

from spendcore.colors import CategoryColors, build_rules, resolve_color
from spendcore.config import DASHBOARD_PALETTE, TRANSACTIONS_PALETTE, KeywordGroup, Palette


@pytest.mark.parametrize(
    "category, expected",
    [
        ("Food", "#10B981"),  # exact
        ("Fast food", "#10B981"),  # keyword
        ("Pharmacy run", "#EF4444"),
        ("House Rent", "#6366F1"),
        ("Gas bill", "#6366F1"),  # bills group is checked before transport
        ("Flea Market", "#F59E0B"),
        ("My miscellaneous stuff", "#3B82F6"),  # fallback scan over table keys
        ("Cafe", "#9CA3AF"),
        ("", "#9CA3AF"),
        (None, "#9CA3AF"),
    ],
)
def test_dashboard_palette_resolution(category, expected):
    assert CategoryColors(DASHBOARD_PALETTE).color_of(category) == expected


@pytest.mark.parametrize(
    "category, expected",
    [
        ("Coffee", "#4D96FF"),
        ("Iced coffee", "#4D96FF"),
        ("City bus", "#06D6A0"),
        ("Utility", "#758BFD"),
        ("Default", "#C7C7CC"),
        # no key scan on this palette, so a partial key falls through to the default
        ("Wallet top-up", "#C7C7CC"),
    ],
)
def test_transactions_palette_resolution(category, expected):
    assert CategoryColors(TRANSACTIONS_PALETTE).color_of(category) == expected


def test_exact_match_is_case_sensitive_before_keywords():
    palette = Palette(
        colors={"Food": "#111111", "food court": "#222222", "Default": "#000000"},
        keyword_groups=[KeywordGroup(("food",), "Food")],
        scan_table_keys=False,
    )
    rules = build_rules(palette)
    assert resolve_color("food court", rules) == "#222222"
    assert resolve_color("Food Court", rules) == "#111111"


def test_rules_end_with_default():
    rules = build_rules(DASHBOARD_PALETTE)
    assert rules[-1].name == "default"
    assert rules[-1].matches("anything")
    assert [r.name for r in rules].index("keywords:Food") < [r.name for r in rules].index("key-scan:Food")


def test_palette_without_default_key_uses_neutral():
    palette = Palette(colors={"Food": "#111111"})
    assert CategoryColors(palette).color_of("Rocket") == "#9CA3AF"
