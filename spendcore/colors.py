"""Category -> color resolution as an ordered list of rules.

Rules are evaluated in priority order and the first match wins:

1. exact, case-sensitive match against the palette's color table
2. keyword groups (case-insensitive substring)
3. substring scan over the color table's own keys (when the palette enables it)
4. the palette's default color

Missing or empty categories go straight to the default.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional

from spendcore.config import Palette

Predicate = Callable[[str], bool]


@dataclass(frozen=True)
class ColorRule:
    name: str
    predicate: Predicate
    color: str

    def matches(self, category: str) -> bool:
        return self.predicate(category)


def _exact(key: str) -> Predicate:
    return lambda category: category == key


def _contains_any(keywords) -> Predicate:
    lowered = tuple(k.lower() for k in keywords)
    return lambda category: any(k in category.lower() for k in lowered)


def build_rules(palette: Palette) -> List[ColorRule]:
    default = palette.default_color
    rules: List[ColorRule] = [
        ColorRule(f"exact:{key}", _exact(key), color) for key, color in palette.colors.items()
    ]
    for group in palette.keyword_groups:
        color = palette.colors.get(group.color_key, default)
        rules.append(ColorRule(f"keywords:{group.color_key}", _contains_any(group.keywords), color))
    if palette.scan_table_keys:
        rules.extend(
            ColorRule(f"key-scan:{key}", _contains_any([key]), color) for key, color in palette.colors.items()
        )
    rules.append(ColorRule("default", lambda _category: True, default))
    return rules


def resolve_color(category: Optional[str], rules: List[ColorRule]) -> str:
    if not category:
        return rules[-1].color
    for rule in rules:
        if rule.matches(category):
            return rule.color
    return rules[-1].color


class CategoryColors:
    """Resolver bound to one page's palette."""

    def __init__(self, palette: Palette):
        self.palette = palette
        self.rules = build_rules(palette)

    def color_of(self, category: Optional[str]) -> str:
        return resolve_color(category, self.rules)
