from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Sequence

import altair as alt
import pandas as pd

from spendcore.formatting import format_percent
from spendcore.models import CategoryAggregate

alt.data_transformers.disable_max_rows()

DONUT_RADIUS = 50
DONUT_STROKE = 20
RING_RADIUS = 40


def circumference(radius: float) -> float:
    return 2 * math.pi * radius


@dataclass(frozen=True)
class ArcSegment:
    category: str
    color: str
    total: Decimal
    percentage: float
    length: float
    offset: float
    circumference: float

    @property
    def dasharray(self) -> str:
        return f"{self.length} {self.circumference}"


def donut_segments(
    categories: Sequence[CategoryAggregate],
    total_expense: Decimal,
    color_of: Callable[[str], str],
    *,
    radius: float = DONUT_RADIUS,
) -> List[ArcSegment]:
    """Lay out one arc per category, clockwise from a fixed origin.

    Each segment starts at the negative cumulative share already consumed.
    Zero totals render nothing and 0% categories are skipped.
    """
    if not categories or total_expense <= 0:
        return []
    circ = circumference(radius)
    consumed = 0.0
    segments: List[ArcSegment] = []
    for agg in categories:
        pct = float(agg.total / total_expense * 100)
        if pct == 0:
            continue
        segments.append(
            ArcSegment(
                category=agg.category,
                color=color_of(agg.category),
                total=agg.total,
                percentage=pct,
                length=(pct / 100) * circ,
                offset=-(consumed / 100) * circ,
                circumference=circ,
            )
        )
        consumed += pct
    return segments


def legend_items(segments: Sequence[ArcSegment], size: int = 4) -> List[Dict[str, Any]]:
    return [
        {"category": s.category, "color": s.color, "percentage": format_percent(s.percentage)}
        for s in segments[:size]
        if s.percentage != 0
    ]


def limit_ring(total_expense: Decimal, limit: Decimal, *, radius: float = RING_RADIUS) -> Dict[str, Any]:
    """Spending-limit progress ring; the displayed share is capped at 100%."""
    circ = circumference(radius)
    pct = min(float(total_expense / limit * 100), 100.0) if limit > 0 else 100.0
    return {
        "percentage": pct,
        "label": format_percent(pct),
        "radius": radius,
        "circumference": circ,
        "dasharray": f"{circ} {circ}",
        "offset": circ - (pct / 100) * circ,
    }


def donut_chart(segments: Sequence[ArcSegment]) -> Optional[alt.Chart]:
    if not segments:
        return None
    df = pd.DataFrame(
        [
            {"order": i, "category": s.category, "total": float(s.total), "percentage": s.percentage}
            for i, s in enumerate(segments)
        ]
    )
    return (
        alt.Chart(df)
        .mark_arc(innerRadius=DONUT_RADIUS, outerRadius=DONUT_RADIUS + DONUT_STROKE)
        .encode(
            theta=alt.Theta("total:Q", stack=True),
            order=alt.Order("order:Q"),
            color=alt.Color(
                "category:N",
                scale=alt.Scale(domain=[s.category for s in segments], range=[s.color for s in segments]),
                legend=None,
            ),
            tooltip=["category", alt.Tooltip("total:Q", format=",.2f"), alt.Tooltip("percentage:Q", format=".0f")],
        )
    )


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()
