import html
from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, Dict, Optional

import pandas as pd
import streamlit as st

from spendcore.config import config_from_env
from spendcore.filters import QUICK_RANGES
from spendcore.logging_setup import configure_logging
from spendcore.service import DashboardService

configure_logging()


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-header {display: flex;justify-content: space-between;align-items: center;margin-bottom: 8px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;}
        .legend-item {display: flex;align-items: center;gap: 8px;font-size: 0.9rem;margin: 2px 0;}
        .legend-dot, .dot {width: 10px;height: 10px;border-radius: 50%;display: inline-block;}
        .date-group-header {font-weight: 600;color: #6b7280;margin: 12px 0 4px;}
        .transaction-item {display: flex;align-items: center;gap: 10px;padding: 6px 0;border-bottom: 1px solid #f3f4f6;}
        .transaction-item .info {flex: 1;}
        .transaction-item .time {color: #9ca3af;font-size: 0.8rem;}
        .bill-item {display: flex;gap: 12px;padding: 4px 0;}
        .placeholder {color: #6b7280;text-align: center;padding: 12px;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(
        f"<div class='card'><div class='card-header'><div class='card-title'>{html.escape(title)}</div></div>",
        unsafe_allow_html=True,
    )
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def placeholder(message: str):
    st.markdown(f"<div class='placeholder'>{html.escape(message)}</div>", unsafe_allow_html=True)


def ring_svg(limit: Dict[str, Any]) -> str:
    r = limit["radius"]
    size = 2 * r + 20
    c = size / 2
    return f"""
    <svg width="{size}" height="{size}" viewBox="0 0 {size} {size}">
      <circle cx="{c}" cy="{c}" r="{r}" stroke="#e5e7eb" stroke-width="10" fill="none"/>
      <circle cx="{c}" cy="{c}" r="{r}" stroke="#6366F1" stroke-width="10" fill="none"
              stroke-dasharray="{limit['dasharray']}" stroke-dashoffset="{limit['offset']}"
              transform="rotate(-90 {c} {c})"/>
      <text x="{c}" y="{c + 5}" text-anchor="middle" font-size="16" font-weight="600">{limit['label']}</text>
    </svg>
    """


@st.cache_resource
def get_service() -> DashboardService:
    return DashboardService(config_from_env())


# ---------- Pages ----------
def render_dashboard_page(service: DashboardService):
    model = service.dashboard(datetime.now())
    summary = model["summary"]

    with card("Financial Overview"):
        cols = st.columns(3)
        cols[0].metric("Total Gains", summary["total_income"])
        cols[1].metric("Total Expenses", summary["total_expense"])
        color = summary.get("remaining_color") or "#111827"
        cols[2].markdown(
            f"<div style='font-size:0.9rem;color:#6b7280;'>Remaining Balance</div>"
            f"<div style='font-size:1.8rem;font-weight:600;color:{color};'>{html.escape(summary['remaining'])}</div>",
            unsafe_allow_html=True,
        )
    if model.get("error"):
        st.error(model["error"])
        return

    chart_col, limit_col = st.columns(2)
    with chart_col:
        with card(f"Expenses ({model['month']})"):
            st.markdown(f"**{model['chart']['total_expense']}**")
            if model["chart"]["vega_spec"]:
                st.vega_lite_chart(model["chart"]["vega_spec"], use_container_width=True)
            for item in model["legend"]:
                st.markdown(
                    f"<div class='legend-item'><span class='legend-dot' style='background-color:{item['color']};'></span>"
                    f"<span>{html.escape(item['category'])}</span><span>{item['percentage']}</span></div>",
                    unsafe_allow_html=True,
                )
    with limit_col:
        with card("Monthly Expense Limit"):
            limit = model["limit"]
            st.markdown(ring_svg(limit), unsafe_allow_html=True)
            st.caption(f"{limit['spent']} of {limit['limit']}")

    with card("Pending Bills"):
        bills = model["pending_bills"]
        if bills["placeholder"]:
            placeholder(bills["placeholder"])
        for bill in bills["items"]:
            st.markdown(
                f"<div class='bill-item'><b>{html.escape(bill['due_day'])}</b>"
                f"<span style='flex:1'>{html.escape(bill['name'])}</span><span>{bill['amount']}</span></div>",
                unsafe_allow_html=True,
            )


def render_transactions_page(service: DashboardService):
    model = service.transactions(datetime.now())
    with card("Transactions"):
        if model["placeholder"]:
            placeholder(model["placeholder"])
        for group in model["groups"]:
            st.markdown(f"<div class='date-group-header'>{html.escape(group['label'])}</div>", unsafe_allow_html=True)
            for item in group["transactions"]:
                st.markdown(
                    f"<div class='transaction-item'><span class='dot' style='background-color:{item['color']};'></span>"
                    f"<div class='info'><div>{html.escape(item['name'])}</div><div class='time'>{item['time']}</div></div>"
                    f"<div>{html.escape(item['amount'])}</div></div>",
                    unsafe_allow_html=True,
                )


def render_ledger_page(service: DashboardService):
    with st.sidebar:
        st.markdown("### Ledger filters")
        quick: Optional[str] = st.radio("Time period", list(QUICK_RANGES), index=len(QUICK_RANGES) - 1, horizontal=True)
        custom = st.checkbox("Custom date range", value=False)
        start_date: Optional[date] = None
        end_date: Optional[date] = None
        if custom:
            quick = None
            start_date = st.date_input("Start date", value=None)
            end_date = st.date_input("End date", value=None)
        category_query = st.text_input("Category contains", "")
        kind = st.selectbox("Type", ["", "income", "expense"], format_func=lambda k: k.title() or "All")
        page = int(st.number_input("Page", min_value=1, value=1, step=1))

    filters = {
        "quick_range": quick,
        "start_date": start_date,
        "end_date": end_date,
        "category_query": category_query,
        "kind": kind,
        "page": page,
    }
    model = service.ledger(filters, datetime.now())
    summary = model["summary"]
    cols = st.columns(3)
    cols[0].metric("Entries", summary["entries"])
    cols[1].metric("Income", summary["total_income"])
    cols[2].metric("Expenses", summary["total_expenses"])

    with card("Entries"):
        if model["placeholder"]:
            placeholder(model["placeholder"])
        if model["rows"]:
            st.dataframe(pd.DataFrame(model["rows"]), hide_index=True, use_container_width=True)
        pagination = model.get("pagination")
        if pagination:
            st.caption(f"Page {pagination['current_page']} of {pagination['total_pages']}")


# ---------- UI setup ----------
st.set_page_config(page_title="Spend Dashboard", layout="wide")
inject_base_styles()
st.title("Spend Dashboard")

service = get_service()
with st.sidebar:
    st.markdown("### Navigate")
    nav_choice = st.radio("Navigate", ["Dashboard", "Transactions", "Ledger"], index=0)
    if st.button("Refresh"):
        st.rerun()

if nav_choice == "Dashboard":
    render_dashboard_page(service)
elif nav_choice == "Transactions":
    render_transactions_page(service)
else:
    render_ledger_page(service)
