"""Core (UI-agnostic) spend dashboard logic.

This package contains:
- CSV fetching and parsing (published sheet -> transaction records)
- monthly classification and category aggregation
- page compute functions (JSON-serializable render models)
- chart helpers (ring/donut geometry, Altair -> Vega-Lite spec dict)
"""
