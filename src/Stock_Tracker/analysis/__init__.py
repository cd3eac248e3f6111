"""Normalization, view-state derivation, and chart series building.

Re-exports all public functions so consumers can import directly:
    from Stock_Tracker.analysis import normalize_quote, derive_view, build_series
"""

from Stock_Tracker.analysis.chart import build_series
from Stock_Tracker.analysis.normalization import normalize_quote
from Stock_Tracker.analysis.providers import PROVIDER_SHAPES, ProviderShape, get_shape
from Stock_Tracker.analysis.view_state import (
    derive_from_state,
    derive_view,
    filter_records,
    initial_state,
    select_symbol,
    set_filter,
    sort_records,
    summarize,
    toggle_sort,
)

__all__ = [
    # Normalization
    "normalize_quote",
    # Providers
    "PROVIDER_SHAPES",
    "ProviderShape",
    "get_shape",
    # View state
    "derive_from_state",
    "derive_view",
    "filter_records",
    "initial_state",
    "select_symbol",
    "set_filter",
    "sort_records",
    "summarize",
    "toggle_sort",
    # Chart
    "build_series",
]
