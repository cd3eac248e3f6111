"""Terminal rendering and shared value formatting."""

from Stock_Tracker.reporting.formatters import (
    NOT_AVAILABLE,
    format_change,
    format_change_percent,
    format_money,
    format_price,
    format_total_market_cap,
    format_volume,
    sort_indicator,
)
from Stock_Tracker.reporting.terminal import render_dashboard

__all__ = [
    "NOT_AVAILABLE",
    "format_change",
    "format_change_percent",
    "format_money",
    "format_price",
    "format_total_market_cap",
    "format_volume",
    "render_dashboard",
    "sort_indicator",
]
