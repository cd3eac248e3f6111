"""Shared formatting utilities for terminal and JSON renderers.

All functions accept typed values from ``Stock_Tracker.models``. Unknown
aggregate values render as ``"N/A"``, never as a zero amount.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Final

from Stock_Tracker.models.enums import SortDirection, SortKey
from Stock_Tracker.models.view import MarketSummary, ViewState

NOT_AVAILABLE: Final[str] = "N/A"

# (threshold, divisor suffix) from largest to smallest
_MONEY_UNITS: Final[tuple[tuple[Decimal, str], ...]] = (
    (Decimal("1e12"), "T"),
    (Decimal("1e9"), "B"),
    (Decimal("1e6"), "M"),
    (Decimal("1e3"), "K"),
)
_VOLUME_UNITS: Final[tuple[tuple[int, str], ...]] = (
    (1_000_000_000, "B"),
    (1_000_000, "M"),
    (1_000, "K"),
)


def format_money(value: Decimal | None) -> str:
    """Abbreviated currency: 2_870_000_000_000 -> '$2.87T'."""
    if value is None:
        return NOT_AVAILABLE
    for threshold, suffix in _MONEY_UNITS:
        if value >= threshold:
            return f"${value / threshold:.2f}{suffix}"
    return f"${value:.2f}"


def format_total_market_cap(summary: MarketSummary) -> str:
    """Total market cap, or 'N/A' when no record reported one."""
    if not summary.has_market_cap:
        return NOT_AVAILABLE
    return format_money(summary.total_market_cap)


def format_volume(volume: int) -> str:
    """Abbreviated share count: 52_340_000 -> '52.34M'."""
    for threshold, suffix in _VOLUME_UNITS:
        if volume >= threshold:
            return f"{volume / threshold:.2f}{suffix}"
    return str(volume)


def format_price(price: Decimal) -> str:
    return f"${price:.2f}"


def format_change(change: Decimal) -> str:
    """Signed change with a leading '+' for non-negative values."""
    sign = "+" if change >= 0 else ""
    return f"{sign}{change:.2f}"


def format_change_percent(change_percent: float) -> str:
    """Signed percentage in parentheses: 1.23 -> '(+1.23%)'."""
    sign = "+" if change_percent >= 0 else ""
    return f"({sign}{change_percent:.2f}%)"


def sort_indicator(state: ViewState, column: SortKey) -> str:
    """Arrow shown next to the active sort column header."""
    if state.sort_key != column:
        return ""
    return "↑" if state.sort_direction == SortDirection.ASCENDING else "↓"
