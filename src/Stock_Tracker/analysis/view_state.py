"""Derived view state: filtering, sorting, and market summary.

Everything here is a pure function of the record batch and the user's
``ViewState``. Filtering narrows only the display list; the summary is
always computed over the full batch.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from decimal import Decimal

from Stock_Tracker.models.enums import SortDirection, SortKey
from Stock_Tracker.models.market_data import QuoteRecord
from Stock_Tracker.models.view import DashboardView, MarketSummary, ViewState
from Stock_Tracker.utils.exceptions import UnknownSymbolError

logger = logging.getLogger(__name__)

_SORT_KEYS: dict[SortKey, Callable[[QuoteRecord], str | Decimal | int]] = {
    # casefold keeps "aapl" next to "AAPL" the way a locale collation does
    SortKey.SYMBOL: lambda record: record.symbol.casefold(),
    SortKey.PRICE: lambda record: record.price,
    SortKey.CHANGE: lambda record: record.change,
    SortKey.VOLUME: lambda record: record.volume,
}


# ---------------------------------------------------------------------------
# Filtering and sorting
# ---------------------------------------------------------------------------


def filter_records(records: Sequence[QuoteRecord], term: str) -> list[QuoteRecord]:
    """Keep records whose symbol or name contains *term*, case-insensitively.

    The term is not trimmed. An empty term keeps every record in its
    original relative order.
    """
    if not term:
        return list(records)
    needle = term.lower()
    return [
        record
        for record in records
        if needle in record.symbol.lower() or needle in record.name.lower()
    ]


def sort_records(
    records: Sequence[QuoteRecord],
    key: SortKey,
    direction: SortDirection,
) -> list[QuoteRecord]:
    """Stable sort on *key*; ties keep their input order in both directions."""
    return sorted(
        records,
        key=_SORT_KEYS[SortKey(key)],
        reverse=direction == SortDirection.DESCENDING,
    )


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------


def summarize(records: Sequence[QuoteRecord]) -> MarketSummary:
    """Aggregate the whole batch.

    Unknown market caps contribute nothing to the total, and
    ``has_market_cap`` is set only if some record reports a positive one.
    Records with zero change count as neither gainer nor loser.
    """
    known_caps = [record.market_cap for record in records if record.market_cap is not None]
    return MarketSummary(
        record_count=len(records),
        total_market_cap=sum(known_caps, Decimal(0)),
        has_market_cap=any(cap > 0 for cap in known_caps),
        gainer_count=sum(1 for record in records if record.change > 0),
        loser_count=sum(1 for record in records if record.change < 0),
        top_gainer=max(records, key=lambda record: record.change_percent, default=None),
        top_loser=min(records, key=lambda record: record.change_percent, default=None),
    )


def derive_view(
    records: Sequence[QuoteRecord],
    filter_term: str,
    sort_key: SortKey,
    sort_direction: SortDirection,
) -> DashboardView:
    """Compute the display list and summary for one render."""
    display = sort_records(filter_records(records, filter_term), sort_key, sort_direction)
    return DashboardView(display=display, summary=summarize(records))


def derive_from_state(records: Sequence[QuoteRecord], state: ViewState) -> DashboardView:
    """:func:`derive_view` taking its inputs from a ``ViewState``."""
    return derive_view(records, state.filter_term, state.sort_key, state.sort_direction)


# ---------------------------------------------------------------------------
# State transitions
# ---------------------------------------------------------------------------


def toggle_sort(state: ViewState, key: SortKey) -> ViewState:
    """Apply a sort-column click.

    Clicking the active column flips the direction; clicking another column
    makes it active in ascending order.
    """
    key = SortKey(key)
    if key == state.sort_key:
        flipped = (
            SortDirection.DESCENDING
            if state.sort_direction == SortDirection.ASCENDING
            else SortDirection.ASCENDING
        )
        return state.model_copy(update={"sort_direction": flipped})
    return state.model_copy(update={"sort_key": key, "sort_direction": SortDirection.ASCENDING})


def set_filter(state: ViewState, term: str) -> ViewState:
    """Replace the filter term."""
    return state.model_copy(update={"filter_term": term})


def select_symbol(state: ViewState, symbol: str, tracked: Sequence[str]) -> ViewState:
    """Choose the charted symbol, which must be one of *tracked*.

    Raises:
        UnknownSymbolError: If *symbol* is not tracked.
    """
    normalized = symbol.strip().upper()
    if normalized not in tracked:
        raise UnknownSymbolError(symbol, tuple(tracked))
    return state.model_copy(update={"selected_symbol": normalized})


def initial_state(tracked: Sequence[str]) -> ViewState:
    """Default view: no filter, symbol ascending, first tracked symbol charted."""
    if not tracked:
        msg = "At least one tracked symbol is required"
        raise ValueError(msg)
    return ViewState(selected_symbol=tracked[0])
