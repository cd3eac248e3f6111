"""View-state models: user-controlled table state and derived aggregates."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from Stock_Tracker.models.enums import SortDirection, SortKey
from Stock_Tracker.models.market_data import QuoteRecord


class ViewState(BaseModel):
    """Filter, sort and chart selection chosen by the user.

    Frozen: transitions produce a new instance so a render never observes a
    half-applied change. Survives across fetch cycles.
    """

    model_config = ConfigDict(frozen=True)

    filter_term: str = ""
    sort_key: SortKey = SortKey.SYMBOL
    sort_direction: SortDirection = SortDirection.ASCENDING
    selected_symbol: str


class MarketSummary(BaseModel):
    """Aggregate statistics over the whole, unfiltered record batch."""

    model_config = ConfigDict(frozen=True)

    record_count: int
    total_market_cap: Decimal
    has_market_cap: bool
    gainer_count: int
    loser_count: int
    top_gainer: QuoteRecord | None = None
    top_loser: QuoteRecord | None = None


class DashboardView(BaseModel):
    """Display-ready table rows plus the summary they were derived with."""

    model_config = ConfigDict(frozen=True)

    display: list[QuoteRecord]
    summary: MarketSummary
