"""Pydantic v2 models, enums, and type definitions.

Re-exports all public models so consumers can import directly:
    from Stock_Tracker.models import QuoteRecord, SortKey, ViewState
"""

from Stock_Tracker.models.dashboard import BatchResult, DashboardSnapshot
from Stock_Tracker.models.enums import FailureKind, Provider, SortDirection, SortKey
from Stock_Tracker.models.market_data import ChartPoint, QuoteRecord, RawSeriesPoint
from Stock_Tracker.models.view import DashboardView, MarketSummary, ViewState

__all__ = [
    # Enums
    "FailureKind",
    "Provider",
    "SortDirection",
    "SortKey",
    # Market data
    "ChartPoint",
    "QuoteRecord",
    "RawSeriesPoint",
    # View state
    "DashboardView",
    "MarketSummary",
    "ViewState",
    # Session
    "BatchResult",
    "DashboardSnapshot",
]
