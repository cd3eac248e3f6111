"""Upstream transport, batch orchestration, and the dashboard session.

Re-exports all public service classes so consumers can import directly:
    from Stock_Tracker.services import DashboardSession, MarketDataClient
"""

from Stock_Tracker.services.batch import fetch_all, unique_symbols
from Stock_Tracker.services.dashboard import (
    CHART_ERROR_MESSAGE,
    TABLE_ERROR_MESSAGE,
    DashboardSession,
)
from Stock_Tracker.services.market_data import MarketDataClient

__all__ = [
    # Transport
    "MarketDataClient",
    # Orchestration
    "fetch_all",
    "unique_symbols",
    # Session
    "CHART_ERROR_MESSAGE",
    "TABLE_ERROR_MESSAGE",
    "DashboardSession",
]
