"""Shared fixtures for web route tests.

Provides a test FastAPI app wired to a DashboardSession whose client is a
mock, so route tests never hit the upstream APIs.
"""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from Stock_Tracker.config import Settings
from Stock_Tracker.models import Provider
from Stock_Tracker.services.dashboard import DashboardSession
from Stock_Tracker.web.app import create_app

QUOTES: dict[str, dict[str, float]] = {
    "AAPL": {"c": 175.43, "d": 2.15, "dp": 1.24, "pc": 173.28},
    "TSLA": {"c": 248.5, "d": -8.75, "dp": -3.4014, "pc": 257.25},
    "MSFT": {"c": 367.75, "d": 0.0, "dp": 0.0, "pc": 367.75},
}


@pytest.fixture()
def market_client(settings: Settings, finnhub_candle_payload: dict[str, Any]) -> MagicMock:
    """Mock MarketDataClient serving canned Finnhub payloads."""
    mock = MagicMock()
    mock.settings = settings.model_copy(
        update={
            "quote_provider": Provider.FINNHUB_QUOTE,
            "chart_provider": Provider.FINNHUB_CANDLE,
        }
    )
    mock.fetch_quote_payload = AsyncMock(side_effect=lambda symbol: QUOTES[symbol])
    mock.fetch_series_payload = AsyncMock(return_value=finnhub_candle_payload)
    mock.aclose = AsyncMock()
    return mock


@pytest.fixture()
def session(market_client: MagicMock) -> DashboardSession:
    return DashboardSession(market_client)


@pytest.fixture()
def app(session: DashboardSession) -> FastAPI:
    """Create a test app serving the prepared session."""
    return create_app(session=session)


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    """Create a synchronous test client for the app."""
    return TestClient(app, raise_server_exceptions=False)
