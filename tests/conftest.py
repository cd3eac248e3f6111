"""Shared test fixtures for the Stock Tracker test suite.

Provides realistic raw upstream payloads and sample records so tests don't
need to inline large construction blocks.
"""

from decimal import Decimal
from typing import Any

import pytest

from Stock_Tracker.config import Settings
from Stock_Tracker.models import Provider, QuoteRecord


@pytest.fixture()
def av_intraday_payload() -> dict[str, Any]:
    """Alpha Vantage TIME_SERIES_INTRADAY response for AAPL, newest first."""
    return {
        "Meta Data": {
            "1. Information": "Intraday (5min) open, high, low, close prices and volume",
            "2. Symbol": "AAPL",
            "3. Last Refreshed": "2024-01-05 16:00:00",
            "4. Interval": "5min",
            "5. Output Size": "Compact",
            "6. Time Zone": "US/Eastern",
        },
        "Time Series (5min)": {
            "2024-01-05 16:00:00": {
                "1. open": "173.5000",
                "2. high": "175.9000",
                "3. low": "173.1000",
                "4. close": "175.4300",
                "5. volume": "1200000",
            },
            "2024-01-05 15:55:00": {
                "1. open": "172.1000",
                "2. high": "173.6000",
                "3. low": "172.0000",
                "4. close": "173.2800",
                "5. volume": "980000",
            },
            "2024-01-05 15:50:00": {
                "1. open": "171.9000",
                "2. high": "172.4000",
                "3. low": "171.5000",
                "4. close": "172.0000",
                "5. volume": "870000",
            },
        },
    }


@pytest.fixture()
def av_daily_payload() -> dict[str, Any]:
    """Alpha Vantage TIME_SERIES_DAILY response for MSFT, newest first."""
    return {
        "Meta Data": {"2. Symbol": "MSFT", "3. Last Refreshed": "2024-01-05"},
        "Time Series (Daily)": {
            "2024-01-05": {"4. close": "367.7500", "5. volume": "20987000"},
            "2024-01-04": {"4. close": "367.9400", "5. volume": "20901500"},
            "2024-01-03": {"4. close": "370.6000", "5. volume": "23083500"},
        },
    }


@pytest.fixture()
def finnhub_quote_payload() -> dict[str, Any]:
    """Finnhub /quote response for TSLA with explicit change fields."""
    return {
        "c": 248.5,
        "d": -8.75,
        "dp": -3.4014,
        "h": 258.4,
        "l": 247.1,
        "o": 256.9,
        "pc": 257.25,
        "t": 1704488400,
    }


@pytest.fixture()
def finnhub_candle_payload() -> dict[str, Any]:
    """Finnhub /stock/candle response for NVDA (2024-01-01 .. 2024-01-03)."""
    return {
        "s": "ok",
        "t": [1704067200, 1704153600, 1704240000],
        "o": [480.0, 492.0, 478.0],
        "h": [495.0, 494.0, 485.0],
        "l": [478.0, 475.0, 470.0],
        "c": [490.0, 481.5, 475.7],
        "v": [41_000_000, 39_500_000, 45_120_000],
    }


@pytest.fixture()
def aapl_record() -> QuoteRecord:
    """AAPL gaining on the day."""
    return QuoteRecord(
        symbol="AAPL",
        name="Apple Inc.",
        price=Decimal("175.43"),
        change=Decimal("2.15"),
        change_percent=1.24,
        volume=52_340_000,
    )


@pytest.fixture()
def tsla_record() -> QuoteRecord:
    """TSLA losing on the day."""
    return QuoteRecord(
        symbol="TSLA",
        name="Tesla, Inc.",
        price=Decimal("248.50"),
        change=Decimal("-8.75"),
        change_percent=-3.40,
        volume=98_000_000,
    )


@pytest.fixture()
def sample_records(aapl_record: QuoteRecord, tsla_record: QuoteRecord) -> list[QuoteRecord]:
    """A four-symbol batch with a gainer, a loser, a flat record and a market cap."""
    return [
        aapl_record,
        tsla_record,
        QuoteRecord(
            symbol="MSFT",
            name="Microsoft Corporation",
            price=Decimal("367.75"),
            change=Decimal("0"),
            change_percent=0.0,
            volume=20_987_000,
            market_cap=Decimal("2730000000000"),
        ),
        QuoteRecord(
            symbol="NVDA",
            name="NVIDIA Corporation",
            price=Decimal("475.70"),
            change=Decimal("-5.80"),
            change_percent=-1.20,
            volume=45_120_000,
        ),
    ]


@pytest.fixture()
def settings() -> Settings:
    """Settings with keys configured and the default Alpha Vantage providers."""
    return Settings(
        alpha_vantage_api_key="test_av_key",
        finnhub_api_key="test_finnhub_key",
        quote_provider=Provider.ALPHA_VANTAGE_INTRADAY,
        chart_provider=Provider.ALPHA_VANTAGE_INTRADAY,
        symbols=("AAPL", "TSLA", "MSFT"),
    )
