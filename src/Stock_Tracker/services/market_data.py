"""Upstream transport for quote and chart-series payloads.

Issues one HTTP GET per call against the configured provider and returns
the decoded JSON untouched. Interpreting the payload is left to
``Stock_Tracker.analysis``. Nothing here retries: a failed call raises and
the caller decides what that means for the batch.
"""

from __future__ import annotations

import datetime
import logging
from typing import Any, Final

import httpx

from Stock_Tracker.analysis.providers import get_shape
from Stock_Tracker.config import Settings
from Stock_Tracker.models.enums import Provider
from Stock_Tracker.utils.exceptions import (
    DataSourceUnavailableError,
    RateLimitExceededError,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

ALPHA_VANTAGE_URL: Final[str] = "https://www.alphavantage.co/query"
FINNHUB_QUOTE_URL: Final[str] = "https://finnhub.io/api/v1/quote"
FINNHUB_CANDLE_URL: Final[str] = "https://finnhub.io/api/v1/stock/candle"

FINNHUB_CANDLE_RESOLUTION: Final[str] = "D"

HTTP_OK: Final[int] = 200
HTTP_TOO_MANY_REQUESTS: Final[int] = 429


class MarketDataClient:
    """Async HTTP client for the quote and chart-series upstreams.

    Usage::

        client = MarketDataClient(load_settings())
        payload = await client.fetch_quote_payload("AAPL")
        series = await client.fetch_series_payload("AAPL")
        await client.aclose()
    """

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(settings.timeout_seconds, connect=5.0),
            limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
        )

        logger.info(
            "MarketDataClient initialized: quote=%s chart=%s alpha_vantage_key=%s finnhub_key=%s",
            settings.quote_provider,
            settings.chart_provider,
            "configured" if settings.alpha_vantage_api_key else "not configured",
            "configured" if settings.finnhub_api_key else "not configured",
        )

    @property
    def settings(self) -> Settings:
        return self._settings

    async def aclose(self) -> None:
        """Close the shared httpx client."""
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def fetch_quote_payload(self, symbol: str) -> Any:
        """Fetch the raw quote payload for *symbol* from the quote provider.

        Raises:
            DataSourceUnavailableError: On transport errors, non-200 status
                codes, or a body that is not JSON.
            RateLimitExceededError: On HTTP 429.
        """
        return await self.fetch_payload(symbol, self._settings.quote_provider)

    async def fetch_series_payload(self, symbol: str) -> Any:
        """Fetch the raw chart-series payload for *symbol* from the chart provider."""
        return await self.fetch_payload(symbol, self._settings.chart_provider)

    async def fetch_payload(self, symbol: str, provider: Provider) -> Any:
        """Issue one GET for *symbol* against *provider* and decode the JSON body."""
        url, params = self.build_request(symbol, provider)
        source = get_shape(provider).source

        try:
            response = await self._client.get(url, params=params)
        except httpx.HTTPError as exc:
            msg = f"{source} request for {symbol} failed: {exc}"
            raise DataSourceUnavailableError(msg, ticker=symbol, source=source) from exc

        if response.status_code == HTTP_TOO_MANY_REQUESTS:
            msg = f"{source} rate limit hit while fetching {symbol}."
            raise RateLimitExceededError(
                msg,
                ticker=symbol,
                source=source,
                http_status=response.status_code,
            )
        if response.status_code != HTTP_OK:
            msg = f"{source} returned HTTP {response.status_code} for {symbol}."
            raise DataSourceUnavailableError(
                msg,
                ticker=symbol,
                source=source,
                http_status=response.status_code,
            )

        try:
            return response.json()
        except ValueError as exc:
            msg = f"{source} returned a non-JSON body for {symbol}."
            raise DataSourceUnavailableError(
                msg,
                ticker=symbol,
                source=source,
                http_status=response.status_code,
            ) from exc

    def build_request(self, symbol: str, provider: Provider) -> tuple[str, dict[str, str]]:
        """Return the URL and query parameters for *symbol* on *provider*."""
        symbol = symbol.strip().upper()
        api_key = self._settings.api_key_for(provider) or ""

        if provider == Provider.ALPHA_VANTAGE_INTRADAY:
            return ALPHA_VANTAGE_URL, {
                "function": "TIME_SERIES_INTRADAY",
                "symbol": symbol,
                "interval": self._settings.intraday_interval,
                "apikey": api_key,
            }
        if provider == Provider.ALPHA_VANTAGE_DAILY:
            return ALPHA_VANTAGE_URL, {
                "function": "TIME_SERIES_DAILY",
                "symbol": symbol,
                "apikey": api_key,
            }
        if provider == Provider.FINNHUB_QUOTE:
            return FINNHUB_QUOTE_URL, {"symbol": symbol, "token": api_key}

        now = datetime.datetime.now(datetime.UTC)
        start = now - datetime.timedelta(days=self._settings.candle_lookback_days)
        return FINNHUB_CANDLE_URL, {
            "symbol": symbol,
            "resolution": FINNHUB_CANDLE_RESOLUTION,
            "from": str(int(start.timestamp())),
            "to": str(int(now.timestamp())),
            "token": api_key,
        }
