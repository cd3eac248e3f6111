"""Runtime configuration read from the environment.

The API keys are passed through untouched: a missing key is not an error
here, it simply makes every upstream call fail, which the dashboard then
reports as a total batch failure.
"""

from __future__ import annotations

import logging
import math
import os
from collections.abc import Mapping
from typing import Final

from pydantic import BaseModel, ConfigDict, Field

from Stock_Tracker.models.enums import Provider

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_SYMBOLS: Final[tuple[str, ...]] = ("AAPL", "MSFT", "GOOGL", "TSLA", "AMZN", "NVDA")

COMPANY_NAMES: Final[dict[str, str]] = {
    "AAPL": "Apple Inc.",
    "MSFT": "Microsoft Corporation",
    "GOOGL": "Alphabet Inc.",
    "TSLA": "Tesla, Inc.",
    "AMZN": "Amazon.com Inc.",
    "NVDA": "NVIDIA Corporation",
}

DEFAULT_INTRADAY_INTERVAL: Final[str] = "5min"
DEFAULT_CANDLE_LOOKBACK_DAYS: Final[int] = 30
DEFAULT_TIMEOUT_SECONDS: Final[float] = 30.0

ENV_ALPHA_VANTAGE_KEY: Final[str] = "ALPHA_VANTAGE_API_KEY"
ENV_FINNHUB_KEY: Final[str] = "FINNHUB_API_KEY"
ENV_QUOTE_PROVIDER: Final[str] = "STOCK_TRACKER_QUOTE_PROVIDER"
ENV_CHART_PROVIDER: Final[str] = "STOCK_TRACKER_CHART_PROVIDER"
ENV_SYMBOLS: Final[str] = "STOCK_TRACKER_SYMBOLS"
ENV_TIMEOUT: Final[str] = "STOCK_TRACKER_TIMEOUT"
ENV_INTERVAL: Final[str] = "STOCK_TRACKER_INTERVAL"


class Settings(BaseModel):
    """Immutable dashboard configuration."""

    model_config = ConfigDict(frozen=True)

    alpha_vantage_api_key: str | None = None
    finnhub_api_key: str | None = None
    quote_provider: Provider = Provider.ALPHA_VANTAGE_INTRADAY
    chart_provider: Provider = Provider.ALPHA_VANTAGE_INTRADAY
    symbols: tuple[str, ...] = Field(default=DEFAULT_SYMBOLS, min_length=1)
    intraday_interval: str = DEFAULT_INTRADAY_INTERVAL
    candle_lookback_days: int = Field(default=DEFAULT_CANDLE_LOOKBACK_DAYS, gt=0)
    timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)

    def api_key_for(self, provider: Provider) -> str | None:
        """Return the key for the upstream family *provider* belongs to."""
        if provider in (Provider.FINNHUB_QUOTE, Provider.FINNHUB_CANDLE):
            return self.finnhub_api_key
        return self.alpha_vantage_api_key


def parse_symbols(raw: str) -> tuple[str, ...]:
    """Split a comma-separated symbol list, uppercasing and dropping duplicates."""
    seen: dict[str, None] = {}
    for part in raw.split(","):
        symbol = part.strip().upper()
        if symbol:
            seen.setdefault(symbol, None)
    return tuple(seen)


def company_name(symbol: str) -> str:
    """Human-readable name for *symbol*, falling back to the symbol itself."""
    return COMPANY_NAMES.get(symbol, symbol)


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build ``Settings`` from environment variables.

    Unknown provider names fall back to the default with a warning rather
    than aborting startup.
    """
    env = os.environ if environ is None else environ

    values: dict[str, object] = {
        "alpha_vantage_api_key": env.get(ENV_ALPHA_VANTAGE_KEY) or None,
        "finnhub_api_key": env.get(ENV_FINNHUB_KEY) or None,
    }

    provider_fields = (
        (ENV_QUOTE_PROVIDER, "quote_provider"),
        (ENV_CHART_PROVIDER, "chart_provider"),
    )
    for env_key, field in provider_fields:
        raw_provider = env.get(env_key)
        if not raw_provider:
            continue
        try:
            values[field] = Provider(raw_provider.strip().lower())
        except ValueError:
            logger.warning("Ignoring unknown provider %s=%r", env_key, raw_provider)

    raw_symbols = env.get(ENV_SYMBOLS)
    if raw_symbols:
        symbols = parse_symbols(raw_symbols)
        if symbols:
            values["symbols"] = symbols

    raw_timeout = env.get(ENV_TIMEOUT)
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError:
            logger.warning("Ignoring non-numeric %s=%r", ENV_TIMEOUT, raw_timeout)
        else:
            if math.isfinite(timeout) and timeout > 0:
                values["timeout_seconds"] = timeout
            else:
                logger.warning("Ignoring out-of-range %s=%r", ENV_TIMEOUT, raw_timeout)

    interval = env.get(ENV_INTERVAL)
    if interval:
        values["intraday_interval"] = interval.strip()

    settings = Settings.model_validate(values)
    logger.debug(
        "Settings loaded: quote_provider=%s chart_provider=%s symbols=%s",
        settings.quote_provider,
        settings.chart_provider,
        ",".join(settings.symbols),
    )
    return settings
