"""Per-provider field extraction, dispatched by an explicit ``Provider`` tag.

Each upstream response shape gets one ``ProviderShape`` entry carrying its
own extraction functions. Callers always name the provider; payloads are
never identified by sniffing their structure.

Shapes handled:

* Alpha Vantage intraday / daily: ``{"Meta Data": {...}, "Time Series (5min)":
  {"2024-01-05 16:00:00": {"4. close": "185.6400", "5. volume": "..."}}}``,
  newest first.
* Finnhub quote: flat ``{"c": 185.64, "d": 1.2, "dp": 0.65, "pc": 184.44}``.
* Finnhub candle: parallel arrays ``{"s": "ok", "t": [...], "c": [...],
  "v": [...]}`` in chronological order.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Final

from Stock_Tracker.analysis._parsing import finite_decimal, finite_float, safe_volume
from Stock_Tracker.models.enums import Provider
from Stock_Tracker.models.market_data import RawSeriesPoint

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

ALPHA_VANTAGE_SOURCE: Final[str] = "alpha_vantage"
FINNHUB_SOURCE: Final[str] = "finnhub"

AV_META_KEY: Final[str] = "Meta Data"
AV_SERIES_PREFIX: Final[str] = "Time Series ("
AV_DAILY_KEY: Final[str] = "Time Series (Daily)"
AV_CLOSE_FIELD: Final[str] = "4. close"
AV_VOLUME_FIELD: Final[str] = "5. volume"
# Alpha Vantage answers HTTP 200 with one of these instead of data
AV_ERROR_KEYS: Final[tuple[str, ...]] = ("Error Message", "Note", "Information")

FINNHUB_OK_STATUS: Final[str] = "ok"
CANDLE_LABEL_FORMAT: Final[str] = "%Y-%m-%d"


@dataclass(frozen=True)
class QuoteFields:
    """Raw quote values pulled out of one payload, before reconciliation.

    ``change`` / ``change_percent`` are set only when the provider supplies
    them explicitly; otherwise they are derived from ``previous``.
    """

    price: Decimal
    previous: Decimal | None = None
    change: Decimal | None = None
    change_percent: float | None = None
    volume: int = 0
    market_cap: Decimal | None = None


@dataclass(frozen=True)
class ProviderShape:
    """One variant of the provider tagged union."""

    provider: Provider
    source: str
    newest_first: bool
    extract_quote: Callable[[Mapping[str, Any]], QuoteFields | None]
    extract_series: Callable[[Mapping[str, Any]], list[RawSeriesPoint]]


# ---------------------------------------------------------------------------
# Alpha Vantage
# ---------------------------------------------------------------------------


def _av_has_error(payload: Mapping[str, Any]) -> bool:
    for key in AV_ERROR_KEYS:
        if key in payload:
            logger.debug("Alpha Vantage returned %r: %s", key, payload[key])
            return True
    return False


def _av_entries(
    payload: Mapping[str, Any],
    series_key: str | None,
) -> list[tuple[str, Mapping[str, Any]]]:
    """Return (timestamp, values) pairs newest first, or [] if unusable.

    With ``series_key=None`` the first intraday ``Time Series (...)`` key is
    used, since its suffix depends on the requested interval.
    """
    if _av_has_error(payload) or not isinstance(payload.get(AV_META_KEY), Mapping):
        return []

    if series_key is None:
        series_key = next(
            (
                key
                for key in payload
                if isinstance(key, str)
                and key.startswith(AV_SERIES_PREFIX)
                and key != AV_DAILY_KEY
            ),
            None,
        )
        if series_key is None:
            return []

    series = payload.get(series_key)
    if not isinstance(series, Mapping):
        return []

    entries = [
        (str(label), values) for label, values in series.items() if isinstance(values, Mapping)
    ]
    # ISO timestamps order lexicographically; this is the native newest-first order
    entries.sort(key=lambda entry: entry[0], reverse=True)
    return entries


def _av_quote(series_key: str | None) -> Callable[[Mapping[str, Any]], QuoteFields | None]:
    def extract(payload: Mapping[str, Any]) -> QuoteFields | None:
        entries = _av_entries(payload, series_key)
        if len(entries) < 2:
            return None
        (_, latest), (_, prior) = entries[0], entries[1]
        price = finite_decimal(latest.get(AV_CLOSE_FIELD))
        if price is None:
            return None
        return QuoteFields(
            price=price,
            previous=finite_decimal(prior.get(AV_CLOSE_FIELD)),
            volume=safe_volume(latest.get(AV_VOLUME_FIELD)),
        )

    return extract


def _av_series(series_key: str | None) -> Callable[[Mapping[str, Any]], list[RawSeriesPoint]]:
    def extract(payload: Mapping[str, Any]) -> list[RawSeriesPoint]:
        return [
            RawSeriesPoint(label=label, close=_raw_close(values.get(AV_CLOSE_FIELD)))
            for label, values in _av_entries(payload, series_key)
        ]

    return extract


# ---------------------------------------------------------------------------
# Finnhub
# ---------------------------------------------------------------------------


def _finnhub_quote(payload: Mapping[str, Any]) -> QuoteFields | None:
    price = payload.get("c")
    # The current price must be a JSON number here, not text
    if isinstance(price, bool) or not isinstance(price, int | float):
        return None
    parsed_price = finite_decimal(price)
    if parsed_price is None:
        return None
    return QuoteFields(
        price=parsed_price,
        previous=finite_decimal(payload.get("pc")),
        change=finite_decimal(payload.get("d")),
        change_percent=finite_float(payload.get("dp")),
    )


def _candle_arrays(payload: Mapping[str, Any]) -> tuple[list[Any], list[Any], list[Any]]:
    if payload.get("s") != FINNHUB_OK_STATUS:
        return [], [], []
    timestamps, closes, volumes = payload.get("t"), payload.get("c"), payload.get("v")
    if not isinstance(timestamps, list) or not isinstance(closes, list):
        return [], [], []
    if len(timestamps) != len(closes):
        logger.debug(
            "Candle arrays differ in length (t=%d, c=%d); pairing the overlap",
            len(timestamps),
            len(closes),
        )
    return timestamps, closes, volumes if isinstance(volumes, list) else []


def _candle_label(timestamp: object) -> str | None:
    if isinstance(timestamp, bool) or not isinstance(timestamp, int | float):
        return None
    try:
        moment = datetime.datetime.fromtimestamp(timestamp, tz=datetime.UTC)
    except (OverflowError, OSError, ValueError):
        return None
    return moment.strftime(CANDLE_LABEL_FORMAT)


def _finnhub_candle_quote(payload: Mapping[str, Any]) -> QuoteFields | None:
    timestamps, closes, volumes = _candle_arrays(payload)
    count = min(len(timestamps), len(closes))
    if count < 2:
        return None
    price = finite_decimal(closes[count - 1])
    if price is None:
        return None
    return QuoteFields(
        price=price,
        previous=finite_decimal(closes[count - 2]),
        volume=safe_volume(volumes[count - 1]) if len(volumes) >= count else 0,
    )


def _finnhub_candle_series(payload: Mapping[str, Any]) -> list[RawSeriesPoint]:
    timestamps, closes, _ = _candle_arrays(payload)
    points: list[RawSeriesPoint] = []
    for timestamp, close in zip(timestamps, closes, strict=False):
        label = _candle_label(timestamp)
        if label is None:
            logger.debug("Skipping candle with unusable timestamp %r", timestamp)
            continue
        points.append(RawSeriesPoint(label=label, close=_raw_close(close)))
    return points


def _no_series(payload: Mapping[str, Any]) -> list[RawSeriesPoint]:
    return []


def _raw_close(value: object) -> str | float | int | None:
    if isinstance(value, str | float | int) and not isinstance(value, bool):
        return value
    return None


# ---------------------------------------------------------------------------
# Dispatch table
# ---------------------------------------------------------------------------

PROVIDER_SHAPES: Final[dict[Provider, ProviderShape]] = {
    Provider.ALPHA_VANTAGE_INTRADAY: ProviderShape(
        provider=Provider.ALPHA_VANTAGE_INTRADAY,
        source=ALPHA_VANTAGE_SOURCE,
        newest_first=True,
        extract_quote=_av_quote(None),
        extract_series=_av_series(None),
    ),
    Provider.ALPHA_VANTAGE_DAILY: ProviderShape(
        provider=Provider.ALPHA_VANTAGE_DAILY,
        source=ALPHA_VANTAGE_SOURCE,
        newest_first=True,
        extract_quote=_av_quote(AV_DAILY_KEY),
        extract_series=_av_series(AV_DAILY_KEY),
    ),
    Provider.FINNHUB_QUOTE: ProviderShape(
        provider=Provider.FINNHUB_QUOTE,
        source=FINNHUB_SOURCE,
        newest_first=False,
        extract_quote=_finnhub_quote,
        extract_series=_no_series,
    ),
    Provider.FINNHUB_CANDLE: ProviderShape(
        provider=Provider.FINNHUB_CANDLE,
        source=FINNHUB_SOURCE,
        newest_first=False,
        extract_quote=_finnhub_candle_quote,
        extract_series=_finnhub_candle_series,
    ),
}


def get_shape(provider: Provider) -> ProviderShape:
    """Return the extraction variant registered for *provider*."""
    return PROVIDER_SHAPES[Provider(provider)]
