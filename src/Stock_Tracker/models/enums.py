"""StrEnum types for the dashboard domain.

All enums use the stdlib StrEnum (Python 3.11+). Values are lowercase strings.
Use enum members in business logic, never raw strings.
"""

from enum import StrEnum


class Provider(StrEnum):
    """Upstream response shape a raw payload was decoded from.

    Each member selects its own field-extraction function; payloads are
    never sniffed structurally.
    """

    ALPHA_VANTAGE_INTRADAY = "alpha_vantage_intraday"
    ALPHA_VANTAGE_DAILY = "alpha_vantage_daily"
    FINNHUB_QUOTE = "finnhub_quote"
    FINNHUB_CANDLE = "finnhub_candle"


class SortKey(StrEnum):
    """Columns the quote table can be sorted by."""

    SYMBOL = "symbol"
    PRICE = "price"
    CHANGE = "change"
    VOLUME = "volume"


class SortDirection(StrEnum):
    """Sort order for the quote table."""

    ASCENDING = "ascending"
    DESCENDING = "descending"


class FailureKind(StrEnum):
    """Why a symbol contributed no record to a batch."""

    TRANSPORT = "transport"
    UNUSABLE_PAYLOAD = "unusable_payload"
