"""Custom exception hierarchy for the Stock Tracker application.

All transport-level exceptions inherit from DataFetchError, which carries
contextual information about which symbol and which upstream failed.
"""


class DataFetchError(Exception):
    """Base exception for all data-fetching failures.

    Attributes:
        ticker: The ticker symbol involved in the failure.
        source: The upstream that failed (e.g., "alpha_vantage", "finnhub").
        http_status: The HTTP status code, if the failure was HTTP-related.
    """

    def __init__(
        self,
        message: str,
        *,
        ticker: str,
        source: str,
        http_status: int | None = None,
    ) -> None:
        self.ticker = ticker
        self.source = source
        self.http_status = http_status
        super().__init__(message)


class DataSourceUnavailableError(DataFetchError):
    """Raised when an upstream is unreachable or returning errors."""


class RateLimitExceededError(DataFetchError):
    """Raised when the upstream signals that its rate limit has been hit."""


class UnknownSymbolError(ValueError):
    """Raised when a symbol outside the tracked set is selected for charting."""

    def __init__(self, symbol: str, tracked: tuple[str, ...]) -> None:
        self.symbol = symbol
        self.tracked = tracked
        super().__init__(f"'{symbol}' is not a tracked symbol (tracked: {', '.join(tracked)})")
