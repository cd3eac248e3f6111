"""Market data models: canonical quote records and chart points.

Price fields use Decimal (constructed from strings) with custom
serializers to prevent silent float conversion in JSON roundtrips.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class QuoteRecord(BaseModel):
    """Provider-independent quote snapshot for one symbol.

    ``symbol`` is the identity of a record within a batch. ``volume`` is
    ``0`` when the provider does not expose it, while ``market_cap`` stays
    ``None`` when unknown so aggregate totals can exclude it.
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    symbol: str = Field(min_length=1)
    name: str
    price: Decimal = Field(ge=0)
    change: Decimal
    change_percent: float
    volume: int = Field(default=0, ge=0)
    market_cap: Decimal | None = Field(default=None, ge=0)

    @field_validator("symbol")
    @classmethod
    def upper_symbol(cls, value: str) -> str:
        """Tickers are stored uppercase."""
        return value.strip().upper()

    @field_serializer("price", "change")
    def serialize_decimal(self, value: Decimal) -> str:
        """Serialize Decimal fields as strings to preserve precision."""
        return str(value)

    @field_serializer("market_cap")
    def serialize_market_cap(self, value: Decimal | None) -> str | None:
        """Serialize market cap as a string, keeping ``None`` for unknown."""
        return None if value is None else str(value)


class RawSeriesPoint(BaseModel):
    """A provider-native (label, close) sample before numeric parsing."""

    model_config = ConfigDict(frozen=True)

    label: str
    close: str | float | int | None


class ChartPoint(BaseModel):
    """A plot-ready price sample. Sequences are ordered oldest first."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    label: str
    price: Decimal

    @field_serializer("price")
    def serialize_decimal(self, value: Decimal) -> str:
        """Serialize Decimal fields as strings to preserve precision."""
        return str(value)
