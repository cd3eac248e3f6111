"""Quote normalization: one raw upstream payload -> one ``QuoteRecord``.

A payload is usable only if it yields a numeric current price. Change
figures supplied by the provider are taken verbatim; missing ones are
derived against the previous reference price:

    change = price - previous
    change_percent = (price - previous) / previous * 100

Derivation against a zero or missing previous price makes the payload
unusable. Unusable payloads return ``None``: the symbol is simply absent
from the batch, it is never represented as an error record.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from decimal import Decimal

from pydantic import ValidationError

from Stock_Tracker.analysis.providers import QuoteFields, get_shape
from Stock_Tracker.config import company_name
from Stock_Tracker.models.enums import Provider
from Stock_Tracker.models.market_data import QuoteRecord

logger = logging.getLogger(__name__)

_HUNDRED = Decimal(100)


def normalize_quote(
    symbol: str,
    payload: object,
    provider: Provider,
    *,
    name: str | None = None,
) -> QuoteRecord | None:
    """Convert a decoded upstream payload into a ``QuoteRecord``.

    Args:
        symbol: Ticker the payload was fetched for.
        payload: Decoded JSON value; anything other than an object is unusable.
        provider: Tag selecting which fields of *payload* to read.
        name: Company name; defaults to the tracked-symbol name map, then
            to the symbol itself.

    Returns:
        The normalized record, or ``None`` if the payload is unusable.
    """
    symbol = symbol.strip().upper()
    if not isinstance(payload, Mapping):
        logger.debug("Unusable %s payload for %s: not an object", provider, symbol)
        return None

    fields = get_shape(provider).extract_quote(payload)
    if fields is None:
        logger.debug("Unusable %s payload for %s: no current price", provider, symbol)
        return None

    return build_record(symbol, fields, name=name or company_name(symbol))


def build_record(symbol: str, fields: QuoteFields, *, name: str) -> QuoteRecord | None:
    """Reconcile extracted fields into a record, or ``None`` if unusable."""
    if fields.price < 0:
        return None

    change = fields.change
    change_percent = fields.change_percent

    if change is None or change_percent is None:
        previous = fields.previous
        if previous is None or previous == 0:
            logger.debug("Cannot derive change for %s: previous price %s", symbol, previous)
            return None
        if change is None:
            change = fields.price - previous
        if change_percent is None:
            change_percent = float((fields.price - previous) / previous * _HUNDRED)

    if not math.isfinite(change_percent):
        return None

    try:
        return QuoteRecord(
            symbol=symbol,
            name=name,
            price=fields.price,
            change=change,
            change_percent=change_percent,
            volume=fields.volume,
            market_cap=fields.market_cap,
        )
    except ValidationError as exc:
        logger.debug("Rejected normalized quote for %s: %s", symbol, exc)
        return None
