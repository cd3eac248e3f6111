"""Batch fetch orchestrator: one concurrent fetch+normalize per symbol.

Each symbol's attempt is isolated. A transport error and an unusable
payload both just leave that symbol out of the batch; the ``on_failure``
hook receives the distinguishing ``FailureKind`` for callers that want
to treat them differently later (e.g. retry policy).
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import Any

from Stock_Tracker.analysis.normalization import normalize_quote
from Stock_Tracker.models.dashboard import BatchResult
from Stock_Tracker.models.enums import FailureKind, Provider
from Stock_Tracker.models.market_data import QuoteRecord

logger = logging.getLogger(__name__)

PayloadFetcher = Callable[[str], Awaitable[Any]]
FailureHook = Callable[[str, FailureKind, BaseException | None], None]


class _UnusablePayload(Exception):
    """Internal marker: the fetch worked but the payload had no usable quote."""


def _log_failure(symbol: str, kind: FailureKind, exc: BaseException | None) -> None:
    if kind == FailureKind.TRANSPORT:
        logger.warning("Quote fetch failed for %s: %s", symbol, exc)
    else:
        logger.warning("Quote payload for %s was unusable", symbol)


def unique_symbols(symbols: Iterable[str]) -> list[str]:
    """Uppercase, strip, and de-duplicate *symbols*, keeping first occurrences."""
    seen: dict[str, None] = {}
    for symbol in symbols:
        cleaned = symbol.strip().upper()
        if cleaned:
            seen.setdefault(cleaned, None)
    return list(seen)


async def fetch_all(
    symbols: Iterable[str],
    fetch_payload: PayloadFetcher,
    provider: Provider,
    *,
    on_failure: FailureHook | None = None,
) -> BatchResult:
    """Fetch and normalize every symbol concurrently.

    Waits for every attempt before returning, so callers swap from
    "loading" to the complete batch in one step.

    Args:
        symbols: Tracked symbols; duplicates are collapsed.
        fetch_payload: Coroutine function returning the decoded payload
            for one symbol (e.g. ``MarketDataClient.fetch_quote_payload``).
        provider: Tag the payloads are normalized with.
        on_failure: Called once per dropped symbol with its failure kind
            and the exception, if any. Defaults to a WARNING log line.

    Returns:
        ``BatchResult`` with the surviving records and the dropped symbols.
    """
    requested = unique_symbols(symbols)
    hook = on_failure or _log_failure

    async def attempt(symbol: str) -> QuoteRecord:
        payload = await fetch_payload(symbol)
        record = normalize_quote(symbol, payload, provider)
        if record is None:
            raise _UnusablePayload(symbol)
        return record

    results: list[QuoteRecord | BaseException] = await asyncio.gather(
        *(attempt(symbol) for symbol in requested),
        return_exceptions=True,
    )

    records: list[QuoteRecord] = []
    failures: dict[str, FailureKind] = {}
    for symbol, result in zip(requested, results, strict=True):
        if isinstance(result, QuoteRecord):
            records.append(result)
            continue
        if isinstance(result, asyncio.CancelledError):
            raise result
        if isinstance(result, _UnusablePayload):
            failures[symbol] = FailureKind.UNUSABLE_PAYLOAD
            hook(symbol, FailureKind.UNUSABLE_PAYLOAD, None)
        else:
            failures[symbol] = FailureKind.TRANSPORT
            hook(symbol, FailureKind.TRANSPORT, result)

    logger.info(
        "Batch quote fetch complete: %d of %d symbols succeeded",
        len(records),
        len(requested),
    )
    return BatchResult(requested=requested, records=records, failures=failures)
