"""Dashboard session: owns the record batch, view state, and chart series.

The session is the single holder of mutable dashboard state. Renderers
only ever read ``snapshot()``; user interaction goes through
``toggle_sort``, ``set_filter`` and ``select_symbol``.

Every fetch cycle is stamped with a generation number. When overlapping
refreshes complete out of order, results from an older generation are
discarded instead of overwriting newer state.
"""

from __future__ import annotations

import asyncio
import datetime
import logging
from typing import Final

from Stock_Tracker.analysis.chart import build_series
from Stock_Tracker.analysis.view_state import (
    derive_from_state,
    initial_state,
    select_symbol,
    set_filter,
    toggle_sort,
)
from Stock_Tracker.models.dashboard import BatchResult, DashboardSnapshot
from Stock_Tracker.models.enums import SortKey
from Stock_Tracker.models.market_data import ChartPoint, QuoteRecord
from Stock_Tracker.models.view import DashboardView, ViewState
from Stock_Tracker.services.batch import FailureHook, fetch_all, unique_symbols
from Stock_Tracker.services.market_data import MarketDataClient
from Stock_Tracker.utils.exceptions import DataFetchError

logger = logging.getLogger(__name__)

TABLE_ERROR_MESSAGE: Final[str] = "Failed to fetch stock data. Please try again."
CHART_ERROR_MESSAGE: Final[str] = "Failed to load chart data."


class DashboardSession:
    """Stateful dashboard backed by a ``MarketDataClient``.

    Usage::

        session = DashboardSession(client)
        await session.refresh_all()
        session.toggle_sort(SortKey.CHANGE)
        session.set_filter("apple")
        snapshot = session.snapshot()
    """

    def __init__(
        self,
        client: MarketDataClient,
        *,
        view_state: ViewState | None = None,
        on_failure: FailureHook | None = None,
    ) -> None:
        self._client = client
        self._on_failure = on_failure
        self._symbols: tuple[str, ...] = tuple(unique_symbols(client.settings.symbols))
        self._state: ViewState = initial_state(self._symbols)
        if view_state is not None:
            # Re-validate the selection against this session's tracked set
            self._state = select_symbol(view_state, view_state.selected_symbol, self._symbols)

        self._records: list[QuoteRecord] = []
        self._chart: list[ChartPoint] = []
        self._loading = False
        self._chart_loading = False
        self._error: str | None = None
        self._chart_error: str | None = None
        self._last_refreshed: datetime.datetime | None = None

        self._generation = 0
        self._chart_generation = 0

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def tracked_symbols(self) -> tuple[str, ...]:
        return self._symbols

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def records(self) -> list[QuoteRecord]:
        return list(self._records)

    @property
    def generation(self) -> int:
        return self._generation

    def view(self) -> DashboardView:
        """Display list and summary for the current batch and view state."""
        return derive_from_state(self._records, self._state)

    def snapshot(self) -> DashboardSnapshot:
        """Everything a renderer needs, as one immutable model."""
        return DashboardSnapshot(
            view=self.view(),
            view_state=self._state,
            tracked_symbols=list(self._symbols),
            chart=list(self._chart),
            loading=self._loading,
            chart_loading=self._chart_loading,
            error=self._error,
            chart_error=self._chart_error,
            last_refreshed=self._last_refreshed,
            generation=self._generation,
        )

    # ------------------------------------------------------------------
    # User interaction
    # ------------------------------------------------------------------

    def toggle_sort(self, key: SortKey) -> ViewState:
        """Sort-column click: flip direction on the active column, else switch."""
        self._state = toggle_sort(self._state, key)
        logger.debug("Sort -> %s %s", self._state.sort_key, self._state.sort_direction)
        return self._state

    def set_filter(self, term: str) -> ViewState:
        """Replace the free-text filter."""
        self._state = set_filter(self._state, term)
        return self._state

    def select_symbol(self, symbol: str) -> ViewState:
        """Change the charted symbol; call ``refresh_chart()`` to load it.

        Raises:
            UnknownSymbolError: If *symbol* is not tracked.
        """
        self._state = select_symbol(self._state, symbol, self._symbols)
        return self._state

    # ------------------------------------------------------------------
    # Fetch cycles
    # ------------------------------------------------------------------

    async def refresh_all(self) -> None:
        """Refresh the quote table and the chart concurrently."""
        await asyncio.gather(self.refresh(), self.refresh_chart())

    async def refresh(self) -> BatchResult | None:
        """Run one fetch -> normalize cycle over every tracked symbol.

        A batch with at least one record replaces the previous batch
        entirely. A batch where every symbol failed sets the table error
        and keeps the last good batch on screen.

        Returns:
            The batch, or ``None`` if a newer refresh started meanwhile and
            this result was discarded.
        """
        self._generation += 1
        generation = self._generation
        self._loading = True
        self._error = None

        try:
            batch = await fetch_all(
                self._symbols,
                self._client.fetch_quote_payload,
                self._client.settings.quote_provider,
                on_failure=self._on_failure,
            )
        finally:
            if generation == self._generation:
                self._loading = False

        if generation != self._generation:
            logger.debug(
                "Discarding stale batch (generation %d, current %d)",
                generation,
                self._generation,
            )
            return None

        if batch.all_failed:
            self._error = TABLE_ERROR_MESSAGE
            logger.error("All %d quote fetches failed", len(batch.requested))
        else:
            self._records = list(batch.records)
            self._last_refreshed = datetime.datetime.now(datetime.UTC)
        return batch

    async def refresh_chart(self) -> list[ChartPoint] | None:
        """Fetch and build the series for the selected symbol.

        Transport failures set the chart-only error; an empty series is a
        valid result that renders as "no chart data".

        Returns:
            The new points, or ``None`` if the result was stale or failed.
        """
        self._chart_generation += 1
        generation = self._chart_generation
        symbol = self._state.selected_symbol
        self._chart_loading = True
        self._chart_error = None

        try:
            payload = await self._client.fetch_series_payload(symbol)
        except DataFetchError as exc:
            if generation != self._chart_generation:
                return None
            logger.warning("Chart fetch failed for %s: %s", symbol, exc)
            self._chart = []
            self._chart_error = CHART_ERROR_MESSAGE
            return None
        finally:
            if generation == self._chart_generation:
                self._chart_loading = False

        if generation != self._chart_generation:
            logger.debug("Discarding stale chart for %s (generation %d)", symbol, generation)
            return None

        self._chart = build_series(payload, self._client.settings.chart_provider)
        logger.info("Loaded %d chart points for %s", len(self._chart), symbol)
        return list(self._chart)
