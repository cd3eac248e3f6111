"""Tests for DashboardSession: refresh cycles, fencing, and view-state mutators.

The MarketDataClient is replaced with a MagicMock whose fetch methods are
AsyncMocks. Fencing tests hold fetches open with asyncio.Event so refreshes
can be completed out of order deterministically.
"""

from __future__ import annotations

import asyncio
from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from Stock_Tracker.config import Settings
from Stock_Tracker.models import Provider, SortDirection, SortKey, ViewState
from Stock_Tracker.services.dashboard import (
    CHART_ERROR_MESSAGE,
    TABLE_ERROR_MESSAGE,
    DashboardSession,
)
from Stock_Tracker.utils.exceptions import DataSourceUnavailableError, UnknownSymbolError

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _quote(price: float, previous: float) -> dict[str, float]:
    return {"c": price, "pc": previous}


def _down(symbol: str) -> DataSourceUnavailableError:
    return DataSourceUnavailableError("down", ticker=symbol, source="finnhub")


@pytest.fixture()
def finnhub_settings(settings: Settings) -> Settings:
    return settings.model_copy(
        update={
            "quote_provider": Provider.FINNHUB_QUOTE,
            "chart_provider": Provider.FINNHUB_CANDLE,
        }
    )


@pytest.fixture()
def client(finnhub_settings: Settings, finnhub_candle_payload: dict[str, Any]) -> MagicMock:
    """Mock client: every quote succeeds, the chart returns a 3-point candle."""
    mock = MagicMock()
    mock.settings = finnhub_settings
    mock.fetch_quote_payload = AsyncMock(
        side_effect=lambda symbol: {
            "AAPL": _quote(175.43, 173.28),
            "TSLA": _quote(248.5, 257.25),
            "MSFT": _quote(367.75, 367.94),
        }[symbol]
    )
    mock.fetch_series_payload = AsyncMock(return_value=finnhub_candle_payload)
    return mock


@pytest.fixture()
def session(client: MagicMock) -> DashboardSession:
    return DashboardSession(client)


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestConstruction:
    def test_initial_state(self, session: DashboardSession) -> None:
        snapshot = session.snapshot()

        assert session.tracked_symbols == ("AAPL", "TSLA", "MSFT")
        assert snapshot.view_state.selected_symbol == "AAPL"
        assert snapshot.view.display == []
        assert snapshot.view.summary.record_count == 0
        assert snapshot.error is None
        assert snapshot.loading is False
        assert snapshot.generation == 0

    def test_preset_view_state(self, client: MagicMock) -> None:
        state = ViewState(
            filter_term="ms",
            sort_key=SortKey.PRICE,
            sort_direction=SortDirection.DESCENDING,
            selected_symbol="msft",
        )

        session = DashboardSession(client, view_state=state)

        assert session.state.selected_symbol == "MSFT"
        assert session.state.sort_key == SortKey.PRICE
        assert session.state.filter_term == "ms"

    def test_preset_untracked_symbol_rejected(self, client: MagicMock) -> None:
        with pytest.raises(UnknownSymbolError):
            DashboardSession(client, view_state=ViewState(selected_symbol="GME"))


# ---------------------------------------------------------------------------
# Quote refresh
# ---------------------------------------------------------------------------


class TestRefresh:
    @pytest.mark.asyncio()
    async def test_success_replaces_records(self, session: DashboardSession) -> None:
        batch = await session.refresh()

        assert batch is not None
        snapshot = session.snapshot()
        assert [r.symbol for r in snapshot.view.display] == ["AAPL", "MSFT", "TSLA"]
        assert snapshot.error is None
        assert snapshot.loading is False
        assert snapshot.last_refreshed is not None
        assert snapshot.generation == 1

    @pytest.mark.asyncio()
    async def test_partial_failure_is_not_an_error(
        self, session: DashboardSession, client: MagicMock
    ) -> None:
        client.fetch_quote_payload.side_effect = lambda symbol: (
            _quote(10.0, 9.0) if symbol != "TSLA" else None
        )

        await session.refresh()

        snapshot = session.snapshot()
        assert [r.symbol for r in snapshot.view.display] == ["AAPL", "MSFT"]
        assert snapshot.error is None

    @pytest.mark.asyncio()
    async def test_total_failure_keeps_previous_records(
        self, session: DashboardSession, client: MagicMock
    ) -> None:
        await session.refresh()
        first_refresh = session.snapshot().last_refreshed

        async def fail(symbol: str) -> None:
            raise _down(symbol)

        client.fetch_quote_payload.side_effect = fail
        batch = await session.refresh()

        assert batch is not None
        assert batch.all_failed is True
        snapshot = session.snapshot()
        assert snapshot.error == TABLE_ERROR_MESSAGE
        assert len(snapshot.view.display) == 3
        assert snapshot.last_refreshed == first_refresh

    @pytest.mark.asyncio()
    async def test_error_cleared_by_next_success(
        self, session: DashboardSession, client: MagicMock
    ) -> None:
        original = client.fetch_quote_payload.side_effect
        client.fetch_quote_payload.side_effect = lambda symbol: None
        await session.refresh()
        assert session.snapshot().error == TABLE_ERROR_MESSAGE

        client.fetch_quote_payload.side_effect = original
        await session.refresh()

        assert session.snapshot().error is None

    @pytest.mark.asyncio()
    async def test_loading_flag_during_fetch(
        self, session: DashboardSession, client: MagicMock
    ) -> None:
        release = asyncio.Event()

        async def slow(symbol: str) -> dict[str, float]:
            await release.wait()
            return _quote(10.0, 9.0)

        client.fetch_quote_payload.side_effect = slow
        task = asyncio.create_task(session.refresh())
        await asyncio.sleep(0)

        assert session.snapshot().loading is True

        release.set()
        await task
        assert session.snapshot().loading is False

    @pytest.mark.asyncio()
    async def test_failure_hook_forwarded(self, client: MagicMock) -> None:
        hook = MagicMock()
        client.fetch_quote_payload.side_effect = lambda symbol: (
            None if symbol == "MSFT" else _quote(10.0, 9.0)
        )
        session = DashboardSession(client, on_failure=hook)

        await session.refresh()

        assert hook.call_count == 1
        assert hook.call_args.args[0] == "MSFT"


class TestFencing:
    """Overlapping refreshes: only the newest generation may commit."""

    @pytest.mark.asyncio()
    async def test_stale_batch_discarded(
        self, session: DashboardSession, client: MagicMock
    ) -> None:
        first_gate = asyncio.Event()
        calls = {"n": 0}

        async def fetch(symbol: str) -> dict[str, float]:
            # First refresh's fetches block; second refresh's complete at once
            calls["n"] += 1
            if calls["n"] <= 3:
                await first_gate.wait()
                return _quote(1.0, 2.0)
            return _quote(100.0, 90.0)

        client.fetch_quote_payload.side_effect = fetch

        stale_task = asyncio.create_task(session.refresh())
        await asyncio.sleep(0)
        fresh = await session.refresh()
        first_gate.set()
        stale = await stale_task

        assert fresh is not None
        assert stale is None
        snapshot = session.snapshot()
        assert all(r.price == Decimal(100) for r in snapshot.view.display)
        assert snapshot.generation == 2
        assert snapshot.loading is False

    @pytest.mark.asyncio()
    async def test_stale_chart_discarded(
        self, session: DashboardSession, client: MagicMock
    ) -> None:
        gate = asyncio.Event()
        aapl_payload = {"s": "ok", "t": [1704067200], "c": [1.0]}
        msft_payload = {"s": "ok", "t": [1704067200, 1704153600], "c": [367.0, 368.0]}

        async def fetch(symbol: str) -> dict[str, Any]:
            if symbol == "AAPL":
                await gate.wait()
                return aapl_payload
            return msft_payload

        client.fetch_series_payload.side_effect = fetch

        stale_task = asyncio.create_task(session.refresh_chart())
        await asyncio.sleep(0)
        session.select_symbol("MSFT")
        fresh = await session.refresh_chart()
        gate.set()
        stale = await stale_task

        assert stale is None
        assert fresh is not None
        assert [p.label for p in session.snapshot().chart] == ["2024-01-01", "2024-01-02"]


# ---------------------------------------------------------------------------
# Chart refresh
# ---------------------------------------------------------------------------


class TestRefreshChart:
    @pytest.mark.asyncio()
    async def test_builds_series_for_selected_symbol(
        self, session: DashboardSession, client: MagicMock
    ) -> None:
        points = await session.refresh_chart()

        client.fetch_series_payload.assert_awaited_once_with("AAPL")
        assert points is not None
        assert [p.label for p in points] == ["2024-01-01", "2024-01-02", "2024-01-03"]
        assert session.snapshot().chart_error is None

    @pytest.mark.asyncio()
    async def test_transport_failure_sets_chart_error_only(
        self, session: DashboardSession, client: MagicMock
    ) -> None:
        await session.refresh()
        client.fetch_series_payload.side_effect = _down("AAPL")

        result = await session.refresh_chart()

        snapshot = session.snapshot()
        assert result is None
        assert snapshot.chart == []
        assert snapshot.chart_error == CHART_ERROR_MESSAGE
        assert snapshot.error is None
        assert len(snapshot.view.display) == 3

    @pytest.mark.asyncio()
    async def test_unusable_series_is_empty_not_error(
        self, session: DashboardSession, client: MagicMock
    ) -> None:
        client.fetch_series_payload.return_value = {"s": "no_data"}

        points = await session.refresh_chart()

        assert points == []
        assert session.snapshot().chart_error is None

    @pytest.mark.asyncio()
    async def test_refresh_all_runs_both(self, session: DashboardSession, client: MagicMock) -> None:
        await session.refresh_all()

        snapshot = session.snapshot()
        assert len(snapshot.view.display) == 3
        assert len(snapshot.chart) == 3
        assert client.fetch_quote_payload.await_count == 3
        client.fetch_series_payload.assert_awaited_once()


# ---------------------------------------------------------------------------
# View-state mutators
# ---------------------------------------------------------------------------


class TestInteraction:
    @pytest.mark.asyncio()
    async def test_toggle_sort_and_filter_do_not_refetch(
        self, session: DashboardSession, client: MagicMock
    ) -> None:
        await session.refresh()

        session.toggle_sort(SortKey.CHANGE)
        session.toggle_sort(SortKey.CHANGE)
        session.set_filter("t")

        snapshot = session.snapshot()
        assert snapshot.view_state.sort_direction == SortDirection.DESCENDING
        assert {r.symbol for r in snapshot.view.display} == {"TSLA", "MSFT"}
        assert client.fetch_quote_payload.await_count == 3

    @pytest.mark.asyncio()
    async def test_summary_ignores_filter(self, session: DashboardSession) -> None:
        await session.refresh()

        session.set_filter("zzz")

        view = session.view()
        assert view.display == []
        assert view.summary.record_count == 3

    def test_select_unknown_symbol(self, session: DashboardSession) -> None:
        with pytest.raises(UnknownSymbolError):
            session.select_symbol("GME")
        assert session.state.selected_symbol == "AAPL"
