"""Dashboard API routes.

GET  /api/dashboard          Snapshot (runs the initial load on first call).
POST /api/refresh            Re-fetch quotes and chart, return the snapshot.
POST /api/sort/{key}         Sort-column click (toggle semantics).
PUT  /api/filter             Replace the filter term.
PUT  /api/symbol/{symbol}    Select the charted symbol and reload the chart.
GET  /api/chart              Chart series for the selected symbol.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict

from Stock_Tracker.models.dashboard import DashboardSnapshot
from Stock_Tracker.models.enums import SortKey
from Stock_Tracker.models.market_data import ChartPoint
from Stock_Tracker.services.dashboard import DashboardSession
from Stock_Tracker.web.deps import get_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["dashboard"])

# ---------------------------------------------------------------------------
# Request / response models (web-layer schemas)
# ---------------------------------------------------------------------------


class FilterUpdate(BaseModel):
    """Body for ``PUT /api/filter``. The term is used as typed, untrimmed."""

    model_config = ConfigDict(frozen=True)

    term: str = ""


class ChartResponse(BaseModel):
    """Chart series for one symbol plus its panel-scoped error, if any."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    points: list[ChartPoint]
    error: str | None = None


# ---------------------------------------------------------------------------
# Route handlers
# ---------------------------------------------------------------------------


@router.get("/dashboard", response_model=DashboardSnapshot)
async def get_dashboard(
    session: Annotated[DashboardSession, Depends(get_session)],
) -> DashboardSnapshot:
    """Return the current snapshot, loading data first if nothing was fetched yet."""
    if session.generation == 0:
        logger.info("Initial dashboard load")
        await session.refresh_all()
    return session.snapshot()


@router.post("/refresh", response_model=DashboardSnapshot)
async def refresh(
    session: Annotated[DashboardSession, Depends(get_session)],
) -> DashboardSnapshot:
    """Manual refresh: re-run fetch -> normalize -> derive and the chart step."""
    await session.refresh_all()
    return session.snapshot()


@router.post("/sort/{key}", response_model=DashboardSnapshot)
async def sort(
    key: SortKey,
    session: Annotated[DashboardSession, Depends(get_session)],
) -> DashboardSnapshot:
    """Apply a sort-column click. Re-derives only; no fetch."""
    session.toggle_sort(key)
    return session.snapshot()


@router.put("/filter", response_model=DashboardSnapshot)
async def update_filter(
    body: FilterUpdate,
    session: Annotated[DashboardSession, Depends(get_session)],
) -> DashboardSnapshot:
    """Replace the filter term. Re-derives only; no fetch."""
    session.set_filter(body.term)
    return session.snapshot()


@router.put("/symbol/{symbol}", response_model=DashboardSnapshot)
async def select_symbol(
    symbol: str,
    session: Annotated[DashboardSession, Depends(get_session)],
) -> DashboardSnapshot:
    """Select the charted symbol and rebuild only the chart.

    ``UnknownSymbolError`` propagates to the middleware (HTTP 404).
    """
    session.select_symbol(symbol)
    await session.refresh_chart()
    return session.snapshot()


@router.get("/chart", response_model=ChartResponse)
async def get_chart(
    session: Annotated[DashboardSession, Depends(get_session)],
) -> ChartResponse:
    """Return the chart series for the currently selected symbol."""
    snapshot = session.snapshot()
    return ChartResponse(
        symbol=snapshot.view_state.selected_symbol,
        points=snapshot.chart,
        error=snapshot.chart_error,
    )
