"""Batch and snapshot models exchanged between the session and its renderers."""

import datetime

from pydantic import BaseModel, ConfigDict, computed_field

from Stock_Tracker.models.enums import FailureKind
from Stock_Tracker.models.market_data import ChartPoint, QuoteRecord
from Stock_Tracker.models.view import DashboardView, ViewState


class BatchResult(BaseModel):
    """Outcome of one fetch cycle across every tracked symbol.

    ``records`` carries no ordering guarantee; the view-state engine
    re-orders them for display.
    """

    model_config = ConfigDict(frozen=True)

    requested: list[str]
    records: list[QuoteRecord]
    failures: dict[str, FailureKind]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def all_failed(self) -> bool:
        """True when no requested symbol produced a record."""
        return not self.records


class DashboardSnapshot(BaseModel):
    """Read-only model handed to the presentation layer."""

    model_config = ConfigDict(frozen=True)

    view: DashboardView
    view_state: ViewState
    tracked_symbols: list[str]
    chart: list[ChartPoint]
    loading: bool
    chart_loading: bool
    error: str | None = None
    chart_error: str | None = None
    last_refreshed: datetime.datetime | None = None
    generation: int = 0
