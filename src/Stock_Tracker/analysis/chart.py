"""Chart series builder: raw series payload -> plot-ready points, oldest first."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from Stock_Tracker.analysis._parsing import finite_decimal
from Stock_Tracker.analysis.providers import get_shape
from Stock_Tracker.models.enums import Provider
from Stock_Tracker.models.market_data import ChartPoint

logger = logging.getLogger(__name__)


def build_series(payload: object, provider: Provider) -> list[ChartPoint]:
    """Build an oldest-to-newest price series from a decoded upstream payload.

    Newest-first providers are reversed; candle arrays are already
    chronological and are paired index-wise. A point whose close does not
    parse is dropped on its own. An empty or error payload yields ``[]``,
    which callers render as "no chart data" rather than as a failure.
    """
    if not isinstance(payload, Mapping):
        return []

    shape = get_shape(provider)
    raw_points = shape.extract_series(payload)
    if shape.newest_first:
        raw_points = raw_points[::-1]

    points: list[ChartPoint] = []
    for raw in raw_points:
        price = finite_decimal(raw.close)
        if price is None:
            logger.debug("Skipping chart point %s: unparseable close %r", raw.label, raw.close)
            continue
        points.append(ChartPoint(label=raw.label, price=price))

    logger.debug("Built %d chart points from %s payload", len(points), provider)
    return points
