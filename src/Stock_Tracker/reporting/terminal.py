"""Rich-based terminal output for the dashboard snapshot.

Uses ``rich.console.Console`` for all output. Color scheme:
green = gainer, red = loser, yellow = warnings.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from decimal import Decimal

from rich.columns import Columns
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from Stock_Tracker.config import company_name
from Stock_Tracker.models.dashboard import DashboardSnapshot
from Stock_Tracker.models.enums import SortKey
from Stock_Tracker.models.market_data import ChartPoint
from Stock_Tracker.reporting.formatters import (
    format_change,
    format_change_percent,
    format_price,
    format_total_market_cap,
    format_volume,
    sort_indicator,
)

logger = logging.getLogger(__name__)

# Shared console instance for terminal output
console = Console()

# --- Color scheme ---
COLOR_GAIN: str = "green"
COLOR_LOSS: str = "red"
COLOR_WARNING: str = "yellow"
COLOR_HEADER: str = "bold cyan"
COLOR_MUTED: str = "dim"

PLACEHOLDER_CELL: str = "[dim]░░░░░░[/dim]"
NO_MATCHES_TEXT: str = "No stocks found matching your search."
NO_CHART_TEXT: str = "No chart data available."

SPARK_BLOCKS: str = "▁▂▃▄▅▆▇█"
SPARK_WIDTH: int = 60


def _change_color(value: Decimal | float) -> str:
    return COLOR_GAIN if value >= 0 else COLOR_LOSS


def render_summary(snapshot: DashboardSnapshot, out: Console | None = None) -> None:
    """Market overview cards: total market cap, gainers, losers."""
    out = out or console
    summary = snapshot.view.summary
    cards = [
        Panel(
            f"[bold]{format_total_market_cap(summary)}[/bold]\n"
            f"[{COLOR_MUTED}]Across {summary.record_count} tracked stocks[/{COLOR_MUTED}]",
            title="Total Market Cap",
        ),
        Panel(
            f"[bold {COLOR_GAIN}]{summary.gainer_count}[/bold {COLOR_GAIN}]\n"
            f"[{COLOR_MUTED}]Stocks with positive change[/{COLOR_MUTED}]",
            title="Gainers",
        ),
        Panel(
            f"[bold {COLOR_LOSS}]{summary.loser_count}[/bold {COLOR_LOSS}]\n"
            f"[{COLOR_MUTED}]Stocks with negative change[/{COLOR_MUTED}]",
            title="Losers",
        ),
    ]
    out.print(Columns(cards, equal=True, expand=True))

    if summary.top_gainer is not None and summary.top_loser is not None:
        out.print(
            f"  Top gainer: [{COLOR_GAIN}]{summary.top_gainer.symbol} "
            f"{format_change_percent(summary.top_gainer.change_percent)}[/{COLOR_GAIN}]"
            f"   Top loser: [{COLOR_LOSS}]{summary.top_loser.symbol} "
            f"{format_change_percent(summary.top_loser.change_percent)}[/{COLOR_LOSS}]"
        )


def build_quote_table(snapshot: DashboardSnapshot) -> Table:
    """Quote table with sort arrows; placeholder rows while loading."""
    state = snapshot.view_state
    table = Table(title="Stock Prices", title_style=COLOR_HEADER)
    table.add_column(f"Symbol {sort_indicator(state, SortKey.SYMBOL)}".rstrip(), style="bold")
    table.add_column("Company", style=COLOR_MUTED, max_width=30, no_wrap=True)
    table.add_column(f"Price {sort_indicator(state, SortKey.PRICE)}".rstrip(), justify="right")
    table.add_column(f"Change {sort_indicator(state, SortKey.CHANGE)}".rstrip(), justify="right")
    table.add_column(
        f"Volume {sort_indicator(state, SortKey.VOLUME)}".rstrip(),
        justify="right",
        style=COLOR_MUTED,
    )

    if snapshot.loading:
        for _ in snapshot.tracked_symbols:
            table.add_row(*([PLACEHOLDER_CELL] * 5))
        return table

    for record in snapshot.view.display:
        color = _change_color(record.change)
        pct_color = _change_color(record.change_percent)
        table.add_row(
            record.symbol,
            record.name,
            format_price(record.price),
            f"[{color}]{format_change(record.change)}[/{color}] "
            f"[{pct_color}]{format_change_percent(record.change_percent)}[/{pct_color}]",
            format_volume(record.volume),
        )
    return table


def sparkline(points: Sequence[ChartPoint], width: int = SPARK_WIDTH) -> str:
    """Compress a price series into a one-line block-character chart."""
    if not points:
        return ""
    if len(points) > width:
        step = len(points) / width
        points = [points[int(i * step)] for i in range(width - 1)] + [points[-1]]
    prices = [point.price for point in points]
    low, high = min(prices), max(prices)
    span = high - low
    top = len(SPARK_BLOCKS) - 1
    if span == 0:
        return SPARK_BLOCKS[top // 2] * len(prices)
    return "".join(SPARK_BLOCKS[int((price - low) / span * top)] for price in prices)


def render_chart(snapshot: DashboardSnapshot, out: Console | None = None) -> None:
    """Price chart for the selected symbol, or its placeholder/error."""
    out = out or console
    symbol = snapshot.view_state.selected_symbol
    title = f"Price Chart: {company_name(symbol)} ({symbol})"

    if snapshot.chart_error:
        body = f"[{COLOR_WARNING}]{snapshot.chart_error}[/{COLOR_WARNING}]"
    elif not snapshot.chart:
        body = f"[{COLOR_MUTED}]{NO_CHART_TEXT}[/{COLOR_MUTED}]"
    else:
        first, last = snapshot.chart[0], snapshot.chart[-1]
        color = _change_color(last.price - first.price)
        body = (
            f"[{color}]{sparkline(snapshot.chart)}[/{color}]\n"
            f"[{COLOR_MUTED}]{first.label} {format_price(first.price)}"
            f"  ->  {last.label} {format_price(last.price)}[/{COLOR_MUTED}]"
        )
    out.print(Panel(body, title=title, style=COLOR_HEADER))


def render_dashboard(snapshot: DashboardSnapshot, out: Console | None = None) -> None:
    """Render the full dashboard: summary, error notice, table, chart."""
    out = out or console
    out.print()
    render_summary(snapshot, out)

    if snapshot.view_state.filter_term:
        out.print(f"  Filter: [bold]{snapshot.view_state.filter_term}[/bold]")

    if snapshot.error:
        out.print(f"[{COLOR_WARNING}]{snapshot.error}[/{COLOR_WARNING}]")

    out.print(build_quote_table(snapshot))
    # A failed first load has no records at all; only a filter can empty a real batch
    if not snapshot.loading and snapshot.view.summary.record_count and not snapshot.view.display:
        out.print(f"[{COLOR_MUTED}]{NO_MATCHES_TEXT}[/{COLOR_MUTED}]")

    render_chart(snapshot, out)
    if snapshot.last_refreshed is not None:
        refreshed = snapshot.last_refreshed.strftime("%Y-%m-%dT%H:%M:%SZ")
        out.print(f"[{COLOR_MUTED}]Last refreshed: {refreshed}[/{COLOR_MUTED}]")
