"""CLI entry point for Stock Tracker, a terminal and HTTP stock dashboard.

Provides the ``stock-tracker`` command with subcommands for rendering the
dashboard once, charting a single symbol, and serving the JSON API.

This is the ONLY module where console output is allowed. All other modules
use ``logging``. Async internals are bridged to typer's synchronous
interface via ``asyncio.run()``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Annotated

import typer
from rich.console import Console

from Stock_Tracker.config import load_settings, parse_symbols
from Stock_Tracker.logging_config import configure_logging
from Stock_Tracker.models.enums import Provider, SortDirection, SortKey
from Stock_Tracker.models.view import ViewState
from Stock_Tracker.utils.exceptions import UnknownSymbolError

app = typer.Typer(name="stock-tracker", help="Stock quote dashboard")

# Rich console for formatted output
console = Console()

logger = logging.getLogger(__name__)

DEFAULT_HOST: str = "127.0.0.1"
DEFAULT_PORT: int = 8000


# ---------------------------------------------------------------------------
# dashboard command
# ---------------------------------------------------------------------------


@app.command()
def dashboard(
    filter_term: Annotated[
        str, typer.Option("--filter", "-f", help="Only show symbols or names containing this")
    ] = "",
    sort: Annotated[SortKey, typer.Option(help="Column to sort by")] = SortKey.SYMBOL,
    descending: Annotated[bool, typer.Option("--desc", help="Sort in descending order")] = False,
    symbol: Annotated[
        str, typer.Option("--symbol", "-s", help="Symbol to chart (default: first tracked)")
    ] = "",
    symbols: Annotated[
        str, typer.Option(help="Comma-separated symbols overriding the tracked set")
    ] = "",
    provider: Annotated[
        Provider | None, typer.Option(help="Quote provider overriding the environment")
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="Suppress info logging")] = False,
) -> None:
    """Fetch every tracked symbol once and render the dashboard."""
    configure_logging(verbose=verbose, quiet=quiet)
    exit_code = asyncio.run(
        _dashboard_async(
            filter_term=filter_term,
            sort=sort,
            descending=descending,
            symbol=symbol,
            symbols=symbols,
            provider=provider,
        )
    )
    if exit_code:
        raise typer.Exit(code=exit_code)


async def _dashboard_async(
    *,
    filter_term: str,
    sort: SortKey,
    descending: bool,
    symbol: str,
    symbols: str,
    provider: Provider | None,
) -> int:
    """Run one fetch cycle and render it. Returns 1 on total batch failure."""
    from Stock_Tracker.reporting.terminal import render_dashboard
    from Stock_Tracker.services import DashboardSession, MarketDataClient

    settings = load_settings()
    overrides: dict[str, object] = {}
    parsed_symbols = parse_symbols(symbols)
    if parsed_symbols:
        overrides["symbols"] = parsed_symbols
    if provider is not None:
        overrides["quote_provider"] = provider
    if overrides:
        settings = settings.model_copy(update=overrides)

    view_state = ViewState(
        filter_term=filter_term,
        sort_key=sort,
        sort_direction=SortDirection.DESCENDING if descending else SortDirection.ASCENDING,
        selected_symbol=symbol or settings.symbols[0],
    )

    client = MarketDataClient(settings)
    try:
        try:
            session = DashboardSession(client, view_state=view_state)
        except UnknownSymbolError as exc:
            console.print(f"[red]{exc}[/red]")
            return 2

        with console.status("Fetching quotes..."):
            await session.refresh_all()

        snapshot = session.snapshot()
        render_dashboard(snapshot, console)
        return 1 if snapshot.error else 0
    finally:
        await client.aclose()


# ---------------------------------------------------------------------------
# chart command
# ---------------------------------------------------------------------------


@app.command()
def chart(
    symbol: Annotated[str, typer.Argument(help="Ticker symbol to chart")],
    provider: Annotated[
        Provider | None, typer.Option(help="Series provider overriding the environment")
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
) -> None:
    """Fetch and render the price chart for one symbol."""
    configure_logging(verbose=verbose)
    exit_code = asyncio.run(_chart_async(symbol=symbol, provider=provider))
    if exit_code:
        raise typer.Exit(code=exit_code)


async def _chart_async(*, symbol: str, provider: Provider | None) -> int:
    """Load the series for *symbol* and print it. Returns 1 on fetch failure."""
    from Stock_Tracker.reporting.terminal import render_chart
    from Stock_Tracker.services import DashboardSession, MarketDataClient

    settings = load_settings()
    normalized = symbol.strip().upper()
    overrides: dict[str, object] = {"symbols": (normalized,)}
    if provider is not None:
        overrides["chart_provider"] = provider
    settings = settings.model_copy(update=overrides)

    client = MarketDataClient(settings)
    try:
        session = DashboardSession(client)
        with console.status(f"Fetching chart for {normalized}..."):
            await session.refresh_chart()
        snapshot = session.snapshot()
        render_chart(snapshot, console)
        return 1 if snapshot.chart_error else 0
    finally:
        await client.aclose()


# ---------------------------------------------------------------------------
# serve command
# ---------------------------------------------------------------------------


@app.command()
def serve(
    host: Annotated[str, typer.Option(help="Interface to bind")] = DEFAULT_HOST,
    port: Annotated[int, typer.Option(help="Port to listen on")] = DEFAULT_PORT,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
) -> None:
    """Serve the dashboard JSON API with uvicorn."""
    import uvicorn

    from Stock_Tracker.web.app import create_app

    configure_logging(verbose=verbose)
    console.print(f"[bold]Serving Stock Tracker on http://{host}:{port}[/bold]")
    uvicorn.run(create_app(), host=host, port=port, log_config=None)


# ---------------------------------------------------------------------------
# providers command
# ---------------------------------------------------------------------------


@app.command()
def providers() -> None:
    """List the supported upstream providers and the active configuration."""
    from rich.table import Table

    settings = load_settings()
    table = Table(title="Providers")
    table.add_column("Provider", style="bold")
    table.add_column("Quotes", justify="center")
    table.add_column("Chart", justify="center")
    table.add_column("API key")

    for member in Provider:
        key = settings.api_key_for(member)
        table.add_row(
            member.value,
            "[green]active[/green]" if member == settings.quote_provider else "",
            "[green]active[/green]" if member == settings.chart_provider else "",
            "configured" if key else "[yellow]missing[/yellow]",
        )
    console.print(table)
    console.print(f"[dim]Tracked symbols: {', '.join(settings.symbols)}[/dim]")


if __name__ == "__main__":
    app()
