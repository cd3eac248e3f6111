"""FastAPI app factory and lifespan wiring for the dashboard JSON API."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from Stock_Tracker.config import Settings, load_settings
from Stock_Tracker.logging_config import configure_logging
from Stock_Tracker.services.dashboard import DashboardSession
from Stock_Tracker.services.market_data import MarketDataClient
from Stock_Tracker.web.middleware import RequestLoggingMiddleware, register_exception_handlers

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    session: DashboardSession | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Configuration for the lifespan-created client; read from
            the environment when omitted.
        session: Pre-built session to serve. When given, the lifespan does
            not create (or close) a client of its own.
    """
    configure_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        if getattr(app.state, "session", None) is not None:
            yield
            return
        client = MarketDataClient(settings or load_settings())
        app.state.session = DashboardSession(client)
        logger.info("Dashboard session created for %d symbols", len(client.settings.symbols))
        try:
            yield
        finally:
            await client.aclose()
            app.state.session = None

    app = FastAPI(title="Stock Tracker", lifespan=lifespan)
    if session is not None:
        app.state.session = session

    register_exception_handlers(app)
    app.add_middleware(RequestLoggingMiddleware)

    from Stock_Tracker.web.routes import dashboard_router

    app.include_router(dashboard_router)

    @app.get("/api/health")
    async def health_check() -> JSONResponse:
        return JSONResponse({"status": "ok"})

    logger.info("Stock Tracker web app created")
    return app
