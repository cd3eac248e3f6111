"""Dependency injection providers for FastAPI route handlers.

The dashboard session is created once during application lifespan startup
and stored on ``app.state``. Route handlers never construct it directly;
they declare the dependency and FastAPI injects it.
"""

import logging

from fastapi import HTTPException, Request

from Stock_Tracker.services.dashboard import DashboardSession

logger = logging.getLogger(__name__)


async def get_session(request: Request) -> DashboardSession:
    """Return the app-wide ``DashboardSession``.

    Raises HTTP 503 if the application has not finished starting up.
    """
    session: DashboardSession | None = getattr(request.app.state, "session", None)
    if session is None:
        logger.error("Dashboard session requested before startup completed")
        raise HTTPException(status_code=503, detail="Dashboard is not initialized.")
    return session
