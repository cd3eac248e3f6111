"""FastAPI route modules for Stock Tracker.

Re-exports all routers so the application factory can import them:
    from Stock_Tracker.web.routes import dashboard_router
"""

from Stock_Tracker.web.routes.dashboard import router as dashboard_router

__all__ = ["dashboard_router"]
