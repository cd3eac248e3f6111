"""FastAPI web layer for Stock Tracker.

Re-exports the application factory so consumers can import directly:
    from Stock_Tracker.web import create_app
"""

from Stock_Tracker.web.app import create_app

__all__ = ["create_app"]
