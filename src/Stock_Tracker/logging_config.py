"""Logging setup shared by the ``stock-tracker`` CLI and the JSON API.

Root level resolution order: ``verbose`` flag, ``quiet`` flag, explicit
``level``, the ``LOG_LEVEL`` environment variable, then INFO. Each package
area can be tuned separately with ``LOG_LEVEL_<AREA>`` (for example
``LOG_LEVEL_SERVICES=DEBUG`` to see per-symbol fetch details).
"""

from __future__ import annotations

import logging
import os

LOG_FORMAT: str = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

_MODULE_LOGGERS: dict[str, str] = {
    "SERVICES": "Stock_Tracker.services",
    "WEB": "Stock_Tracker.web",
    "ANALYSIS": "Stock_Tracker.analysis",
    "REPORTING": "Stock_Tracker.reporting",
}

# Third-party loggers that log once per HTTP request at INFO
_NOISY_LOGGERS: tuple[str, ...] = ("httpx", "uvicorn.access")


def _level_from_name(name: str | None) -> int | None:
    """Map a level name such as ``"debug"`` to its number, or ``None``."""
    if not name:
        return None
    return logging.getLevelNamesMapping().get(name.strip().upper())


def configure_logging(
    *,
    level: str = "",
    verbose: bool = False,
    quiet: bool = False,
) -> None:
    """Install the root handler and apply per-area level overrides.

    Safe to call more than once: ``force=True`` replaces whatever handler
    uvicorn or an earlier call installed.
    """
    if verbose:
        effective = logging.DEBUG
    elif quiet:
        effective = logging.WARNING
    else:
        effective = _level_from_name(level)
        if effective is None:
            effective = _level_from_name(os.environ.get("LOG_LEVEL"))
        if effective is None:
            effective = logging.INFO

    logging.basicConfig(level=effective, format=LOG_FORMAT, force=True)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    for area, logger_name in _MODULE_LOGGERS.items():
        override = _level_from_name(os.environ.get(f"LOG_LEVEL_{area}"))
        if override is not None:
            logging.getLogger(logger_name).setLevel(override)
