"""Defensive numeric parsing for decoded upstream JSON.

Upstreams mix JSON numbers with numeric-looking text ("175.4300"), and
use ``null``, ``"."`` or ``"None"`` for missing values. These helpers turn
all of that into either a finite number or ``None``.
"""

from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation


def finite_decimal(value: object) -> Decimal | None:
    """Parse *value* into a finite Decimal, or ``None`` if it is not numeric.

    Booleans are rejected even though ``bool`` subclasses ``int``.
    Floats go through ``str()`` so ``0.1`` stays ``Decimal("0.1")``.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, int | float):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        return Decimal(str(value))
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = Decimal(text)
        except InvalidOperation:
            return None
        return parsed if parsed.is_finite() else None
    return None


def finite_float(value: object) -> float | None:
    """Like :func:`finite_decimal` but returning a float."""
    parsed = finite_decimal(value)
    return None if parsed is None else float(parsed)


def safe_volume(value: object) -> int:
    """Parse a volume, treating missing, negative or garbage values as 0."""
    parsed = finite_decimal(value)
    if parsed is None or parsed < 0:
        return 0
    return int(parsed)
