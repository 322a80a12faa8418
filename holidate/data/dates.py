from __future__ import annotations

import datetime as dt
from typing import Any, Tuple


def day_of(value: Any) -> Tuple[int, str]:
    """Return (year, YYYY-MM-DD day key) for a date-like value.

    Accepts ``datetime.date``/``datetime.datetime``, ISO date strings and
    objects exposing ``year()`` and ``day_key()`` methods.
    """
    if isinstance(value, dt.datetime):
        value = value.date()
    if isinstance(value, dt.date):
        return value.year, value.isoformat()
    if isinstance(value, str):
        parsed = dt.date.fromisoformat(value.strip())
        return parsed.year, parsed.isoformat()

    year = getattr(value, "year", None)
    day_key = getattr(value, "day_key", None)
    if callable(year) and callable(day_key):
        return int(year()), str(day_key())
    raise TypeError(f"Unsupported date value: {value!r}")


__all__ = ["day_of"]
