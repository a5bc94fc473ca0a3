"""Date helpers.

All stored timestamps are UTC ISO-8601 strings, all ledger dates are
``YYYY-MM-DD`` strings.
"""

from __future__ import annotations

import math
from datetime import date, datetime, timezone
from typing import Callable

# Injected wherever "today" matters so tests can pin the calendar
Clock = Callable[[], date]


def utc_today() -> date:
    """Current calendar date in UTC."""
    return datetime.now(timezone.utc).date()


def utc_now_iso() -> str:
    """Current instant as an ISO-8601 UTC string."""
    return datetime.now(timezone.utc).isoformat()


def parse_date(value: str | date) -> date:
    """Parse a ``YYYY-MM-DD`` string (or pass a date through).

    Raises:
        ValueError: If the string is not a valid ISO date
    """
    if isinstance(value, date):
        return value
    return date.fromisoformat(value[:10])


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like a dashboard would: halves go up, not to even."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor
