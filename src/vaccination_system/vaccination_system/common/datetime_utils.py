from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterator


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 date or date-time string into a naive local datetime.

    Accepts what browsers send (`2026-03-01`, `2026-03-01T09:30`,
    `2026-03-01T09:30:00.000Z`). Aware values are converted to local time.
    """
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def day_window(moment: datetime) -> tuple[datetime, datetime]:
    """Return `[midnight, midnight + 24h)` for the calendar day of `moment`."""
    start = datetime.combine(moment.date(), datetime.min.time())
    return start, start + timedelta(days=1)


def trailing_days(today: date, days: int) -> Iterator[date]:
    """Yield the `days` calendar days ending with `today`, oldest first."""
    for offset in range(days - 1, -1, -1):
        yield today - timedelta(days=offset)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
