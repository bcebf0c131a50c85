from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_month(value: str) -> tuple[int, int]:
    """Parse YYYY-MM into (year, month)."""
    try:
        parsed = datetime.strptime(value.strip(), "%Y-%m")
    except (AttributeError, ValueError):
        raise ValidationError(f"Invalid month {value!r}, expected YYYY-MM")
    return parsed.year, parsed.month


def current_month(today: date | None = None) -> str:
    today = today or date.today()
    return f"{today.year:04d}-{today.month:02d}"


def month_bounds(year: int, month: int) -> tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def truncate_to_second(value: datetime) -> time:
    return value.time().replace(microsecond=0)


def seconds_between(earlier: time, later: time) -> int:
    base = date(2000, 1, 1)
    return int((datetime.combine(base, later) - datetime.combine(base, earlier)) / timedelta(seconds=1))


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
