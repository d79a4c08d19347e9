from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta
from typing import Iterator, Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date {value!r}, expected YYYY-MM-DD")


def parse_optional_date(value: Optional[str]) -> Optional[date]:
    if not value or not value.strip():
        return None
    return parse_iso_date(value.strip())


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def end_of_day(day: date) -> datetime:
    # Millisecond precision matches the DATETIME(3) timestamp column.
    return datetime.combine(day, time(23, 59, 59, 999000))


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last calendar day of a month."""
    if not 1 <= month <= 12:
        raise ValidationError("month must be between 1 and 12")
    if not 1 <= year <= 9999:
        raise ValidationError("year is out of range")
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def iter_days(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def count_working_days(start: date, end: date) -> int:
    """Monday to Friday days in [start, end]."""
    return sum(1 for d in iter_days(start, end) if d.weekday() < 5)
