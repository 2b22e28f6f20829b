from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta
from typing import Union

from ..core.exceptions import ValidationError

DateLike = Union[date, datetime]

_MONTH_NAMES = {name.lower(): idx for idx, name in enumerate(calendar.month_name) if name}


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def start_of_day(value: DateLike) -> datetime:
    if isinstance(value, datetime):
        value = value.date()
    return datetime.combine(value, time.min)


def at_hour(day: DateLike, hour: int) -> datetime:
    return start_of_day(day).replace(hour=int(hour))


def calculate_working_days(start: DateLike, end: DateLike) -> int:
    """Count Monday-Friday days in [start, end], inclusive."""
    current = start.date() if isinstance(start, datetime) else start
    last = end.date() if isinstance(end, datetime) else end

    count = 0
    while current <= last:
        if current.weekday() < 5:
            count += 1
        current += timedelta(days=1)
    return count


def month_number(month_name: str) -> int:
    idx = _MONTH_NAMES.get((month_name or "").strip().lower())
    if idx is None:
        raise ValidationError(f"invalid month name: {month_name!r}")
    return idx


def month_range(month_name: str, year: int) -> tuple[date, date]:
    """Resolve an English month name to its first and last calendar day."""
    month = month_number(month_name)
    last_day = calendar.monthrange(int(year), month)[1]
    return date(int(year), month, 1), date(int(year), month, last_day)


def month_name_of(value: DateLike) -> str:
    return calendar.month_name[value.month]


def hours_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 3600


def millis_between(start: datetime, end: datetime) -> int:
    return int((end - start).total_seconds() * 1000)
