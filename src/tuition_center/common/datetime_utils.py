from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_clock(value: str) -> time:
    """Parse HH:MM or HH:MM:SS into a time."""
    value = value.strip()
    fmt = "%H:%M:%S" if value.count(":") == 2 else "%H:%M"
    return datetime.strptime(value, fmt).time()


def parse_month(value: str) -> Tuple[date, date]:
    """Parse YYYY-MM and return (first day, last day) of that month."""
    first = datetime.strptime(value, "%Y-%m").date()
    last_day = calendar.monthrange(first.year, first.month)[1]
    return first, first.replace(day=last_day)


def month_key(day: date) -> str:
    return day.strftime("%Y-%m")


def month_label(value: str) -> str:
    """'2025-03' -> 'March 2025'."""
    first, _ = parse_month(value)
    return first.strftime("%B %Y")


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def today() -> date:
    return now_local().date()


def week_bounds(day: date) -> Tuple[date, date]:
    """Monday..Sunday of the week containing ``day``."""
    start = day - timedelta(days=day.weekday())
    return start, start + timedelta(days=6)


def range_bounds(name: Optional[str], *, on: date) -> Optional[Tuple[date, date]]:
    """Resolve the ``range`` query filter (today/week/month) to a date span."""
    if name == "today":
        return on, on
    if name == "week":
        return week_bounds(on)
    if name == "month":
        return parse_month(month_key(on))
    return None


def overlaps(start_a: time, end_a: time, start_b: time, end_b: time) -> bool:
    """Half-open interval overlap: touching ranges do not collide."""
    return start_a < end_b and end_a > start_b


def format_clock(value: Optional[time]) -> Optional[str]:
    return value.strftime("%H:%M") if value else None


def iso(value) -> Optional[str]:
    return value.isoformat() if value else None
