"""Calendar math used by the rules and the calendar views.

Months are 1-based (1 = January) and weekdays count from Sunday = 0, the
layout the calendar grids use. Every comparison goes through the calendar
day of its inputs so that time-of-day never shifts a date across a boundary.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta
from enum import Enum
from typing import List, Optional, Tuple, Union

DateLike = Union[date, datetime]


class SelectionEdge(str, Enum):
    START = "start"
    END = "end"
    NONE = "none"


def as_calendar_day(value: DateLike) -> date:
    """Return the calendar day of a date or datetime."""
    if isinstance(value, datetime):
        return value.date()
    return value


def normalize_to_midnight(value: DateLike) -> datetime:
    day = as_calendar_day(value)
    return datetime(day.year, day.month, day.day)


def normalize_to_noon(value: DateLike) -> datetime:
    day = as_calendar_day(value)
    return datetime(day.year, day.month, day.day, 12)


def days_in_month(month: int, year: int) -> int:
    if month == 12:
        first_of_next = date(year + 1, 1, 1)
    else:
        first_of_next = date(year, month + 1, 1)
    return (first_of_next - timedelta(days=1)).day


def first_weekday(month: int, year: int) -> int:
    """Weekday of the 1st, 0 = Sunday through 6 = Saturday."""
    return (date(year, month, 1).weekday() + 1) % 7


def generate_month_grid(month: int, year: int) -> List[Optional[int]]:
    """Day numbers for a 7-column grid, led by one ``None`` per blank cell."""
    blanks: List[Optional[int]] = [None] * first_weekday(month, year)
    return blanks + list(range(1, days_in_month(month, year) + 1))


def is_same_calendar_day(a: DateLike, b: DateLike) -> bool:
    return as_calendar_day(a) == as_calendar_day(b)


def is_today(value: DateLike, today: Optional[date] = None) -> bool:
    return as_calendar_day(value) == (today or date.today())


def range_contains(value: DateLike, start: Optional[DateLike], end: Optional[DateLike]) -> bool:
    """Inclusive containment; an open-ended range contains nothing."""
    if start is None or end is None:
        return False
    current = normalize_to_midnight(value)
    return normalize_to_midnight(start) <= current <= normalize_to_midnight(end)


def classify_date_in_selection(
    value: DateLike,
    start: Optional[DateLike],
    end: Optional[DateLike],
) -> SelectionEdge:
    if start is not None and is_same_calendar_day(value, start):
        return SelectionEdge.START
    if end is not None and is_same_calendar_day(value, end):
        return SelectionEdge.END
    return SelectionEdge.NONE


def year_bounds(year: int) -> Tuple[date, date]:
    return date(year, 1, 1), date(year, 12, 31)


def month_bounds(month: int, year: int) -> Tuple[date, date]:
    return date(year, month, 1), date(year, month, days_in_month(month, year))
