from __future__ import annotations

import calendar
from datetime import date, timedelta


DAYS_PER_WEEK = 7


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def add_months(year: int, month: int, offset: int) -> tuple[int, int]:
    zero_based = (year * 12 + (month - 1)) + offset
    return zero_based // 12, (zero_based % 12) + 1


def check_year(year: int) -> int:
    if not date.min.year <= year <= date.max.year:
        raise OverflowError(f"year {year} is out of range")
    return year


def clamped_date(year: int, month: int, day: int) -> date:
    # Days past the end of a short month land on its last day, never in the next month.
    check_year(year)
    return date(year, month, min(day, days_in_month(year, month)))


def sunday_weekday(value: date) -> int:
    """Weekday number with 0=Sunday .. 6=Saturday."""
    return value.isoweekday() % DAYS_PER_WEEK


def start_of_week(value: date) -> date:
    return value - timedelta(days=sunday_weekday(value))
