from __future__ import annotations

from datetime import date, timedelta

from recurpreview.services.calendar_math import DAYS_PER_WEEK, days_in_month, sunday_weekday
from recurpreview.services.rule_errors import InvalidOrdinal, InvalidWeekday


ORDINALS = ("first", "second", "third", "fourth", "last")
LAST_ORDINAL = "last"


def check_weekday(weekday: int, *, field: str = "month_week_day") -> int:
    if isinstance(weekday, bool) or not isinstance(weekday, int) or not 0 <= weekday <= 6:
        raise InvalidWeekday(f"Weekday must be between 0 (Sunday) and 6 (Saturday), got {weekday!r}", field=field)
    return weekday


def check_ordinal(ordinal: str) -> str:
    if ordinal not in ORDINALS:
        raise InvalidOrdinal(f"Unsupported ordinal: {ordinal!r}")
    return ordinal


def _first_weekday_in_month(year: int, month: int, weekday: int) -> date:
    current = date(year, month, 1)
    while sunday_weekday(current) != weekday:
        current += timedelta(days=1)
    return current


def _last_weekday_in_month(year: int, month: int, weekday: int) -> date:
    current = date(year, month, days_in_month(year, month))
    while sunday_weekday(current) != weekday:
        current -= timedelta(days=1)
    return current


def resolve_nth_weekday(year: int, month: int, ordinal: str, weekday: int) -> date:
    """Return the date of the ``ordinal`` occurrence of ``weekday`` (0=Sunday) in the month.

    ``first`` through ``fourth`` always exist since every month has at least 28 days.
    ``last`` is resolved from the month end, so it equals ``fourth`` in months with
    exactly four such weekdays and is one week later in months with five.
    """
    check_ordinal(ordinal)
    check_weekday(weekday)
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")

    if ordinal == LAST_ORDINAL:
        return _last_weekday_in_month(year, month, weekday)
    first = _first_weekday_in_month(year, month, weekday)
    return first + timedelta(days=ORDINALS.index(ordinal) * DAYS_PER_WEEK)


def ordinal_for_date(value: date) -> str:
    index = (value.day - 1) // DAYS_PER_WEEK
    if index >= len(ORDINALS) - 1:
        return LAST_ORDINAL
    return ORDINALS[index]
