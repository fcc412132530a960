from __future__ import annotations

import calendar
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date


# Matches the 0=Sunday weekday numbering used by rules.
_MONTH_CALENDAR = calendar.Calendar(firstweekday=calendar.SUNDAY)


@dataclass(frozen=True)
class CalendarDayCell:
    day: date
    in_month: bool
    selected: bool


@dataclass(frozen=True)
class CalendarMonthView:
    year: int
    month: int
    weeks: list[list[CalendarDayCell]]
    selected_count: int

    @property
    def selected_dates(self) -> list[date]:
        return [cell.day for week in self.weeks for cell in week if cell.in_month and cell.selected]


def build_month_view(occurrences: Iterable[date], *, year: int, month: int) -> CalendarMonthView:
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")

    selected = set(occurrences)
    weeks = [
        [CalendarDayCell(day=day, in_month=day.month == month, selected=day in selected) for day in week]
        for week in _MONTH_CALENDAR.monthdatescalendar(year, month)
    ]
    selected_count = sum(1 for week in weeks for cell in week if cell.in_month and cell.selected)
    return CalendarMonthView(year=year, month=month, weeks=weeks, selected_count=selected_count)


def grid_last_day(year: int, month: int) -> date:
    """Last date shown in the month grid, which may fall in the following month."""
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    return _MONTH_CALENDAR.monthdatescalendar(year, month)[-1][-1]
