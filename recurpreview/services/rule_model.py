from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Any, ClassVar

from recurpreview.services.calendar_math import sunday_weekday
from recurpreview.services.nth_weekday import check_ordinal, check_weekday, ordinal_for_date
from recurpreview.services.rule_errors import (
    EmptyWeekdaySet,
    InvalidDateRange,
    InvalidInterval,
    InvalidMonthDay,
    InvalidStartDate,
    UnsupportedRecurrenceType,
)


DAILY = "daily"
WEEKLY = "weekly"
MONTHLY_BY_DAY = "monthly_by_day"
MONTHLY_BY_WEEKDAY = "monthly_by_weekday"
YEARLY = "yearly"

RECURRENCE_TYPES = (DAILY, WEEKLY, MONTHLY_BY_DAY, MONTHLY_BY_WEEKDAY, YEARLY)


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _check_interval(interval: int) -> None:
    if not _is_int(interval) or interval < 1:
        raise InvalidInterval(f"Interval must be a whole number of at least 1, got {interval!r}")


def _is_date(value: object) -> bool:
    return isinstance(value, date) and not isinstance(value, datetime)


def _check_date_range(start_date: date, end_date: date | None) -> None:
    if not _is_date(start_date):
        raise InvalidStartDate(f"Start date must be a calendar date, got {start_date!r}")
    if end_date is not None and not _is_date(end_date):
        raise InvalidDateRange(f"End date must be a calendar date, got {end_date!r}")
    if end_date is not None and end_date < start_date:
        raise InvalidDateRange(f"End date {end_date.isoformat()} is before start date {start_date.isoformat()}")


@dataclass(frozen=True, kw_only=True)
class _Rule:
    recurrence_type: ClassVar[str]

    interval: int = 1
    start_date: date
    end_date: date | None = None

    def __post_init__(self) -> None:
        _check_interval(self.interval)
        self._check_fields()
        _check_date_range(self.start_date, self.end_date)

    def _check_fields(self) -> None:
        pass


@dataclass(frozen=True, kw_only=True)
class DailyRule(_Rule):
    recurrence_type: ClassVar[str] = DAILY


@dataclass(frozen=True, kw_only=True)
class WeeklyRule(_Rule):
    recurrence_type: ClassVar[str] = WEEKLY

    days_of_week: tuple[int, ...]

    def _check_fields(self) -> None:
        if not self.days_of_week:
            raise EmptyWeekdaySet("Weekly rules need at least one day of the week")
        for weekday in self.days_of_week:
            check_weekday(weekday, field="days_of_week")
        # Kept sorted so advancement can search it in order.
        object.__setattr__(self, "days_of_week", tuple(sorted(set(self.days_of_week))))


@dataclass(frozen=True, kw_only=True)
class MonthlyByDayRule(_Rule):
    recurrence_type: ClassVar[str] = MONTHLY_BY_DAY

    month_day: int

    def _check_fields(self) -> None:
        if not _is_int(self.month_day) or not 1 <= self.month_day <= 31:
            raise InvalidMonthDay(f"Day of month must be between 1 and 31, got {self.month_day!r}")


@dataclass(frozen=True, kw_only=True)
class MonthlyByWeekdayRule(_Rule):
    recurrence_type: ClassVar[str] = MONTHLY_BY_WEEKDAY

    month_week: str
    month_week_day: int

    def _check_fields(self) -> None:
        check_ordinal(self.month_week)
        check_weekday(self.month_week_day, field="month_week_day")


@dataclass(frozen=True, kw_only=True)
class YearlyRule(_Rule):
    recurrence_type: ClassVar[str] = YEARLY


RecurrenceRule = DailyRule | WeeklyRule | MonthlyByDayRule | MonthlyByWeekdayRule | YearlyRule


@dataclass(frozen=True, kw_only=True)
class RuleDraft:
    """Editable rule state as it comes from a form; may be invalid."""

    recurrence_type: str
    start_date: date
    interval: int = 1
    end_date: date | None = None
    days_of_week: tuple[int, ...] = ()
    month_day: int | None = None
    month_week: str | None = None
    month_week_day: int | None = None


def validate(draft: RuleDraft) -> RecurrenceRule:
    common: dict[str, Any] = {
        "interval": draft.interval,
        "start_date": draft.start_date,
        "end_date": draft.end_date,
    }
    if draft.recurrence_type == DAILY:
        return DailyRule(**common)
    if draft.recurrence_type == WEEKLY:
        return WeeklyRule(days_of_week=tuple(draft.days_of_week), **common)
    if draft.recurrence_type == MONTHLY_BY_DAY:
        return MonthlyByDayRule(month_day=draft.month_day, **common)
    if draft.recurrence_type == MONTHLY_BY_WEEKDAY:
        return MonthlyByWeekdayRule(month_week=draft.month_week, month_week_day=draft.month_week_day, **common)
    if draft.recurrence_type == YEARLY:
        return YearlyRule(**common)
    raise UnsupportedRecurrenceType(f"Unsupported recurrence_type: {draft.recurrence_type}")


def with_changes(rule: RecurrenceRule, **changes: Any) -> RecurrenceRule:
    # replace() builds a fresh instance, so every invariant is checked again.
    return replace(rule, **changes)


def draft_from_rule(rule: RecurrenceRule) -> RuleDraft:
    fields: dict[str, Any] = {}
    if isinstance(rule, WeeklyRule):
        fields["days_of_week"] = rule.days_of_week
    elif isinstance(rule, MonthlyByDayRule):
        fields["month_day"] = rule.month_day
    elif isinstance(rule, MonthlyByWeekdayRule):
        fields["month_week"] = rule.month_week
        fields["month_week_day"] = rule.month_week_day
    return RuleDraft(
        recurrence_type=rule.recurrence_type,
        interval=rule.interval,
        start_date=rule.start_date,
        end_date=rule.end_date,
        **fields,
    )


def defaults_for_type(recurrence_type: str, anchor_date: date) -> dict[str, Any]:
    """Type-specific fields that keep ``anchor_date`` as an occurrence after a type switch."""
    if recurrence_type not in RECURRENCE_TYPES:
        raise UnsupportedRecurrenceType(f"Unsupported recurrence_type: {recurrence_type}")
    if recurrence_type == WEEKLY:
        return {"days_of_week": (sunday_weekday(anchor_date),)}
    if recurrence_type == MONTHLY_BY_DAY:
        return {"month_day": anchor_date.day}
    if recurrence_type == MONTHLY_BY_WEEKDAY:
        return {
            "month_week": ordinal_for_date(anchor_date),
            "month_week_day": sunday_weekday(anchor_date),
        }
    return {}


def change_type(draft: RuleDraft, recurrence_type: str, anchor_date: date | None = None) -> RuleDraft:
    fields: dict[str, Any] = {
        "recurrence_type": recurrence_type,
        "days_of_week": (),
        "month_day": None,
        "month_week": None,
        "month_week_day": None,
    }
    fields.update(defaults_for_type(recurrence_type, anchor_date or draft.start_date))
    return replace(draft, **fields)
