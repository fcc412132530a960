from __future__ import annotations

from datetime import date, timedelta
import logging

from recurpreview.services.bound_policy import Bound, BoundPolicy
from recurpreview.services.calendar_math import (
    DAYS_PER_WEEK,
    add_months,
    check_year,
    clamped_date,
    start_of_week,
    sunday_weekday,
)
from recurpreview.services.nth_weekday import resolve_nth_weekday
from recurpreview.services.rule_model import (
    DailyRule,
    MonthlyByDayRule,
    MonthlyByWeekdayRule,
    RecurrenceRule,
    WeeklyRule,
    YearlyRule,
)

logger = logging.getLogger(__name__)


def _next_weekly(rule: WeeklyRule, current: date) -> date:
    current_weekday = sunday_weekday(current)
    for weekday in rule.days_of_week:
        if weekday > current_weekday:
            return current + timedelta(days=weekday - current_weekday)
    # Selected days of this week are used up; move to the first one of the next active week.
    next_week = start_of_week(current) + timedelta(days=DAYS_PER_WEEK * rule.interval)
    return next_week + timedelta(days=rule.days_of_week[0])


def _advance(rule: RecurrenceRule, current: date, step: int) -> date:
    if isinstance(rule, DailyRule):
        return current + timedelta(days=rule.interval)

    if isinstance(rule, WeeklyRule):
        return _next_weekly(rule, current)

    if isinstance(rule, MonthlyByDayRule):
        year, month = add_months(current.year, current.month, rule.interval)
        return clamped_date(year, month, rule.month_day)

    if isinstance(rule, MonthlyByWeekdayRule):
        year, month = add_months(current.year, current.month, rule.interval)
        return resolve_nth_weekday(check_year(year), month, rule.month_week, rule.month_week_day)

    if isinstance(rule, YearlyRule):
        # Anchored on the start date so a Feb 29 clamp does not stick in later leap years.
        start = rule.start_date
        return clamped_date(start.year + step * rule.interval, start.month, start.day)

    raise ValueError(f"Unsupported rule: {rule!r}")


def generate(rule: RecurrenceRule, bound: Bound) -> list[date]:
    policy = BoundPolicy.for_rule(bound, rule.end_date)

    occurrences: list[date] = []
    current = rule.start_date
    if policy.past_end(current):
        return occurrences

    step = 0
    while True:
        occurrences.append(current)
        if policy.count_reached(len(occurrences)):
            break

        step += 1
        try:
            candidate = _advance(rule, current, step)
        except OverflowError:
            logger.debug("Occurrence generation reached calendar limit last=%s produced=%s", current, len(occurrences))
            break

        policy.ensure_progress(previous=current, candidate=candidate, occurrences=occurrences)
        if policy.past_end(candidate):
            break
        current = candidate

    logger.debug(
        "Occurrences generated type=%s interval=%s start=%s count=%s",
        rule.recurrence_type,
        rule.interval,
        rule.start_date,
        len(occurrences),
    )
    return occurrences
