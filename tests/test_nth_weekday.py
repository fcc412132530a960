from datetime import date, timedelta

from recurpreview.services.calendar_math import sunday_weekday
from recurpreview.services.nth_weekday import ordinal_for_date, resolve_nth_weekday
from recurpreview.services.rule_errors import InvalidOrdinal, InvalidWeekday


SUNDAY, MONDAY, TUESDAY, FRIDAY = 0, 1, 2, 5


def test_second_tuesday_when_first_tuesday_is_the_third() -> None:
    # February 2026 starts on a Sunday, so its first Tuesday is the 3rd.
    assert resolve_nth_weekday(2026, 2, "first", TUESDAY) == date(2026, 2, 3)
    assert resolve_nth_weekday(2026, 2, "second", TUESDAY) == date(2026, 2, 10)


def test_last_friday_of_31_day_month_ending_on_thursday() -> None:
    # December 2026 has 31 days and ends on a Thursday.
    assert sunday_weekday(date(2026, 12, 31)) == 4
    assert resolve_nth_weekday(2026, 12, "last", FRIDAY) == date(2026, 12, 25)
    assert date(2026, 12, 31) - resolve_nth_weekday(2026, 12, "last", FRIDAY) == timedelta(days=6)


def test_fourth_and_last_match_in_month_with_four_occurrences() -> None:
    assert resolve_nth_weekday(2026, 2, "fourth", SUNDAY) == date(2026, 2, 22)
    assert resolve_nth_weekday(2026, 2, "last", SUNDAY) == date(2026, 2, 22)


def test_last_is_one_week_after_fourth_in_month_with_five_occurrences() -> None:
    assert resolve_nth_weekday(2026, 3, "fourth", SUNDAY) == date(2026, 3, 22)
    assert resolve_nth_weekday(2026, 3, "last", SUNDAY) == date(2026, 3, 29)


def test_leap_february_last_weekday() -> None:
    assert resolve_nth_weekday(2028, 2, "last", TUESDAY) == date(2028, 2, 29)
    assert resolve_nth_weekday(2026, 1, "first", MONDAY) == date(2026, 1, 5)


def test_every_ordinal_resolves_inside_the_month_for_a_full_year() -> None:
    for month in range(1, 13):
        for weekday in range(7):
            resolved = [
                resolve_nth_weekday(2027, month, ordinal, weekday)
                for ordinal in ("first", "second", "third", "fourth", "last")
            ]
            assert all(day.month == month for day in resolved)
            assert all(sunday_weekday(day) == weekday for day in resolved)
            assert resolved[:4] == sorted(set(resolved[:4]))
            assert resolved[4] >= resolved[3]


def test_ordinal_for_date_reproduces_every_day_of_the_year() -> None:
    current = date(2026, 1, 1)
    while current.year == 2026:
        ordinal = ordinal_for_date(current)
        assert resolve_nth_weekday(current.year, current.month, ordinal, sunday_weekday(current)) == current
        current += timedelta(days=1)

    assert ordinal_for_date(date(2026, 10, 19)) == "third"
    assert ordinal_for_date(date(2026, 10, 30)) == "last"


def test_invalid_ordinal_and_weekday_are_rejected() -> None:
    try:
        resolve_nth_weekday(2026, 1, "fifth", MONDAY)
    except InvalidOrdinal as exc:
        assert exc.field == "month_week"
    else:
        raise AssertionError("Expected InvalidOrdinal")

    try:
        resolve_nth_weekday(2026, 1, "first", 7)
    except InvalidWeekday as exc:
        assert exc.field == "month_week_day"
    else:
        raise AssertionError("Expected InvalidWeekday")
