from datetime import date

from recurpreview.services.bound_policy import Bound
from recurpreview.services.calendar_view_service import build_month_view, grid_last_day
from recurpreview.services.occurrence_generator import generate
from recurpreview.services.rule_model import MonthlyByDayRule, WeeklyRule


def test_month_grid_starts_on_sunday_and_flags_outside_days() -> None:
    view = build_month_view([], year=2026, month=1)

    first_week = view.weeks[0]
    assert first_week[0].day == date(2025, 12, 28)
    assert [cell.in_month for cell in first_week] == [False, False, False, False, True, True, True]
    assert all(len(week) == 7 for week in view.weeks)
    assert view.selected_count == 0


def test_selection_is_exact_date_match_only() -> None:
    occurrences = generate(MonthlyByDayRule(start_date=date(2026, 1, 31), month_day=31), Bound(max_count=4))

    january = build_month_view(occurrences, year=2026, month=1)
    february = build_month_view(occurrences, year=2026, month=2)

    assert january.selected_dates == [date(2026, 1, 31)]
    assert february.selected_dates == [date(2026, 2, 28)]
    # February 2026 fills exactly four Sunday-first weeks.
    assert len(february.weeks) == 4
    assert all(cell.in_month for week in february.weeks for cell in week)


def test_spill_over_days_keep_their_selection_but_are_not_counted() -> None:
    occurrences = generate(WeeklyRule(start_date=date(2026, 3, 30), days_of_week=(1, 5)), Bound(max_count=4))
    assert occurrences == [date(2026, 3, 30), date(2026, 4, 3), date(2026, 4, 6), date(2026, 4, 10)]

    view = build_month_view(occurrences, year=2026, month=3)

    selected_cells = [cell for week in view.weeks for cell in week if cell.selected]
    assert [(cell.day, cell.in_month) for cell in selected_cells] == [
        (date(2026, 3, 30), True),
        (date(2026, 4, 3), False),
    ]
    assert view.selected_dates == [date(2026, 3, 30)]
    assert view.selected_count == 1


def test_invalid_month_is_rejected() -> None:
    try:
        build_month_view([], year=2026, month=13)
    except ValueError as exc:
        assert "Month" in str(exc)
    else:
        raise AssertionError("Expected ValueError")


def test_grid_last_day_closes_the_final_week() -> None:
    assert grid_last_day(2026, 2) == date(2026, 2, 28)
    assert grid_last_day(2026, 3) == date(2026, 4, 4)
    assert grid_last_day(2025, 12) == date(2026, 1, 3)
