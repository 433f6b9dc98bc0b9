from __future__ import annotations

from datetime import date, timedelta

import pytest

from meal_tracker.credits.workdays import count_work_days


def _naive_count(year, month, work_days):
    day = date(year, month, 1)
    total = 0
    while day.month == month:
        # isoweekday: Monday=1 .. Sunday=7 -> 0=Sunday
        if day.isoweekday() % 7 in work_days:
            total += 1
        day += timedelta(days=1)
    return total


@pytest.mark.parametrize("year", [2023, 2024, 2025])
@pytest.mark.parametrize("month", range(1, 13))
def test_matches_day_by_day_count(year, month):
    work_days = {1, 2, 3, 4, 5, 6}
    assert count_work_days(year, month, work_days) == _naive_count(year, month, work_days)


def test_every_day_counts_month_length():
    every_day = range(7)
    assert count_work_days(2024, 2, every_day) == 29
    assert count_work_days(2023, 2, every_day) == 28
    assert count_work_days(2024, 12, every_day) == 31


def test_known_months():
    # January 2024 starts on a Monday: 27 days excluding 4 Sundays.
    assert count_work_days(2024, 1, {1, 2, 3, 4, 5, 6}) == 27
    assert count_work_days(2024, 1, {0}) == 4
    assert count_work_days(2024, 1, {1, 2, 3, 4, 5}) == 23


def test_no_work_days_gives_zero():
    assert count_work_days(2024, 3, set()) == 0
