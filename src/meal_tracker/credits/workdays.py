from __future__ import annotations

import calendar
from datetime import date
from typing import Iterable

from ..common.datetime_utils import sunday_based_weekday


def count_work_days(year: int, month: int, work_days: Iterable[int]) -> int:
    """Number of days in the month whose weekday (0=Sunday) is a work day.

    month is 1-based. No holiday calendar is applied.
    """

    wanted = set(work_days)
    days_in_month = calendar.monthrange(year, month)[1]
    return sum(1 for day in range(1, days_in_month + 1) if sunday_based_weekday(date(year, month, day)) in wanted)
