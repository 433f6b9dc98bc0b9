from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..common.datetime_utils import minute_of_day, sunday_based_weekday
from ..core.enums import MealType
from .model import WorkSchedule


def is_work_day(now: datetime, schedule: WorkSchedule) -> bool:
    return sunday_based_weekday(now.date()) in schedule.work_days


def resolve_meal_type(now: datetime, schedule: WorkSchedule) -> Optional[MealType]:
    """Meal type servable at `now`, or None.

    A closed day overrides any window. Breakfast is checked before lunch, so
    with overlapping windows the shared minutes resolve to breakfast.
    """

    if not is_work_day(now, schedule):
        return None

    minute = minute_of_day(now)
    if schedule.breakfast_window.contains(minute):
        return MealType.BREAKFAST
    if schedule.lunch_window.contains(minute):
        return MealType.LUNCH
    return None
