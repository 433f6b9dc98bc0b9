from __future__ import annotations

from dataclasses import dataclass
from typing import Any, FrozenSet

from ..common.datetime_utils import format_hhmm, parse_hhmm
from ..core.constants import (
    DEFAULT_BREAKFAST_WINDOW,
    DEFAULT_LUNCH_WINDOW,
    DEFAULT_MONTHLY_LIMIT,
    DEFAULT_WORK_DAYS,
)
from ..core.enums import MealType
from ..core.exceptions import ValidationError

MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class MealWindow:
    """Clock-time interval as minute-of-day, inclusive at both ends."""

    start_minute: int
    end_minute: int

    @classmethod
    def parse(cls, start: str, end: str) -> "MealWindow":
        return cls(start_minute=parse_hhmm(start), end_minute=parse_hhmm(end))

    def contains(self, minute: int) -> bool:
        return self.start_minute <= minute <= self.end_minute

    def validate(self, name: str) -> None:
        for value in (self.start_minute, self.end_minute):
            if not 0 <= int(value) < MINUTES_PER_DAY:
                raise ValidationError(f"{name} window is outside the day")
        if self.start_minute > self.end_minute:
            raise ValidationError(f"{name} window starts after it ends")

    def __str__(self) -> str:
        return f"{format_hhmm(self.start_minute)}-{format_hhmm(self.end_minute)}"


@dataclass(frozen=True)
class WorkSchedule:
    """Global service schedule.

    work_days uses 0=Sunday .. 6=Saturday.
    """

    work_days: FrozenSet[int]
    breakfast_window: MealWindow
    lunch_window: MealWindow
    monthly_breakfast_limit: int
    monthly_lunch_limit: int

    def window_for(self, meal_type: MealType) -> MealWindow:
        if meal_type == MealType.BREAKFAST:
            return self.breakfast_window
        return self.lunch_window

    def validate(self) -> "WorkSchedule":
        if not self.work_days:
            raise ValidationError("At least one work day is required")
        if any(not 0 <= int(d) <= 6 for d in self.work_days):
            raise ValidationError("Work days must be between 0 (Sunday) and 6 (Saturday)")
        self.breakfast_window.validate("Breakfast")
        self.lunch_window.validate("Lunch")
        if self.monthly_breakfast_limit < 0 or self.monthly_lunch_limit < 0:
            raise ValidationError("Monthly limits cannot be negative")
        return self

    def to_dict(self) -> dict[str, Any]:
        return {
            "workDays": sorted(self.work_days),
            "breakfastStart": format_hhmm(self.breakfast_window.start_minute),
            "breakfastEnd": format_hhmm(self.breakfast_window.end_minute),
            "lunchStart": format_hhmm(self.lunch_window.start_minute),
            "lunchEnd": format_hhmm(self.lunch_window.end_minute),
            "monthlyBreakfastLimit": self.monthly_breakfast_limit,
            "monthlyLunchLimit": self.monthly_lunch_limit,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WorkSchedule":
        """Build from the persisted/API shape; raises ValidationError on bad input."""

        try:
            work_days = frozenset(int(d) for d in data["workDays"])
            schedule = cls(
                work_days=work_days,
                breakfast_window=MealWindow.parse(data["breakfastStart"], data["breakfastEnd"]),
                lunch_window=MealWindow.parse(data["lunchStart"], data["lunchEnd"]),
                monthly_breakfast_limit=int(data.get("monthlyBreakfastLimit", DEFAULT_MONTHLY_LIMIT)),
                monthly_lunch_limit=int(data.get("monthlyLunchLimit", DEFAULT_MONTHLY_LIMIT)),
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Invalid work schedule: {e}")
        return schedule.validate()


DEFAULT_WORK_SCHEDULE = WorkSchedule(
    work_days=frozenset(DEFAULT_WORK_DAYS),
    breakfast_window=MealWindow.parse(*DEFAULT_BREAKFAST_WINDOW),
    lunch_window=MealWindow.parse(*DEFAULT_LUNCH_WINDOW),
    monthly_breakfast_limit=DEFAULT_MONTHLY_LIMIT,
    monthly_lunch_limit=DEFAULT_MONTHLY_LIMIT,
)
