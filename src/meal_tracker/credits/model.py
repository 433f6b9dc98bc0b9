from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from ..core.enums import MealType


@dataclass(frozen=True)
class MonthlyAllotment:
    """Stored per (user, year, month) row. Usage is never stored here."""

    user_id: int
    year: int
    month: int
    total_work_days: int
    breakfast_credits: int
    lunch_credits: int

    @classmethod
    def from_work_days(cls, *, user_id: int, year: int, month: int, total_work_days: int) -> "MonthlyAllotment":
        # One credit per work day for each meal type.
        return cls(
            user_id=user_id,
            year=year,
            month=month,
            total_work_days=total_work_days,
            breakfast_credits=total_work_days,
            lunch_credits=total_work_days,
        )

    def credits_for(self, meal_type: MealType) -> int:
        return self.breakfast_credits if meal_type == MealType.BREAKFAST else self.lunch_credits


@dataclass(frozen=True)
class CreditSummary:
    user_id: int
    year: int
    month: int
    total_work_days: int
    breakfast_credits: int
    lunch_credits: int
    breakfast_used: int
    lunch_used: int

    @property
    def breakfast_remaining(self) -> int:
        return max(0, self.breakfast_credits - self.breakfast_used)

    @property
    def lunch_remaining(self) -> int:
        return max(0, self.lunch_credits - self.lunch_used)

    def remaining_for(self, meal_type: MealType) -> int:
        return self.breakfast_remaining if meal_type == MealType.BREAKFAST else self.lunch_remaining

    def to_dict(self) -> dict:
        return {
            "year": self.year,
            "month": self.month,
            "totalWorkDays": self.total_work_days,
            "breakfastCredits": self.breakfast_credits,
            "lunchCredits": self.lunch_credits,
            "breakfastUsed": self.breakfast_used,
            "lunchUsed": self.lunch_used,
            "breakfastRemaining": self.breakfast_remaining,
            "lunchRemaining": self.lunch_remaining,
        }


def reconcile(allotment: MonthlyAllotment, used: Dict[MealType, int]) -> CreditSummary:
    """Combine the stored allotment with live usage counts."""

    return CreditSummary(
        user_id=allotment.user_id,
        year=allotment.year,
        month=allotment.month,
        total_work_days=allotment.total_work_days,
        breakfast_credits=allotment.breakfast_credits,
        lunch_credits=allotment.lunch_credits,
        breakfast_used=int(used.get(MealType.BREAKFAST, 0)),
        lunch_used=int(used.get(MealType.LUNCH, 0)),
    )


@dataclass(frozen=True)
class RefreshReport:
    year: int
    month: int
    refreshed: int
    failed: int


@dataclass(frozen=True)
class MealCounts:
    """Meals taken in a month against the schedule's monthly limits."""

    year: int
    month: int
    breakfast: int
    lunch: int
    breakfast_limit: int
    lunch_limit: int

    @property
    def breakfast_remaining(self) -> int:
        return max(0, self.breakfast_limit - self.breakfast)

    @property
    def lunch_remaining(self) -> int:
        return max(0, self.lunch_limit - self.lunch)

    def to_dict(self) -> dict:
        return {
            "year": self.year,
            "month": self.month,
            "breakfast": self.breakfast,
            "lunch": self.lunch,
            "limits": {"breakfast": self.breakfast_limit, "lunch": self.lunch_limit},
            "remaining": {"breakfast": self.breakfast_remaining, "lunch": self.lunch_remaining},
        }
