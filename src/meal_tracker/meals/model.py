from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import DenialReason, MealType


@dataclass(frozen=True)
class MealRecord:
    """Immutable fact: a meal taken by a user. Append-only."""

    record_id: int
    user_id: int
    meal_type: MealType
    meal_date: date
    taken_at: datetime
    device_fingerprint: Optional[str] = None
    forced: bool = False


@dataclass(frozen=True)
class MealDecision:
    """Allow/deny outcome of the eligibility checks.

    `record` is set only when a meal was committed.
    """

    success: bool
    meal_type: Optional[MealType] = None
    reason: Optional[DenialReason] = None
    record: Optional[MealRecord] = None

    @classmethod
    def deny(cls, reason: DenialReason, meal_type: Optional[MealType] = None) -> "MealDecision":
        return cls(success=False, meal_type=meal_type, reason=reason)

    @classmethod
    def allow(cls, meal_type: MealType, record: Optional[MealRecord] = None) -> "MealDecision":
        return cls(success=True, meal_type=meal_type, record=record)

    def to_dict(self) -> dict:
        out: dict = {"success": self.success}
        if self.meal_type is not None:
            out["mealType"] = self.meal_type.value
        if self.reason is not None:
            out["reason"] = self.reason.value
        if self.record is not None:
            out["record"] = record_to_dict(self.record)
        return out


def record_to_dict(r: MealRecord) -> dict:
    return {
        "id": r.record_id,
        "userId": r.user_id,
        "mealType": r.meal_type.value,
        "date": r.meal_date.strftime("%Y-%m-%d"),
        "timestamp": r.taken_at.isoformat(timespec="seconds"),
        "forced": r.forced,
    }
