from __future__ import annotations

from datetime import date, datetime
from typing import Dict, Optional, Protocol, Sequence

from ..core.enums import MealType
from .model import MealRecord


class MealRepository(Protocol):
    """Append-only meal log. No update or delete operations exist on purpose."""

    def exists_for(self, *, user_id: int, meal_type: MealType, meal_date: date) -> bool:
        raise NotImplementedError

    def create(
        self,
        *,
        user_id: int,
        meal_type: MealType,
        meal_date: date,
        taken_at: datetime,
        device_fingerprint: Optional[str] = None,
        forced: bool = False,
    ) -> MealRecord:
        """Insert a record.

        Raises DuplicateMealError when (user_id, meal_type, meal_date) exists.
        """

        raise NotImplementedError

    def count_for_month(self, *, user_id: int, year: int, month: int) -> Dict[MealType, int]:
        raise NotImplementedError

    def list_for_user(
        self,
        *,
        user_id: int,
        year: Optional[int] = None,
        month: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Sequence[MealRecord]:
        """Newest first."""

        raise NotImplementedError

    def count_by_type(self, *, start: date, end: date) -> Dict[MealType, int]:
        """Counts per meal type for meal_date in [start, end]."""

        raise NotImplementedError

    def list_recent(self, *, limit: int) -> Sequence[MealRecord]:
        raise NotImplementedError
