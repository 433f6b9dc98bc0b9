from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_RECENT_ACTIVITY
from ..core.enums import MealType, Role
from ..core.exceptions import AuthorizationError
from ..credits.model import RefreshReport
from ..credits.service import CreditLedger
from ..meals.model import MealDecision, MealRecord
from ..meals.repository import MealRepository
from ..meals.service import MealService
from ..security.model import ScanStats
from ..security.service import ScanGuard
from ..users.repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardStats:
    today_breakfast: int
    today_lunch: int
    monthly_breakfast: int
    monthly_lunch: int
    total_users: int
    active_users: int
    pending_approval: int
    recent_activities: Sequence[MealRecord]


def _require_admin(current_role: Role) -> None:
    if current_role != Role.ADMIN:
        raise AuthorizationError("Admin permission required")


class AdminService:
    """Admin-only operations: credit refresh, forced meals, dashboards."""

    def __init__(
        self,
        ledger: CreditLedger,
        meal_service: MealService,
        meals: MealRepository,
        users: UserRepository,
        guard: ScanGuard,
    ):
        self._ledger = ledger
        self._meal_service = meal_service
        self._meals = meals
        self._users = users
        self._guard = guard

    def refresh_credits(
        self,
        *,
        current_role: Role,
        year: Optional[int] = None,
        month: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> RefreshReport:
        _require_admin(current_role)
        return self._ledger.refresh_all(year, month, now=now)

    def force_meal(
        self,
        *,
        current_role: Role,
        user_id: int,
        meal_type: MealType,
        now: Optional[datetime] = None,
    ) -> MealDecision:
        _require_admin(current_role)
        logger.info("forced %s requested for user %s", meal_type.value, user_id)
        return self._meal_service.take_meal(user_id, meal_type, force=True, now=now)

    def dashboard_stats(self, *, current_role: Role, now: Optional[datetime] = None) -> DashboardStats:
        _require_admin(current_role)

        today = (now or now_local()).date()
        month_start = date(today.year, today.month, 1)
        today_counts = self._meals.count_by_type(start=today, end=today)
        month_counts = self._meals.count_by_type(start=month_start, end=today)
        users = self._users.list_all()

        return DashboardStats(
            today_breakfast=today_counts.get(MealType.BREAKFAST, 0),
            today_lunch=today_counts.get(MealType.LUNCH, 0),
            monthly_breakfast=month_counts.get(MealType.BREAKFAST, 0),
            monthly_lunch=month_counts.get(MealType.LUNCH, 0),
            total_users=len(users),
            active_users=sum(1 for u in users if u.is_active),
            pending_approval=sum(1 for u in users if u.is_active and not u.is_approved),
            recent_activities=self._meals.list_recent(limit=DEFAULT_RECENT_ACTIVITY),
        )

    def scan_stats(self, *, current_role: Role, now: Optional[datetime] = None) -> ScanStats:
        _require_admin(current_role)
        return self._guard.stats(now=now)
