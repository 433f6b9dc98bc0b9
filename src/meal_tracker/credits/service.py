from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import now_local
from ..common.validators import require_year_month
from ..core.enums import MealType
from ..core.exceptions import ValidationError
from ..meals.repository import MealRepository
from ..schedule.service import ScheduleService
from ..users.repository import UserRepository
from .model import CreditSummary, MealCounts, MonthlyAllotment, RefreshReport, reconcile
from .repository import CreditRepository
from .workdays import count_work_days

logger = logging.getLogger(__name__)


class CreditLedger:
    """Monthly meal credits per user.

    The allotment is created lazily on first touch of a month and stays fixed
    until an explicit refresh. Usage is always recounted from the meal log.
    """

    def __init__(
        self,
        credits: CreditRepository,
        meals: MealRepository,
        users: UserRepository,
        schedules: ScheduleService,
    ):
        self._credits = credits
        self._meals = meals
        self._users = users
        self._schedules = schedules

    @staticmethod
    def _target_month(year: Optional[int], month: Optional[int], now: datetime) -> tuple[int, int]:
        return require_year_month(now.year if year is None else year, now.month if month is None else month)

    def _compute_allotment(self, user_id: int, year: int, month: int) -> MonthlyAllotment:
        schedule = self._schedules.get_schedule()
        total = count_work_days(year, month, schedule.work_days)
        return MonthlyAllotment.from_work_days(user_id=int(user_id), year=year, month=month, total_work_days=total)

    def get_allotment(self, user_id: int, year: int, month: int) -> MonthlyAllotment:
        allotment = self._credits.get(user_id=int(user_id), year=year, month=month)
        if allotment is None:
            allotment = self._credits.create_if_absent(self._compute_allotment(user_id, year, month))
        return allotment

    def get_monthly_credits(
        self,
        user_id: int,
        year: Optional[int] = None,
        month: Optional[int] = None,
        *,
        now: Optional[datetime] = None,
    ) -> CreditSummary:
        year, month = self._target_month(year, month, now or now_local())
        allotment = self.get_allotment(user_id, year, month)
        used = self._meals.count_for_month(user_id=int(user_id), year=year, month=month)
        return reconcile(allotment, used)

    def meal_counts(
        self,
        user_id: int,
        year: Optional[int] = None,
        month: Optional[int] = None,
        *,
        now: Optional[datetime] = None,
    ) -> MealCounts:
        """Usage against the schedule's monthly limits. Does not touch the allotment."""

        year, month = self._target_month(year, month, now or now_local())
        used = self._meals.count_for_month(user_id=int(user_id), year=year, month=month)
        schedule = self._schedules.get_schedule()
        return MealCounts(
            year=year,
            month=month,
            breakfast=int(used.get(MealType.BREAKFAST, 0)),
            lunch=int(used.get(MealType.LUNCH, 0)),
            breakfast_limit=schedule.monthly_breakfast_limit,
            lunch_limit=schedule.monthly_lunch_limit,
        )

    def refresh_all(
        self,
        year: Optional[int] = None,
        month: Optional[int] = None,
        *,
        now: Optional[datetime] = None,
    ) -> RefreshReport:
        """Recompute allotments of all active, approved users for one month.

        A failure for one user is logged and counted; the batch continues.
        """

        now = now or now_local()
        year, month = self._target_month(year, month, now)
        if (year, month) < (now.year, now.month):
            raise ValidationError("Past months cannot be refreshed")

        refreshed = failed = 0
        for user in self._users.list_eligible():
            try:
                self._credits.upsert(self._compute_allotment(user.user_id, year, month))
                refreshed += 1
            except Exception:
                failed += 1
                logger.exception("credit refresh failed for user %s (%04d-%02d)", user.user_id, year, month)

        logger.info("credit refresh %04d-%02d: refreshed=%d failed=%d", year, month, refreshed, failed)
        return RefreshReport(year=year, month=month, refreshed=refreshed, failed=failed)
