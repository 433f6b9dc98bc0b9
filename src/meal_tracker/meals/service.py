from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import DenialReason, MealType
from ..core.exceptions import DuplicateMealError, ValidationError
from ..credits.service import CreditLedger
from ..schedule.resolver import resolve_meal_type
from ..schedule.service import ScheduleService
from ..users.repository import UserRepository
from .model import MealDecision, MealRecord
from .repository import MealRepository

logger = logging.getLogger(__name__)


class MealService:
    """Eligibility engine and meal log use cases.

    Checks run in a fixed order and stop at the first failure:
    user -> active -> approved -> meal window -> once per day -> quota.
    Forced (admin) meals skip the window and once-per-day checks but still
    need quota; storage keeps at most one record per user, meal and day.
    """

    def __init__(
        self,
        meals: MealRepository,
        users: UserRepository,
        schedules: ScheduleService,
        ledger: CreditLedger,
    ):
        self._meals = meals
        self._users = users
        self._schedules = schedules
        self._ledger = ledger

    def evaluate(
        self,
        user_id: int,
        meal_type: Optional[MealType] = None,
        *,
        force: bool = False,
        now: Optional[datetime] = None,
    ) -> MealDecision:
        now = now or now_local()

        user = self._users.get_by_id(int(user_id))
        if not user:
            return MealDecision.deny(DenialReason.USER_NOT_FOUND, meal_type)
        if not user.is_active:
            return MealDecision.deny(DenialReason.USER_INACTIVE, meal_type)
        if not user.is_approved:
            return MealDecision.deny(DenialReason.USER_NOT_APPROVED, meal_type)

        if force:
            if meal_type is None:
                raise ValidationError("Meal type is required for a forced meal")
        else:
            current = resolve_meal_type(now, self._schedules.get_schedule())
            if current is None or (meal_type is not None and meal_type != current):
                return MealDecision.deny(DenialReason.OUTSIDE_MEAL_WINDOW, meal_type)
            meal_type = current

            if self._meals.exists_for(user_id=user.user_id, meal_type=meal_type, meal_date=now.date()):
                return MealDecision.deny(DenialReason.ALREADY_TAKEN, meal_type)

        summary = self._ledger.get_monthly_credits(user.user_id, now.year, now.month)
        if summary.remaining_for(meal_type) <= 0:
            return MealDecision.deny(DenialReason.QUOTA_EXHAUSTED, meal_type)

        return MealDecision.allow(meal_type)

    def can_consume(self, user_id: int, meal_type: MealType, *, now: Optional[datetime] = None) -> bool:
        return self.evaluate(user_id, meal_type, now=now).success

    def take_meal(
        self,
        user_id: int,
        meal_type: Optional[MealType] = None,
        *,
        force: bool = False,
        device_fingerprint: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> MealDecision:
        now = now or now_local()

        decision = self.evaluate(user_id, meal_type, force=force, now=now)
        if not decision.success:
            logger.info("meal denied for user %s: %s", user_id, decision.reason.value)
            return decision

        try:
            record = self._meals.create(
                user_id=int(user_id),
                meal_type=decision.meal_type,
                meal_date=now.date(),
                taken_at=now,
                device_fingerprint=device_fingerprint,
                forced=force,
            )
        except DuplicateMealError:
            # Lost a race against a concurrent request for the same meal.
            logger.info("meal denied for user %s: duplicate %s", user_id, decision.meal_type.value)
            return MealDecision.deny(DenialReason.ALREADY_TAKEN, decision.meal_type)

        logger.info(
            "meal recorded: user=%s meal=%s forced=%s record=%s",
            user_id,
            record.meal_type.value,
            force,
            record.record_id,
        )
        return MealDecision.allow(record.meal_type, record)

    def history(
        self,
        user_id: int,
        *,
        year: Optional[int] = None,
        month: Optional[int] = None,
        limit: Optional[int] = DEFAULT_HISTORY_LIMIT,
    ) -> Sequence[MealRecord]:
        return self._meals.list_for_user(user_id=int(user_id), year=year, month=month, limit=limit)

    def today_meals(self, user_id: int, *, now: Optional[datetime] = None) -> Sequence[MealType]:
        today = (now or now_local()).date()
        return [
            meal_type
            for meal_type in MealType
            if self._meals.exists_for(user_id=int(user_id), meal_type=meal_type, meal_date=today)
        ]
