from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import now_local
from ..core.enums import MealType, Role
from ..core.exceptions import AuthorizationError
from .model import DEFAULT_WORK_SCHEDULE, WorkSchedule
from .repository import SettingsRepository
from .resolver import resolve_meal_type

logger = logging.getLogger(__name__)


class ScheduleService:
    def __init__(self, settings: SettingsRepository):
        self._settings = settings

    def get_schedule(self) -> WorkSchedule:
        return self._settings.get_work_schedule() or DEFAULT_WORK_SCHEDULE

    def current_meal(self, *, now: Optional[datetime] = None) -> Optional[MealType]:
        return resolve_meal_type(now or now_local(), self.get_schedule())

    def update_schedule(self, *, current_role: Role, schedule: WorkSchedule) -> WorkSchedule:
        """Persist a new schedule.

        Existing monthly allotments are left untouched; run a credit refresh to
        re-seed them.
        """

        if current_role != Role.ADMIN:
            raise AuthorizationError("Admin permission required")

        schedule.validate()
        self._settings.save_work_schedule(schedule)
        logger.info(
            "work schedule updated: days=%s breakfast=%s lunch=%s",
            sorted(schedule.work_days),
            schedule.breakfast_window,
            schedule.lunch_window,
        )
        return schedule
