from __future__ import annotations

import json
from typing import Optional

from ..core.constants import WORK_SCHEDULE_SETTING_KEY
from ..core.exceptions import ConfigurationError, ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import WorkSchedule
from .repository import SettingsRepository


class MySQLSettingsRepository(SettingsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_work_schedule(self) -> Optional[WorkSchedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT setting_value FROM system_settings WHERE setting_key=%s",
                (WORK_SCHEDULE_SETTING_KEY,),
            )
            row = fetchone(cur)
        if not row:
            return None
        try:
            return WorkSchedule.from_dict(json.loads(row["setting_value"]))
        except (ValueError, ValidationError) as e:
            raise ConfigurationError(f"Stored work schedule is corrupt: {e}") from e

    def save_work_schedule(self, schedule: WorkSchedule) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO system_settings(setting_key, setting_value, description)
                VALUES(%s,%s,%s)
                ON DUPLICATE KEY UPDATE setting_value=VALUES(setting_value)
                """,
                (
                    WORK_SCHEDULE_SETTING_KEY,
                    json.dumps(schedule.to_dict()),
                    "Work days, meal windows and monthly limits",
                ),
            )
