from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import MonthlyAllotment
from .repository import CreditRepository

_SELECT = """
    SELECT user_id, year, month, total_work_days, breakfast_credits, lunch_credits
    FROM user_credits
    WHERE user_id=%s AND year=%s AND month=%s
"""


def _to_allotment(row: dict) -> MonthlyAllotment:
    return MonthlyAllotment(
        user_id=int(row["user_id"]),
        year=int(row["year"]),
        month=int(row["month"]),
        total_work_days=int(row["total_work_days"]),
        breakfast_credits=int(row["breakfast_credits"]),
        lunch_credits=int(row["lunch_credits"]),
    )


class MySQLCreditRepository(CreditRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, *, user_id: int, year: int, month: int) -> Optional[MonthlyAllotment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT, (int(user_id), int(year), int(month)))
            row = fetchone(cur)
            return _to_allotment(row) if row else None

    def create_if_absent(self, allotment: MonthlyAllotment) -> MonthlyAllotment:
        with db_cursor(self._conn_factory) as (_, cur):
            # UNIQUE(user_id, year, month) makes the losing writer a no-op.
            cur.execute(
                """
                INSERT IGNORE INTO user_credits(user_id, year, month, total_work_days, breakfast_credits, lunch_credits)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    allotment.user_id,
                    allotment.year,
                    allotment.month,
                    allotment.total_work_days,
                    allotment.breakfast_credits,
                    allotment.lunch_credits,
                ),
            )
            cur.execute(_SELECT, (allotment.user_id, allotment.year, allotment.month))
            return _to_allotment(fetchone(cur))

    def upsert(self, allotment: MonthlyAllotment) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO user_credits(user_id, year, month, total_work_days, breakfast_credits, lunch_credits)
                VALUES(%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    total_work_days=VALUES(total_work_days),
                    breakfast_credits=VALUES(breakfast_credits),
                    lunch_credits=VALUES(lunch_credits)
                """,
                (
                    allotment.user_id,
                    allotment.year,
                    allotment.month,
                    allotment.total_work_days,
                    allotment.breakfast_credits,
                    allotment.lunch_credits,
                ),
            )
