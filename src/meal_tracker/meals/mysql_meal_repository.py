from __future__ import annotations

from datetime import date, datetime
from typing import Dict, Optional, Sequence

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from ..core.enums import MealType
from ..core.exceptions import DuplicateMealError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone
from .model import MealRecord
from .repository import MealRepository

_RECORD_COLUMNS = "record_id, user_id, meal_type, meal_date, taken_at, device_fingerprint, forced"


def _to_record(row: dict) -> MealRecord:
    return MealRecord(
        record_id=int(row["record_id"]),
        user_id=int(row["user_id"]),
        meal_type=MealType(row["meal_type"]),
        meal_date=row["meal_date"],
        taken_at=row["taken_at"],
        device_fingerprint=row.get("device_fingerprint"),
        forced=as_bool(row.get("forced")),
    )


def _empty_counts() -> Dict[MealType, int]:
    return {meal_type: 0 for meal_type in MealType}


class MySQLMealRepository(MealRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def exists_for(self, *, user_id: int, meal_type: MealType, meal_date: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS found FROM meal_records WHERE user_id=%s AND meal_type=%s AND meal_date=%s",
                (int(user_id), meal_type.value, meal_date),
            )
            return fetchone(cur) is not None

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
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO meal_records(user_id, meal_type, meal_date, taken_at, device_fingerprint, forced)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (int(user_id), meal_type.value, meal_date, taken_at, device_fingerprint, int(forced)),
                )
                record_id = int(cur.lastrowid)
        except IntegrityError as e:
            if e.errno == errorcode.ER_DUP_ENTRY:
                raise DuplicateMealError(f"{meal_type.value} already recorded for user {user_id} on {meal_date}") from e
            raise

        return MealRecord(
            record_id=record_id,
            user_id=int(user_id),
            meal_type=meal_type,
            meal_date=meal_date,
            taken_at=taken_at,
            device_fingerprint=device_fingerprint,
            forced=forced,
        )

    def count_for_month(self, *, user_id: int, year: int, month: int) -> Dict[MealType, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT meal_type, COUNT(*) AS total
                FROM meal_records
                WHERE user_id=%s AND YEAR(meal_date)=%s AND MONTH(meal_date)=%s
                GROUP BY meal_type
                """,
                (int(user_id), int(year), int(month)),
            )
            counts = _empty_counts()
            for r in fetchall(cur):
                counts[MealType(r["meal_type"])] = int(r["total"])
            return counts

    def list_for_user(
        self,
        *,
        user_id: int,
        year: Optional[int] = None,
        month: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Sequence[MealRecord]:
        clauses = ["user_id=%s"]
        params: list[object] = [int(user_id)]
        if year is not None:
            clauses.append("YEAR(meal_date)=%s")
            params.append(int(year))
        if month is not None:
            clauses.append("MONTH(meal_date)=%s")
            params.append(int(month))

        sql = f"SELECT {_RECORD_COLUMNS} FROM meal_records WHERE {' AND '.join(clauses)} ORDER BY taken_at DESC"
        if limit is not None:
            sql += " LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_record(r) for r in fetchall(cur)]

    def count_by_type(self, *, start: date, end: date) -> Dict[MealType, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT meal_type, COUNT(*) AS total
                FROM meal_records
                WHERE meal_date BETWEEN %s AND %s
                GROUP BY meal_type
                """,
                (start, end),
            )
            counts = _empty_counts()
            for r in fetchall(cur):
                counts[MealType(r["meal_type"])] = int(r["total"])
            return counts

    def list_recent(self, *, limit: int) -> Sequence[MealRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_RECORD_COLUMNS} FROM meal_records ORDER BY taken_at DESC LIMIT %s",
                (int(limit),),
            )
            return [_to_record(r) for r in fetchall(cur)]
