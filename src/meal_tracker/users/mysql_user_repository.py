from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository

_USER_COLUMNS = "user_id, full_name, email, password_hash, role, department, is_active, is_approved"


def _to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        full_name=row["full_name"],
        email=row["email"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        department=row.get("department"),
        is_active=as_bool(row.get("is_active"), True),
        is_approved=as_bool(row.get("is_approved")),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE email=%s", (email,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def create_user(
        self,
        *,
        full_name: str,
        email: str,
        password_hash: str,
        role: Role,
        department: Optional[str],
        is_approved: bool,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(full_name, email, password_hash, role, department, is_active, is_approved)
                VALUES(%s,%s,%s,%s,%s,1,%s)
                """,
                (full_name, email, password_hash, role.value, department, int(is_approved)),
            )
            return int(cur.lastrowid)

    def update_profile(self, user_id: int, *, full_name: str, department: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET full_name=%s, department=%s WHERE user_id=%s",
                (full_name, department, int(user_id)),
            )
            return cur.rowcount > 0

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET is_active=%s WHERE user_id=%s", (int(is_active), int(user_id)))
            return cur.rowcount > 0

    def set_approved(self, user_id: int, *, is_approved: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET is_approved=%s WHERE user_id=%s", (int(is_approved), int(user_id)))
            return cur.rowcount > 0

    def list_all(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users ORDER BY user_id DESC")
            return [_to_user(r) for r in fetchall(cur)]

    def list_eligible(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE is_active=1 AND is_approved=1 ORDER BY user_id ASC"
            )
            return [_to_user(r) for r in fetchall(cur)]
