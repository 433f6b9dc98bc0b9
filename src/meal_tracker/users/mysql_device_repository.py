from __future__ import annotations

from datetime import datetime
from typing import Optional

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchone
from .model import DeviceInfo, DeviceRegistration
from .repository import DeviceRepository


def _to_device(row: dict) -> DeviceRegistration:
    return DeviceRegistration(
        device_id=int(row["device_id"]),
        user_id=int(row["user_id"]),
        fingerprint=row["fingerprint"],
        user_agent=row.get("user_agent"),
        screen_resolution=row.get("screen_resolution"),
        timezone=row.get("timezone"),
        is_active=as_bool(row.get("is_active")),
        created_at=row["created_at"],
        last_used=row.get("last_used"),
    )


class MySQLDeviceRepository(DeviceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_active_by_fingerprint(self, fingerprint: str) -> Optional[DeviceRegistration]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT device_id, user_id, fingerprint, user_agent, screen_resolution, timezone,
                       is_active, created_at, last_used
                FROM devices
                WHERE fingerprint=%s AND is_active=1
                """,
                (fingerprint,),
            )
            row = fetchone(cur)
            return _to_device(row) if row else None

    def register(self, *, user_id: int, fingerprint: str, info: DeviceInfo, now: datetime) -> DeviceRegistration:
        # Both statements share one transaction: the user never has two active devices.
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute("UPDATE devices SET is_active=0 WHERE user_id=%s AND is_active=1", (int(user_id),))
                cur.execute(
                    """
                    INSERT INTO devices(user_id, fingerprint, user_agent, screen_resolution, timezone,
                                        is_active, created_at, last_used)
                    VALUES(%s,%s,%s,%s,%s,1,%s,%s)
                    """,
                    (int(user_id), fingerprint, info.user_agent, info.screen_resolution, info.timezone, now, now),
                )
                device_id = int(cur.lastrowid)
        except IntegrityError as e:
            if e.errno == errorcode.ER_DUP_ENTRY:
                raise ValidationError("This device is registered to another user") from e
            raise

        return DeviceRegistration(
            device_id=device_id,
            user_id=int(user_id),
            fingerprint=fingerprint,
            user_agent=info.user_agent,
            screen_resolution=info.screen_resolution,
            timezone=info.timezone,
            is_active=True,
            created_at=now,
            last_used=now,
        )

    def touch(self, device_id: int, *, now: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE devices SET last_used=%s WHERE device_id=%s", (now, int(device_id)))
