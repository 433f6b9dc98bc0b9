from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall
from .model import ScanAttempt
from .repository import ScanAttemptRepository


class MySQLScanAttemptRepository(ScanAttemptRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add(self, attempt: ScanAttempt) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO scan_attempts(device_fingerprint, attempted_at, success, ip_address)
                VALUES(%s,%s,%s,%s)
                """,
                (attempt.device_fingerprint, attempt.attempted_at, int(attempt.success), attempt.ip_address),
            )

    def list_since(self, *, since: datetime, device_fingerprint: Optional[str] = None) -> Sequence[ScanAttempt]:
        clauses = ["attempted_at > %s"]
        params: list[object] = [since]
        if device_fingerprint is not None:
            clauses.append("device_fingerprint=%s")
            params.append(device_fingerprint)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT device_fingerprint, attempted_at, success, ip_address
                FROM scan_attempts
                WHERE {' AND '.join(clauses)}
                ORDER BY attempted_at DESC
                """,
                tuple(params),
            )
            return [
                ScanAttempt(
                    device_fingerprint=r["device_fingerprint"],
                    attempted_at=r["attempted_at"],
                    success=as_bool(r.get("success")),
                    ip_address=r.get("ip_address"),
                )
                for r in fetchall(cur)
            ]

    def prune_before(self, cutoff: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM scan_attempts WHERE attempted_at <= %s", (cutoff,))
            return int(cur.rowcount)
