from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Iterator

from werkzeug.security import generate_password_hash

from ..core.constants import WORK_SCHEDULE_SETTING_KEY
from ..schedule.model import DEFAULT_WORK_SCHEDULE
from .connection import DBConfig, DatabaseConnection

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"

# (full_name, email, password, role, department)
DEMO_USERS = (
    ("Admin Demo", "admin@example.com", "admin123", "admin", "Administration"),
    ("Staff Demo", "staff@example.com", "staff123", "staff", "Kitchen"),
)


def _factory(db_config: dict) -> DatabaseConnection:
    # Bootstrap may run before the app exists, so no shared singleton here.
    return DatabaseConnection(DBConfig.from_dict(db_config))


def _strip_create_db_and_use(sql: str) -> str:
    # schema.sql names a database; the configured one wins.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_comments(sql: str) -> str:
    return "\n".join(line for line in sql.splitlines() if not line.lstrip().startswith("--"))


def split_statements(sql: str) -> Iterator[str]:
    """Split on ';' outside of quoted strings."""

    buf: list[str] = []
    quote = None
    escape = False

    for ch in sql:
        buf.append(ch)
        if escape:
            escape = False
        elif ch == "\\":
            escape = True
        elif quote:
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == ";":
            stmt = "".join(buf[:-1]).strip()
            buf.clear()
            if stmt:
                yield stmt

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    factory = _factory(db_config)
    conn = factory.connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{factory.config.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path = DEFAULT_SCHEMA_PATH) -> None:
    ensure_database_exists(db_config)
    sql = _strip_create_db_and_use(_strip_comments(Path(schema_path).read_text(encoding="utf-8")))

    conn = _factory(db_config).connect()
    try:
        cur = conn.cursor()
        for stmt in split_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("schema applied from %s", schema_path)


def ensure_demo_users(db_config: dict) -> None:
    """Upsert demo accounts (approved) and the default work schedule."""

    conn = _factory(db_config).connect()
    try:
        cur = conn.cursor()
        for full_name, email, password, role, department in DEMO_USERS:
            cur.execute(
                """
                INSERT INTO users(full_name, email, password_hash, role, department, is_active, is_approved)
                VALUES(%s,%s,%s,%s,%s,1,1)
                ON DUPLICATE KEY UPDATE
                    full_name=VALUES(full_name),
                    password_hash=VALUES(password_hash),
                    role=VALUES(role),
                    department=VALUES(department),
                    is_active=1,
                    is_approved=1
                """,
                (full_name, email, generate_password_hash(password), role, department),
            )

        # Keep an admin-edited schedule if one exists.
        cur.execute(
            """
            INSERT IGNORE INTO system_settings(setting_key, setting_value, description)
            VALUES(%s,%s,%s)
            """,
            (WORK_SCHEDULE_SETTING_KEY, json.dumps(DEFAULT_WORK_SCHEDULE.to_dict()), "Work days and meal windows"),
        )
        conn.commit()
    finally:
        conn.close()
    logger.info("demo users ready: %s", ", ".join(u[1] for u in DEMO_USERS))


def list_tables(db_config: dict) -> list[str]:
    conn = _factory(db_config).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
