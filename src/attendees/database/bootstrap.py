from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable

from ..activities.model import ActivitySettings
from ..core.constants import DEFAULT_LOCATION_NAME
from .connection import DBConfig, DatabaseConnection


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema/seed files (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _connection(db_config: dict) -> DatabaseConnection:
    return DatabaseConnection(DBConfig.from_dict(db_config))


def ensure_database_exists(db_config: dict) -> None:
    factory = _connection(db_config)
    conn = factory.connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{factory.config.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    sql = _strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8"))

    conn = _connection(db_config).connect()
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


def seed_demo_data(db_config: dict) -> None:
    """Idempotent demo course: one activity, one location, three members."""

    conn = _connection(db_config).connect()
    try:
        cur = conn.cursor(dictionary=True)

        members = [
            ("Ada", "Lovelace", "1001", "ada@example.org", "ada"),
            ("Alan", "Turing", "1002", "alan@example.org", "alan"),
            ("Grace", "Hopper", "1003", "grace@example.org", "grace"),
        ]
        for first, last, idnumber, email, username in members:
            cur.execute("SELECT member_id FROM members WHERE username=%s", (username,))
            row = cur.fetchone()
            if row:
                member_id = int(row["member_id"])
            else:
                cur.execute(
                    """
                    INSERT INTO members (first_name, last_name, idnumber, email, username)
                    VALUES (%s, %s, %s, %s, %s)
                    """,
                    (first, last, idnumber, email, username),
                )
                member_id = int(cur.lastrowid)
            cur.execute(
                "INSERT IGNORE INTO course_enrolments (course_id, member_id, can_sign) VALUES (1, %s, 1)",
                (member_id,),
            )

        cur.execute("SELECT activity_id FROM activities WHERE course_id=1 AND name=%s", ("Front desk",))
        row = cur.fetchone()
        if not row:
            settings = ActivitySettings(timecard_enabled=True, kiosk_mode=True, show_roster=True)
            cur.execute(
                "INSERT INTO activities (course_id, name, intro, settings_json) VALUES (1, %s, %s, %s)",
                ("Front desk", "Sign in when you arrive.", settings.to_json()),
            )
            cur.execute(
                "INSERT INTO locations (activity_id, name) VALUES (%s, %s)",
                (int(cur.lastrowid), DEFAULT_LOCATION_NAME),
            )

        conn.commit()
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = _connection(db_config).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
