from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

from werkzeug.security import generate_password_hash

from .connection import DatabaseConnection
from .mysql_base import db_cursor, fetchone

logger = logging.getLogger(__name__)

DEMO_COORDINATOR = {
    "name": "Demo Coordinator",
    "email": "coordinator@example.com",
    "password": "coordinator123",
    "school": "Demo High School",
}

DEMO_STUDENTS = [
    ("Aarav Sharma", "STU-0001", "9th", "A"),
    ("Diya Patel", "STU-0002", "10th", "B"),
    ("Kabir Singh", "STU-0003", "11th", "A"),
    ("Meera Iyer", "STU-0004", "12th", "C"),
]


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_comments(sql: str) -> str:
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema files (handles ';' inside quotes).
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


def ensure_database_exists(conn_factory: DatabaseConnection) -> None:
    name = conn_factory.config.database
    conn = conn_factory.connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{name}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(conn_factory: DatabaseConnection, *, schema_path: str | Path) -> None:
    ensure_database_exists(conn_factory)

    sql = Path(schema_path).read_text(encoding="utf-8")
    sql = _strip_comments(_strip_create_db_and_use(sql))

    with db_cursor(conn_factory, dictionary=False) as (_, cur):
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
    logger.info("Applied schema %s to %s", schema_path, conn_factory.config.describe())


def ensure_demo_data(conn_factory: DatabaseConnection) -> int:
    """Upsert the demo coordinator and a small roster; returns the coordinator id."""
    demo = DEMO_COORDINATOR
    with db_cursor(conn_factory) as (_, cur):
        cur.execute("SELECT coordinator_id FROM coordinators WHERE email=%s", (demo["email"],))
        row = fetchone(cur)
        if row:
            coordinator_id = int(row["coordinator_id"])
            cur.execute(
                "UPDATE coordinators SET name=%s, password_hash=%s, school=%s WHERE coordinator_id=%s",
                (demo["name"], generate_password_hash(demo["password"]), demo["school"], coordinator_id),
            )
        else:
            cur.execute(
                "INSERT INTO coordinators(name, email, password_hash, school) VALUES(%s,%s,%s,%s)",
                (demo["name"], demo["email"], generate_password_hash(demo["password"]), demo["school"]),
            )
            coordinator_id = int(cur.lastrowid)

        for name, code, grade, class_name in DEMO_STUDENTS:
            cur.execute(
                """
                INSERT IGNORE INTO students(coordinator_id, student_code, name, grade, class_name)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (coordinator_id, code, name, grade, class_name),
            )

    logger.info("Demo coordinator ready: %s", demo["email"])
    return coordinator_id


def list_tables(conn_factory: DatabaseConnection) -> list[str]:
    with db_cursor(conn_factory, dictionary=False) as (_, cur):
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
