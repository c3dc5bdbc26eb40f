from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Coordinator
from .repository import CoordinatorRepository

_COLUMNS = "coordinator_id, name, email, password_hash, school, created_at"


def _to_coordinator(row: dict) -> Coordinator:
    return Coordinator(
        coordinator_id=int(row["coordinator_id"]),
        name=row["name"],
        email=row["email"],
        password_hash=row["password_hash"],
        school=row["school"],
        created_at=row.get("created_at"),
    )


class MySQLCoordinatorRepository(CoordinatorRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, coordinator_id: int) -> Optional[Coordinator]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM coordinators WHERE coordinator_id=%s", (int(coordinator_id),))
            row = fetchone(cur)
            return _to_coordinator(row) if row else None

    def get_by_email(self, email: str) -> Optional[Coordinator]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM coordinators WHERE email=%s", (email,))
            row = fetchone(cur)
            return _to_coordinator(row) if row else None

    def create(self, *, name: str, email: str, password_hash: str, school: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO coordinators(name, email, password_hash, school)
                VALUES(%s,%s,%s,%s)
                """,
                (name, email, password_hash, school),
            )
            return int(cur.lastrowid)
