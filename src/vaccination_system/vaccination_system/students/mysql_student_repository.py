from __future__ import annotations

from contextlib import contextmanager
from datetime import date
from typing import Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..core.enums import VaccinationStatus
from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Student, VaccineRecord
from .repository import StudentRepository

_COLUMNS = """
    student_id, coordinator_id, student_code, name, grade, class_name, date_of_birth,
    parent_name, contact_number, vaccination_status, created_at
"""


def _load_vaccines(cur, student_ids: Sequence[int]) -> dict[int, list[VaccineRecord]]:
    out: dict[int, list[VaccineRecord]] = {sid: [] for sid in student_ids}
    if not student_ids:
        return out

    cur.execute(
        f"""
        SELECT student_id, vaccine_name, last_dose_at, doses, completed
        FROM student_vaccines
        WHERE student_id IN ({in_clause(student_ids)})
        ORDER BY student_id, position
        """,
        tuple(student_ids),
    )
    for r in fetchall(cur):
        out[int(r["student_id"])].append(
            VaccineRecord(
                name=r["vaccine_name"],
                last_dose_at=r.get("last_dose_at"),
                doses=int(r["doses"]),
                completed=bool(r["completed"]),
            )
        )
    return out


def _to_students(cur, rows: list[dict]) -> list[Student]:
    vaccines = _load_vaccines(cur, [int(r["student_id"]) for r in rows])
    return [
        Student(
            student_id=int(r["student_id"]),
            coordinator_id=int(r["coordinator_id"]),
            student_code=r["student_code"],
            name=r["name"],
            grade=r["grade"],
            class_name=r.get("class_name"),
            date_of_birth=r.get("date_of_birth"),
            parent_name=r.get("parent_name"),
            contact_number=r.get("contact_number"),
            vaccination_status=VaccinationStatus(r["vaccination_status"]),
            vaccines=tuple(vaccines[int(r["student_id"])]),
            created_at=r.get("created_at"),
        )
        for r in rows
    ]


@contextmanager
def _unique_student_code():
    """Turn a lost race on the student_code UNIQUE key into a ValidationError."""
    try:
        yield
    except mysql.connector.IntegrityError as e:
        if e.errno == errorcode.ER_DUP_ENTRY:
            raise ValidationError("Student with this ID already exists") from e
        raise


def _write_vaccines(cur, student_id: int, vaccines: Sequence[VaccineRecord]) -> None:
    cur.execute("DELETE FROM student_vaccines WHERE student_id=%s", (int(student_id),))
    for position, v in enumerate(vaccines):
        cur.execute(
            """
            INSERT INTO student_vaccines(student_id, position, vaccine_name, last_dose_at, doses, completed)
            VALUES(%s,%s,%s,%s,%s,%s)
            """,
            (int(student_id), position, v.name, v.last_dose_at, int(v.doses), int(v.completed)),
        )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_coordinator(
        self,
        coordinator_id: int,
        *,
        grade: Optional[str] = None,
        status: Optional[VaccinationStatus] = None,
        search: Optional[str] = None,
    ) -> Sequence[Student]:
        clauses = ["coordinator_id=%s"]
        params: list[object] = [int(coordinator_id)]
        if grade:
            clauses.append("grade=%s")
            params.append(grade)
        if status:
            clauses.append("vaccination_status=%s")
            params.append(status.value)
        if search:
            clauses.append("(LOWER(name) LIKE %s OR LOWER(student_code) LIKE %s)")
            pattern = f"%{search.lower()}%"
            params.extend([pattern, pattern])

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM students WHERE {where} ORDER BY created_at DESC, student_id DESC",
                tuple(params),
            )
            return _to_students(cur, fetchall(cur))

    def get_for_coordinator(self, coordinator_id: int, student_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM students WHERE student_id=%s AND coordinator_id=%s",
                (int(student_id), int(coordinator_id)),
            )
            row = fetchone(cur)
            return _to_students(cur, [row])[0] if row else None

    def get_many_for_coordinator(self, coordinator_id: int, student_ids: Sequence[int]) -> Sequence[Student]:
        if not student_ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM students
                WHERE coordinator_id=%s AND student_id IN ({in_clause(student_ids)})
                ORDER BY student_id
                """,
                (int(coordinator_id), *[int(s) for s in student_ids]),
            )
            return _to_students(cur, fetchall(cur))

    def get_by_code(self, student_code: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE student_code=%s", (student_code,))
            row = fetchone(cur)
            return _to_students(cur, [row])[0] if row else None

    def create(
        self,
        *,
        coordinator_id: int,
        student_code: str,
        name: str,
        grade: str,
        class_name: Optional[str],
        date_of_birth: Optional[date],
        parent_name: Optional[str],
        contact_number: Optional[str],
        vaccination_status: VaccinationStatus,
        vaccines: Sequence[VaccineRecord] = (),
    ) -> int:
        with _unique_student_code(), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO students(
                    coordinator_id, student_code, name, grade, class_name, date_of_birth,
                    parent_name, contact_number, vaccination_status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(coordinator_id),
                    student_code,
                    name,
                    grade,
                    class_name,
                    date_of_birth,
                    parent_name,
                    contact_number,
                    vaccination_status.value,
                ),
            )
            student_id = int(cur.lastrowid)
            _write_vaccines(cur, student_id, vaccines)
            return student_id

    def update(self, student: Student) -> bool:
        with _unique_student_code(), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE students
                SET student_code=%s, name=%s, grade=%s, class_name=%s, date_of_birth=%s,
                    parent_name=%s, contact_number=%s, vaccination_status=%s
                WHERE student_id=%s AND coordinator_id=%s
                """,
                (
                    student.student_code,
                    student.name,
                    student.grade,
                    student.class_name,
                    student.date_of_birth,
                    student.parent_name,
                    student.contact_number,
                    student.vaccination_status.value,
                    int(student.student_id),
                    int(student.coordinator_id),
                ),
            )
            # rowcount is 0 when nothing changed, so check existence instead.
            cur.execute("SELECT 1 AS ok FROM students WHERE student_id=%s", (int(student.student_id),))
            if not fetchone(cur):
                return False
            _write_vaccines(cur, student.student_id, student.vaccines)
            return True

    def update_vaccination(
        self,
        *,
        student_id: int,
        vaccines: Sequence[VaccineRecord],
        status: VaccinationStatus,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT student_id FROM students WHERE student_id=%s FOR UPDATE",
                (int(student_id),),
            )
            if not fetchone(cur):
                return False
            cur.execute(
                "UPDATE students SET vaccination_status=%s WHERE student_id=%s",
                (status.value, int(student_id)),
            )
            _write_vaccines(cur, student_id, vaccines)
            return True

    def delete(self, *, coordinator_id: int, student_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM students WHERE student_id=%s AND coordinator_id=%s",
                (int(student_id), int(coordinator_id)),
            )
            return cur.rowcount > 0
