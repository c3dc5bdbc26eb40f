from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import DriveStatus, VaccinationStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import EnrolledStudent, Enrollment, VaccinationDrive
from .repository import DriveRepository

_COLUMNS = """
    d.drive_id, d.coordinator_id, d.name, d.scheduled_at, d.location, d.vaccine_type,
    d.description, d.target_count, d.vaccinated_count, d.status, d.created_at
"""


def _load_enrollments(cur, drive_ids: Sequence[int]) -> dict[int, list[Enrollment]]:
    out: dict[int, list[Enrollment]] = {did: [] for did in drive_ids}
    if not drive_ids:
        return out

    cur.execute(
        f"""
        SELECT e.drive_id, e.student_id, e.attended, e.notes,
               s.name, s.student_code, s.grade, s.class_name, s.vaccination_status
        FROM drive_enrollments e
        LEFT JOIN students s ON s.student_id = e.student_id
        WHERE e.drive_id IN ({in_clause(drive_ids)})
        ORDER BY e.drive_id, e.position
        """,
        tuple(drive_ids),
    )
    for r in fetchall(cur):
        student = None
        if r.get("student_code") is not None:
            student = EnrolledStudent(
                student_id=int(r["student_id"]),
                name=r["name"],
                student_code=r["student_code"],
                grade=r["grade"],
                class_name=r.get("class_name"),
                vaccination_status=VaccinationStatus(r["vaccination_status"]),
            )
        out[int(r["drive_id"])].append(
            Enrollment(
                student_id=int(r["student_id"]),
                attended=bool(r["attended"]),
                notes=r.get("notes"),
                student=student,
            )
        )
    return out


def _to_drives(cur, rows: list[dict]) -> list[VaccinationDrive]:
    enrollments = _load_enrollments(cur, [int(r["drive_id"]) for r in rows])
    return [
        VaccinationDrive(
            drive_id=int(r["drive_id"]),
            coordinator_id=int(r["coordinator_id"]),
            name=r["name"],
            scheduled_at=r["scheduled_at"],
            location=r["location"],
            vaccine_type=r["vaccine_type"],
            description=r.get("description"),
            target_count=int(r["target_count"]),
            vaccinated_count=int(r["vaccinated_count"]),
            status=DriveStatus(r["status"]),
            enrollments=tuple(enrollments[int(r["drive_id"])]),
            created_at=r.get("created_at"),
        )
        for r in rows
    ]


def _insert_enrollments(cur, drive_id: int, student_ids: Sequence[int]) -> int:
    cur.execute(
        "SELECT COALESCE(MAX(position), -1) AS last FROM drive_enrollments WHERE drive_id=%s",
        (int(drive_id),),
    )
    position = int(fetchone(cur)["last"]) + 1
    added = 0
    for student_id in student_ids:
        cur.execute(
            """
            INSERT IGNORE INTO drive_enrollments(drive_id, student_id, position, attended, notes)
            VALUES(%s,%s,%s,0,NULL)
            """,
            (int(drive_id), int(student_id), position),
        )
        if cur.rowcount > 0:
            added += 1
            position += 1
    return added


class MySQLDriveRepository(DriveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_coordinator(
        self,
        coordinator_id: int,
        *,
        statuses: Optional[Sequence[DriveStatus]] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        vaccine_type: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Sequence[VaccinationDrive]:
        clauses = ["d.coordinator_id=%s"]
        params: list[object] = [int(coordinator_id)]
        if statuses:
            clauses.append(f"d.status IN ({in_clause(statuses)})")
            params.extend(s.value for s in statuses)
        if start is not None:
            clauses.append("d.scheduled_at >= %s")
            params.append(start)
        if end is not None:
            clauses.append("d.scheduled_at < %s")
            params.append(end)
        if vaccine_type:
            clauses.append("d.vaccine_type=%s")
            params.append(vaccine_type)

        sql = f"SELECT {_COLUMNS} FROM vaccination_drives d WHERE {' AND '.join(clauses)} ORDER BY d.scheduled_at ASC, d.drive_id ASC"
        if limit:
            sql += " LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return _to_drives(cur, fetchall(cur))

    def get_for_coordinator(self, coordinator_id: int, drive_id: int) -> Optional[VaccinationDrive]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM vaccination_drives d WHERE d.drive_id=%s AND d.coordinator_id=%s",
                (int(drive_id), int(coordinator_id)),
            )
            row = fetchone(cur)
            return _to_drives(cur, [row])[0] if row else None

    def find_on_day(
        self,
        *,
        coordinator_id: int,
        location: str,
        start: datetime,
        end: datetime,
        exclude_drive_id: Optional[int] = None,
    ) -> Optional[VaccinationDrive]:
        clauses = ["d.coordinator_id=%s", "d.location=%s", "d.scheduled_at >= %s", "d.scheduled_at < %s"]
        params: list[object] = [int(coordinator_id), location, start, end]
        if exclude_drive_id is not None:
            clauses.append("d.drive_id <> %s")
            params.append(int(exclude_drive_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM vaccination_drives d WHERE {' AND '.join(clauses)} LIMIT 1",
                tuple(params),
            )
            row = fetchone(cur)
            return _to_drives(cur, [row])[0] if row else None

    def create(
        self,
        *,
        coordinator_id: int,
        name: str,
        scheduled_at: datetime,
        location: str,
        vaccine_type: str,
        description: Optional[str],
        target_count: int,
        student_ids: Sequence[int] = (),
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO vaccination_drives(
                    coordinator_id, name, scheduled_at, location, vaccine_type, description,
                    target_count, vaccinated_count, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,0,%s)
                """,
                (
                    int(coordinator_id),
                    name,
                    scheduled_at,
                    location,
                    vaccine_type,
                    description,
                    int(target_count),
                    DriveStatus.SCHEDULED.value,
                ),
            )
            drive_id = int(cur.lastrowid)
            if student_ids:
                _insert_enrollments(cur, drive_id, student_ids)
            return drive_id

    def update_details(self, drive: VaccinationDrive) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE vaccination_drives
                SET name=%s, scheduled_at=%s, location=%s, vaccine_type=%s, description=%s,
                    target_count=%s, status=%s
                WHERE drive_id=%s AND coordinator_id=%s
                """,
                (
                    drive.name,
                    drive.scheduled_at,
                    drive.location,
                    drive.vaccine_type,
                    drive.description,
                    int(drive.target_count),
                    drive.status.value,
                    int(drive.drive_id),
                    int(drive.coordinator_id),
                ),
            )
            cur.execute("SELECT 1 AS ok FROM vaccination_drives WHERE drive_id=%s", (int(drive.drive_id),))
            return fetchone(cur) is not None

    def delete(self, *, coordinator_id: int, drive_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM vaccination_drives WHERE drive_id=%s AND coordinator_id=%s",
                (int(drive_id), int(coordinator_id)),
            )
            return cur.rowcount > 0

    def add_enrollments(self, *, drive_id: int, student_ids: Sequence[int]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            return _insert_enrollments(cur, drive_id, student_ids)

    def update_enrollment(
        self,
        *,
        drive_id: int,
        student_id: int,
        attended: bool,
        notes: Optional[str],
        vaccinated_count: int,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS ok FROM drive_enrollments WHERE drive_id=%s AND student_id=%s FOR UPDATE",
                (int(drive_id), int(student_id)),
            )
            if not fetchone(cur):
                return False
            cur.execute(
                "UPDATE drive_enrollments SET attended=%s, notes=%s WHERE drive_id=%s AND student_id=%s",
                (int(bool(attended)), notes, int(drive_id), int(student_id)),
            )
            cur.execute(
                "UPDATE vaccination_drives SET vaccinated_count=%s WHERE drive_id=%s",
                (max(0, int(vaccinated_count)), int(drive_id)),
            )
            return True
