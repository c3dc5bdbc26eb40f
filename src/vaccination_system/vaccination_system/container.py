from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .coordinators.mysql_coordinator_repository import MySQLCoordinatorRepository
from .coordinators.repository import CoordinatorRepository
from .coordinators.service import AuthService
from .coordinators.tokens import TokenService
from .core.constants import DEFAULT_TOKEN_EXPIRY_DAYS
from .database.connection import DBConfig, DatabaseConnection
from .drives.attendance import AttendanceService
from .drives.mysql_drive_repository import MySQLDriveRepository
from .drives.repository import DriveRepository
from .drives.scheduling import SchedulingGuard
from .drives.service import DriveService
from .reports.service import ReportService
from .students.mysql_student_repository import MySQLStudentRepository
from .students.repository import StudentRepository
from .students.service import StudentService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    coordinators_repo: CoordinatorRepository
    students_repo: StudentRepository
    drives_repo: DriveRepository

    auth_service: AuthService
    student_service: StudentService
    drive_service: DriveService
    attendance_service: AttendanceService
    report_service: ReportService


def build_services(
    *,
    coordinators_repo: CoordinatorRepository,
    students_repo: StudentRepository,
    drives_repo: DriveRepository,
    tokens: TokenService,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services on top of the given repositories (MySQL or in-memory)."""
    return Container(
        conn=conn,
        coordinators_repo=coordinators_repo,
        students_repo=students_repo,
        drives_repo=drives_repo,
        auth_service=AuthService(coordinators_repo, tokens),
        student_service=StudentService(students_repo),
        drive_service=DriveService(drives_repo, students_repo, guard=SchedulingGuard(drives_repo)),
        attendance_service=AttendanceService(drives_repo, students_repo),
        report_service=ReportService(students_repo, drives_repo),
    )


def build_container(
    *,
    db_config: dict,
    jwt_secret: str,
    jwt_algorithm: str = "HS256",
    token_expiry_days: int = DEFAULT_TOKEN_EXPIRY_DAYS,
) -> Container:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config))
    return build_services(
        coordinators_repo=MySQLCoordinatorRepository(conn),
        students_repo=MySQLStudentRepository(conn),
        drives_repo=MySQLDriveRepository(conn),
        tokens=TokenService(jwt_secret, algorithm=jwt_algorithm, expiry_days=token_expiry_days),
        conn=conn,
    )
