"""Attendance marking and the vaccine-history update it triggers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import now_local
from ..core.exceptions import NotFoundError
from ..students.repository import StudentRepository
from ..students.vaccination import derive_status, record_dose
from .lifecycle import ensure_can_mark_attendance
from .model import Enrollment, VaccinationDrive
from .repository import DriveRepository

logger = logging.getLogger(__name__)


def count_attended(enrollments: tuple[Enrollment, ...]) -> int:
    return sum(1 for e in enrollments if e.attended)


@dataclass(frozen=True)
class AttendanceOutcome:
    drive: VaccinationDrive
    # False when the drive side was saved but the student's history was not.
    student_updated: bool


class AttendanceService:
    """Use case: mark a student's attendance on an in-progress drive.

    The drive side (enrollment + counter) and the student side (vaccine history
    + status) are two separate transactions. A failing student update is
    logged and leaves the committed drive update in place.
    """

    def __init__(self, drives: DriveRepository, students: StudentRepository):
        self._drives = drives
        self._students = students

    def mark(
        self,
        coordinator_id: int,
        drive_id: int,
        student_id: int,
        *,
        attended: bool,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceOutcome:
        now = now or now_local()

        drive = self._drives.get_for_coordinator(coordinator_id, drive_id)
        if not drive:
            raise NotFoundError("Vaccination drive not found")
        ensure_can_mark_attendance(drive)

        if not any(e.student_id == student_id for e in drive.enrollments):
            raise NotFoundError("Student not found in this vaccination drive")

        enrollments = tuple(
            Enrollment(student_id=e.student_id, attended=attended, notes=notes, student=e.student)
            if e.student_id == student_id
            else e
            for e in drive.enrollments
        )
        if not self._drives.update_enrollment(
            drive_id=drive.drive_id,
            student_id=student_id,
            attended=attended,
            notes=notes,
            vaccinated_count=count_attended(enrollments),
        ):
            raise NotFoundError("Student not found in this vaccination drive")

        student_updated = False
        if attended:
            student_updated = self._record_dose(coordinator_id, student_id, drive, now)

        return AttendanceOutcome(
            drive=self._drives.get_for_coordinator(coordinator_id, drive_id) or drive,
            student_updated=student_updated,
        )

    def _record_dose(self, coordinator_id: int, student_id: int, drive: VaccinationDrive, now: datetime) -> bool:
        try:
            student = self._students.get_for_coordinator(coordinator_id, student_id)
            if not student:
                logger.warning(
                    "Student %s not found; attendance on drive %s kept without dose record",
                    student_id,
                    drive.drive_id,
                )
                return False

            vaccines = record_dose(student.vaccines, drive.vaccine_type, at=now)
            if not self._students.update_vaccination(
                student_id=student.student_id,
                vaccines=vaccines,
                status=derive_status(vaccines),
            ):
                logger.warning("Student %s vanished before its %s dose was saved", student_id, drive.vaccine_type)
                return False
            return True
        except Exception:
            logger.exception(
                "Failed to record %s dose for student %s (drive %s); drive attendance kept",
                drive.vaccine_type,
                student_id,
                drive.drive_id,
            )
            return False
