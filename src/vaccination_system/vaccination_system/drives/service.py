from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import require_choice
from ..core.constants import UPCOMING_DRIVES_LIMIT
from ..core.enums import DriveStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..students.repository import StudentRepository
from .lifecycle import ensure_can_delete, ensure_can_enroll, ensure_editable, ensure_transition
from .model import VaccinationDrive
from .repository import DriveRepository
from .scheduling import SchedulingGuard
from .schema import parse_drive_payload, parse_student_ids

REQUIRED_FIELDS = ("name", "scheduled_at", "location", "vaccine_type", "target_count")
REQUIRED_MESSAGE = "Name, date, location, vaccine type, and target count are required"


@dataclass(frozen=True)
class EnrollmentResult:
    added: int
    drive: VaccinationDrive


class DriveService:
    """Use cases: schedule, edit and staff vaccination drives."""

    def __init__(
        self,
        drives: DriveRepository,
        students: StudentRepository,
        *,
        guard: Optional[SchedulingGuard] = None,
    ):
        self._drives = drives
        self._students = students
        self._guard = guard or SchedulingGuard(drives)

    def list_drives(self, coordinator_id: int, *, status: Optional[str] = None) -> Sequence[VaccinationDrive]:
        statuses = [require_choice(status, DriveStatus, "status")] if status else None
        return self._drives.list_for_coordinator(coordinator_id, statuses=statuses)

    def get_drive(self, coordinator_id: int, drive_id: int) -> VaccinationDrive:
        drive = self._drives.get_for_coordinator(coordinator_id, drive_id)
        if not drive:
            raise NotFoundError("Vaccination drive not found")
        return drive

    def upcoming(
        self,
        coordinator_id: int,
        *,
        now: Optional[datetime] = None,
        limit: int = UPCOMING_DRIVES_LIMIT,
    ) -> Sequence[VaccinationDrive]:
        return self._drives.list_for_coordinator(
            coordinator_id,
            statuses=[DriveStatus.SCHEDULED],
            start=now or now_local(),
            limit=limit,
        )

    def create_drive(self, coordinator_id: int, payload: Mapping[str, Any]) -> VaccinationDrive:
        fields = parse_drive_payload(payload)
        if any(k not in fields for k in REQUIRED_FIELDS):
            raise ValidationError(REQUIRED_MESSAGE)

        self._guard.ensure_free(
            coordinator_id=coordinator_id,
            location=fields["location"],
            when=fields["scheduled_at"],
        )

        student_ids = self._owned_student_ids(
            coordinator_id, parse_student_ids(payload.get("studentIds"), required=False)
        )
        drive_id = self._drives.create(
            coordinator_id=coordinator_id,
            name=fields["name"],
            scheduled_at=fields["scheduled_at"],
            location=fields["location"],
            vaccine_type=fields["vaccine_type"],
            description=fields.get("description"),
            target_count=fields["target_count"],
            student_ids=student_ids,
        )
        return self.get_drive(coordinator_id, drive_id)

    def update_drive(self, coordinator_id: int, drive_id: int, payload: Mapping[str, Any]) -> VaccinationDrive:
        drive = self.get_drive(coordinator_id, drive_id)
        ensure_editable(drive)

        changes = parse_drive_payload(payload)
        new_status = changes.pop("status", None)
        candidate = replace(drive, **changes)

        if candidate.location != drive.location or candidate.scheduled_at != drive.scheduled_at:
            self._guard.ensure_free(
                coordinator_id=coordinator_id,
                location=candidate.location,
                when=candidate.scheduled_at,
                exclude_drive_id=drive.drive_id,
            )

        if new_status is not None:
            ensure_transition(drive.status, new_status)
            candidate = replace(candidate, status=new_status)

        if not self._drives.update_details(candidate):
            raise NotFoundError("Vaccination drive not found")
        return self.get_drive(coordinator_id, drive_id)

    def delete_drive(self, coordinator_id: int, drive_id: int) -> None:
        drive = self.get_drive(coordinator_id, drive_id)
        ensure_can_delete(drive)
        if not self._drives.delete(coordinator_id=coordinator_id, drive_id=drive_id):
            raise NotFoundError("Vaccination drive not found")

    def add_students(self, coordinator_id: int, drive_id: int, student_ids: Sequence[int]) -> EnrollmentResult:
        if not student_ids:
            raise ValidationError("Student IDs are required")

        drive = self.get_drive(coordinator_id, drive_id)
        ensure_can_enroll(drive)

        owned = self._owned_student_ids(coordinator_id, student_ids)
        if not owned:
            raise NotFoundError("No valid students found")

        enrolled = {e.student_id for e in drive.enrollments}
        new_ids = [sid for sid in owned if sid not in enrolled]
        if not new_ids:
            raise ValidationError("All selected students are already in this drive")

        added = self._drives.add_enrollments(drive_id=drive.drive_id, student_ids=new_ids)
        return EnrollmentResult(added=added, drive=self.get_drive(coordinator_id, drive_id))

    def _owned_student_ids(self, coordinator_id: int, student_ids: Sequence[int]) -> list[int]:
        if not student_ids:
            return []
        wanted = list(dict.fromkeys(student_ids))
        found = {s.student_id for s in self._students.get_many_for_coordinator(coordinator_id, wanted)}
        return [sid for sid in wanted if sid in found]
