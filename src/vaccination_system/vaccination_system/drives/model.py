from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import DriveStatus, VaccinationStatus


@dataclass(frozen=True)
class EnrolledStudent:
    """Read-model: the student fields shown next to an enrollment."""

    student_id: int
    name: str
    student_code: str
    grade: str
    class_name: Optional[str]
    vaccination_status: VaccinationStatus


@dataclass(frozen=True)
class Enrollment:
    student_id: int
    attended: bool = False
    notes: Optional[str] = None
    # None when the student record no longer exists.
    student: Optional[EnrolledStudent] = None


@dataclass(frozen=True)
class VaccinationDrive:
    """Domain entity: a vaccination event at one location on one day.

    `vaccinated_count` is a cached count of attended enrollments, updated
    together with the enrollment it depends on.
    """

    drive_id: int
    coordinator_id: int
    name: str
    scheduled_at: datetime
    location: str
    vaccine_type: str
    description: Optional[str]
    target_count: int
    vaccinated_count: int = 0
    status: DriveStatus = DriveStatus.SCHEDULED
    enrollments: tuple[Enrollment, ...] = ()
    created_at: Optional[datetime] = None
