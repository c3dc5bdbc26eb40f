from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import VaccinationStatus


@dataclass(frozen=True)
class VaccineRecord:
    """Dose history of one vaccine for one student."""

    name: str
    last_dose_at: Optional[datetime]
    doses: int
    completed: bool = False


@dataclass(frozen=True)
class Student:
    """Domain entity: a student on a coordinator's roster.

    `student_code` is the school-issued identifier (unique system-wide);
    `vaccination_status` is derived from `vaccines` whenever they change.
    """

    student_id: int
    coordinator_id: int
    student_code: str
    name: str
    grade: str
    class_name: Optional[str]
    date_of_birth: Optional[date]
    parent_name: Optional[str]
    contact_number: Optional[str]
    vaccination_status: VaccinationStatus
    vaccines: tuple[VaccineRecord, ...] = ()
    created_at: Optional[datetime] = None
