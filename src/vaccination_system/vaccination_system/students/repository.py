from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import VaccinationStatus
from .model import Student, VaccineRecord


class StudentRepository(Protocol):
    def list_for_coordinator(
        self,
        coordinator_id: int,
        *,
        grade: Optional[str] = None,
        status: Optional[VaccinationStatus] = None,
        search: Optional[str] = None,
    ) -> Sequence[Student]:
        """Newest first; `search` matches name or student code, case-insensitive."""

        raise NotImplementedError

    def get_for_coordinator(self, coordinator_id: int, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def get_many_for_coordinator(self, coordinator_id: int, student_ids: Sequence[int]) -> Sequence[Student]:
        raise NotImplementedError

    def get_by_code(self, student_code: str) -> Optional[Student]:
        raise NotImplementedError

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
        raise NotImplementedError

    def update(self, student: Student) -> bool:
        """Write profile fields, status and vaccine history in one transaction."""

        raise NotImplementedError

    def update_vaccination(
        self,
        *,
        student_id: int,
        vaccines: Sequence[VaccineRecord],
        status: VaccinationStatus,
    ) -> bool:
        """Replace the vaccine history and status together."""

        raise NotImplementedError

    def delete(self, *, coordinator_id: int, student_id: int) -> bool:
        raise NotImplementedError
