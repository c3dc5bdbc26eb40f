from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..common.validators import require_choice
from ..core.enums import VaccinationStatus
from ..core.exceptions import DomainError, NotFoundError, ValidationError
from .model import Student
from .repository import StudentRepository
from .schema import parse_student_payload
from .vaccination import ensure_unique_names, resolve_status

logger = logging.getLogger(__name__)

REQUIRED_MESSAGE = "Name, student ID, and grade are required"


@dataclass(frozen=True)
class ImportResult:
    success_count: int
    total_count: int
    errors: list[str] = field(default_factory=list)


class StudentService:
    """Use cases: manage a coordinator's student roster."""

    def __init__(self, students: StudentRepository):
        self._students = students

    def list_students(
        self,
        coordinator_id: int,
        *,
        grade: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Sequence[Student]:
        status_filter = require_choice(status, VaccinationStatus, "status") if status else None
        return self._students.list_for_coordinator(
            coordinator_id,
            grade=grade or None,
            status=status_filter,
            search=(search or "").strip() or None,
        )

    def get_student(self, coordinator_id: int, student_id: int) -> Student:
        student = self._students.get_for_coordinator(coordinator_id, student_id)
        if not student:
            raise NotFoundError("Student not found")
        return student

    def create_student(self, coordinator_id: int, payload: Mapping[str, Any]) -> Student:
        fields = parse_student_payload(payload)
        if not all(fields.get(k) for k in ("name", "student_code", "grade")):
            raise ValidationError(REQUIRED_MESSAGE)

        if self._students.get_by_code(fields["student_code"]):
            raise ValidationError("Student with this ID already exists")

        vaccines = fields.get("vaccines", ())
        ensure_unique_names(vaccines)

        student_id = self._students.create(
            coordinator_id=coordinator_id,
            student_code=fields["student_code"],
            name=fields["name"],
            grade=fields["grade"],
            class_name=fields.get("class_name"),
            date_of_birth=fields.get("date_of_birth"),
            parent_name=fields.get("parent_name"),
            contact_number=fields.get("contact_number"),
            vaccination_status=resolve_status(vaccines, fields.get("vaccination_status")),
            vaccines=vaccines,
        )
        return self.get_student(coordinator_id, student_id)

    def update_student(self, coordinator_id: int, student_id: int, payload: Mapping[str, Any]) -> Student:
        student = self.get_student(coordinator_id, student_id)
        changes = parse_student_payload(payload)

        for required in ("name", "student_code", "grade"):
            if required in changes and not changes[required]:
                raise ValidationError(REQUIRED_MESSAGE)

        new_code = changes.get("student_code")
        if new_code and new_code != student.student_code:
            other = self._students.get_by_code(new_code)
            if other and other.student_id != student.student_id:
                raise ValidationError("Student with this ID already exists")

        # a replaced history invalidates the stored status
        fallback = None if "vaccines" in changes else student.vaccination_status
        declared = changes.pop("vaccination_status", fallback)
        updated = replace(student, **changes)
        ensure_unique_names(updated.vaccines)
        updated = replace(updated, vaccination_status=resolve_status(updated.vaccines, declared))

        if not self._students.update(updated):
            raise NotFoundError("Student not found")
        return self.get_student(coordinator_id, student_id)

    def delete_student(self, coordinator_id: int, student_id: int) -> None:
        if not self._students.delete(coordinator_id=coordinator_id, student_id=student_id):
            raise NotFoundError("Student not found")

    def import_rows(self, coordinator_id: int, rows: Iterable[Mapping[str, str]]) -> ImportResult:
        """Create one student per row; a bad row is reported and skipped."""
        rows = list(rows)
        errors: list[str] = []
        success = 0

        for row in rows:
            code = (row.get("studentId") or "").strip()
            if not (row.get("name") or "").strip() or not code or not (row.get("grade") or "").strip():
                errors.append(f"Missing required fields for student: {code or 'unknown'}")
                continue

            if self._students.get_by_code(code):
                errors.append(f"Student with ID {code} already exists")
                continue

            try:
                # Imported rows never carry dose history.
                self.create_student(coordinator_id, {k: v for k, v in row.items() if k != "vaccines"})
                success += 1
            except DomainError as e:
                errors.append(f"Error importing student {code}: {e}")

        if errors:
            logger.info("Student import for coordinator %s: %d ok, %d rejected", coordinator_id, success, len(errors))
        return ImportResult(success_count=success, total_count=len(rows), errors=errors)

    def export_students(
        self,
        coordinator_id: int,
        *,
        grade: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Sequence[Student]:
        students = self.list_students(coordinator_id, grade=grade, status=status)
        if not students:
            raise NotFoundError("No students found matching the criteria")
        return students
