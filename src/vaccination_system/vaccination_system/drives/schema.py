"""JSON field mapping for vaccination drives."""

from __future__ import annotations

from typing import Any, Dict, Mapping

from ..common.datetime_utils import parse_iso_datetime
from ..common.validators import optional_text, require_choice, require_non_empty, require_positive_int
from ..core.enums import DriveStatus
from ..core.exceptions import ValidationError
from .model import Enrollment, VaccinationDrive

FIELD_MAP = {
    "name": "name",
    "date": "scheduled_at",
    "location": "location",
    "vaccineType": "vaccine_type",
    "description": "description",
    "targetCount": "target_count",
    "status": "status",
}

LABELS = {
    "name": "Name",
    "location": "Location",
    "vaccine_type": "Vaccine type",
}


def parse_drive_payload(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Typed drive attributes for the keys present (and non-empty) in `data`."""
    out: Dict[str, Any] = {}
    for key, attr in FIELD_MAP.items():
        value = data.get(key)
        if value is None or (isinstance(value, str) and not value.strip()):
            continue

        if attr == "scheduled_at":
            try:
                out[attr] = parse_iso_datetime(str(value))
            except ValueError:
                raise ValidationError(f"Invalid date '{value}'")
        elif attr == "target_count":
            out[attr] = require_positive_int(value, "Target count")
        elif attr == "status":
            out[attr] = require_choice(value, DriveStatus, "status")
        elif attr == "description":
            out[attr] = optional_text(value)
        else:
            out[attr] = require_non_empty(value, LABELS[attr])
    return out


def parse_student_ids(value: Any, *, required: bool) -> list[int]:
    if value is None and not required:
        return []
    if not isinstance(value, list) or (required and not value):
        raise ValidationError("Student IDs are required")
    try:
        return list(dict.fromkeys(int(v) for v in value))
    except (TypeError, ValueError):
        raise ValidationError("Student IDs must be numeric")


def enrollment_to_json(e: Enrollment) -> dict:
    student: Any = e.student_id
    if e.student is not None:
        student = {
            "id": e.student.student_id,
            "name": e.student.name,
            "studentId": e.student.student_code,
            "grade": e.student.grade,
            "class": e.student.class_name or "",
            "vaccinationStatus": e.student.vaccination_status.value,
        }
    return {"student": student, "attended": e.attended, "notes": e.notes or ""}


def drive_to_json(d: VaccinationDrive, *, with_students: bool = True) -> dict:
    out = {
        "id": d.drive_id,
        "name": d.name,
        "date": d.scheduled_at.isoformat(),
        "location": d.location,
        "vaccineType": d.vaccine_type,
        "description": d.description or "",
        "targetCount": d.target_count,
        "vaccinatedCount": d.vaccinated_count,
        "status": d.status.value,
        "createdAt": d.created_at.isoformat() if d.created_at else None,
    }
    if with_students:
        out["students"] = [enrollment_to_json(e) for e in d.enrollments]
    return out
