"""JSON/CSV field mapping for students."""

from __future__ import annotations

from typing import Any, Dict, Mapping

from ..common.datetime_utils import parse_iso_date, parse_iso_datetime
from ..common.validators import optional_text, require_choice, require_non_empty, require_positive_int
from ..core.enums import VaccinationStatus
from ..core.exceptions import ValidationError
from .model import Student, VaccineRecord
from .vaccination import is_complete

# external key -> Student attribute
FIELD_MAP = {
    "name": "name",
    "studentId": "student_code",
    "grade": "grade",
    "class": "class_name",
    "dateOfBirth": "date_of_birth",
    "parentName": "parent_name",
    "contactNumber": "contact_number",
    "vaccinationStatus": "vaccination_status",
    "vaccines": "vaccines",
}


def _parse_vaccine(item: Any) -> VaccineRecord:
    if not isinstance(item, Mapping):
        raise ValidationError("Each vaccine must be an object")

    name = require_non_empty(item.get("name"), "Vaccine name")
    doses = require_positive_int(item.get("doses", 1), "Vaccine doses")
    raw_date = optional_text(item.get("date"))
    try:
        last_dose_at = parse_iso_datetime(raw_date) if raw_date else None
    except ValueError:
        raise ValidationError(f"Invalid vaccine date '{raw_date}'")
    return VaccineRecord(name=name, last_dose_at=last_dose_at, doses=doses, completed=is_complete(doses))


def parse_student_payload(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Translate the keys present in `data` into typed Student attributes.

    Absent keys are left out, so the result doubles as a partial update.
    """
    out: Dict[str, Any] = {}
    for key, attr in FIELD_MAP.items():
        if key not in data:
            continue
        value = data[key]

        if attr == "date_of_birth":
            text = optional_text(value)
            try:
                out[attr] = parse_iso_date(text[:10]) if text else None
            except ValueError:
                raise ValidationError(f"Invalid date of birth '{text}' (expected YYYY-MM-DD)")
        elif attr == "vaccination_status":
            text = optional_text(value)
            if text:
                out[attr] = require_choice(text, VaccinationStatus, "vaccination status")
        elif attr == "vaccines":
            if value is None:
                out[attr] = ()
            elif isinstance(value, list):
                out[attr] = tuple(_parse_vaccine(item) for item in value)
            else:
                raise ValidationError("vaccines must be a list")
        else:
            out[attr] = optional_text(value)
    return out


def vaccine_to_json(v: VaccineRecord) -> dict:
    return {
        "name": v.name,
        "date": v.last_dose_at.isoformat() if v.last_dose_at else None,
        "doses": v.doses,
        "completed": v.completed,
    }


def student_to_json(s: Student) -> dict:
    return {
        "id": s.student_id,
        "name": s.name,
        "studentId": s.student_code,
        "grade": s.grade,
        "class": s.class_name or "",
        "dateOfBirth": s.date_of_birth.isoformat() if s.date_of_birth else None,
        "parentName": s.parent_name or "",
        "contactNumber": s.contact_number or "",
        "vaccinationStatus": s.vaccination_status.value,
        "vaccines": [vaccine_to_json(v) for v in s.vaccines],
        "createdAt": s.created_at.isoformat() if s.created_at else None,
    }


def student_summary_json(s: Student) -> dict:
    return {
        "id": s.student_id,
        "name": s.name,
        "studentId": s.student_code,
        "grade": s.grade,
        "class": s.class_name or "",
        "vaccinationStatus": s.vaccination_status.value,
    }
