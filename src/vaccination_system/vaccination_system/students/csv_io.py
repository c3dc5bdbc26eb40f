from __future__ import annotations

import csv
import io
from typing import Iterable, List

from .model import Student

CSV_COLUMNS = [
    "name",
    "studentId",
    "grade",
    "class",
    "dateOfBirth",
    "parentName",
    "contactNumber",
    "vaccinationStatus",
]


def read_rows(raw: bytes) -> List[dict]:
    """Parse an uploaded CSV (header row required) into dict rows."""
    text = raw.decode("utf-8-sig")
    reader = csv.DictReader(io.StringIO(text))
    rows: List[dict] = []
    for row in reader:
        rows.append({(k or "").strip(): (v or "").strip() for k, v in row.items() if k})
    return rows


def write_students(students: Iterable[Student]) -> bytes:
    out = io.StringIO()
    writer = csv.DictWriter(out, fieldnames=CSV_COLUMNS, extrasaction="ignore")
    writer.writeheader()
    for s in students:
        writer.writerow(
            {
                "name": s.name,
                "studentId": s.student_code,
                "grade": s.grade,
                "class": s.class_name or "",
                "dateOfBirth": s.date_of_birth.strftime("%Y-%m-%d") if s.date_of_birth else "",
                "parentName": s.parent_name or "",
                "contactNumber": s.contact_number or "",
                "vaccinationStatus": s.vaccination_status.value,
            }
        )
    # BOM keeps Excel happy with UTF-8 names.
    return out.getvalue().encode("utf-8-sig")
