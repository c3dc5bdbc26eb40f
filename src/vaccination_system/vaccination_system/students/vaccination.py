"""Per-student vaccine dose accumulation and status derivation."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional, Sequence

from ..core.constants import DOSES_FOR_COMPLETION
from ..core.enums import VaccinationStatus
from ..core.exceptions import ValidationError
from .model import VaccineRecord


def is_complete(doses: int) -> bool:
    return doses >= DOSES_FOR_COMPLETION


def record_dose(vaccines: Sequence[VaccineRecord], vaccine_name: str, *, at: datetime) -> tuple[VaccineRecord, ...]:
    """Return the history with one more dose of `vaccine_name` given at `at`."""
    updated: list[VaccineRecord] = []
    found = False
    for record in vaccines:
        if record.name == vaccine_name:
            doses = record.doses + 1
            record = replace(record, doses=doses, last_dose_at=at, completed=is_complete(doses))
            found = True
        updated.append(record)

    if not found:
        updated.append(VaccineRecord(name=vaccine_name, last_dose_at=at, doses=1, completed=is_complete(1)))
    return tuple(updated)


def derive_status(vaccines: Sequence[VaccineRecord]) -> VaccinationStatus:
    if not vaccines:
        return VaccinationStatus.NOT_VACCINATED
    if all(v.completed for v in vaccines):
        return VaccinationStatus.VACCINATED
    return VaccinationStatus.PARTIALLY_VACCINATED


def resolve_status(
    vaccines: Sequence[VaccineRecord],
    declared: Optional[VaccinationStatus] = None,
) -> VaccinationStatus:
    """Status to store for a student.

    A declared status only survives while the student has no recorded doses.
    """
    if vaccines:
        return derive_status(vaccines)
    return declared or VaccinationStatus.NOT_VACCINATED


def ensure_unique_names(vaccines: Sequence[VaccineRecord]) -> None:
    seen: set[str] = set()
    for record in vaccines:
        if record.name in seen:
            raise ValidationError(f"Duplicate vaccine record for {record.name}")
        seen.add(record.name)
