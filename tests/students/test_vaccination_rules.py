from __future__ import annotations

from datetime import datetime

from src.vaccination_system.vaccination_system.core.enums import VaccinationStatus
from src.vaccination_system.vaccination_system.students.model import VaccineRecord
from src.vaccination_system.vaccination_system.students.vaccination import (
    derive_status,
    is_complete,
    record_dose,
    resolve_status,
)

AT = datetime(2026, 3, 10, 9, 0, 0)


def test_completion_threshold_is_two_doses():
    assert is_complete(1) is False
    assert is_complete(2) is True
    assert is_complete(3) is True


def test_first_dose_appends_incomplete_record():
    vaccines = record_dose((), "MMR", at=AT)

    assert vaccines == (VaccineRecord(name="MMR", last_dose_at=AT, doses=1, completed=False),)
    assert derive_status(vaccines) == VaccinationStatus.PARTIALLY_VACCINATED


def test_second_dose_completes_existing_record_in_place():
    first = record_dose((), "MMR", at=datetime(2026, 1, 1, 9, 0, 0))
    vaccines = record_dose(first, "MMR", at=AT)

    assert len(vaccines) == 1
    assert vaccines[0].doses == 2
    assert vaccines[0].completed is True
    assert vaccines[0].last_dose_at == AT
    assert derive_status(vaccines) == VaccinationStatus.VACCINATED


def test_dose_of_other_vaccine_keeps_order_and_other_records():
    polio = VaccineRecord(name="Polio", last_dose_at=None, doses=2, completed=True)
    vaccines = record_dose((polio,), "HPV", at=AT)

    assert [v.name for v in vaccines] == ["Polio", "HPV"]
    assert vaccines[0] is polio
    assert derive_status(vaccines) == VaccinationStatus.PARTIALLY_VACCINATED


def test_status_is_vaccinated_only_when_every_record_is_complete():
    done = VaccineRecord(name="Polio", last_dose_at=None, doses=2, completed=True)
    partial = VaccineRecord(name="MMR", last_dose_at=None, doses=1, completed=False)

    assert derive_status(()) == VaccinationStatus.NOT_VACCINATED
    assert derive_status((done,)) == VaccinationStatus.VACCINATED
    assert derive_status((done, partial)) == VaccinationStatus.PARTIALLY_VACCINATED


def test_declared_status_only_applies_without_dose_history():
    partial = VaccineRecord(name="MMR", last_dose_at=None, doses=1, completed=False)

    assert resolve_status((), VaccinationStatus.VACCINATED) == VaccinationStatus.VACCINATED
    assert resolve_status(()) == VaccinationStatus.NOT_VACCINATED
    assert resolve_status((partial,), VaccinationStatus.VACCINATED) == VaccinationStatus.PARTIALLY_VACCINATED
