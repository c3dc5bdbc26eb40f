from __future__ import annotations

from datetime import date

import pytest

from src.vaccination_system.vaccination_system.core.enums import VaccinationStatus
from src.vaccination_system.vaccination_system.core.exceptions import NotFoundError, ValidationError
from src.vaccination_system.vaccination_system.students.csv_io import CSV_COLUMNS, read_rows, write_students
from src.vaccination_system.vaccination_system.students.service import StudentService


@pytest.fixture
def service(students_repo):
    return StudentService(students_repo)


def _payload(code="STU-1", **overrides):
    data = {"name": "Asha Rao", "studentId": code, "grade": "9th", "class": "A", "dateOfBirth": "2011-04-02"}
    data.update(overrides)
    return data


def test_create_student_parses_fields_and_defaults_status(service):
    s = service.create_student(1, _payload())

    assert s.student_code == "STU-1"
    assert s.class_name == "A"
    assert s.date_of_birth == date(2011, 4, 2)
    assert s.vaccination_status == VaccinationStatus.NOT_VACCINATED
    assert s.vaccines == ()


def test_create_student_requires_name_code_and_grade(service):
    with pytest.raises(ValidationError, match="Name, student ID, and grade are required"):
        service.create_student(1, {"name": "X", "grade": "9th"})


def test_student_code_is_unique_across_coordinators(service):
    service.create_student(1, _payload())

    with pytest.raises(ValidationError, match="already exists"):
        service.create_student(2, _payload())


def test_create_with_vaccines_derives_status(service):
    s = service.create_student(
        1,
        _payload(
            vaccinationStatus="not_vaccinated",
            vaccines=[{"name": "MMR", "date": "2026-01-05", "doses": 2}, {"name": "HPV", "doses": 1}],
        ),
    )

    assert [v.completed for v in s.vaccines] == [True, False]
    assert s.vaccination_status == VaccinationStatus.PARTIALLY_VACCINATED


def test_duplicate_vaccine_names_are_rejected(service):
    with pytest.raises(ValidationError, match="Duplicate vaccine record"):
        service.create_student(1, _payload(vaccines=[{"name": "MMR"}, {"name": "MMR"}]))


def test_other_coordinators_students_are_invisible(service):
    s = service.create_student(1, _payload())

    with pytest.raises(NotFoundError, match="Student not found"):
        service.get_student(2, s.student_id)
    with pytest.raises(NotFoundError):
        service.delete_student(2, s.student_id)


def test_list_filters_by_grade_status_and_search(service):
    service.create_student(1, _payload("STU-1", name="Asha Rao"))
    service.create_student(1, _payload("STU-2", name="Kiran Das", grade="10th"))
    service.create_student(1, _payload("STU-3", name="Ravi Rao", vaccinationStatus="vaccinated"))

    assert [s.student_code for s in service.list_students(1, grade="10th")] == ["STU-2"]
    assert [s.student_code for s in service.list_students(1, status="vaccinated")] == ["STU-3"]
    assert {s.student_code for s in service.list_students(1, search="rao")} == {"STU-1", "STU-3"}
    assert [s.student_code for s in service.list_students(1, search="stu-2")] == ["STU-2"]


def test_list_rejects_unknown_status(service):
    with pytest.raises(ValidationError, match="Invalid status"):
        service.list_students(1, status="immune")


def test_update_keeps_unspecified_fields_and_rederives_status(service):
    s = service.create_student(1, _payload())

    updated = service.update_student(1, s.student_id, {"grade": "10th", "vaccines": [{"name": "MMR", "doses": 2}]})

    assert updated.name == "Asha Rao"
    assert updated.grade == "10th"
    assert updated.vaccination_status == VaccinationStatus.VACCINATED


def test_update_rejects_code_taken_by_another_student(service):
    service.create_student(1, _payload("STU-1"))
    second = service.create_student(1, _payload("STU-2"))

    with pytest.raises(ValidationError, match="already exists"):
        service.update_student(1, second.student_id, {"studentId": "STU-1"})


def test_update_rejects_blank_required_field(service):
    s = service.create_student(1, _payload())

    with pytest.raises(ValidationError):
        service.update_student(1, s.student_id, {"name": "  "})


def test_import_reports_bad_rows_and_keeps_good_ones(service):
    service.create_student(1, _payload("STU-9"))
    rows = [
        {"name": "A", "studentId": "STU-10", "grade": "9th"},
        {"name": "", "studentId": "STU-11", "grade": "9th"},
        {"name": "B", "studentId": "STU-9", "grade": "9th"},
        {"name": "C", "studentId": "STU-12", "grade": "9th", "vaccinationStatus": "bogus"},
    ]

    result = service.import_rows(1, rows)

    assert result.success_count == 1
    assert result.total_count == 4
    assert result.errors[0] == "Missing required fields for student: STU-11"
    assert result.errors[1] == "Student with ID STU-9 already exists"
    assert result.errors[2].startswith("Error importing student STU-12:")


def test_export_requires_matching_students(service):
    with pytest.raises(NotFoundError, match="No students found"):
        service.export_students(1)


def test_csv_export_can_be_imported_again(service, students_repo):
    service.create_student(1, _payload("STU-1", name="Zoë Müller", parentName="Hans"))

    raw = write_students(service.export_students(1))
    rows = read_rows(raw)

    assert raw.startswith(b"\xef\xbb\xbf")
    assert list(rows[0].keys()) == CSV_COLUMNS
    assert rows[0]["name"] == "Zoë Müller"
    assert rows[0]["dateOfBirth"] == "2011-04-02"

    students_repo.rows.clear()
    assert service.import_rows(1, rows).success_count == 1


def test_clearing_vaccine_history_resets_status(service):
    s = service.create_student(1, _payload(vaccines=[{"name": "MMR", "doses": 2}]))
    assert s.vaccination_status == VaccinationStatus.VACCINATED

    updated = service.update_student(1, s.student_id, {"vaccines": []})

    assert updated.vaccines == ()
    assert updated.vaccination_status == VaccinationStatus.NOT_VACCINATED


def test_profile_only_update_keeps_declared_status(service):
    s = service.create_student(1, _payload(vaccinationStatus="vaccinated"))

    updated = service.update_student(1, s.student_id, {"class": "C"})

    assert updated.vaccination_status == VaccinationStatus.VACCINATED
