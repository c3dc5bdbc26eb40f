from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional, Sequence

import pytest

from src.vaccination_system.vaccination_system.container import build_services
from src.vaccination_system.vaccination_system.coordinators.model import Coordinator
from src.vaccination_system.vaccination_system.coordinators.tokens import TokenService
from src.vaccination_system.vaccination_system.core.enums import DriveStatus, VaccinationStatus
from src.vaccination_system.vaccination_system.drives.model import EnrolledStudent, Enrollment, VaccinationDrive
from src.vaccination_system.vaccination_system.students.model import Student, VaccineRecord

TEST_JWT_SECRET = "test-jwt-secret"


class InMemoryCoordinators:
    def __init__(self):
        self._next_id = 1
        self.rows: dict[int, Coordinator] = {}

    def get_by_id(self, coordinator_id: int) -> Optional[Coordinator]:
        return self.rows.get(int(coordinator_id))

    def get_by_email(self, email: str) -> Optional[Coordinator]:
        return next((c for c in self.rows.values() if c.email == email), None)

    def create(self, *, name, email, password_hash, school) -> int:
        cid = self._next_id
        self._next_id += 1
        self.rows[cid] = Coordinator(
            coordinator_id=cid,
            name=name,
            email=email,
            password_hash=password_hash,
            school=school,
            created_at=datetime(2026, 1, 1, 8, 0, 0),
        )
        return cid


class InMemoryStudents:
    def __init__(self):
        self._next_id = 1
        self.rows: dict[int, Student] = {}
        # set to an exception instance to make vaccine updates blow up
        self.fail_vaccination_update: Optional[Exception] = None

    def list_for_coordinator(self, coordinator_id, *, grade=None, status=None, search=None) -> Sequence[Student]:
        out = [s for s in self.rows.values() if s.coordinator_id == coordinator_id]
        if grade:
            out = [s for s in out if s.grade == grade]
        if status:
            out = [s for s in out if s.vaccination_status == status]
        if search:
            needle = search.lower()
            out = [s for s in out if needle in s.name.lower() or needle in s.student_code.lower()]
        return sorted(out, key=lambda s: s.student_id, reverse=True)

    def get_for_coordinator(self, coordinator_id, student_id) -> Optional[Student]:
        s = self.rows.get(int(student_id))
        return s if s and s.coordinator_id == coordinator_id else None

    def get_many_for_coordinator(self, coordinator_id, student_ids) -> Sequence[Student]:
        found = (self.get_for_coordinator(coordinator_id, sid) for sid in student_ids)
        return [s for s in found if s]

    def get_by_code(self, student_code) -> Optional[Student]:
        return next((s for s in self.rows.values() if s.student_code == student_code), None)

    def create(
        self,
        *,
        coordinator_id,
        student_code,
        name,
        grade,
        class_name,
        date_of_birth,
        parent_name,
        contact_number,
        vaccination_status,
        vaccines=(),
    ) -> int:
        sid = self._next_id
        self._next_id += 1
        self.rows[sid] = Student(
            student_id=sid,
            coordinator_id=coordinator_id,
            student_code=student_code,
            name=name,
            grade=grade,
            class_name=class_name,
            date_of_birth=date_of_birth,
            parent_name=parent_name,
            contact_number=contact_number,
            vaccination_status=vaccination_status,
            vaccines=tuple(vaccines),
            created_at=datetime(2026, 1, 1, 8, 0, 0),
        )
        return sid

    def update(self, student: Student) -> bool:
        if student.student_id not in self.rows:
            return False
        self.rows[student.student_id] = student
        return True

    def update_vaccination(self, *, student_id, vaccines, status) -> bool:
        if self.fail_vaccination_update is not None:
            raise self.fail_vaccination_update
        s = self.rows.get(int(student_id))
        if not s:
            return False
        self.rows[s.student_id] = replace(s, vaccines=tuple(vaccines), vaccination_status=status)
        return True

    def delete(self, *, coordinator_id, student_id) -> bool:
        s = self.get_for_coordinator(coordinator_id, student_id)
        if not s:
            return False
        del self.rows[s.student_id]
        return True

    def add(self, coordinator_id: int, code: str, *, name=None, grade="9th", vaccines=(), status=None) -> Student:
        """Test helper: insert a student directly."""
        vaccines = tuple(vaccines)
        sid = self.create(
            coordinator_id=coordinator_id,
            student_code=code,
            name=name or f"Student {code}",
            grade=grade,
            class_name="A",
            date_of_birth=None,
            parent_name=None,
            contact_number=None,
            vaccination_status=status or VaccinationStatus.NOT_VACCINATED,
            vaccines=vaccines,
        )
        return self.rows[sid]


class InMemoryDrives:
    """Stores bare enrollments; student summaries are joined on read."""

    def __init__(self, students: InMemoryStudents):
        self._students = students
        self._next_id = 1
        self.rows: dict[int, VaccinationDrive] = {}

    def _with_students(self, d: VaccinationDrive) -> VaccinationDrive:
        enrollments = []
        for e in d.enrollments:
            s = self._students.rows.get(e.student_id)
            summary = None
            if s is not None:
                summary = EnrolledStudent(
                    student_id=s.student_id,
                    name=s.name,
                    student_code=s.student_code,
                    grade=s.grade,
                    class_name=s.class_name,
                    vaccination_status=s.vaccination_status,
                )
            enrollments.append(replace(e, student=summary))
        return replace(d, enrollments=tuple(enrollments))

    def list_for_coordinator(
        self,
        coordinator_id,
        *,
        statuses=None,
        start=None,
        end=None,
        vaccine_type=None,
        limit=None,
    ) -> Sequence[VaccinationDrive]:
        out = [d for d in self.rows.values() if d.coordinator_id == coordinator_id]
        if statuses:
            out = [d for d in out if d.status in statuses]
        if start is not None:
            out = [d for d in out if d.scheduled_at >= start]
        if end is not None:
            out = [d for d in out if d.scheduled_at < end]
        if vaccine_type:
            out = [d for d in out if d.vaccine_type == vaccine_type]
        out.sort(key=lambda d: (d.scheduled_at, d.drive_id))
        if limit:
            out = out[:limit]
        return [self._with_students(d) for d in out]

    def get_for_coordinator(self, coordinator_id, drive_id) -> Optional[VaccinationDrive]:
        d = self.rows.get(int(drive_id))
        return self._with_students(d) if d and d.coordinator_id == coordinator_id else None

    def find_on_day(self, *, coordinator_id, location, start, end, exclude_drive_id=None):
        for d in self.rows.values():
            if (
                d.coordinator_id == coordinator_id
                and d.location == location
                and start <= d.scheduled_at < end
                and d.drive_id != exclude_drive_id
            ):
                return d
        return None

    def create(
        self,
        *,
        coordinator_id,
        name,
        scheduled_at,
        location,
        vaccine_type,
        description,
        target_count,
        student_ids=(),
    ) -> int:
        did = self._next_id
        self._next_id += 1
        self.rows[did] = VaccinationDrive(
            drive_id=did,
            coordinator_id=coordinator_id,
            name=name,
            scheduled_at=scheduled_at,
            location=location,
            vaccine_type=vaccine_type,
            description=description,
            target_count=target_count,
            enrollments=tuple(Enrollment(student_id=sid) for sid in student_ids),
            created_at=datetime(2026, 1, 1, 8, 0, 0),
        )
        return did

    def update_details(self, drive: VaccinationDrive) -> bool:
        current = self.rows.get(drive.drive_id)
        if not current:
            return False
        self.rows[drive.drive_id] = replace(
            drive,
            vaccinated_count=current.vaccinated_count,
            enrollments=current.enrollments,
        )
        return True

    def delete(self, *, coordinator_id, drive_id) -> bool:
        d = self.rows.get(int(drive_id))
        if not d or d.coordinator_id != coordinator_id:
            return False
        del self.rows[d.drive_id]
        return True

    def add_enrollments(self, *, drive_id, student_ids) -> int:
        d = self.rows[int(drive_id)]
        existing = {e.student_id for e in d.enrollments}
        new = [Enrollment(student_id=sid) for sid in student_ids if sid not in existing]
        self.rows[d.drive_id] = replace(d, enrollments=d.enrollments + tuple(new))
        return len(new)

    def update_enrollment(self, *, drive_id, student_id, attended, notes, vaccinated_count) -> bool:
        d = self.rows.get(int(drive_id))
        if not d or not any(e.student_id == student_id for e in d.enrollments):
            return False
        enrollments = tuple(
            Enrollment(student_id=e.student_id, attended=attended, notes=notes) if e.student_id == student_id else e
            for e in d.enrollments
        )
        self.rows[d.drive_id] = replace(d, enrollments=enrollments, vaccinated_count=max(0, vaccinated_count))
        return True

    def put(self, coordinator_id: int, when: datetime, *, status=DriveStatus.SCHEDULED, vaccine_type="MMR",
            location="Main Hall", vaccinated_count=0, target_count=10, student_ids=()) -> VaccinationDrive:
        """Test helper: insert a drive in any state."""
        did = self.create(
            coordinator_id=coordinator_id,
            name=f"{vaccine_type} drive",
            scheduled_at=when,
            location=location,
            vaccine_type=vaccine_type,
            description=None,
            target_count=target_count,
            student_ids=student_ids,
        )
        self.rows[did] = replace(self.rows[did], status=status, vaccinated_count=vaccinated_count)
        return self.rows[did]


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 3, 10, 9, 0, 0)


@pytest.fixture
def coordinators_repo() -> InMemoryCoordinators:
    return InMemoryCoordinators()


@pytest.fixture
def students_repo() -> InMemoryStudents:
    return InMemoryStudents()


@pytest.fixture
def drives_repo(students_repo) -> InMemoryDrives:
    return InMemoryDrives(students_repo)


@pytest.fixture
def tokens() -> TokenService:
    return TokenService(TEST_JWT_SECRET)


@pytest.fixture
def container(coordinators_repo, students_repo, drives_repo, tokens):
    return build_services(
        coordinators_repo=coordinators_repo,
        students_repo=students_repo,
        drives_repo=drives_repo,
        tokens=tokens,
    )


@pytest.fixture
def app(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    from src.vaccination_system.vaccination_system.main import create_app

    return create_app(container=container)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def mmr_record():
    def _make(doses: int, at: datetime = datetime(2026, 1, 5, 10, 0, 0)) -> VaccineRecord:
        return VaccineRecord(name="MMR", last_dose_at=at, doses=doses, completed=doses >= 2)

    return _make
