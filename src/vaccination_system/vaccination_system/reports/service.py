from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import now_local, trailing_days
from ..core.constants import DASHBOARD_RECENT_DAYS, REPORT_GRADES, REPORT_RECENT_DAYS, UPCOMING_DRIVES_LIMIT
from ..core.enums import DriveStatus, VaccinationStatus
from ..drives.model import VaccinationDrive
from ..drives.repository import DriveRepository
from ..students.model import Student
from ..students.repository import StudentRepository

STATUS_LABELS = {
    VaccinationStatus.VACCINATED: "Fully Vaccinated",
    VaccinationStatus.PARTIALLY_VACCINATED: "Partially Vaccinated",
    VaccinationStatus.NOT_VACCINATED: "Not Vaccinated",
}

ACTIVE_DRIVE_STATES = (DriveStatus.IN_PROGRESS, DriveStatus.COMPLETED)


def percent(part: int, whole: int, *, digits: int = 0) -> float:
    """Percentage rounded half-up; 0 when `whole` is 0."""
    if whole <= 0:
        return 0
    scale = 10 ** digits
    value = math.floor(part * 100 * scale / whole + 0.5) / scale
    return int(value) if digits == 0 else value


def status_distribution(students: Iterable[Student]) -> list[dict]:
    counts = {status: 0 for status in VaccinationStatus}
    for s in students:
        counts[s.vaccination_status] += 1
    return [
        {"status": status.value, "label": STATUS_LABELS[status], "count": counts[status]}
        for status in VaccinationStatus
    ]


def rate_by_grade(students: Sequence[Student], grades: Sequence[str] = REPORT_GRADES) -> list[dict]:
    out: list[dict] = []
    for grade in grades:
        in_grade = [s for s in students if s.grade == grade]
        vaccinated = sum(1 for s in in_grade if s.vaccination_status == VaccinationStatus.VACCINATED)
        out.append({"grade": grade, "rate": percent(vaccinated, len(in_grade))})
    return out


def vaccine_type_distribution(students: Iterable[Student]) -> list[dict]:
    counts: dict[str, int] = {}
    for s in students:
        for v in s.vaccines:
            counts[v.name] = counts.get(v.name, 0) + 1
    return [{"type": name, "count": count} for name, count in counts.items()]


def rate_by_month(drives: Iterable[VaccinationDrive]) -> list[dict]:
    months: dict[tuple[int, int], list[int]] = {}
    for d in drives:
        key = (d.scheduled_at.year, d.scheduled_at.month)
        bucket = months.setdefault(key, [0, 0])
        bucket[0] += d.vaccinated_count
        bucket[1] += d.target_count

    out: list[dict] = []
    for (year, month), (vaccinated, target) in sorted(months.items()):
        out.append(
            {
                "month": f"{year:04d}-{month:02d}",
                "label": date(year, month, 1).strftime("%b"),
                "rate": percent(vaccinated, target),
            }
        )
    return out


def daily_counts(drives: Iterable[VaccinationDrive], *, today: date, days: int) -> list[dict]:
    """Sum of vaccinated counts per day for the trailing window, zero-filled."""
    totals: dict[date, int] = {day: 0 for day in trailing_days(today, days)}
    for d in drives:
        day = d.scheduled_at.date()
        if day in totals:
            totals[day] += d.vaccinated_count
    return [{"date": day.isoformat(), "count": count} for day, count in totals.items()]


@dataclass(frozen=True)
class DashboardStats:
    total_students: int
    vaccinated_students: int
    partially_vaccinated_students: int
    pending_vaccinations: int
    upcoming_drives: int
    vaccination_rate: float
    recent_vaccination_data: list[dict]
    upcoming_drives_list: list[VaccinationDrive]


@dataclass(frozen=True)
class ReportData:
    status_distribution: list[dict]
    rate_by_grade: list[dict]
    vaccine_type_distribution: list[dict]
    rate_by_month: list[dict]
    recent_vaccinations: list[dict]


class ReportService:
    """Read-only rollups over a coordinator's students and drives."""

    def __init__(self, students: StudentRepository, drives: DriveRepository):
        self._students = students
        self._drives = drives

    def _recent(self, coordinator_id: int, *, today: date, days: int) -> list[dict]:
        first_day = today - timedelta(days=days - 1)
        drives = self._drives.list_for_coordinator(
            coordinator_id,
            statuses=list(ACTIVE_DRIVE_STATES),
            start=datetime.combine(first_day, datetime.min.time()),
            end=datetime.combine(today + timedelta(days=1), datetime.min.time()),
        )
        return daily_counts(drives, today=today, days=days)

    def dashboard(self, coordinator_id: int, *, now: Optional[datetime] = None) -> DashboardStats:
        now = now or now_local()
        students = self._students.list_for_coordinator(coordinator_id)

        total = len(students)
        vaccinated = sum(1 for s in students if s.vaccination_status == VaccinationStatus.VACCINATED)
        partial = sum(1 for s in students if s.vaccination_status == VaccinationStatus.PARTIALLY_VACCINATED)

        upcoming = self._drives.list_for_coordinator(coordinator_id, statuses=[DriveStatus.SCHEDULED], start=now)

        return DashboardStats(
            total_students=total,
            vaccinated_students=vaccinated,
            partially_vaccinated_students=partial,
            pending_vaccinations=total - vaccinated,
            upcoming_drives=len(upcoming),
            vaccination_rate=percent(vaccinated, total, digits=1),
            recent_vaccination_data=self._recent(coordinator_id, today=now.date(), days=DASHBOARD_RECENT_DAYS),
            upcoming_drives_list=list(upcoming[:UPCOMING_DRIVES_LIMIT]),
        )

    def build_report(
        self,
        coordinator_id: int,
        *,
        now: Optional[datetime] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        grade: Optional[str] = None,
        vaccine_type: Optional[str] = None,
    ) -> ReportData:
        now = now or now_local()
        students = self._students.list_for_coordinator(coordinator_id, grade=grade or None)

        drives = self._drives.list_for_coordinator(
            coordinator_id,
            start=datetime.combine(start, datetime.min.time()) if start else None,
            # end date is inclusive
            end=datetime.combine(end + timedelta(days=1), datetime.min.time()) if end else None,
            vaccine_type=vaccine_type or None,
        )

        return ReportData(
            status_distribution=status_distribution(students),
            rate_by_grade=rate_by_grade(students),
            vaccine_type_distribution=vaccine_type_distribution(students),
            rate_by_month=rate_by_month(drives),
            recent_vaccinations=self._recent(coordinator_id, today=now.date(), days=REPORT_RECENT_DAYS),
        )
