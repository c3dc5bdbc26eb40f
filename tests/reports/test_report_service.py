from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime

import pytest

from src.vaccination_system.vaccination_system.core.enums import DriveStatus, VaccinationStatus
from src.vaccination_system.vaccination_system.reports.service import ReportService, percent, rate_by_month


@pytest.fixture
def service(students_repo, drives_repo):
    return ReportService(students_repo, drives_repo)


@pytest.fixture
def roster(students_repo, mmr_record):
    students_repo.add(1, "S1", grade="9th", vaccines=[mmr_record(2)], status=VaccinationStatus.VACCINATED)
    students_repo.add(1, "S2", grade="9th", vaccines=[mmr_record(1)], status=VaccinationStatus.PARTIALLY_VACCINATED)
    students_repo.add(1, "S3", grade="10th")
    # another coordinator's student never shows up
    students_repo.add(2, "S4", grade="9th", vaccines=[mmr_record(2)], status=VaccinationStatus.VACCINATED)


def test_percent_rounds_half_up_and_handles_zero():
    assert percent(1, 3) == 33
    assert percent(1, 8) == 13
    assert percent(1, 3, digits=1) == 33.3
    assert percent(2, 3, digits=1) == 66.7
    assert percent(5, 0) == 0


def test_dashboard_totals(service, roster, drives_repo, fixed_now):
    drives_repo.put(1, datetime(2026, 3, 12, 9, 0), location="A")
    drives_repo.put(1, datetime(2026, 3, 14, 9, 0), location="B")
    drives_repo.put(1, datetime(2026, 3, 16, 9, 0), location="C")
    drives_repo.put(1, datetime(2026, 3, 18, 9, 0), location="D")
    drives_repo.put(1, datetime(2026, 3, 1, 9, 0), location="E")

    stats = service.dashboard(1, now=fixed_now)

    assert stats.total_students == 3
    assert stats.vaccinated_students == 1
    assert stats.partially_vaccinated_students == 1
    assert stats.pending_vaccinations == 2
    assert stats.vaccination_rate == 33.3
    assert stats.upcoming_drives == 4
    assert [d.location for d in stats.upcoming_drives_list] == ["A", "B", "C"]


def test_dashboard_with_empty_roster_has_zero_rate(service, fixed_now):
    stats = service.dashboard(1, now=fixed_now)

    assert stats.total_students == 0
    assert stats.vaccination_rate == 0
    assert stats.upcoming_drives_list == []


def test_recent_vaccination_data_is_zero_filled_per_day(service, drives_repo, fixed_now):
    drives_repo.put(1, datetime(2026, 3, 9, 10, 0), status=DriveStatus.COMPLETED, vaccinated_count=4, location="A")
    drives_repo.put(1, datetime(2026, 3, 9, 15, 0), status=DriveStatus.COMPLETED, vaccinated_count=2, location="B")
    drives_repo.put(1, datetime(2026, 3, 10, 8, 0), status=DriveStatus.IN_PROGRESS, vaccinated_count=3)
    # outside the window, or not yet started / cancelled
    drives_repo.put(1, datetime(2026, 3, 3, 10, 0), status=DriveStatus.COMPLETED, vaccinated_count=9)
    drives_repo.put(1, datetime(2026, 3, 8, 10, 0), status=DriveStatus.CANCELLED, vaccinated_count=7)

    recent = service.dashboard(1, now=fixed_now).recent_vaccination_data

    assert [r["date"] for r in recent] == [f"2026-03-{d:02d}" for d in range(4, 11)]
    assert {r["date"]: r["count"] for r in recent if r["count"]} == {"2026-03-09": 6, "2026-03-10": 3}


def test_report_distributions(service, roster, fixed_now):
    report = service.build_report(1, now=fixed_now)

    assert report.status_distribution == [
        {"status": "vaccinated", "label": "Fully Vaccinated", "count": 1},
        {"status": "partially_vaccinated", "label": "Partially Vaccinated", "count": 1},
        {"status": "not_vaccinated", "label": "Not Vaccinated", "count": 1},
    ]
    assert report.rate_by_grade == [
        {"grade": "9th", "rate": 50},
        {"grade": "10th", "rate": 0},
        {"grade": "11th", "rate": 0},
        {"grade": "12th", "rate": 0},
    ]
    assert report.vaccine_type_distribution == [{"type": "MMR", "count": 2}]
    assert len(report.recent_vaccinations) == 30


def test_report_grade_filter_narrows_students(service, roster, fixed_now):
    report = service.build_report(1, now=fixed_now, grade="10th")

    assert sum(r["count"] for r in report.status_distribution) == 1
    assert report.vaccine_type_distribution == []


def test_rate_by_month_respects_inclusive_date_range_and_vaccine(service, drives_repo, fixed_now):
    drives_repo.put(1, datetime(2026, 1, 20, 9, 0), vaccinated_count=5, target_count=10, location="A")
    drives_repo.put(1, datetime(2026, 2, 28, 15, 0), vaccinated_count=3, target_count=4, location="B")
    drives_repo.put(1, datetime(2026, 2, 10, 9, 0), vaccinated_count=1, target_count=1, location="C", vaccine_type="HPV")
    drives_repo.put(1, datetime(2026, 3, 1, 9, 0), vaccinated_count=1, target_count=1, location="D")

    report = service.build_report(
        1,
        now=fixed_now,
        start=date(2026, 1, 1),
        end=date(2026, 2, 28),
        vaccine_type="MMR",
    )

    assert report.rate_by_month == [
        {"month": "2026-01", "label": "Jan", "rate": 50},
        {"month": "2026-02", "label": "Feb", "rate": 75},
    ]


def test_rate_by_month_with_zero_target_is_zero(drives_repo, fixed_now):
    d = drives_repo.put(1, fixed_now, vaccinated_count=0, target_count=1)
    zero_target = replace(d, target_count=0)

    assert rate_by_month([zero_target]) == [{"month": "2026-03", "label": "Mar", "rate": 0}]
