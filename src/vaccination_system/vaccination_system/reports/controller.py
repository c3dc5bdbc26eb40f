from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.auth import current_coordinator_id, token_required
from ..common.datetime_utils import parse_iso_date
from ..core.exceptions import ValidationError
from ..container import Container
from ..drives.schema import drive_to_json


def register(app: Flask, container: Container) -> None:
    auth_required = token_required(container.auth_service)
    reports = container.report_service

    def _parse_date_arg(name: str):
        value = (request.args.get(name) or "").strip()
        if not value:
            return None
        try:
            return parse_iso_date(value[:10])
        except ValueError:
            raise ValidationError(f"Invalid {name} '{value}' (expected YYYY-MM-DD)")

    @app.route("/api/reports/dashboard", methods=["GET"], endpoint="reports_dashboard")
    @auth_required
    def reports_dashboard():
        stats = reports.dashboard(current_coordinator_id())
        return jsonify(
            {
                "totalStudents": stats.total_students,
                "vaccinatedStudents": stats.vaccinated_students,
                "partiallyVaccinatedStudents": stats.partially_vaccinated_students,
                "pendingVaccinations": stats.pending_vaccinations,
                "upcomingDrives": stats.upcoming_drives,
                "vaccinationRate": stats.vaccination_rate,
                "recentVaccinationData": stats.recent_vaccination_data,
                "upcomingDrivesList": [drive_to_json(d, with_students=False) for d in stats.upcoming_drives_list],
            }
        )

    @app.route("/api/reports/data", methods=["GET"], endpoint="reports_data")
    @auth_required
    def reports_data():
        start = _parse_date_arg("startDate")
        end = _parse_date_arg("endDate")
        if start and end and end < start:
            raise ValidationError("endDate must not be before startDate")

        data = reports.build_report(
            current_coordinator_id(),
            start=start,
            end=end,
            grade=request.args.get("grade"),
            vaccine_type=request.args.get("vaccineType"),
        )
        return jsonify(
            {
                "vaccinationStatusDistribution": data.status_distribution,
                "vaccinationRateByGrade": data.rate_by_grade,
                "vaccineTypeDistribution": data.vaccine_type_distribution,
                "vaccinationRateByMonth": data.rate_by_month,
                "recentVaccinations": data.recent_vaccinations,
            }
        )
