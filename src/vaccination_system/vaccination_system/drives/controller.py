from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.auth import current_coordinator_id, token_required
from ..common.payload import json_body, parse_bool
from ..common.validators import optional_text
from ..core.exceptions import ValidationError
from ..container import Container
from .schema import drive_to_json, parse_student_ids


def register(app: Flask, container: Container) -> None:
    auth_required = token_required(container.auth_service)
    drives = container.drive_service

    @app.route("/api/vaccination-drives", methods=["GET"], endpoint="drives_list")
    @auth_required
    def drives_list():
        rows = drives.list_drives(current_coordinator_id(), status=request.args.get("status"))
        return jsonify([drive_to_json(d) for d in rows])

    @app.route("/api/vaccination-drives", methods=["POST"], endpoint="drives_create")
    @auth_required
    def drives_create():
        drive = drives.create_drive(current_coordinator_id(), json_body())
        return jsonify(drive_to_json(drive)), 201

    @app.route("/api/vaccination-drives/stats/upcoming", methods=["GET"], endpoint="drives_upcoming")
    @auth_required
    def drives_upcoming():
        rows = drives.upcoming(current_coordinator_id())
        return jsonify([drive_to_json(d, with_students=False) for d in rows])

    @app.route("/api/vaccination-drives/<int:drive_id>", methods=["GET"], endpoint="drives_detail")
    @auth_required
    def drives_detail(drive_id: int):
        return jsonify(drive_to_json(drives.get_drive(current_coordinator_id(), drive_id)))

    @app.route("/api/vaccination-drives/<int:drive_id>", methods=["PUT"], endpoint="drives_update")
    @auth_required
    def drives_update(drive_id: int):
        drive = drives.update_drive(current_coordinator_id(), drive_id, json_body())
        return jsonify(drive_to_json(drive))

    @app.route("/api/vaccination-drives/<int:drive_id>", methods=["DELETE"], endpoint="drives_delete")
    @auth_required
    def drives_delete(drive_id: int):
        drives.delete_drive(current_coordinator_id(), drive_id)
        return jsonify({"message": "Vaccination drive removed"})

    @app.route("/api/vaccination-drives/<int:drive_id>/students", methods=["POST"], endpoint="drives_add_students")
    @auth_required
    def drives_add_students(drive_id: int):
        student_ids = parse_student_ids(json_body().get("studentIds"), required=True)
        result = drives.add_students(current_coordinator_id(), drive_id, student_ids)
        return jsonify(
            {
                "message": f"Added {result.added} students to the vaccination drive",
                "drive": drive_to_json(result.drive),
            }
        )

    @app.route(
        "/api/vaccination-drives/<int:drive_id>/students/<int:student_id>",
        methods=["PUT"],
        endpoint="drives_mark_attendance",
    )
    @auth_required
    def drives_mark_attendance(drive_id: int, student_id: int):
        data = json_body()
        if "attended" not in data:
            raise ValidationError("attended is required")

        outcome = container.attendance_service.mark(
            current_coordinator_id(),
            drive_id,
            student_id,
            attended=parse_bool(data["attended"], "attended"),
            notes=optional_text(data.get("notes")),
        )
        return jsonify({"message": "Student attendance updated", "drive": drive_to_json(outcome.drive)})
