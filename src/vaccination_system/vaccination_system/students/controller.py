from __future__ import annotations

import io

from flask import Flask, jsonify, request, send_file

from ..common.auth import current_coordinator_id, token_required
from ..common.payload import json_body
from ..core.exceptions import ValidationError
from ..container import Container
from .csv_io import read_rows, write_students
from .schema import student_to_json

CSV_MIMETYPES = {"text/csv", "application/csv", "application/vnd.ms-excel"}


def register(app: Flask, container: Container) -> None:
    auth_required = token_required(container.auth_service)
    students = container.student_service

    @app.route("/api/students", methods=["GET"], endpoint="students_list")
    @auth_required
    def students_list():
        rows = students.list_students(
            current_coordinator_id(),
            grade=request.args.get("grade"),
            status=request.args.get("status"),
            search=request.args.get("search"),
        )
        return jsonify([student_to_json(s) for s in rows])

    @app.route("/api/students", methods=["POST"], endpoint="students_create")
    @auth_required
    def students_create():
        student = students.create_student(current_coordinator_id(), json_body())
        return jsonify(student_to_json(student)), 201

    @app.route("/api/students/<int:student_id>", methods=["GET"], endpoint="students_detail")
    @auth_required
    def students_detail(student_id: int):
        return jsonify(student_to_json(students.get_student(current_coordinator_id(), student_id)))

    @app.route("/api/students/<int:student_id>", methods=["PUT"], endpoint="students_update")
    @auth_required
    def students_update(student_id: int):
        student = students.update_student(current_coordinator_id(), student_id, json_body())
        return jsonify(student_to_json(student))

    @app.route("/api/students/<int:student_id>", methods=["DELETE"], endpoint="students_delete")
    @auth_required
    def students_delete(student_id: int):
        students.delete_student(current_coordinator_id(), student_id)
        return jsonify({"message": "Student removed"})

    @app.route("/api/students/import", methods=["POST"], endpoint="students_import")
    @auth_required
    def students_import():
        upload = request.files.get("file")
        if upload is None or not upload.filename:
            raise ValidationError("Please upload a CSV file")
        if not upload.filename.lower().endswith(".csv") and upload.mimetype not in CSV_MIMETYPES:
            raise ValidationError("Only CSV files are allowed")

        try:
            rows = read_rows(upload.read())
        except UnicodeDecodeError:
            raise ValidationError("CSV file must be UTF-8 encoded")

        result = students.import_rows(current_coordinator_id(), rows)
        return jsonify(
            {
                "message": f"Imported {result.success_count} students successfully",
                "errors": result.errors or None,
                "successCount": result.success_count,
                "totalCount": result.total_count,
            }
        )

    @app.route("/api/students/export", methods=["GET"], endpoint="students_export")
    @auth_required
    def students_export():
        rows = students.export_students(
            current_coordinator_id(),
            grade=request.args.get("grade"),
            status=request.args.get("status"),
        )
        return send_file(
            io.BytesIO(write_students(rows)),
            mimetype="text/csv",
            as_attachment=True,
            download_name="students.csv",
        )
