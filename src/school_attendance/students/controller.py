from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import json_body, login_required
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/students", methods=["GET"], endpoint="list_students")
    @login_required
    def list_students():
        students = container.student_service.list_students(
            class_name=request.args.get("class"),
            section=request.args.get("section"),
            search=request.args.get("search"),
        )
        return jsonify([s.to_dict() for s in students])

    @app.route("/api/students", methods=["POST"], endpoint="create_student")
    @login_required
    def create_student():
        student = container.student_service.register_row(json_body())
        return jsonify(student.to_dict()), 201

    @app.route("/api/students/bulk", methods=["POST"], endpoint="bulk_create_students")
    @login_required
    def bulk_create_students():
        """Rows arrive already parsed from the uploaded sheet."""
        rows = json_body().get("rows")
        if not isinstance(rows, list) or not rows:
            raise ValidationError("rows must be a non-empty list")
        if not all(isinstance(r, dict) for r in rows):
            raise ValidationError("every row must be an object")

        result = container.student_service.bulk_register(rows)
        return jsonify(
            {
                "message": (
                    f"Bulk upload completed. {len(result.succeeded)} students added, "
                    f"{len(result.failed)} errors."
                ),
                "results": result.to_dict(),
            }
        )

    @app.route("/api/students/<int:student_id>", methods=["PUT"], endpoint="update_student")
    @login_required
    def update_student(student_id: int):
        student = container.student_service.update(student_id, json_body())
        return jsonify(student.to_dict())

    @app.route("/api/students/<int:student_id>", methods=["DELETE"], endpoint="delete_student")
    @login_required
    def delete_student(student_id: int):
        purged = container.student_service.remove(student_id)
        return jsonify(
            {
                "message": "Student and all related data deleted successfully",
                "attendance_deleted": purged,
            }
        )
