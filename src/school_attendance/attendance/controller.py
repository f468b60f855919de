from __future__ import annotations

import logging

from flask import Flask, current_app, jsonify, request

from ..common.web import current_actor_id, date_arg, datetime_value, int_value, json_body, login_required
from ..container import Container
from ..core.constants import DEFAULT_RECENT_CLASSES_LIMIT
from ..core.exceptions import ValidationError
from .model import MarkItem

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance", methods=["GET"], endpoint="list_attendance")
    @login_required
    def list_attendance():
        student_id = request.args.get("studentId")
        rows = container.attendance_service.query(
            on=date_arg("date"),
            student_id=int_value(student_id, "studentId") if student_id else None,
            class_name=request.args.get("class"),
            section=request.args.get("section"),
        )
        return jsonify([r.to_dict() for r in rows])

    @app.route("/api/attendance", methods=["POST"], endpoint="mark_attendance")
    @login_required
    def mark_attendance():
        data = json_body()
        if data.get("student") in (None, ""):
            raise ValidationError("Student ID is required")

        outcome = container.attendance_service.record_mark(
            student_id=int_value(data.get("student"), "student"),
            status=data.get("status"),
            marked_by=current_actor_id(),
            when=datetime_value(data.get("date"), "date"),
            remarks=data.get("remarks"),
        )
        return jsonify(outcome.detail.to_dict()), 201 if outcome.created else 200

    @app.route("/api/attendance/bulk", methods=["POST"], endpoint="mark_attendance_bulk")
    @login_required
    def mark_attendance_bulk():
        data = json_body()
        entries = data.get("attendanceData")
        if not isinstance(entries, list):
            raise ValidationError("Attendance data must be an array")

        items = []
        for entry in entries:
            try:
                items.append(
                    MarkItem(
                        student_id=int(entry["student"]),
                        status=entry.get("status"),
                        remarks=entry.get("remarks"),
                    )
                )
            except (TypeError, KeyError, ValueError, AttributeError):
                logger.warning("Skipping malformed attendance entry: %r", entry)

        result = container.attendance_service.mark_bulk(
            items=items,
            marked_by=current_actor_id(),
            when=datetime_value(data.get("date"), "date"),
        )
        return jsonify(result.to_dict())

    @app.route("/api/attendance/recent-classes", methods=["GET"], endpoint="recent_classes")
    @login_required
    def recent_classes():
        default_limit = current_app.config.get("RECENT_CLASSES_LIMIT", DEFAULT_RECENT_CLASSES_LIMIT)
        limit = int_value(request.args.get("limit", default_limit), "limit")
        summaries = container.report_service.recent_class_summaries(limit=limit)
        return jsonify([s.to_dict() for s in summaries])

    @app.route("/api/attendance/report", methods=["GET"], endpoint="attendance_report")
    @login_required
    def attendance_report():
        report = container.report_service.student_report(
            start=date_arg("startDate"),
            end=date_arg("endDate"),
            class_name=request.args.get("class"),
            section=request.args.get("section"),
        )
        return jsonify([r.to_dict() for r in report])
