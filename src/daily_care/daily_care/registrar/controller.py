from __future__ import annotations

from dataclasses import asdict

from flask import Flask, request

from ..common.http import json_error, respond
from ..common.result import Ok
from ..core.exceptions import DomainError, ValidationError
from ..container import Container
from ..records.serialization import parse_day


def register(app: Flask, container: Container) -> None:
    registrar = container.batch_registrar

    def _student_ids(data: dict) -> list[str]:
        ids = data.get("student_ids") or []
        if not isinstance(ids, list):
            raise ValidationError("student_ids must be a list")
        return [str(s) for s in ids]

    @app.route("/api/classes/<class_id>/records/batch", methods=["POST"], endpoint="registrar_batch")
    def registrar_batch(class_id: str):
        data = request.get_json(silent=True) or {}
        try:
            day = parse_day(data.get("date"))
        except ValidationError as e:
            return json_error(e)
        result = registrar.register_present_students(class_id, day, str(data.get("staff_id") or ""))
        return respond(result, lambda r: {"created": r.created, "skipped": r.skipped, "failed": list(r.failed)})

    @app.route("/api/classes/<class_id>/records/selectable", methods=["POST"], endpoint="registrar_selectable")
    def registrar_selectable(class_id: str):
        data = request.get_json(silent=True) or {}
        try:
            day = parse_day(data.get("date"))
            selectable = registrar.selectable(day, _student_ids(data))
        except DomainError as e:
            return json_error(e)
        return respond(Ok({"class_id": class_id, "student_ids": selectable}))

    @app.route("/api/classes/<class_id>/records/sessions", methods=["POST"], endpoint="registrar_session")
    def registrar_session(class_id: str):
        data = request.get_json(silent=True) or {}
        try:
            day = parse_day(data.get("date"))
            ids = _student_ids(data)
        except ValidationError as e:
            return json_error(e)
        result = registrar.start_detail_session(class_id, day, str(data.get("staff_id") or ""), ids)
        return respond(result, asdict, status=201)

    @app.route("/api/classes/<class_id>/attendance/summary", methods=["GET"], endpoint="attendance_summary")
    def attendance_summary(class_id: str):
        try:
            day = parse_day(request.args.get("date"))
            summary = container.attendance_service.summary(class_id=class_id, day=day)
        except DomainError as e:
            return json_error(e)
        data = asdict(summary)
        data["day"] = summary.day.isoformat()
        return respond(Ok(data))
