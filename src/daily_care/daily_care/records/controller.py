from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import now_local
from ..common.http import json_error, respond
from ..common.result import Ok
from ..core.exceptions import ValidationError
from ..container import Container
from ..state import detail
from .serialization import changes_from_payload, parse_day, record_to_dict


def register(app: Flask, container: Container) -> None:
    store = container.record_store

    @app.route("/api/records", methods=["POST"], endpoint="records_get_or_create")
    def records_get_or_create():
        data = request.get_json(silent=True) or {}
        try:
            day = parse_day(data.get("date"))
        except ValidationError as e:
            return json_error(e)
        result = store.get_or_create(
            day,
            str(data.get("student_id") or ""),
            str(data.get("class_id") or ""),
            str(data.get("staff_id") or ""),
        )
        return respond(result, record_to_dict)

    @app.route("/api/records/<record_id>", methods=["GET"], endpoint="records_detail")
    def records_detail(record_id: str):
        return respond(store.get(record_id), record_to_dict)

    @app.route("/api/records/<record_id>", methods=["PUT"], endpoint="records_update")
    def records_update(record_id: str):
        data = request.get_json(silent=True) or {}
        loaded = store.get(record_id)
        if not loaded.ok:
            return json_error(loaded.error)

        now = now_local()
        state = detail.apply(detail.DetailState(), detail.RecordLoaded(loaded.value))
        try:
            changes = changes_from_payload(loaded.value, data)
        except ValidationError as e:
            return json_error(e)

        state = detail.apply(
            state,
            detail.FieldsEdited(changes=changes, now=now),
            auto_clear_seconds=container.error_auto_clear_seconds,
        )
        if state.error is not None:
            return json_error(ValidationError(state.error.text))

        return respond(store.update(state.record, staff_id=str(data.get("staff_id") or "") or None), record_to_dict)

    @app.route("/api/records", methods=["DELETE"], endpoint="records_soft_delete")
    def records_soft_delete():
        try:
            day = parse_day(request.args.get("date"))
        except ValidationError as e:
            return json_error(e)
        result = store.soft_delete(
            day,
            request.args.get("student_id") or "",
            staff_id=request.args.get("staff_id") or None,
        )
        if result.ok and not result.value:
            return respond(Ok({"deleted": False}), status=404)
        return respond(result, lambda deleted: {"deleted": deleted})
