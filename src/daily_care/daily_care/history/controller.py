from __future__ import annotations

import csv
import io

from flask import Flask, request

from ..common.http import json_error, respond
from ..core.exceptions import ValidationError
from ..container import Container
from ..records.serialization import parse_day, record_to_dict

CSV_FIELDS = [
    "date",
    "student_id",
    "first_course",
    "second_course",
    "dessert",
    "snack",
    "meal_notes",
    "nap",
    "nap_start",
    "nap_end",
    "bowel_count",
    "general_notes",
    "reviewed",
]


def register(app: Flask, container: Container) -> None:
    history = container.history_query

    def _many(records):
        return [record_to_dict(r) for r in records]

    @app.route("/api/students/<student_id>/history", methods=["GET"], endpoint="history_list")
    def history_list(student_id: str):
        start_s = request.args.get("start")
        end_s = request.args.get("end")
        try:
            if start_s or end_s:
                start = parse_day(start_s)
                end = parse_day(end_s or start_s)
                return respond(history.by_date_range(student_id, start, end), _many)

            limit_s = request.args.get("limit")
            if limit_s is not None and not limit_s.isdigit():
                raise ValidationError("limit must be a positive number")
            return respond(history.most_recent(student_id, int(limit_s) if limit_s else None), _many)
        except ValidationError as e:
            return json_error(e)

    @app.route("/api/students/<student_id>/history.csv", methods=["GET"], endpoint="history_export")
    def history_export(student_id: str):
        try:
            start = parse_day(request.args.get("start"))
            end = parse_day(request.args.get("end"))
        except ValidationError as e:
            return json_error(e)

        result = history.export_rows(student_id, start, end)
        if not result.ok:
            return json_error(result.error)

        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for row in result.value:
            writer.writerow(row)

        filename = f"daily_records_{student_id}_{start:%Y%m%d}_{end:%Y%m%d}.csv"
        return app.response_class(
            out.getvalue().encode("utf-8-sig"),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )
