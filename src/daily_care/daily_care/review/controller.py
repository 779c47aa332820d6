from __future__ import annotations

from flask import Flask, request

from ..common.http import respond
from ..container import Container
from ..records.serialization import record_to_dict


def register(app: Flask, container: Container) -> None:
    reviews = container.review_tracker

    @app.route("/api/records/<record_id>/review", methods=["POST"], endpoint="review_mark")
    def review_mark(record_id: str):
        data = request.get_json(silent=True) or {}
        return respond(reviews.mark_reviewed(record_id, str(data.get("comment") or "")), record_to_dict)

    @app.route("/api/guardian/unreviewed", methods=["GET"], endpoint="review_unreviewed")
    def review_unreviewed():
        student_ids = request.args.getlist("student_id")
        if request.args.get("count_only") in {"1", "true"}:
            return respond(reviews.unreviewed_count(student_ids), lambda n: {"count": n})
        return respond(reviews.unreviewed(student_ids), lambda rs: [record_to_dict(r) for r in rs])
