from __future__ import annotations

from typing import Any, Callable

from flask import jsonify

from ..core.exceptions import DomainError, NotFoundError, StoreError, ValidationError
from .result import Result

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (StoreError, 503),
)


def status_for(error: DomainError) -> int:
    for kind, status in _STATUS_BY_ERROR:
        if isinstance(error, kind):
            return status
    return 500


def json_error(error: DomainError):
    return jsonify({"success": False, "message": str(error)}), status_for(error)


def respond(result: Result, serialize: Callable[[Any], Any] = lambda v: v, *, status: int = 200):
    if not result.ok:
        return json_error(result.error)
    return jsonify({"success": True, "data": serialize(result.value)}), status
