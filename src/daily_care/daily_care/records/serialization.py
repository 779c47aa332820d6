from __future__ import annotations

from datetime import date, datetime
from typing import Any, Mapping

from ..common.datetime_utils import parse_clock, parse_iso_date
from ..core.exceptions import ValidationError
from .model import MEAL_SLOTS, DailyRecord, Meals, Supplies
from .normalizer import normalize

_TEXT_FIELDS = ("meal_notes", "nap_notes", "bowel_notes", "other_supply_note", "general_notes")
_BOOL_FIELDS = ("nap_taken", "bowel_movement")


def _iso(value) -> str | None:
    if value is None:
        return None
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def _clock(value) -> str | None:
    return value.strftime("%H:%M") if value else None


def record_to_dict(r: DailyRecord) -> dict:
    return {
        "id": r.record_id,
        "student_id": r.student_id,
        "class_id": r.class_id,
        "date": _iso(r.day),
        "created_by_staff_id": r.created_by_staff_id,
        "last_modified_by_staff_id": r.last_modified_by_staff_id,
        "last_modified_at": _iso(r.last_modified_at),
        "meals": {slot: normalize(value).value for slot, value in r.meals.as_dict().items()},
        "meal_notes": r.meal_notes,
        "nap_taken": r.nap_taken,
        "nap_start": _clock(r.nap_start),
        "nap_end": _clock(r.nap_end),
        "nap_notes": r.nap_notes,
        "bowel_movement": r.bowel_movement,
        "bowel_count": r.bowel_count,
        "bowel_notes": r.bowel_notes,
        "supplies": {
            "diapers": r.supplies.diapers,
            "wipes": r.supplies.wipes,
            "change_of_clothes": r.supplies.change_of_clothes,
        },
        "other_supply_note": r.other_supply_note,
        "general_notes": r.general_notes,
        "reviewed_by_guardian": r.reviewed_by_guardian,
        "reviewed_at": _iso(r.reviewed_at),
        "guardian_comment": r.guardian_comment,
    }


def changes_from_payload(current: DailyRecord, payload: Mapping[str, Any]) -> dict[str, Any]:
    """Translate a JSON body into DailyRecord field changes.

    Only keys present in the payload are returned; identity and review keys
    are passed through untouched so the caller can reject them.
    """

    changes: dict[str, Any] = {}

    if "meals" in payload:
        meals = payload.get("meals") or {}
        unknown = set(meals) - set(MEAL_SLOTS)
        if unknown:
            raise ValidationError(f"Unknown meal slot(s): {', '.join(sorted(unknown))}")
        base = current.meals.as_dict()
        base.update({slot: normalize(value) for slot, value in meals.items()})
        changes["meals"] = Meals(**base)

    if "supplies" in payload:
        supplies = payload.get("supplies") or {}
        changes["supplies"] = Supplies(
            diapers=bool(supplies.get("diapers", current.supplies.diapers)),
            wipes=bool(supplies.get("wipes", current.supplies.wipes)),
            change_of_clothes=bool(supplies.get("change_of_clothes", current.supplies.change_of_clothes)),
        )

    for key in ("nap_start", "nap_end"):
        if key in payload:
            raw = payload.get(key)
            value = parse_clock(raw)
            if raw not in (None, "") and value is None:
                raise ValidationError(f"Invalid time for {key} (HH:MM)")
            changes[key] = value

    for key in _TEXT_FIELDS:
        if key in payload:
            changes[key] = str(payload.get(key) or "")

    for key in _BOOL_FIELDS:
        if key in payload:
            changes[key] = bool(payload.get(key))

    if "bowel_count" in payload:
        try:
            changes["bowel_count"] = int(payload.get("bowel_count") or 0)
        except (TypeError, ValueError):
            raise ValidationError("Bowel count must be a number")

    if "class_id" in payload:
        changes["class_id"] = str(payload["class_id"])

    # identity/review keys, rejected by the detail reducer
    for key in ("student_id", "deleted", "reviewed_by_guardian", "reviewed_at", "guardian_comment"):
        if key in payload:
            changes[key] = payload[key]
    if "date" in payload:
        changes["day"] = payload["date"]
    if "id" in payload and payload["id"] != current.record_id:
        changes["record_id"] = payload["id"]

    return changes


def parse_day(value: Any) -> date:
    if isinstance(value, date):
        return value
    try:
        return parse_iso_date(str(value or "").strip())
    except ValueError:
        raise ValidationError("Invalid date (YYYY-MM-DD)")
