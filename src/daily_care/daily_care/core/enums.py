from __future__ import annotations

from enum import Enum


class MealState(str, Enum):
    """Canonical outcome of one meal slot as stored in the database."""

    NOT_SERVED = "NOT_SERVED"
    COMPLETE = "COMPLETE"
    PARTIAL = "PARTIAL"
    REFUSED = "REFUSED"
    NO_DATA = "NO_DATA"
    NOT_APPLICABLE = "NOT_APPLICABLE"


class AttendanceStatus(str, Enum):
    """Per-student status inside a class attendance sheet."""

    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    LATE = "LATE"
    EXCUSED_ABSENCE = "EXCUSED_ABSENCE"
