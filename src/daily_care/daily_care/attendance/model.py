from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Mapping, Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceSheet:
    """Attendance of one class on one day: student id -> status."""

    class_id: str
    day: date
    statuses: Mapping[str, AttendanceStatus] = field(default_factory=dict)

    def status_of(self, student_id: str) -> Optional[AttendanceStatus]:
        return self.statuses.get(student_id)


@dataclass(frozen=True)
class RosterEntry:
    student_id: str
    present: bool = False


@dataclass(frozen=True)
class AttendanceSummary:
    """Read-model for the attendance report of a class and day."""

    class_id: str
    day: date
    total: int
    present: int
    absent: int
    percentage: float
    with_record: int
    without_record: int
    is_holiday: bool
