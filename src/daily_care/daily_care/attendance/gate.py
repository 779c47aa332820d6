from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import as_day
from ..core.enums import AttendanceStatus
from .model import AttendanceSheet, RosterEntry
from .repository import AttendanceRepository, RosterRepository


@dataclass(frozen=True)
class GateView:
    """Roster of a class for one day, with the attendance sheet it was read with."""

    class_id: str
    day: date
    sheet: Optional[AttendanceSheet]
    roster: tuple[RosterEntry, ...]

    def is_eligible(self, student_id: str) -> bool:
        if self.sheet is None:
            return False
        return self.sheet.status_of(student_id) == AttendanceStatus.PRESENT

    @property
    def present_ids(self) -> tuple[str, ...]:
        return tuple(e.student_id for e in self.roster if e.present)


class AttendanceGate:
    """Read-only eligibility check: only students marked PRESENT get a record.

    A class/day without an attendance sheet yet is closed: nobody is eligible.
    """

    def __init__(self, attendance: AttendanceRepository, roster: RosterRepository):
        self._attendance = attendance
        self._roster = roster

    def is_eligible(self, student_id: str, class_id: str, day: date | datetime) -> bool:
        sheet = self._attendance.get_attendance(class_id=class_id, day=as_day(day))
        if sheet is None:
            return False
        return sheet.status_of(student_id) == AttendanceStatus.PRESENT

    def view(self, class_id: str, day: date | datetime) -> GateView:
        day = as_day(day)
        sheet = self._attendance.get_attendance(class_id=class_id, day=day)
        roster = tuple(
            RosterEntry(
                student_id=student_id,
                present=bool(sheet and sheet.status_of(student_id) == AttendanceStatus.PRESENT),
            )
            for student_id in self._roster.students_in_class(class_id)
        )
        return GateView(class_id=class_id, day=day, sheet=sheet, roster=roster)
