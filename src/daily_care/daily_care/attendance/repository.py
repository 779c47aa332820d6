from __future__ import annotations

from datetime import date
from typing import Mapping, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceSheet


class AttendanceRepository(Protocol):
    def get_attendance(self, *, class_id: str, day: date) -> Optional[AttendanceSheet]:
        """None when nobody has taken attendance for this class and day yet."""

        raise NotImplementedError

    def save_attendance(self, *, class_id: str, day: date, statuses: Mapping[str, AttendanceStatus]) -> bool:
        """Merge the given statuses into the sheet. Returns True on success."""

        raise NotImplementedError


class RosterRepository(Protocol):
    def students_in_class(self, class_id: str) -> Sequence[str]:
        raise NotImplementedError


class CalendarRepository(Protocol):
    def is_holiday(self, day: date) -> Optional[bool]:
        """True/False when the calendar knows the day, None otherwise."""

        raise NotImplementedError
