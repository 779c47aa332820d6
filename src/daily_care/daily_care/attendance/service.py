from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Iterable, Mapping

from ..common.datetime_utils import as_day
from ..common.result import Err, Ok, Result
from ..core.enums import AttendanceStatus
from ..core.exceptions import DomainError, StoreError
from ..records.store import DailyRecordStore
from .gate import AttendanceGate
from .model import AttendanceSummary
from .repository import AttendanceRepository, CalendarRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        calendar: CalendarRepository,
        gate: AttendanceGate,
        store: DailyRecordStore,
    ):
        self._attendance = attendance
        self._calendar = calendar
        self._gate = gate
        self._store = store

    def save_attendance(
        self,
        *,
        class_id: str,
        day: date | datetime,
        statuses: Mapping[str, AttendanceStatus],
    ) -> Result[bool]:
        try:
            ok = self._attendance.save_attendance(class_id=class_id, day=as_day(day), statuses=dict(statuses))
        except DomainError as e:
            logger.error("Saving attendance for class %s failed: %s", class_id, e)
            return Err(e)
        if not ok:
            return Err(StoreError("Attendance could not be saved"))
        return Ok(True)

    def mark_present(self, *, class_id: str, day: date | datetime, student_ids: Iterable[str]) -> Result[bool]:
        return self.save_attendance(
            class_id=class_id,
            day=day,
            statuses={student_id: AttendanceStatus.PRESENT for student_id in student_ids},
        )

    def is_holiday(self, day: date | datetime) -> bool:
        """Advisory only; never blocks registration."""

        day = as_day(day)
        try:
            known = self._calendar.is_holiday(day)
        except DomainError as e:
            logger.warning("Holiday lookup failed for %s: %s", day, e)
            known = None
        if known is not None:
            return bool(known)
        return day.weekday() >= 5

    def summary(self, *, class_id: str, day: date | datetime) -> AttendanceSummary:
        view = self._gate.view(class_id, day)
        with_record = self._store.student_ids_with_record(class_id=class_id, day=view.day)

        total = len(view.roster)
        present = len(view.present_ids)
        registered = sum(1 for e in view.roster if e.student_id in with_record)
        return AttendanceSummary(
            class_id=class_id,
            day=view.day,
            total=total,
            present=present,
            absent=total - present,
            percentage=round(present * 100.0 / total, 1) if total else 0.0,
            with_record=registered,
            without_record=total - registered,
            is_holiday=self.is_holiday(view.day),
        )
