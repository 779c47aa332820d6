from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from ..attendance.gate import AttendanceGate
from ..attendance.service import AttendanceService
from ..common.datetime_utils import as_day
from ..common.result import Err, Ok, Result
from ..core.exceptions import DomainError, ValidationError
from ..records.store import DailyRecordStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchResult:
    """Outcome of a gated batch creation for one class and day."""

    created: int
    skipped: int
    failed: tuple[str, ...] = ()

    @property
    def has_failures(self) -> bool:
        return bool(self.failed)


@dataclass(frozen=True)
class DetailSessionResult:
    record_ids: tuple[str, ...]
    failed: tuple[str, ...] = ()
    attendance_warning: Optional[str] = None
    is_holiday: bool = False


class BatchRegistrar:
    """Creates the day's records for the students actually in class.

    Students are processed one at a time so the counts always match the
    sub-operations that completed; one student's failure is recorded and the
    loop moves on.
    """

    def __init__(self, gate: AttendanceGate, store: DailyRecordStore, attendance: AttendanceService):
        self._gate = gate
        self._store = store
        self._attendance = attendance

    def register_present_students(self, class_id: str, day: date | datetime, staff_id: str) -> Result[BatchResult]:
        day = as_day(day)
        try:
            view = self._gate.view(class_id, day)
        except DomainError as e:
            logger.error("Cannot load roster for class %s on %s: %s", class_id, day, e)
            return Err(e)

        created = 0
        skipped = 0
        failed: list[str] = []

        for entry in view.roster:
            student_id = entry.student_id
            if not view.is_eligible(student_id):
                continue
            try:
                if self._store.exists(day, student_id):
                    skipped += 1
                    continue
                if self._store.create_if_missing(day, student_id, class_id, staff_id).unwrap():
                    created += 1
                else:
                    skipped += 1
            except DomainError as e:
                logger.error("Could not create record for student %s on %s: %s", student_id, day, e)
                failed.append(student_id)

        result = BatchResult(created=created, skipped=skipped, failed=tuple(failed))
        logger.info(
            "Batch for class %s on %s: created=%d skipped=%d failed=%d",
            class_id,
            day,
            result.created,
            result.skipped,
            len(result.failed),
        )
        return Ok(result)

    def selectable(self, day: date | datetime, student_ids: Iterable[str]) -> list[str]:
        """Drop students that already have a record, keeping the caller's order."""

        return [s for s in dict.fromkeys(student_ids) if not self._store.exists(day, s)]

    def start_detail_session(
        self,
        class_id: str,
        day: date | datetime,
        staff_id: str,
        student_ids: Sequence[str],
    ) -> Result[DetailSessionResult]:
        """Mark the selected students present, then open their records.

        The attendance write is best-effort: when it fails the warning is
        returned and the records are opened anyway.
        """

        day = as_day(day)
        selected = list(dict.fromkeys(student_ids))
        try:
            if not selected:
                raise ValidationError("Select at least one student")
            already = [s for s in selected if self._store.exists(day, s)]
            if already:
                raise ValidationError(f"{len(already)} selected student(s) already have a record for this day")
        except DomainError as e:
            return Err(e)

        warning = None
        saved = self._attendance.mark_present(class_id=class_id, day=day, student_ids=selected)
        if not saved.ok:
            warning = "Attendance could not be saved, but you can continue with the daily record"
            logger.warning("Attendance write failed for class %s on %s: %s", class_id, day, saved.error)

        record_ids: list[str] = []
        failed: list[str] = []
        for student_id in selected:
            res = self._store.get_or_create(day, student_id, class_id, staff_id)
            if res.ok:
                record_ids.append(res.value.record_id)
            else:
                failed.append(student_id)

        return Ok(
            DetailSessionResult(
                record_ids=tuple(record_ids),
                failed=tuple(failed),
                attendance_warning=warning,
                is_holiday=self._attendance.is_holiday(day),
            )
        )
