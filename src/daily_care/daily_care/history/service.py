from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Sequence

from ..common.datetime_utils import as_day, day_bounds
from ..common.result import Err, Ok, Result
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.exceptions import DomainError, ValidationError
from ..records.identity import migrate_loaded
from ..records.model import DailyRecord
from ..records.normalizer import normalize_record
from ..records.repository import DailyRecordRepository

logger = logging.getLogger(__name__)


class HistoryQuery:
    """Read path over persisted records.

    Every returned record has been through legacy-id migration and meal-state
    normalization, deleted records are never returned, and results are sorted
    newest day first.
    """

    def __init__(self, records: DailyRecordRepository, *, default_limit: int = DEFAULT_HISTORY_LIMIT):
        self._records = records
        self._default_limit = int(default_limit)

    def most_recent(self, student_id: str, limit: int | None = None) -> Result[list[DailyRecord]]:
        limit = self._default_limit if limit is None else int(limit)
        if limit <= 0:
            return Ok([])
        try:
            rows = self._records.list_for_student(student_id=student_id, limit=limit)
            return Ok(self._prepare(rows)[:limit])
        except DomainError as e:
            logger.error("Loading history for student %s failed: %s", student_id, e)
            return Err(e)

    def by_date_range(
        self,
        student_id: str,
        start: date | datetime,
        end: date | datetime,
    ) -> Result[list[DailyRecord]]:
        start_at, end_at = day_bounds(start, end)
        if end_at < start_at:
            return Err(ValidationError("End date must not be before start date"))
        try:
            rows = self._records.list_for_student(
                student_id=student_id,
                start_day=start_at.date(),
                end_day=end_at.date(),
            )
            in_range = [r for r in self._prepare(rows) if start_at.date() <= as_day(r.day) <= end_at.date()]
            return Ok(in_range)
        except DomainError as e:
            logger.error("Loading history range for student %s failed: %s", student_id, e)
            return Err(e)

    def export_rows(self, student_id: str, start: date | datetime, end: date | datetime) -> Result[list[dict]]:
        return self.by_date_range(student_id, start, end).map(lambda records: [_to_row(r) for r in records])

    def _prepare(self, rows: Sequence[DailyRecord]) -> list[DailyRecord]:
        live = [r for r in rows if not r.deleted]
        migrated = migrate_loaded(live, canonical_exists=lambda rid: self._records.exists(rid, include_deleted=True))
        out = [normalize_record(r) for r in migrated]
        out.sort(key=lambda r: as_day(r.day), reverse=True)
        return out


def _clock(value) -> str:
    return value.strftime("%H:%M") if value else ""


def _to_row(r: DailyRecord) -> dict:
    return {
        "date": as_day(r.day).strftime("%Y-%m-%d"),
        "student_id": r.student_id,
        "first_course": r.meals.first_course.value,
        "second_course": r.meals.second_course.value,
        "dessert": r.meals.dessert.value,
        "snack": r.meals.snack.value,
        "meal_notes": r.meal_notes,
        "nap": "yes" if r.nap_taken else "no",
        "nap_start": _clock(r.nap_start),
        "nap_end": _clock(r.nap_end),
        "bowel_count": r.bowel_count,
        "general_notes": r.general_notes,
        "reviewed": "yes" if r.reviewed_by_guardian else "no",
    }
