from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Optional

from ..common.datetime_utils import as_day, now_local
from ..common.result import Err, Ok, Result
from ..common.validators import require_non_empty, require_non_negative
from ..core.exceptions import DomainError, NotFoundError, ValidationError
from .identity import derive_id, identity_of, is_legacy_id, migrate_loaded, migrate_one, parse_id
from .model import DailyRecord
from .normalizer import normalize_meals, normalize_record
from .repository import DailyRecordRepository

logger = logging.getLogger(__name__)


class DailyRecordStore:
    """Get-or-create, update, soft delete and lookups over daily records.

    Every lookup goes through derive_id; legacy placeholder ids are migrated
    as rows are loaded. Operations that can fail return a Result; the cheap
    existence helpers raise StoreError instead.
    """

    def __init__(self, records: DailyRecordRepository, *, clock: Callable[[], datetime] = now_local):
        self._records = records
        self._clock = clock

    def exists(self, day: date | datetime, student_id: str) -> bool:
        record_id = derive_id(day, student_id)
        if self._records.exists(record_id):
            return True
        if self._records.exists(record_id, include_deleted=True):
            # a deleted canonical row supersedes any legacy copy
            return False
        return bool(self._records.list_legacy_for(student_id=student_id, day=as_day(day)))

    def student_ids_with_record(self, *, class_id: str, day: date | datetime) -> set[str]:
        rows = self._records.list_for_class_and_day(class_id=class_id, day=as_day(day))
        return {r.student_id for r in migrate_loaded(rows, canonical_exists=self._canonical_row_exists)}

    def get_or_create(
        self,
        day: date | datetime,
        student_id: str,
        class_id: str,
        staff_id: str,
    ) -> Result[DailyRecord]:
        try:
            record, _ = self._get_or_create(day, student_id, class_id, staff_id)
            return Ok(record)
        except DomainError as e:
            logger.error("get_or_create failed for student %s: %s", student_id, e)
            return Err(e)

    def create_if_missing(
        self,
        day: date | datetime,
        student_id: str,
        class_id: str,
        staff_id: str,
    ) -> Result[bool]:
        """Like get_or_create, but reports whether this call wrote the record.

        Ok(False) means the record was already there, including when another
        writer inserted it between our lookup and our insert.
        """

        try:
            _, created = self._get_or_create(day, student_id, class_id, staff_id)
            return Ok(created)
        except DomainError as e:
            logger.error("create_if_missing failed for student %s: %s", student_id, e)
            return Err(e)

    def _get_or_create(
        self,
        day: date | datetime,
        student_id: str,
        class_id: str,
        staff_id: str,
    ) -> tuple[DailyRecord, bool]:
        day = as_day(day)
        record_id = derive_id(day, student_id)
        class_id = require_non_empty(class_id, "Class id")
        staff_id = require_non_empty(staff_id, "Staff id")

        existing = self._records.get_by_id(record_id)
        if existing is not None and not existing.deleted:
            return normalize_record(existing), False

        if existing is None:
            adopted = self._adopt_legacy(student_id=student_id, day=day)
            if adopted is not None:
                return adopted, False

        fresh = self._new_record(record_id, day=day, student_id=student_id, class_id=class_id, staff_id=staff_id)

        if existing is not None:
            # Same identity, previously soft-deleted: start over but keep the guardian review.
            fresh = replace(
                fresh,
                reviewed_by_guardian=existing.reviewed_by_guardian,
                reviewed_at=existing.reviewed_at,
                guardian_comment=existing.guardian_comment,
            )
            self._records.save(fresh)
            logger.info("Recreated daily record %s", record_id)
            return fresh, True

        if not self._records.insert_if_absent(fresh):
            current = self._records.get_by_id(record_id)
            if current is not None and not current.deleted:
                logger.info("Daily record %s was created concurrently", record_id)
                return normalize_record(current), False
            self._records.save(fresh)

        logger.info("Created daily record %s", record_id)
        return fresh, True

    def update(self, record: DailyRecord, *, staff_id: Optional[str] = None) -> Result[DailyRecord]:
        """Replace the stored document with ``record``.

        The id is never re-derived from the new content; it must already be
        the canonical id of the record's day and student. Guardian review
        fields and the deleted flag are owned elsewhere and are carried over
        from the stored row.
        """

        try:
            if is_legacy_id(record.record_id) or record.record_id != identity_of(record):
                raise ValidationError("Record id does not match its day and student")
            require_non_negative(record.bowel_count, "Bowel count")

            current = self._load(record.record_id)

            updated = replace(
                record,
                meals=normalize_meals(record.meals),
                created_by_staff_id=current.created_by_staff_id,
                last_modified_by_staff_id=staff_id or record.last_modified_by_staff_id,
                last_modified_at=self._clock(),
                deleted=current.deleted,
                reviewed_by_guardian=current.reviewed_by_guardian,
                reviewed_at=current.reviewed_at,
                guardian_comment=current.guardian_comment,
            )
            self._records.save(updated)
            return Ok(updated)
        except DomainError as e:
            return Err(e)

    def soft_delete(self, day: date | datetime, student_id: str, *, staff_id: Optional[str] = None) -> Result[bool]:
        try:
            day = as_day(day)
            record_id = derive_id(day, student_id)
            current = self._records.get_by_id(record_id)
            if current is None:
                current = self._adopt_legacy(student_id=student_id, day=day)
            if current is None or current.deleted:
                return Ok(False)

            self._records.save(
                replace(
                    current,
                    deleted=True,
                    last_modified_at=self._clock(),
                    last_modified_by_staff_id=staff_id or current.last_modified_by_staff_id,
                )
            )
            logger.info("Soft-deleted daily record %s", record_id)
            return Ok(True)
        except DomainError as e:
            return Err(e)

    def get(self, record_id: str) -> Result[DailyRecord]:
        """Detail fetch. A missing or deleted record is Err(NotFoundError)."""

        try:
            return Ok(self._load(record_id))
        except DomainError as e:
            return Err(e)

    def get_for(self, day: date | datetime, student_id: str) -> Result[DailyRecord]:
        try:
            record_id = derive_id(day, student_id)
        except DomainError as e:
            return Err(e)
        return self.get(record_id)

    def record_review(self, record: DailyRecord, *, reviewed_at: datetime, comment: str) -> DailyRecord:
        """Write only the guardian review fields of a loaded record.

        Staff fields are left as stored, so an edit saved after ``record``
        was loaded is kept. A record adopted from a legacy row gets its
        canonical row first. Raises NotFoundError if the record is gone.
        """

        if not self._canonical_row_exists(record.record_id):
            self._records.insert_if_absent(record)
        if not self._records.mark_reviewed(record.record_id, reviewed_at=reviewed_at, comment=comment):
            raise NotFoundError(f"Daily record {record.record_id} not found")
        return self._load(record.record_id)

    def _load(self, record_id: str) -> DailyRecord:
        row = self._records.get_by_id(record_id)

        if row is not None and is_legacy_id(row.record_id):
            migrated = migrate_one(row, canonical_exists=self._canonical_row_exists)
            if migrated is None:
                # superseded, serve the canonical record instead
                return self._load(identity_of(row))
            row = migrated

        if row is None:
            identity = parse_id(record_id)
            if identity is not None:
                row = self._adopt_legacy(student_id=identity[1], day=identity[0])

        if row is None or row.deleted:
            raise NotFoundError(f"Daily record {record_id} not found")
        return normalize_record(row)

    def _adopt_legacy(self, *, student_id: str, day: date) -> Optional[DailyRecord]:
        legacy = self._records.list_legacy_for(student_id=student_id, day=day)
        migrated = migrate_loaded(legacy, canonical_exists=self._canonical_row_exists)
        return normalize_record(migrated[0]) if migrated else None

    def _canonical_row_exists(self, record_id: str) -> bool:
        return self._records.exists(record_id, include_deleted=True)

    def _new_record(self, record_id: str, *, day: date, student_id: str, class_id: str, staff_id: str) -> DailyRecord:
        return DailyRecord(
            record_id=record_id,
            student_id=student_id,
            class_id=class_id,
            day=day,
            created_by_staff_id=staff_id,
            last_modified_by_staff_id=staff_id,
            last_modified_at=self._clock(),
        )
