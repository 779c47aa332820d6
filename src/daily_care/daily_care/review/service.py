from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Iterable, Optional

from ..common.datetime_utils import as_day, now_local
from ..common.result import Err, Ok, Result
from ..core.constants import MAX_UNREVIEWED_LIMIT
from ..core.exceptions import DomainError
from ..records.identity import migrate_loaded
from ..records.model import DailyRecord
from ..records.normalizer import normalize_record
from ..records.repository import DailyRecordRepository
from ..records.store import DailyRecordStore

logger = logging.getLogger(__name__)


class ReviewTracker:
    """Guardian acknowledgement of a record.

    reviewed_by_guardian only ever goes from False to True; reviewing again
    replaces the comment and timestamp.
    """

    def __init__(
        self,
        store: DailyRecordStore,
        records: DailyRecordRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._store = store
        self._records = records
        self._clock = clock

    def mark_reviewed(self, record_id: str, comment: str = "") -> Result[DailyRecord]:
        loaded = self._store.get(record_id)
        if not loaded.ok:
            return loaded

        record = loaded.value
        try:
            reviewed = self._store.record_review(
                record,
                reviewed_at=self._clock(),
                comment=(comment or "").strip(),
            )
        except DomainError as e:
            logger.error("Saving review of %s failed: %s", record.record_id, e)
            return Err(e)

        if not record.reviewed_by_guardian:
            logger.info("Record %s reviewed by guardian", record.record_id)
        return Ok(reviewed)

    def unreviewed(
        self,
        student_ids: Iterable[str],
        *,
        limit: Optional[int] = MAX_UNREVIEWED_LIMIT,
    ) -> Result[list[DailyRecord]]:
        ids = list(dict.fromkeys(student_ids))
        if not ids:
            return Ok([])
        try:
            rows = self._records.list_unreviewed(student_ids=ids, limit=limit)
            migrated = migrate_loaded(
                [r for r in rows if not r.deleted and not r.reviewed_by_guardian],
                canonical_exists=lambda rid: self._records.exists(rid, include_deleted=True),
            )
        except DomainError as e:
            return Err(e)
        out = [normalize_record(r) for r in migrated]
        out.sort(key=lambda r: as_day(r.day), reverse=True)
        return Ok(out if limit is None else out[:limit])

    def unreviewed_count(self, student_ids: Iterable[str]) -> Result[int]:
        return self.unreviewed(student_ids, limit=None).map(len)
