from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Protocol, Sequence

from .model import DailyRecord


class DailyRecordRepository(Protocol):
    """Storage interface for daily records.

    Rows are returned as stored: legacy ids are not migrated here and meal
    states may still hold raw words. Single-row writes are atomic; there is no
    cross-row transaction.
    """

    def get_by_id(self, record_id: str) -> Optional[DailyRecord]:
        """Row with this id, deleted or not."""

        raise NotImplementedError

    def exists(self, record_id: str, *, include_deleted: bool = False) -> bool:
        raise NotImplementedError

    def list_legacy_for(self, *, student_id: str, day: date) -> Sequence[DailyRecord]:
        """Non-deleted rows for this identity still carrying a placeholder id."""

        raise NotImplementedError

    def insert_if_absent(self, record: DailyRecord) -> bool:
        """Insert the row unless its id is taken. Returns True if inserted."""

        raise NotImplementedError

    def save(self, record: DailyRecord) -> None:
        """Upsert keyed by record_id.

        Guardian review fields are only taken from ``record`` when the row is
        new; an existing row keeps its own.
        """

        raise NotImplementedError

    def list_for_student(
        self,
        *,
        student_id: str,
        start_day: Optional[date] = None,
        end_day: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> Sequence[DailyRecord]:
        """Non-deleted rows, newest day first.

        ``limit`` caps canonical rows only; rows still carrying a placeholder
        id are always included so read-time migration has them all.
        """

        raise NotImplementedError

    def list_for_class_and_day(self, *, class_id: str, day: date) -> Sequence[DailyRecord]:
        raise NotImplementedError

    def list_unreviewed(self, *, student_ids: Iterable[str], limit: Optional[int] = None) -> Sequence[DailyRecord]:
        """Non-deleted rows a guardian has not reviewed yet, newest day first.

        ``limit`` is applied like in list_for_student.
        """

        raise NotImplementedError

    def mark_reviewed(self, record_id: str, *, reviewed_at: datetime, comment: str) -> bool:
        """Set only the guardian review columns. False if no live row has this id."""

        raise NotImplementedError
