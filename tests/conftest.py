from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Iterable, Mapping, Optional

import pytest

from daily_care.attendance.gate import AttendanceGate
from daily_care.attendance.model import AttendanceSheet
from daily_care.attendance.service import AttendanceService
from daily_care.core.constants import LEGACY_ID_PREFIX
from daily_care.core.enums import AttendanceStatus
from daily_care.core.exceptions import StoreError
from daily_care.history.service import HistoryQuery
from daily_care.records.identity import derive_id
from daily_care.records.model import DailyRecord
from daily_care.records.store import DailyRecordStore
from daily_care.registrar.service import BatchRegistrar
from daily_care.review.service import ReviewTracker


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class InMemoryRecords:
    """Dict-backed stand-in for MySQLDailyRecordRepository."""

    def __init__(self):
        self.rows: dict[str, DailyRecord] = {}
        self.writes = 0
        self.fail_for_students: set[str] = set()
        # record ids another writer inserts just before our insert_if_absent
        self.concurrent_inserts: dict[str, DailyRecord] = {}

    def put(self, record: DailyRecord) -> DailyRecord:
        self.rows[record.record_id] = record
        return record

    def get_by_id(self, record_id: str) -> Optional[DailyRecord]:
        return self.rows.get(record_id)

    def exists(self, record_id: str, *, include_deleted: bool = False) -> bool:
        r = self.rows.get(record_id)
        return r is not None and (include_deleted or not r.deleted)

    def list_legacy_for(self, *, student_id: str, day: date):
        return [
            r
            for r in self.rows.values()
            if r.record_id.startswith(LEGACY_ID_PREFIX) and r.student_id == student_id and r.day == day and not r.deleted
        ]

    def insert_if_absent(self, record: DailyRecord) -> bool:
        self._check(record)
        other = self.concurrent_inserts.pop(record.record_id, None)
        if other is not None:
            self.rows[record.record_id] = other
        if record.record_id in self.rows:
            return False
        self.writes += 1
        self.rows[record.record_id] = record
        return True

    def save(self, record: DailyRecord) -> None:
        self._check(record)
        self.writes += 1
        current = self.rows.get(record.record_id)
        if current is not None:
            record = replace(
                record,
                reviewed_by_guardian=current.reviewed_by_guardian,
                reviewed_at=current.reviewed_at,
                guardian_comment=current.guardian_comment,
            )
        self.rows[record.record_id] = record

    def list_for_student(self, *, student_id: str, start_day=None, end_day=None, limit=None):
        return self._capped(
            (
                r
                for r in self.rows.values()
                if r.student_id == student_id
                and (start_day is None or r.day >= start_day)
                and (end_day is None or r.day <= end_day)
            ),
            limit,
        )

    def list_for_class_and_day(self, *, class_id: str, day: date):
        return [r for r in self.rows.values() if r.class_id == class_id and r.day == day and not r.deleted]

    def list_unreviewed(self, *, student_ids: Iterable[str], limit=None):
        ids = set(student_ids)
        return self._capped((r for r in self.rows.values() if r.student_id in ids and not r.reviewed_by_guardian), limit)

    def mark_reviewed(self, record_id: str, *, reviewed_at: datetime, comment: str) -> bool:
        current = self.rows.get(record_id)
        if current is None or current.deleted:
            return False
        self.writes += 1
        self.rows[record_id] = replace(
            current, reviewed_by_guardian=True, reviewed_at=reviewed_at, guardian_comment=comment
        )
        return True

    def _capped(self, rows, limit):
        # limit applies to canonical rows, placeholder-id rows always come back
        live = sorted((r for r in rows if not r.deleted), key=lambda r: r.day, reverse=True)
        canonical = [r for r in live if not r.record_id.startswith(LEGACY_ID_PREFIX)]
        legacy = [r for r in live if r.record_id.startswith(LEGACY_ID_PREFIX)]
        if limit is not None:
            canonical = canonical[:limit]
        return sorted(canonical + legacy, key=lambda r: r.day, reverse=True)

    def _check(self, record: DailyRecord) -> None:
        if record.student_id in self.fail_for_students:
            raise StoreError(f"write failed for {record.student_id}")


class InMemoryAttendance:
    def __init__(self):
        self.sheets: dict[tuple[str, date], dict[str, AttendanceStatus]] = {}
        self.fail_saves = False

    def get_attendance(self, *, class_id: str, day: date) -> Optional[AttendanceSheet]:
        statuses = self.sheets.get((class_id, day))
        if statuses is None:
            return None
        return AttendanceSheet(class_id=class_id, day=day, statuses=dict(statuses))

    def save_attendance(self, *, class_id: str, day: date, statuses: Mapping[str, AttendanceStatus]) -> bool:
        if self.fail_saves:
            raise StoreError("attendance table unavailable")
        self.sheets.setdefault((class_id, day), {}).update(statuses)
        return True


class InMemoryRoster:
    def __init__(self, classes: Optional[dict[str, list[str]]] = None):
        self.classes = classes or {}

    def students_in_class(self, class_id: str):
        return list(self.classes.get(class_id, []))


class InMemoryCalendar:
    def __init__(self, holidays: Iterable[date] = ()):
        self.holidays = set(holidays)

    def is_holiday(self, day: date) -> Optional[bool]:
        return True if day in self.holidays else None


def make_record(student_id: str, day: date, *, record_id: Optional[str] = None, class_id: str = "C1", **fields) -> DailyRecord:
    return DailyRecord(
        record_id=record_id or derive_id(day, student_id),
        student_id=student_id,
        class_id=class_id,
        day=day,
        created_by_staff_id="T1",
        last_modified_by_staff_id="T1",
        last_modified_at=datetime.combine(day, datetime.min.time()).replace(hour=9),
        **fields,
    )


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 3, 1, 9, 30, 0)


@pytest.fixture
def clock(fixed_now) -> FakeClock:
    return FakeClock(fixed_now)


@pytest.fixture
def records_repo() -> InMemoryRecords:
    return InMemoryRecords()


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def roster_repo() -> InMemoryRoster:
    return InMemoryRoster()


@pytest.fixture
def calendar_repo() -> InMemoryCalendar:
    return InMemoryCalendar()


@pytest.fixture
def store(records_repo, clock) -> DailyRecordStore:
    return DailyRecordStore(records_repo, clock=clock)


@pytest.fixture
def gate(attendance_repo, roster_repo) -> AttendanceGate:
    return AttendanceGate(attendance_repo, roster_repo)


@pytest.fixture
def attendance_service(attendance_repo, calendar_repo, gate, store) -> AttendanceService:
    return AttendanceService(attendance_repo, calendar_repo, gate, store)


@pytest.fixture
def registrar(gate, store, attendance_service) -> BatchRegistrar:
    return BatchRegistrar(gate, store, attendance_service)


@pytest.fixture
def history(records_repo) -> HistoryQuery:
    return HistoryQuery(records_repo)


@pytest.fixture
def reviews(store, records_repo, clock) -> ReviewTracker:
    return ReviewTracker(store, records_repo, clock=clock)


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def legacy(record_factory):
    def _legacy(student_id: str, day: date, suffix: str = "abc", **fields) -> DailyRecord:
        return record_factory(student_id, day, record_id=f"{LEGACY_ID_PREFIX}{suffix}", **fields)

    return _legacy


