from __future__ import annotations

from dataclasses import dataclass

from .attendance.gate import AttendanceGate
from .attendance.mysql_attendance_repository import (
    MySQLAttendanceRepository,
    MySQLCalendarRepository,
    MySQLRosterRepository,
)
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_ERROR_AUTO_CLEAR_SECONDS, DEFAULT_HISTORY_LIMIT
from .database.connection import DBConfig, DatabaseConnection
from .history.service import HistoryQuery
from .records.mysql_record_repository import MySQLDailyRecordRepository
from .records.store import DailyRecordStore
from .registrar.service import BatchRegistrar
from .review.service import ReviewTracker


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    records_repo: MySQLDailyRecordRepository
    attendance_repo: MySQLAttendanceRepository
    roster_repo: MySQLRosterRepository
    calendar_repo: MySQLCalendarRepository

    record_store: DailyRecordStore
    attendance_gate: AttendanceGate
    attendance_service: AttendanceService
    batch_registrar: BatchRegistrar
    history_query: HistoryQuery
    review_tracker: ReviewTracker

    error_auto_clear_seconds: int = DEFAULT_ERROR_AUTO_CLEAR_SECONDS


def build_container(
    *,
    db_config: dict,
    history_limit: int = DEFAULT_HISTORY_LIMIT,
    error_auto_clear_seconds: int = DEFAULT_ERROR_AUTO_CLEAR_SECONDS,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    records_repo = MySQLDailyRecordRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    roster_repo = MySQLRosterRepository(conn)
    calendar_repo = MySQLCalendarRepository(conn)

    record_store = DailyRecordStore(records_repo)
    attendance_gate = AttendanceGate(attendance_repo, roster_repo)
    attendance_service = AttendanceService(attendance_repo, calendar_repo, attendance_gate, record_store)
    batch_registrar = BatchRegistrar(attendance_gate, record_store, attendance_service)
    history_query = HistoryQuery(records_repo, default_limit=history_limit)
    review_tracker = ReviewTracker(record_store, records_repo)

    return Container(
        conn=conn,
        records_repo=records_repo,
        attendance_repo=attendance_repo,
        roster_repo=roster_repo,
        calendar_repo=calendar_repo,
        record_store=record_store,
        attendance_gate=attendance_gate,
        attendance_service=attendance_service,
        batch_registrar=batch_registrar,
        history_query=history_query,
        review_tracker=review_tracker,
        error_auto_clear_seconds=int(error_auto_clear_seconds),
    )
