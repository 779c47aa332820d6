from __future__ import annotations

from datetime import date, datetime
from typing import Mapping, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceSheet
from .repository import AttendanceRepository, CalendarRepository, RosterRepository


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_attendance(self, *, class_id: str, day: date) -> Optional[AttendanceSheet]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT student_id, status
                FROM attendance_sheets
                WHERE class_id=%s AND sheet_day=%s
                """,
                (class_id, day),
            )
            rows = fetchall(cur)
            if not rows:
                return None
            return AttendanceSheet(
                class_id=class_id,
                day=day,
                statuses={r["student_id"]: AttendanceStatus(r["status"]) for r in rows},
            )

    def save_attendance(self, *, class_id: str, day: date, statuses: Mapping[str, AttendanceStatus]) -> bool:
        if not statuses:
            return True
        now = datetime.now()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                INSERT INTO attendance_sheets(class_id, sheet_day, student_id, status, updated_at)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE status=VALUES(status), updated_at=VALUES(updated_at)
                """,
                [(class_id, day, student_id, status.value, now) for student_id, status in statuses.items()],
            )
            return True


class MySQLRosterRepository(RosterRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def students_in_class(self, class_id: str) -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT student_id FROM class_students WHERE class_id=%s ORDER BY student_id ASC",
                (class_id,),
            )
            return [r["student_id"] for r in fetchall(cur)]


class MySQLCalendarRepository(CalendarRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def is_holiday(self, day: date) -> Optional[bool]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT holiday_day FROM holidays WHERE holiday_day=%s", (day,))
            return True if fetchone(cur) else None
