from __future__ import annotations

from datetime import date, datetime
from typing import Any, Iterable, Optional, Sequence

from ..core.constants import LEGACY_ID_PREFIX
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import DailyRecord, Meals, Supplies
from .repository import DailyRecordRepository

_COLUMNS = """
    record_id, student_id, class_id, record_day,
    created_by_staff_id, last_modified_by_staff_id, last_modified_at,
    meal_first_course, meal_second_course, meal_dessert, meal_snack, meal_notes,
    nap_taken, nap_start, nap_end, nap_notes,
    bowel_movement, bowel_count, bowel_notes,
    needs_diapers, needs_wipes, needs_change_of_clothes, other_supply_note,
    general_notes, deleted,
    reviewed_by_guardian, reviewed_at, guardian_comment
"""

# Guardian review columns are written on insert only; mark_reviewed owns them after that.
_UPSERT = f"""
    INSERT INTO daily_records({_COLUMNS})
    VALUES({", ".join(["%s"] * 28)})
    ON DUPLICATE KEY UPDATE
        student_id=VALUES(student_id), class_id=VALUES(class_id), record_day=VALUES(record_day),
        last_modified_by_staff_id=VALUES(last_modified_by_staff_id),
        last_modified_at=VALUES(last_modified_at),
        meal_first_course=VALUES(meal_first_course), meal_second_course=VALUES(meal_second_course),
        meal_dessert=VALUES(meal_dessert), meal_snack=VALUES(meal_snack), meal_notes=VALUES(meal_notes),
        nap_taken=VALUES(nap_taken), nap_start=VALUES(nap_start), nap_end=VALUES(nap_end),
        nap_notes=VALUES(nap_notes),
        bowel_movement=VALUES(bowel_movement), bowel_count=VALUES(bowel_count),
        bowel_notes=VALUES(bowel_notes),
        needs_diapers=VALUES(needs_diapers), needs_wipes=VALUES(needs_wipes),
        needs_change_of_clothes=VALUES(needs_change_of_clothes),
        other_supply_note=VALUES(other_supply_note),
        general_notes=VALUES(general_notes), deleted=VALUES(deleted)
"""


def _clock(value) -> Optional[str]:
    if value is None:
        return None
    if hasattr(value, "strftime"):
        return value.strftime("%H:%M")
    return str(value)


def _raw_state(value) -> str:
    return getattr(value, "value", value)


def _to_params(r: DailyRecord) -> tuple[Any, ...]:
    return (
        r.record_id,
        r.student_id,
        r.class_id,
        r.day,
        r.created_by_staff_id,
        r.last_modified_by_staff_id,
        r.last_modified_at,
        _raw_state(r.meals.first_course),
        _raw_state(r.meals.second_course),
        _raw_state(r.meals.dessert),
        _raw_state(r.meals.snack),
        r.meal_notes,
        int(r.nap_taken),
        _clock(r.nap_start),
        _clock(r.nap_end),
        r.nap_notes,
        int(r.bowel_movement),
        int(r.bowel_count),
        r.bowel_notes,
        int(r.supplies.diapers),
        int(r.supplies.wipes),
        int(r.supplies.change_of_clothes),
        r.other_supply_note,
        r.general_notes,
        int(r.deleted),
        int(r.reviewed_by_guardian),
        r.reviewed_at,
        r.guardian_comment,
    )


def _from_row(r: dict) -> DailyRecord:
    # Meal states and nap times are kept raw; the normalizer cleans them on read.
    return DailyRecord(
        record_id=r["record_id"],
        student_id=r["student_id"],
        class_id=r["class_id"],
        day=r["record_day"],
        created_by_staff_id=r["created_by_staff_id"],
        last_modified_by_staff_id=r["last_modified_by_staff_id"],
        last_modified_at=r["last_modified_at"],
        meals=Meals(
            first_course=r["meal_first_course"],
            second_course=r["meal_second_course"],
            dessert=r["meal_dessert"],
            snack=r["meal_snack"],
        ),
        meal_notes=r.get("meal_notes") or "",
        nap_taken=bool(r["nap_taken"]),
        nap_start=r.get("nap_start"),
        nap_end=r.get("nap_end"),
        nap_notes=r.get("nap_notes") or "",
        bowel_movement=bool(r["bowel_movement"]),
        bowel_count=int(r.get("bowel_count") or 0),
        bowel_notes=r.get("bowel_notes") or "",
        supplies=Supplies(
            diapers=bool(r["needs_diapers"]),
            wipes=bool(r["needs_wipes"]),
            change_of_clothes=bool(r["needs_change_of_clothes"]),
        ),
        other_supply_note=r.get("other_supply_note") or "",
        general_notes=r.get("general_notes") or "",
        deleted=bool(r["deleted"]),
        reviewed_by_guardian=bool(r["reviewed_by_guardian"]),
        reviewed_at=r.get("reviewed_at"),
        guardian_comment=r.get("guardian_comment") or "",
    )


class MySQLDailyRecordRepository(DailyRecordRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, record_id: str) -> Optional[DailyRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM daily_records WHERE record_id=%s", (record_id,))
            r = fetchone(cur)
            return _from_row(r) if r else None

    def exists(self, record_id: str, *, include_deleted: bool = False) -> bool:
        sql = "SELECT COUNT(*) AS n FROM daily_records WHERE record_id=%s"
        if not include_deleted:
            sql += " AND deleted=0"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, (record_id,))
            r = fetchone(cur)
            return bool(r and int(r["n"]) > 0)

    def list_legacy_for(self, *, student_id: str, day: date) -> Sequence[DailyRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM daily_records
                WHERE student_id=%s AND record_day=%s AND deleted=0 AND record_id LIKE %s
                ORDER BY last_modified_at DESC
                """,
                (student_id, day, f"{LEGACY_ID_PREFIX}%"),
            )
            return [_from_row(r) for r in fetchall(cur)]

    def insert_if_absent(self, record: DailyRecord) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT IGNORE INTO daily_records({_COLUMNS}) VALUES({', '.join(['%s'] * 28)})",
                _to_params(record),
            )
            return cur.rowcount > 0

    def save(self, record: DailyRecord) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_UPSERT, _to_params(record))

    def list_for_student(
        self,
        *,
        student_id: str,
        start_day: Optional[date] = None,
        end_day: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> Sequence[DailyRecord]:
        clauses = ["student_id=%s", "deleted=0"]
        params: list[object] = [student_id]
        if start_day is not None:
            clauses.append("record_day >= %s")
            params.append(start_day)
        if end_day is not None:
            clauses.append("record_day <= %s")
            params.append(end_day)

        return self._select_capped(clauses, params, limit)

    def list_for_class_and_day(self, *, class_id: str, day: date) -> Sequence[DailyRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM daily_records WHERE class_id=%s AND record_day=%s AND deleted=0",
                (class_id, day),
            )
            return [_from_row(r) for r in fetchall(cur)]

    def list_unreviewed(self, *, student_ids: Iterable[str], limit: Optional[int] = None) -> Sequence[DailyRecord]:
        placeholders, ids = in_clause(student_ids)
        if not ids:
            return []
        clauses = [f"student_id IN ({placeholders})", "deleted=0", "reviewed_by_guardian=0"]
        return self._select_capped(clauses, list(ids), limit)

    def mark_reviewed(self, record_id: str, *, reviewed_at: datetime, comment: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE daily_records
                SET reviewed_by_guardian=1, reviewed_at=%s, guardian_comment=%s
                WHERE record_id=%s AND deleted=0
                """,
                (reviewed_at, comment, record_id),
            )
            if cur.rowcount > 0:
                return True
            # rowcount is 0 when nothing changed, tell that apart from a missing row
            cur.execute("SELECT COUNT(*) AS n FROM daily_records WHERE record_id=%s AND deleted=0", (record_id,))
            r = fetchone(cur)
            return bool(r and int(r["n"]) > 0)

    def _select_capped(self, clauses: list[str], params: list[object], limit: Optional[int]) -> list[DailyRecord]:
        """Rows matching ``clauses``, newest day first.

        ``limit`` caps canonical rows only. Placeholder-id rows are always
        returned in full so that dropping superseded copies on read can never
        push a canonical record out of the first ``limit``.
        """

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            if limit is None:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM daily_records WHERE {where} ORDER BY record_day DESC",
                    tuple(params),
                )
                return [_from_row(r) for r in fetchall(cur)]

            legacy = f"{LEGACY_ID_PREFIX}%"
            cur.execute(
                f"SELECT {_COLUMNS} FROM daily_records WHERE {where} AND record_id NOT LIKE %s "
                "ORDER BY record_day DESC LIMIT %s",
                tuple(params) + (legacy, int(limit)),
            )
            rows = [_from_row(r) for r in fetchall(cur)]
            cur.execute(
                f"SELECT {_COLUMNS} FROM daily_records WHERE {where} AND record_id LIKE %s",
                tuple(params) + (legacy,),
            )
            rows.extend(_from_row(r) for r in fetchall(cur))

        rows.sort(key=lambda r: r.day, reverse=True)
        return rows
