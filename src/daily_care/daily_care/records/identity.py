"""Deterministic identity of daily records.

A record is addressed by ``registro_<YYYYMMDD>_<studentId>``. Every code path
that needs to find, create or delete a record recomputes the id here instead
of carrying ids around.

Records written by older clients carry a ``local_`` placeholder id. They are
migrated when loaded: the canonical id is recomputed from their stored day
and student, and the record is adopted under that id unless a canonically
keyed record for the same identity already exists, in which case the legacy
copy is stale and dropped.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Iterable, Optional

from ..common.datetime_utils import as_day
from ..core.constants import LEGACY_ID_PREFIX, RECORD_ID_DATE_FORMAT, RECORD_ID_PREFIX
from ..core.exceptions import ValidationError
from .model import DailyRecord

logger = logging.getLogger(__name__)


def derive_id(day: date | datetime, student_id: str) -> str:
    student_id = (student_id or "").strip()
    if not student_id:
        raise ValidationError("Student id is required to address a record")
    return f"{RECORD_ID_PREFIX}{as_day(day).strftime(RECORD_ID_DATE_FORMAT)}_{student_id}"


def identity_of(record: DailyRecord) -> str:
    """Canonical id recomputed from the record's own day and student."""
    return derive_id(record.day, record.student_id)


def is_legacy_id(record_id: str) -> bool:
    return (record_id or "").startswith(LEGACY_ID_PREFIX)


def migrate_one(record: DailyRecord, *, canonical_exists: Callable[[str], bool]) -> Optional[DailyRecord]:
    """Return the record under its canonical id, or None if it is superseded."""

    if not is_legacy_id(record.record_id):
        return record

    canonical = identity_of(record)
    if canonical_exists(canonical):
        logger.warning("Legacy record %s superseded by %s, ignoring", record.record_id, canonical)
        return None

    logger.info("Adopting legacy record %s as %s", record.record_id, canonical)
    return replace(record, record_id=canonical)


def migrate_loaded(
    records: Iterable[DailyRecord],
    *,
    canonical_exists: Callable[[str], bool] | None = None,
) -> list[DailyRecord]:
    """Apply the legacy-id migration to a batch of loaded records.

    Canonical records in the batch always win. Among several legacy copies of
    the same identity the most recently modified one is adopted. Input order
    is preserved for the records that survive.
    """

    items = list(records)
    canonical_ids = {r.record_id for r in items if not is_legacy_id(r.record_id)}

    def exists(record_id: str) -> bool:
        if record_id in canonical_ids:
            return True
        return bool(canonical_exists and canonical_exists(record_id))

    chosen: dict[str, DailyRecord] = {}
    for r in items:
        if not is_legacy_id(r.record_id):
            continue
        canonical = identity_of(r)
        current = chosen.get(canonical)
        if current is None or r.last_modified_at > current.last_modified_at:
            chosen[canonical] = r

    out: list[DailyRecord] = []
    for r in items:
        if not is_legacy_id(r.record_id):
            out.append(r)
            continue
        if chosen.get(identity_of(r)) is not r:
            logger.warning("Dropping duplicate legacy record %s", r.record_id)
            continue
        migrated = migrate_one(r, canonical_exists=exists)
        if migrated is not None:
            out.append(migrated)
    return out


def parse_id(record_id: str) -> Optional[tuple[date, str]]:
    """Split a canonical id back into (day, student_id); None if not canonical."""

    if not (record_id or "").startswith(RECORD_ID_PREFIX):
        return None
    stamp, sep, student_id = record_id[len(RECORD_ID_PREFIX):].partition("_")
    if not sep or not student_id:
        return None
    try:
        day = datetime.strptime(stamp, RECORD_ID_DATE_FORMAT).date()
    except ValueError:
        return None
    return day, student_id
