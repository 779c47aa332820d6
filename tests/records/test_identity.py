from datetime import date, datetime

import pytest

from daily_care.core.exceptions import ValidationError
from daily_care.records.identity import derive_id, is_legacy_id, migrate_loaded, migrate_one, parse_id


def test_derive_id_is_deterministic_and_ignores_time_of_day():
    assert derive_id(date(2024, 3, 1), "S1") == "registro_20240301_S1"
    assert derive_id(datetime(2024, 3, 1, 23, 59), "S1") == derive_id(date(2024, 3, 1), "S1")


def test_derive_id_requires_student():
    with pytest.raises(ValidationError):
        derive_id(date(2024, 3, 1), "  ")


def test_parse_id_round_trips_student_ids_with_underscores():
    assert parse_id("registro_20240301_S_01") == (date(2024, 3, 1), "S_01")
    assert parse_id("local_123") is None
    assert parse_id("registro_2024XX01_S1") is None
    assert parse_id("registro_20240301") is None


def test_legacy_record_is_adopted_under_canonical_id(legacy):
    old = legacy("S1", date(2024, 3, 1))
    assert is_legacy_id(old.record_id)

    adopted = migrate_one(old, canonical_exists=lambda _: False)

    assert adopted.record_id == "registro_20240301_S1"
    assert adopted.student_id == "S1"


def test_legacy_record_is_dropped_when_canonical_exists(legacy):
    assert migrate_one(legacy("S1", date(2024, 3, 1)), canonical_exists=lambda _: True) is None


def test_migrate_loaded_prefers_canonical_record_in_batch(record_factory, legacy):
    day = date(2024, 3, 1)
    canonical = record_factory("S1", day, general_notes="canonical")
    stale = legacy("S1", day, general_notes="stale")

    out = migrate_loaded([stale, canonical])

    assert [r.general_notes for r in out] == ["canonical"]


def test_migrate_loaded_keeps_newest_of_duplicate_legacy_copies(legacy):
    from dataclasses import replace

    day = date(2024, 3, 1)
    older = legacy("S1", day, suffix="a", general_notes="older")
    newer = replace(legacy("S1", day, suffix="b", general_notes="newer"), last_modified_at=datetime(2024, 3, 1, 15, 0))

    out = migrate_loaded([older, newer, legacy("S2", day, suffix="c")])

    assert [(r.record_id, r.general_notes) for r in out] == [
        ("registro_20240301_S1", "newer"),
        ("registro_20240301_S2", ""),
    ]
