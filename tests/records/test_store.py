from dataclasses import replace
from datetime import date, datetime

from daily_care.core.enums import MealState
from daily_care.core.exceptions import NotFoundError, StoreError, ValidationError
from daily_care.records.identity import derive_id
from daily_care.records.model import Meals

DAY = date(2024, 3, 1)


def test_get_or_create_twice_returns_same_record_without_second_write(store, records_repo):
    first = store.get_or_create(DAY, "S1", "C1", "T1").unwrap()
    second = store.get_or_create(datetime(2024, 3, 1, 17, 45), "S1", "C1", "T2").unwrap()

    assert first.record_id == second.record_id == "registro_20240301_S1"
    assert second.created_by_staff_id == "T1"
    assert records_repo.writes == 1


def test_new_record_has_defaults(store, fixed_now):
    record = store.get_or_create(DAY, "S1", "C1", "T1").unwrap()

    assert record.meals == Meals()
    assert record.bowel_count == 0
    assert record.deleted is False
    assert record.reviewed_by_guardian is False
    assert record.last_modified_at == fixed_now


def test_get_or_create_rejects_missing_ids(store, records_repo):
    res = store.get_or_create(DAY, "S1", "", "T1")

    assert not res.ok
    assert isinstance(res.error, ValidationError)
    assert records_repo.writes == 0


def test_get_or_create_returns_err_on_store_failure(store, records_repo):
    records_repo.fail_for_students.add("S1")

    res = store.get_or_create(DAY, "S1", "C1", "T1")

    assert isinstance(res.error, StoreError)
    assert store.exists(DAY, "S1") is False


def test_update_persists_and_stamps_modification(store, clock, history):
    record = store.get_or_create(DAY, "S1", "C1", "T1").unwrap()
    later = clock.advance(hours=3)

    updated = store.update(replace(record, meals=replace(record.meals, first_course=MealState.COMPLETE)), staff_id="T2").unwrap()

    assert updated.last_modified_at == later
    assert updated.last_modified_by_staff_id == "T2"
    assert updated.created_by_staff_id == "T1"

    latest = history.most_recent("S1", 1).unwrap()
    assert len(latest) == 1
    assert latest[0].record_id == derive_id(DAY, "S1")
    assert latest[0].meals.first_course is MealState.COMPLETE


def test_update_normalizes_meal_words(store):
    record = store.get_or_create(DAY, "S1", "C1", "T1").unwrap()

    updated = store.update(replace(record, meals=Meals(first_course="bueno", snack="nada"))).unwrap()

    assert updated.meals.first_course is MealState.COMPLETE
    assert updated.meals.snack is MealState.REFUSED


def test_update_never_rederives_id(store):
    record = store.get_or_create(DAY, "S1", "C1", "T1").unwrap()

    res = store.update(replace(record, day=date(2024, 3, 2)))

    assert isinstance(res.error, ValidationError)
    assert store.get_for(DAY, "S1").unwrap().day == DAY


def test_update_rejects_negative_bowel_count(store):
    record = store.get_or_create(DAY, "S1", "C1", "T1").unwrap()

    assert isinstance(store.update(replace(record, bowel_count=-1)).error, ValidationError)


def test_update_of_missing_record_is_not_found(store, record_factory):
    res = store.update(record_factory("S9", DAY))

    assert isinstance(res.error, NotFoundError)


def test_update_keeps_guardian_review(store, reviews):
    record = store.get_or_create(DAY, "S1", "C1", "T1").unwrap()
    reviews.mark_reviewed(record.record_id, "thanks").unwrap()

    # staff edits a snapshot taken before the review
    updated = store.update(replace(record, general_notes="played outside")).unwrap()

    assert updated.reviewed_by_guardian is True
    assert updated.guardian_comment == "thanks"
    assert updated.general_notes == "played outside"


def test_soft_delete_hides_record_but_keeps_identity(store, history):
    store.get_or_create(DAY, "S1", "C1", "T1").unwrap()

    assert store.soft_delete(DAY, "S1", staff_id="T2").unwrap() is True

    assert store.exists(DAY, "S1") is False
    assert history.most_recent("S1").unwrap() == []
    assert isinstance(store.get_for(DAY, "S1").error, NotFoundError)
    assert derive_id(DAY, "S1") == "registro_20240301_S1"


def test_soft_delete_without_record_reports_false(store):
    assert store.soft_delete(DAY, "S1").unwrap() is False


def test_get_or_create_after_delete_recreates_with_defaults(store, reviews, records_repo):
    record = store.get_or_create(DAY, "S1", "C1", "T1").unwrap()
    store.update(replace(record, general_notes="first try")).unwrap()
    reviews.mark_reviewed(record.record_id).unwrap()
    store.soft_delete(DAY, "S1").unwrap()

    again = store.get_or_create(DAY, "S1", "C1", "T3").unwrap()

    assert again.record_id == record.record_id
    assert again.deleted is False
    assert again.general_notes == ""
    assert again.created_by_staff_id == "T3"
    assert again.reviewed_by_guardian is True
    assert records_repo.get_by_id(record.record_id).deleted is False


def test_legacy_record_is_adopted_without_write(store, records_repo, legacy):
    records_repo.put(legacy("S1", DAY, meals=Meals(first_course="good")))

    assert store.exists(DAY, "S1") is True
    record = store.get_or_create(DAY, "S1", "C1", "T1").unwrap()

    assert record.record_id == "registro_20240301_S1"
    assert record.meals.first_course is MealState.COMPLETE
    assert records_repo.writes == 0


def test_update_of_adopted_legacy_record_writes_canonical_row(store, records_repo, legacy):
    records_repo.put(legacy("S1", DAY))
    adopted = store.get_for(DAY, "S1").unwrap()

    store.update(replace(adopted, general_notes="migrated")).unwrap()

    assert records_repo.get_by_id("registro_20240301_S1").general_notes == "migrated"
    assert store.get("local_abc").unwrap().general_notes == "migrated"


def test_deleted_canonical_row_supersedes_legacy_copy(store, records_repo, record_factory, legacy):
    records_repo.put(record_factory("S1", DAY, deleted=True))
    records_repo.put(legacy("S1", DAY))

    assert store.exists(DAY, "S1") is False
    assert isinstance(store.get_for(DAY, "S1").error, NotFoundError)


def test_soft_delete_of_legacy_record(store, records_repo, legacy):
    records_repo.put(legacy("S1", DAY))

    assert store.soft_delete(DAY, "S1").unwrap() is True
    assert store.exists(DAY, "S1") is False


def test_student_ids_with_record(store, records_repo, legacy):
    store.get_or_create(DAY, "S1", "C1", "T1").unwrap()
    store.get_or_create(DAY, "S2", "C1", "T1").unwrap()
    store.soft_delete(DAY, "S2").unwrap()
    records_repo.put(legacy("S3", DAY))
    store.get_or_create(DAY, "S4", "C2", "T1").unwrap()

    assert store.student_ids_with_record(class_id="C1", day=DAY) == {"S1", "S3"}


def test_create_if_missing_reports_whether_it_wrote(store, records_repo, record_factory):
    assert store.create_if_missing(DAY, "S1", "C1", "T1").unwrap() is True
    assert store.create_if_missing(DAY, "S1", "C1", "T1").unwrap() is False

    records_repo.concurrent_inserts["registro_20240301_S2"] = record_factory("S2", DAY, general_notes="other tablet")
    assert store.create_if_missing(DAY, "S2", "C1", "T1").unwrap() is False
    assert store.get_for(DAY, "S2").unwrap().general_notes == "other tablet"
