from datetime import date, time

import pytest

from daily_care.core.enums import MealState
from daily_care.records.model import Meals
from daily_care.records.normalizer import normalize, normalize_record


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("good", MealState.COMPLETE),
        ("BAD", MealState.REFUSED),
        (" fair ", MealState.PARTIAL),
        ("COMPLETO", MealState.COMPLETE),
        ("parcial", MealState.PARTIAL),
        ("Rechazado", MealState.REFUSED),
        ("no_aplicable", MealState.NOT_APPLICABLE),
        ("NO_DATA", MealState.NO_DATA),
        ("xyz-unknown", MealState.NOT_SERVED),
        ("", MealState.NOT_SERVED),
        (None, MealState.NOT_SERVED),
    ],
)
def test_normalize_maps_vocabulary(raw, expected):
    assert normalize(raw) is expected


def test_normalize_is_idempotent():
    for raw in ("good", "medio", "nada", "whatever"):
        once = normalize(raw)
        assert normalize(once) is once
        assert normalize(once.value) is once


def test_unknown_value_is_logged(caplog):
    normalize("xyz-unknown")
    assert "xyz-unknown" in caplog.text


def test_normalize_record_cleans_meals_and_nap_times(record_factory):
    raw = record_factory(
        "S1",
        date(2024, 3, 1),
        meals=Meals(first_course="bien", second_course="mal", dessert="REGULAR", snack="???"),
        nap_start="13:5",
        nap_end="not a time",
    )

    clean = normalize_record(raw)

    assert clean.meals == Meals(
        first_course=MealState.COMPLETE,
        second_course=MealState.REFUSED,
        dessert=MealState.PARTIAL,
        snack=MealState.NOT_SERVED,
    )
    assert clean.nap_start == time(13, 5)
    assert clean.nap_end is None
