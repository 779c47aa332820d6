"""Mapping of stored meal outcomes to the canonical MealState.

This module owns the only vocabulary table; nothing else maps raw words to
meal states.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from ..common.datetime_utils import parse_clock
from ..core.enums import MealState
from .model import DailyRecord, Meals

logger = logging.getLogger(__name__)

_VOCABULARY: dict[str, MealState] = {
    # canonical names
    **{state.value: state for state in MealState},
    # names written by the Spanish client
    "COMPLETO": MealState.COMPLETE,
    "PARCIAL": MealState.PARTIAL,
    "RECHAZADO": MealState.REFUSED,
    "NO_SERVIDO": MealState.NOT_SERVED,
    "SIN_DATOS": MealState.NO_DATA,
    "NO_APLICABLE": MealState.NOT_APPLICABLE,
    # casual terms
    "GOOD": MealState.COMPLETE,
    "WELL": MealState.COMPLETE,
    "BIEN": MealState.COMPLETE,
    "BUENO": MealState.COMPLETE,
    "FAIR": MealState.PARTIAL,
    "MEDIUM": MealState.PARTIAL,
    "REGULAR": MealState.PARTIAL,
    "MEDIO": MealState.PARTIAL,
    "BAD": MealState.REFUSED,
    "NONE": MealState.REFUSED,
    "MAL": MealState.REFUSED,
    "NADA": MealState.REFUSED,
}

FALLBACK_STATE = MealState.NOT_SERVED


def normalize(raw: Any) -> MealState:
    """Map a raw stored value to a MealState. Never raises.

    Unknown values fall back to NOT_SERVED; non-empty ones are logged so the
    data can be cleaned up later.
    """

    if isinstance(raw, MealState):
        return raw
    key = str(raw).strip().upper() if raw is not None else ""
    state = _VOCABULARY.get(key)
    if state is not None:
        return state
    if key:
        logger.warning("Unrecognized meal state %r, using %s", raw, FALLBACK_STATE.value)
    return FALLBACK_STATE


def normalize_meals(meals: Meals) -> Meals:
    return Meals(**{slot: normalize(value) for slot, value in meals.as_dict().items()})


def normalize_record(record: DailyRecord) -> DailyRecord:
    """Normalize meal states and nap times of a loaded record."""

    return replace(
        record,
        meals=normalize_meals(record.meals),
        nap_start=parse_clock(record.nap_start),
        nap_end=parse_clock(record.nap_end),
    )
