from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Optional

from ..core.enums import MealState

MEAL_SLOTS = ("first_course", "second_course", "dessert", "snack")


@dataclass(frozen=True)
class Meals:
    """Outcome of the four meal slots of the day."""

    first_course: MealState = MealState.NOT_SERVED
    second_course: MealState = MealState.NOT_SERVED
    dessert: MealState = MealState.NOT_SERVED
    snack: MealState = MealState.NOT_SERVED

    def as_dict(self) -> dict[str, MealState]:
        return {slot: getattr(self, slot) for slot in MEAL_SLOTS}


@dataclass(frozen=True)
class Supplies:
    """Items the family has to bring in."""

    diapers: bool = False
    wipes: bool = False
    change_of_clothes: bool = False


@dataclass(frozen=True)
class DailyRecord:
    """Domain entity: one care record per student and calendar day.

    Instances are immutable; every change produces a new snapshot through
    dataclasses.replace.
    """

    record_id: str
    student_id: str
    class_id: str
    day: date
    created_by_staff_id: str
    last_modified_by_staff_id: str
    last_modified_at: datetime

    meals: Meals = field(default_factory=Meals)
    meal_notes: str = ""

    nap_taken: bool = False
    nap_start: Optional[time] = None
    nap_end: Optional[time] = None
    nap_notes: str = ""

    bowel_movement: bool = False
    bowel_count: int = 0
    bowel_notes: str = ""

    supplies: Supplies = field(default_factory=Supplies)
    other_supply_note: str = ""

    general_notes: str = ""

    deleted: bool = False

    reviewed_by_guardian: bool = False
    reviewed_at: Optional[datetime] = None
    guardian_comment: str = ""

