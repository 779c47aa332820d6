"""Snapshot of the class/day selection screen and its reducer.

This is the snapshot API for clients driving the selection screen: the HTTP
routes stay stateless and a client folds their responses (roster, records
already made, batch outcome) into a SelectionState through apply().
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Optional, Union

from ..attendance.model import RosterEntry
from ..core.constants import DEFAULT_ERROR_AUTO_CLEAR_SECONDS
from ..core.exceptions import DomainError, ValidationError
from .messages import ErrorMessage, error_message, tick


@dataclass(frozen=True)
class SelectionState:
    class_id: str = ""
    day: Optional[date] = None
    roster: tuple[RosterEntry, ...] = ()
    with_record: frozenset[str] = field(default_factory=frozenset)
    selected: tuple[str, ...] = ()
    only_present: bool = False
    is_holiday: bool = False
    loading: bool = True
    error: Optional[ErrorMessage] = None
    success: Optional[str] = None

    @property
    def visible(self) -> tuple[RosterEntry, ...]:
        if self.only_present:
            return tuple(e for e in self.roster if e.present)
        return self.roster


@dataclass(frozen=True)
class RosterLoaded:
    class_id: str
    day: date
    roster: tuple[RosterEntry, ...]
    with_record: frozenset[str]
    is_holiday: bool = False


@dataclass(frozen=True)
class StudentToggled:
    student_id: str
    now: datetime


@dataclass(frozen=True)
class SelectAll:
    pass


@dataclass(frozen=True)
class ClearSelection:
    pass


@dataclass(frozen=True)
class PresentFilterToggled:
    pass


@dataclass(frozen=True)
class BatchFinished:
    created: int
    skipped: int
    with_record: frozenset[str]
    failed: tuple[str, ...] = ()


@dataclass(frozen=True)
class ErrorRaised:
    error: DomainError
    now: datetime


@dataclass(frozen=True)
class Tick:
    now: datetime


@dataclass(frozen=True)
class ErrorDismissed:
    pass


SelectionEvent = Union[
    RosterLoaded,
    StudentToggled,
    SelectAll,
    ClearSelection,
    PresentFilterToggled,
    BatchFinished,
    ErrorRaised,
    Tick,
    ErrorDismissed,
]


def apply(
    state: SelectionState,
    event: SelectionEvent,
    *,
    auto_clear_seconds: int = DEFAULT_ERROR_AUTO_CLEAR_SECONDS,
) -> SelectionState:
    if isinstance(event, RosterLoaded):
        return replace(
            state,
            class_id=event.class_id,
            day=event.day,
            roster=tuple(event.roster),
            with_record=frozenset(event.with_record),
            selected=tuple(s for s in state.selected if s not in event.with_record),
            is_holiday=event.is_holiday,
            loading=False,
        )

    if isinstance(event, StudentToggled):
        if event.student_id in state.selected:
            return replace(state, selected=tuple(s for s in state.selected if s != event.student_id))
        if event.student_id in state.with_record:
            err = ValidationError("This student already has a record for the selected day")
            return replace(state, error=error_message(err, now=event.now, auto_clear_seconds=auto_clear_seconds))
        return replace(state, selected=state.selected + (event.student_id,))

    if isinstance(event, SelectAll):
        return replace(state, selected=tuple(e.student_id for e in state.visible if e.student_id not in state.with_record))

    if isinstance(event, ClearSelection):
        return replace(state, selected=())

    if isinstance(event, PresentFilterToggled):
        return replace(state, only_present=not state.only_present)

    if isinstance(event, BatchFinished):
        with_record = frozenset(event.with_record)
        success = f"{event.created} record(s) created, {event.skipped} already existed"
        if event.failed:
            success += f", {len(event.failed)} failed"
        return replace(
            state,
            with_record=with_record,
            selected=tuple(s for s in state.selected if s not in with_record),
            success=success,
            loading=False,
        )

    if isinstance(event, ErrorRaised):
        return replace(
            state,
            error=error_message(event.error, now=event.now, auto_clear_seconds=auto_clear_seconds),
            loading=False,
        )

    if isinstance(event, Tick):
        return replace(state, error=tick(state.error, event.now))

    if isinstance(event, ErrorDismissed):
        return replace(state, error=None)

    raise TypeError(f"Unsupported selection event: {event!r}")
