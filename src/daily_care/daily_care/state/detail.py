"""Snapshot of the record detail screen and its reducer."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Mapping, Optional, Union

from ..core.constants import DEFAULT_ERROR_AUTO_CLEAR_SECONDS
from ..core.exceptions import DomainError, ValidationError
from ..records.model import DailyRecord
from .messages import ErrorMessage, error_message, tick

# Guardian review fields and identity are not editable from this screen.
LOCKED_FIELDS = frozenset(
    {
        "record_id",
        "student_id",
        "day",
        "created_by_staff_id",
        "deleted",
        "reviewed_by_guardian",
        "reviewed_at",
        "guardian_comment",
    }
)


@dataclass(frozen=True)
class DetailState:
    record: Optional[DailyRecord] = None
    dirty: bool = False
    loading: bool = True
    saving: bool = False
    error: Optional[ErrorMessage] = None


@dataclass(frozen=True)
class RecordLoaded:
    record: DailyRecord


@dataclass(frozen=True)
class FieldsEdited:
    changes: Mapping[str, Any]
    now: datetime


@dataclass(frozen=True)
class SaveStarted:
    pass


@dataclass(frozen=True)
class SaveSucceeded:
    record: DailyRecord


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


DetailEvent = Union[RecordLoaded, FieldsEdited, SaveStarted, SaveSucceeded, ErrorRaised, Tick, ErrorDismissed]


def apply(
    state: DetailState,
    event: DetailEvent,
    *,
    auto_clear_seconds: int = DEFAULT_ERROR_AUTO_CLEAR_SECONDS,
) -> DetailState:
    if isinstance(event, RecordLoaded):
        return replace(state, record=event.record, dirty=False, loading=False, error=None)

    if isinstance(event, FieldsEdited):
        locked = LOCKED_FIELDS.intersection(event.changes)
        if state.record is None or locked:
            err = ValidationError(
                f"Fields cannot be edited here: {', '.join(sorted(locked))}" if locked else "No record loaded"
            )
            return replace(state, error=error_message(err, now=event.now, auto_clear_seconds=auto_clear_seconds))
        try:
            record = replace(state.record, **dict(event.changes))
        except TypeError as exc:
            err = ValidationError(f"Unknown field: {exc}")
            return replace(state, error=error_message(err, now=event.now, auto_clear_seconds=auto_clear_seconds))
        return replace(state, record=record, dirty=True)

    if isinstance(event, SaveStarted):
        return replace(state, saving=True)

    if isinstance(event, SaveSucceeded):
        return replace(state, record=event.record, dirty=False, saving=False, error=None)

    if isinstance(event, ErrorRaised):
        return replace(
            state,
            loading=False,
            saving=False,
            error=error_message(event.error, now=event.now, auto_clear_seconds=auto_clear_seconds),
        )

    if isinstance(event, Tick):
        return replace(state, error=tick(state.error, event.now))

    if isinstance(event, ErrorDismissed):
        return replace(state, error=None)

    raise TypeError(f"Unsupported detail event: {event!r}")
