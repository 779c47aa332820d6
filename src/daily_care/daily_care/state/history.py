"""Snapshot of the guardian/staff history screen and its reducer.

This is the snapshot API for clients showing a student's history: they feed
the history and review route responses into apply(). The server keeps no
screen state of its own.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Optional, Union

from ..core.exceptions import DomainError
from ..records.model import DailyRecord
from .messages import ErrorMessage, error_message


@dataclass(frozen=True)
class HistoryState:
    student_id: str = ""
    records: tuple[DailyRecord, ...] = ()
    start: Optional[date] = None
    end: Optional[date] = None
    loading: bool = True
    error: Optional[ErrorMessage] = None


@dataclass(frozen=True)
class HistoryRequested:
    student_id: str
    start: Optional[date] = None
    end: Optional[date] = None


@dataclass(frozen=True)
class HistoryLoaded:
    records: tuple[DailyRecord, ...]


@dataclass(frozen=True)
class RecordReviewed:
    record: DailyRecord


@dataclass(frozen=True)
class ErrorRaised:
    error: DomainError
    now: datetime


@dataclass(frozen=True)
class ErrorDismissed:
    pass


HistoryEvent = Union[HistoryRequested, HistoryLoaded, RecordReviewed, ErrorRaised, ErrorDismissed]


def apply(state: HistoryState, event: HistoryEvent) -> HistoryState:
    if isinstance(event, HistoryRequested):
        return HistoryState(student_id=event.student_id, start=event.start, end=event.end, loading=True)

    if isinstance(event, HistoryLoaded):
        return replace(state, records=tuple(event.records), loading=False, error=None)

    if isinstance(event, RecordReviewed):
        records = tuple(event.record if r.record_id == event.record.record_id else r for r in state.records)
        return replace(state, records=records)

    if isinstance(event, ErrorRaised):
        return replace(state, loading=False, error=error_message(event.error, now=event.now))

    if isinstance(event, ErrorDismissed):
        return replace(state, error=None)

    raise TypeError(f"Unsupported history event: {event!r}")
