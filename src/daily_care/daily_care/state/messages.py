from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from ..core.constants import DEFAULT_ERROR_AUTO_CLEAR_SECONDS
from ..core.exceptions import DomainError


@dataclass(frozen=True)
class ErrorMessage:
    """Error shown on a screen. Transient ones carry an expiry."""

    text: str
    expires_at: Optional[datetime] = None

    def expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now >= self.expires_at


def error_message(
    error: DomainError,
    *,
    now: datetime,
    auto_clear_seconds: int = DEFAULT_ERROR_AUTO_CLEAR_SECONDS,
) -> ErrorMessage:
    if error.transient:
        return ErrorMessage(text=str(error), expires_at=now + timedelta(seconds=auto_clear_seconds))
    return ErrorMessage(text=str(error))


def tick(current: Optional[ErrorMessage], now: datetime) -> Optional[ErrorMessage]:
    if current is not None and current.expired(now):
        return None
    return current
