"""
Clock -- injectable time source.

Every timestamp the desk writes (``last_updated``, history ``changed_at``,
comment and reply timestamps, token ``iat``/``exp``) and every debounce
decision reads the time from a Clock passed in by the caller.  Only
SystemClock touches the wall clock.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone


class Clock(ABC):
    """Source of timezone-aware UTC ``datetime`` values."""

    @abstractmethod
    def now(self) -> datetime:
        ...


class SystemClock(Clock):

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Manually driven clock for tests and demos.

    Time stands still until ``advance()`` moves it forward, so debounce
    windows and token expiry can be stepped through exactly.
    """

    def __init__(self, start: datetime | None = None):
        start = start or datetime(2025, 1, 15, 9, 0, tzinfo=timezone.utc)
        if start.tzinfo is None:
            raise ValueError("DeterministicClock needs a timezone-aware start time")
        self._now = start.astimezone(timezone.utc)

    def now(self) -> datetime:
        return self._now

    def advance(self, seconds: float = 1.0) -> datetime:
        """Move forward by ``seconds`` (fractions allowed) and return the new time."""
        self._now += timedelta(seconds=seconds)
        return self._now
