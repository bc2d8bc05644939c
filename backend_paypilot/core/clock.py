"""
Time source for the engine.

Everything that compares instants (trust recovery, override timestamps) reads
the current time from an injected Clock so tests can pin and advance it.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone


class Clock(ABC):
    """Supplies the current instant as a timezone-aware UTC datetime."""

    @abstractmethod
    def now(self) -> datetime:
        ...


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """Clock pinned to a given instant; advance() moves it forward."""

    def __init__(self, start: datetime | None = None) -> None:
        start = start or datetime(2024, 1, 1, tzinfo=timezone.utc)
        if start.tzinfo is None:
            start = start.replace(tzinfo=timezone.utc)
        self._now = start
        self._lock = threading.Lock()

    def now(self) -> datetime:
        with self._lock:
            return self._now

    def set(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        with self._lock:
            self._now = instant

    def advance(self, **kwargs: float) -> datetime:
        """Move forward by timedelta(**kwargs) and return the new instant."""
        with self._lock:
            self._now = self._now + timedelta(**kwargs)
            return self._now
