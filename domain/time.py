"""
Domain time utilities.

Centralized timestamp validation and the injectable clock used by the sale.

Contract excerpts implemented here:
- All sale timestamps are timezone-aware UTC datetimes.
- The current time is a capability handed to the sale runtime, never read
  implicitly by domain code, so tests can move a sale across its deadline
  deterministically.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone


def require_utc_timestamp(name: str, value: datetime) -> None:
    """
    Enforces the contract requirement that timestamps are UTC.

    Invariants:
    - Timestamps must be timezone-aware.
    - Timestamps must have UTC offset 0.
    """

    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError(f"{name} must be timezone-aware (UTC)")
    if value.utcoffset() != timedelta(0):
        raise ValueError(f"{name} must be a UTC timestamp (offset 0)")


class Clock(ABC):
    """Source of the current logical time."""

    @abstractmethod
    def now(self) -> datetime:
        raise NotImplementedError


class SystemClock(Clock):
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """
    Manually driven clock.

    Time only moves when `set` or `advance` is called.
    """

    def __init__(self, current: datetime) -> None:
        require_utc_timestamp("current", current)
        self._current = current

    def now(self) -> datetime:
        return self._current

    def set(self, current: datetime) -> None:
        require_utc_timestamp("current", current)
        self._current = current

    def advance(self, **delta: float) -> datetime:
        """Move forward by a timedelta given as keyword arguments (e.g. minutes=5)."""

        step = timedelta(**delta)
        if step < timedelta(0):
            raise ValueError("FixedClock cannot move backwards")
        self._current = self._current + step
        return self._current
