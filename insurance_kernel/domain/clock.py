"""
Injectable time source for contracts, payments and reconciliation.

Contract numbers (``CTR-yyyyMMdd-...``), ``created_at``/``updated_at``
stamps and every reconciliation threshold (overdue, unpaid, renewal window)
are derived from a Clock handed to the service or checker, never from
``datetime.now()`` directly. A run can therefore be replayed against a fixed
instant.

Invariants:
    - ``now_utc()`` is timezone-aware and in UTC.
    - ``today()`` is the UTC calendar date of ``now_utc()``; contract dates
      are compared against it, not against local time.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, time, timedelta, timezone


class Clock(ABC):

    @abstractmethod
    def now_utc(self) -> datetime:
        ...

    def today(self) -> date:
        return self.now_utc().date()


class SystemClock(Clock):
    """Wall-clock time. The only place the kernel reads the system time."""

    def now_utc(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Clock pinned to one instant until a test moves it.

    A naive ``at`` is rejected rather than guessed; an aware one in another
    zone is converted to UTC, which can move ``today()`` across midnight.
    """

    DEFAULT_INSTANT = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __init__(self, at: datetime | None = None):
        at = at or self.DEFAULT_INSTANT
        if at.tzinfo is None:
            raise ValueError(f"DeterministicClock needs a timezone-aware instant, got {at!r}")
        self._at = at.astimezone(timezone.utc)

    @classmethod
    def on(cls, day: date) -> "DeterministicClock":
        """Noon UTC on ``day``, clear of any midnight rollover."""
        return cls(datetime.combine(day, time(12, 0), tzinfo=timezone.utc))

    def now_utc(self) -> datetime:
        return self._at

    def advance(self, seconds: int = 1) -> None:
        self._at += timedelta(seconds=seconds)

    def advance_days(self, days: int) -> None:
        self._at += timedelta(days=days)


def utc_now(clock: Clock | None = None) -> datetime:
    """Current UTC time from ``clock``, or from the system clock when omitted."""
    return (clock or SystemClock()).now_utc()
