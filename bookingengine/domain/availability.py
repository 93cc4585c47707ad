"""
Availability window and bookable date/slot calculation.

This is where the configuration meets the clock: the effective window is
recomputed from "now" on every evaluation and never cached.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterator, List, Mapping

import pendulum
from pendulum import DateTime

from .allocator import group_for_day
from .exclusions import is_date_excluded
from .models import (
    AvailabilityWindow,
    BookingConfiguration,
    BookingKind,
    BufferUnit,
    QuantityPolicy,
    TimeInterval,
    Weekday,
)
from .slots import normalize_slots
from .time_of_day import to_minutes

BookedCounts = Mapping[str, int]


@dataclass(frozen=True)
class EffectiveWindow:
    """
    The [earliest, latest] instant range in which bookings are accepted.

    Empty when the buffer reaches past the lookahead limit.
    """
    earliest: DateTime
    latest: DateTime

    @property
    def is_empty(self) -> bool:
        return self.earliest > self.latest

    def contains(self, instant: DateTime) -> bool:
        """Check an instant lies inside the window (both ends inclusive)."""
        return self.earliest <= instant <= self.latest

    def contains_date(self, day: date) -> bool:
        """Whole-day check: the date touches the window."""
        return self.earliest.date() <= day <= self.latest.date()

    def dates(self) -> Iterator[date]:
        """Every calendar date the window touches."""
        current = self.earliest.date()
        last = self.latest.date()
        while current <= last:
            yield date(current.year, current.month, current.day)
            current = current + timedelta(days=1)


@dataclass(frozen=True)
class AvailableSlot:
    """A slot that can still be booked on a specific date."""
    date: date
    interval: TimeInterval
    remaining: int | None  # None means unlimited


def effective_window(now: datetime, availability: AvailabilityWindow) -> EffectiveWindow:
    """
    Compute the bookable window relative to ``now``.

    latest   = now + max_days_ahead days
    earliest = now + buffer (days or hours)
    """
    if not isinstance(now, DateTime):
        now = pendulum.instance(now)

    latest = now.add(days=max(0, availability.max_days_ahead))

    amount = max(0, availability.buffer.amount)
    if availability.buffer.unit == BufferUnit.HOURS:
        earliest = now.add(hours=amount)
    else:
        earliest = now.add(days=amount)

    return EffectiveWindow(earliest=earliest, latest=latest)


def day_key(day: date) -> str:
    """Occupancy key for a whole day: "YYYY-MM-DD"."""
    return day.isoformat()


def slot_key(day: date, interval: TimeInterval) -> str:
    """Occupancy key for a slot: "YYYY-MM-DD HH:MM-HH:MM"."""
    return f"{day.isoformat()} {interval.key()}"


def remaining_quantity(policy: QuantityPolicy, booked: int) -> int | None:
    """Places left for one unit, or None when quantity is not limited."""
    if not policy.enabled:
        return None
    return max(0, max(1, policy.per_unit) - max(0, booked))


class AvailabilityCalculator:
    """
    Determines which dates and slots of a configuration can be booked.

    Algorithm:
    1. Restrict to the dates touched by the effective window
    2. Drop excluded dates (and excluded weekdays for whole-day bookings)
    3. For timeslots, take the slots of the group owning the weekday and keep
       those whose start lies inside the window
    4. Drop units whose quantity is used up
    """

    def __init__(self, config: BookingConfiguration):
        self.config = config

    def slot_start(self, day: date, interval: TimeInterval, window: EffectiveWindow) -> DateTime:
        """The instant a slot starts, in the window's timezone."""
        minutes = to_minutes(interval.start)
        return window.earliest.set(
            year=day.year,
            month=day.month,
            day=day.day,
            hour=minutes // 60,
            minute=minutes % 60,
            second=0,
            microsecond=0,
        )

    def slots_for_date(
        self,
        day: date,
        window: EffectiveWindow,
        booked: BookedCounts | None = None,
    ) -> List[AvailableSlot]:
        """Slots still open on ``day``. Empty for whole-day configurations."""
        if self.config.kind != BookingKind.TIMESLOTS:
            return []

        if not window.contains_date(day) or is_date_excluded(self.config, day):
            return []

        owner = group_for_day(self.config.groups, Weekday.from_date(day))
        if owner is None:
            return []

        booked = booked or {}
        available: List[AvailableSlot] = []

        for interval in normalize_slots(self.config.groups[owner].slots):
            if not window.contains(self.slot_start(day, interval, window)):
                continue

            remaining = remaining_quantity(
                self.config.quantity,
                booked.get(slot_key(day, interval), 0),
            )
            if remaining == 0:
                continue

            available.append(AvailableSlot(date=day, interval=interval, remaining=remaining))

        return available

    def remaining_for_day(self, day: date, booked: BookedCounts | None = None) -> int | None:
        booked = booked or {}
        return remaining_quantity(self.config.quantity, booked.get(day_key(day), 0))

    def is_date_bookable(
        self,
        day: date,
        window: EffectiveWindow,
        booked: BookedCounts | None = None,
    ) -> bool:
        """
        Check whether ``day`` can be booked at all.

        For timeslots this means at least one slot is still open.
        """
        if self.config.kind == BookingKind.TIMESLOTS:
            return bool(self.slots_for_date(day, window, booked))

        if not window.contains_date(day) or is_date_excluded(self.config, day):
            return False

        return self.remaining_for_day(day, booked) != 0

    def bookable_dates(
        self,
        window: EffectiveWindow,
        booked: BookedCounts | None = None,
    ) -> List[date]:
        """All dates within the window that can be booked."""
        if window.is_empty:
            return []
        return [day for day in window.dates() if self.is_date_bookable(day, window, booked)]
