"""
Domain models for booking configuration.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import FrozenSet, List, Tuple

from .time_of_day import parse_time_of_day, to_minutes


class Weekday(str, Enum):
    """Day of the week, keyed the way booking documents store it."""
    MONDAY = "mon"
    TUESDAY = "tue"
    WEDNESDAY = "wed"
    THURSDAY = "thu"
    FRIDAY = "fri"
    SATURDAY = "sat"
    SUNDAY = "sun"

    @classmethod
    def parse(cls, value) -> "Weekday | None":
        """Parse "mon" or "monday" (any case). Returns None if unknown."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None

        key = value.strip().lower()
        for day in cls:
            if key in (day.value, day.name.lower()):
                return day
        return None

    @classmethod
    def from_date(cls, day: date) -> "Weekday":
        """Get the weekday a calendar date falls on."""
        return list(cls)[day.weekday()]

    @property
    def position(self) -> int:
        """0=Monday, 6=Sunday."""
        return list(Weekday).index(self)


ALL_WEEKDAYS: FrozenSet[Weekday] = frozenset(Weekday)


def sort_weekdays(days) -> List[Weekday]:
    """Return weekdays in calendar order, Monday first."""
    return sorted(days, key=lambda d: d.position)


@dataclass(frozen=True)
class TimeInterval:
    """
    A time-of-day interval such as 09:00-10:00.

    Invariant for stored intervals: end must be after start (no overnight
    wraparound). An interval may be built invalid while it is being edited;
    slot normalization drops it.
    """
    start: str
    end: str

    @property
    def is_valid(self) -> bool:
        """Check both ends are well-formed and end is after start."""
        start = parse_time_of_day(self.start)
        end = parse_time_of_day(self.end)
        if start is None or end is None:
            return False
        return to_minutes(end) > to_minutes(start)

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return to_minutes(self.end) - to_minutes(self.start)

    def key(self) -> str:
        """Format as "HH:MM-HH:MM", the form used in booked-count keys."""
        return f"{self.start}-{self.end}"

    @classmethod
    def parse(cls, value: str) -> "TimeInterval | None":
        """Parse "HH:MM-HH:MM". Returns None if either end is malformed."""
        if not isinstance(value, str) or "-" not in value:
            return None

        start, _, end = value.partition("-")
        start = parse_time_of_day(start)
        end = parse_time_of_day(end)
        if start is None or end is None:
            return None

        return cls(start=start, end=end)

    def __str__(self) -> str:
        return f"{self.start} – {self.end}"


@dataclass(frozen=True)
class WeekdayGroup:
    """
    A bundle of weekdays sharing one slot list.

    Across the groups of one configuration the day sets are disjoint.
    """
    days: FrozenSet[Weekday] = frozenset()
    slots: Tuple[TimeInterval, ...] = ()

    def sorted_days(self) -> List[Weekday]:
        return sort_weekdays(self.days)


class BufferUnit(str, Enum):
    DAYS = "days"
    HOURS = "hours"


@dataclass(frozen=True)
class BufferPeriod:
    """Lead time added to "now" before the earliest bookable moment."""
    amount: int = 0
    unit: BufferUnit = BufferUnit.DAYS


@dataclass(frozen=True)
class AvailabilityWindow:
    """How far ahead bookings are offered, net of the buffer."""
    max_days_ahead: int = 365
    buffer: BufferPeriod = field(default_factory=BufferPeriod)


@dataclass(frozen=True)
class QuantityPolicy:
    """
    Capacity per unit.

    The unit is a slot for timeslot bookings and a day for whole-day bookings.
    """
    enabled: bool = False
    per_unit: int = 1


class BookingKind(str, Enum):
    TIMESLOTS = "timeslots"
    DAYS = "days"


class BookingMode(str, Enum):
    SINGLE_DAY = "single_day"
    DATE_RANGE = "date_range"


class CountMode(str, Enum):
    """How the length of a date range is counted."""
    NIGHTS = "nights"
    DAYS = "days"


@dataclass(frozen=True)
class DateRangePolicy:
    """
    Optional min/max range length for date-range bookings.

    The stored limits are only clamped to >= 0 when edited; use
    ``effective_limits`` when enforcing them.
    """
    custom_limits_enabled: bool = False
    min_length_days: int = 1
    max_length_days: int = 30

    def effective_limits(self) -> Tuple[int, int]:
        """Return (min, max) with min >= 1 and max >= min."""
        minimum = max(1, self.min_length_days)
        maximum = max(minimum, self.max_length_days)
        return minimum, maximum


@dataclass(frozen=True)
class BookingConfiguration:
    """
    Root aggregate for a bookable product.

    Fields that do not apply to the current kind or mode are kept as they
    are, so switching back restores them.
    """
    kind: BookingKind = BookingKind.TIMESLOTS
    availability: AvailabilityWindow = field(default_factory=AvailabilityWindow)
    quantity: QuantityPolicy = field(default_factory=QuantityPolicy)
    groups: Tuple[WeekdayGroup, ...] = ()
    excluded_dates: FrozenSet[date] = frozenset()
    excluded_dates_enabled: bool = False
    excluded_weekdays: FrozenSet[Weekday] = frozenset()
    booking_mode: BookingMode = BookingMode.SINGLE_DAY
    count_mode: CountMode = CountMode.NIGHTS
    date_range: DateRangePolicy = field(default_factory=DateRangePolicy)

    @property
    def is_timeslots(self) -> bool:
        return self.kind == BookingKind.TIMESLOTS

    @property
    def is_date_range(self) -> bool:
        return self.kind == BookingKind.DAYS and self.booking_mode == BookingMode.DATE_RANGE
