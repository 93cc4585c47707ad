"""
Application service deciding whether a proposed reservation is acceptable.

The service combines the booking configuration with the current time and,
optionally, with occupancy data from a ``BookedCountsProvider``. The actual
rules live in the domain layer; this keeps hosts thin and lets occupancy be
stubbed in tests through a simple protocol.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Dict, List, Protocol

import pendulum

from ..domain.allocator import group_for_day
from ..domain.availability import (
    AvailabilityCalculator,
    BookedCounts,
    EffectiveWindow,
    effective_window,
)
from ..domain.date_range import check_range_length, range_length
from ..domain.exceptions import BookingRejectedError
from ..domain.exclusions import is_date_listed, is_weekday_excluded
from ..domain.models import (
    BookingConfiguration,
    BookingKind,
    BookingMode,
    CountMode,
    TimeInterval,
    Weekday,
)
from ..domain.slots import normalize_slots

logger = logging.getLogger(__name__)


class RejectionReason(str, Enum):
    WRONG_KIND = "wrong_kind"
    WRONG_MODE = "wrong_mode"
    OUTSIDE_WINDOW = "outside_window"
    DATE_EXCLUDED = "date_excluded"
    WEEKDAY_EXCLUDED = "weekday_excluded"
    NO_SCHEDULE = "no_schedule"
    SLOT_NOT_OFFERED = "slot_not_offered"
    SOLD_OUT = "sold_out"
    INVALID_RANGE = "invalid_range"
    RANGE_TOO_SHORT = "range_too_short"
    RANGE_TOO_LONG = "range_too_long"


@dataclass(frozen=True)
class AcceptanceResult:
    """Outcome of an acceptance check."""
    accepted: bool
    reason: RejectionReason | None = None
    detail: str = ""

    @classmethod
    def ok(cls) -> "AcceptanceResult":
        return cls(accepted=True)

    @classmethod
    def reject(cls, reason: RejectionReason, detail: str = "") -> "AcceptanceResult":
        return cls(accepted=False, reason=reason, detail=detail)

    def __bool__(self) -> bool:
        return self.accepted


class BookedCountsProvider(Protocol):
    """Protocol describing where existing bookings are counted."""

    def get_booked_counts(self, start: date, end: date) -> Dict[str, int]:
        """Return occupancy per slot/day key between two dates (inclusive)."""


class BookingAcceptanceService:
    """
    Validates proposed reservations against a booking configuration.

    The availability window is recomputed from "now" on every call.
    """

    def __init__(
        self,
        config: BookingConfiguration,
        booked_counts_provider: BookedCountsProvider | None = None,
        timezone: str = "Europe/Berlin",
    ) -> None:
        self._config = config
        self._calculator = AvailabilityCalculator(config)
        self._booked_counts_provider = booked_counts_provider
        self._timezone = timezone

    @property
    def config(self) -> BookingConfiguration:
        return self._config

    def window(self, now: datetime | None = None) -> EffectiveWindow:
        """Effective window for ``now`` (defaults to the current time)."""
        if now is None:
            now = pendulum.now(self._timezone)
        return effective_window(now, self._config.availability)

    def _booked(self, start: date, end: date) -> BookedCounts:
        if self._booked_counts_provider is None:
            return {}
        return self._booked_counts_provider.get_booked_counts(start, end)

    def _date_rejection(self, day: date) -> AcceptanceResult | None:
        """Exclusion checks shared by all whole-day modes."""
        if is_date_listed(self._config, day):
            return AcceptanceResult.reject(RejectionReason.DATE_EXCLUDED, day.isoformat())

        if is_weekday_excluded(self._config, day):
            return AcceptanceResult.reject(RejectionReason.WEEKDAY_EXCLUDED, day.isoformat())

        return None

    def check_timeslot(
        self,
        day: date,
        interval: TimeInterval,
        now: datetime | None = None,
    ) -> AcceptanceResult:
        """Check a slot booking on ``day``."""
        if self._config.kind != BookingKind.TIMESLOTS:
            return AcceptanceResult.reject(RejectionReason.WRONG_KIND)

        canonical = normalize_slots((interval,))
        if not canonical:
            return AcceptanceResult.reject(
                RejectionReason.SLOT_NOT_OFFERED,
                f"{interval.start}-{interval.end}",
            )
        interval = canonical[0]

        window = self.window(now)
        if not window.contains(self._calculator.slot_start(day, interval, window)):
            return AcceptanceResult.reject(RejectionReason.OUTSIDE_WINDOW, f"{day} {interval.key()}")

        if is_date_listed(self._config, day):
            return AcceptanceResult.reject(RejectionReason.DATE_EXCLUDED, day.isoformat())

        if group_for_day(self._config.groups, Weekday.from_date(day)) is None:
            return AcceptanceResult.reject(RejectionReason.NO_SCHEDULE, Weekday.from_date(day).value)

        offered = self._calculator.slots_for_date(day, window)
        if not any(slot.interval == interval for slot in offered):
            return AcceptanceResult.reject(RejectionReason.SLOT_NOT_OFFERED, interval.key())

        open_slots = self._calculator.slots_for_date(day, window, self._booked(day, day))
        if not any(slot.interval == interval for slot in open_slots):
            return AcceptanceResult.reject(RejectionReason.SOLD_OUT, interval.key())

        return AcceptanceResult.ok()

    def check_single_day(self, day: date, now: datetime | None = None) -> AcceptanceResult:
        """Check a whole-day booking in single-day mode."""
        if self._config.kind != BookingKind.DAYS:
            return AcceptanceResult.reject(RejectionReason.WRONG_KIND)
        if self._config.booking_mode != BookingMode.SINGLE_DAY:
            return AcceptanceResult.reject(RejectionReason.WRONG_MODE)

        window = self.window(now)
        if not window.contains_date(day):
            return AcceptanceResult.reject(RejectionReason.OUTSIDE_WINDOW, day.isoformat())

        rejection = self._date_rejection(day)
        if rejection is not None:
            return rejection

        if self._calculator.remaining_for_day(day, self._booked(day, day)) == 0:
            return AcceptanceResult.reject(RejectionReason.SOLD_OUT, day.isoformat())

        return AcceptanceResult.ok()

    def check_date_range(
        self,
        start: date,
        end: date,
        now: datetime | None = None,
    ) -> AcceptanceResult:
        """
        Check a whole-day booking in date-range mode.

        Both ends must lie in the window, every counted day (each night from
        check-in, or every day inclusive) must be free of exclusions and
        capacity, and the length must satisfy the custom limits when enabled.
        """
        if self._config.kind != BookingKind.DAYS:
            return AcceptanceResult.reject(RejectionReason.WRONG_KIND)
        if self._config.booking_mode != BookingMode.DATE_RANGE:
            return AcceptanceResult.reject(RejectionReason.WRONG_MODE)

        count_mode = self._config.count_mode
        if end < start or (count_mode == CountMode.NIGHTS and end == start):
            return AcceptanceResult.reject(RejectionReason.INVALID_RANGE, f"{start} - {end}")

        window = self.window(now)
        if not (window.contains_date(start) and window.contains_date(end)):
            return AcceptanceResult.reject(RejectionReason.OUTSIDE_WINDOW, f"{start} - {end}")

        length = range_length(start, end, count_mode)
        check = check_range_length(self._config.date_range, length)
        if check.too_short:
            return AcceptanceResult.reject(
                RejectionReason.RANGE_TOO_SHORT,
                f"{length} < {check.min_length}",
            )
        if check.too_long:
            return AcceptanceResult.reject(
                RejectionReason.RANGE_TOO_LONG,
                f"{length} > {check.max_length}",
            )

        booked = self._booked(start, end)
        for day in self._counted_days(start, end, count_mode):
            rejection = self._date_rejection(day)
            if rejection is not None:
                return rejection
            if self._calculator.remaining_for_day(day, booked) == 0:
                return AcceptanceResult.reject(RejectionReason.SOLD_OUT, day.isoformat())

        return AcceptanceResult.ok()

    @staticmethod
    def _counted_days(start: date, end: date, count_mode: CountMode) -> List[date]:
        days = range_length(start, end, count_mode)
        return [start + timedelta(days=offset) for offset in range(days)]

    def ensure_timeslot(self, day: date, interval: TimeInterval, now: datetime | None = None) -> None:
        self._raise_if_rejected(self.check_timeslot(day, interval, now))

    def ensure_single_day(self, day: date, now: datetime | None = None) -> None:
        self._raise_if_rejected(self.check_single_day(day, now))

    def ensure_date_range(self, start: date, end: date, now: datetime | None = None) -> None:
        self._raise_if_rejected(self.check_date_range(start, end, now))

    @staticmethod
    def _raise_if_rejected(result: AcceptanceResult) -> None:
        if not result.accepted:
            logger.info("Booking rejected: %s %s", result.reason.value, result.detail)
            raise BookingRejectedError(result.reason, result.detail)
