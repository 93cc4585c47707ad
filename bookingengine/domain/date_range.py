"""
Whole-day booking mode and range length policy.
"""

from dataclasses import dataclass, replace
from datetime import date
from typing import Any

from .models import BookingConfiguration, BookingMode, CountMode, DateRangePolicy


@dataclass(frozen=True)
class RangeCheck:
    """Outcome of checking a range length against a policy."""
    valid: bool
    length: int
    min_length: int | None = None
    max_length: int | None = None

    @property
    def too_short(self) -> bool:
        return self.min_length is not None and self.length < self.min_length

    @property
    def too_long(self) -> bool:
        return self.max_length is not None and self.length > self.max_length


def clamp_non_negative(value: Any) -> int:
    """Coerce form input to an int >= 0; unparsable input becomes 0."""
    try:
        number = int(value)
    except (TypeError, ValueError):
        return 0
    return max(0, number)


def set_booking_mode(config: BookingConfiguration, mode: BookingMode) -> BookingConfiguration:
    """Switch between single day and date range. Range settings are kept."""
    return replace(config, booking_mode=mode)


def set_count_mode(config: BookingConfiguration, mode: CountMode) -> BookingConfiguration:
    return replace(config, count_mode=mode)


def set_custom_limits(config: BookingConfiguration, enabled: bool) -> BookingConfiguration:
    """Turn custom range limits on or off. The limits themselves are kept."""
    return replace(
        config,
        date_range=replace(config.date_range, custom_limits_enabled=enabled),
    )


def set_range_limits(
    config: BookingConfiguration,
    min_length: Any,
    max_length: Any,
) -> BookingConfiguration:
    """
    Store the two range-length inputs, each clamped to >= 0.

    No cross-field validation here: ``DateRangePolicy.effective_limits``
    applies min >= 1 and max >= min when the limits are used.
    """
    return replace(
        config,
        date_range=replace(
            config.date_range,
            min_length_days=clamp_non_negative(min_length),
            max_length_days=clamp_non_negative(max_length),
        ),
    )


def range_length(start: date, end: date, count_mode: CountMode) -> int:
    """
    Length of a date range.

    Nights count the stays between check-in and check-out, days count both
    ends inclusively.
    """
    nights = (end - start).days
    if count_mode == CountMode.NIGHTS:
        return nights
    return nights + 1


def check_range_length(policy: DateRangePolicy, length: int) -> RangeCheck:
    """Validate a range length. Always valid while custom limits are off."""
    if not policy.custom_limits_enabled:
        return RangeCheck(valid=True, length=length)

    minimum, maximum = policy.effective_limits()
    return RangeCheck(
        valid=minimum <= length <= maximum,
        length=length,
        min_length=minimum,
        max_length=maximum,
    )
