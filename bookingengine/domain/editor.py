"""
Edit operations on the booking configuration aggregate.

Each function takes a configuration and returns a complete replacement;
the input is never modified. Raw form values are clamped here rather than
rejected.
"""

import logging
from dataclasses import replace
from datetime import date
from typing import Any, Iterable

from . import allocator, exclusions
from .date_range import clamp_non_negative
from .models import (
    AvailabilityWindow,
    BookingConfiguration,
    BookingKind,
    BufferPeriod,
    BufferUnit,
    QuantityPolicy,
    TimeInterval,
    Weekday,
    WeekdayGroup,
)
from .slots import generate_slots, normalize_slots

logger = logging.getLogger(__name__)


def new_configuration(kind: BookingKind = BookingKind.TIMESLOTS) -> BookingConfiguration:
    """Defaults for a product that was just made bookable."""
    return BookingConfiguration(kind=kind)


def set_kind(config: BookingConfiguration, kind: BookingKind) -> BookingConfiguration:
    return replace(config, kind=kind)


def set_availability(
    config: BookingConfiguration,
    max_days_ahead: Any,
    buffer_amount: Any,
    buffer_unit: BufferUnit | str = BufferUnit.DAYS,
) -> BookingConfiguration:
    """Store lookahead and buffer, clamping negative or unparsable input to 0."""
    try:
        unit = BufferUnit(buffer_unit)
    except ValueError:
        logger.warning("Unknown buffer unit %r, using days", buffer_unit)
        unit = BufferUnit.DAYS

    return replace(
        config,
        availability=AvailabilityWindow(
            max_days_ahead=clamp_non_negative(max_days_ahead),
            buffer=BufferPeriod(amount=clamp_non_negative(buffer_amount), unit=unit),
        ),
    )


def set_quantity(config: BookingConfiguration, enabled: bool, per_unit: Any = 1) -> BookingConfiguration:
    """Store the quantity policy; ``per_unit`` is at least 1."""
    return replace(
        config,
        quantity=QuantityPolicy(enabled=enabled, per_unit=max(1, clamp_non_negative(per_unit))),
    )


# Weekday groups

def add_group(config: BookingConfiguration) -> BookingConfiguration:
    return replace(config, groups=allocator.add_group(config.groups))


def remove_group(config: BookingConfiguration, index: int) -> BookingConfiguration:
    return replace(config, groups=allocator.remove_group(config.groups, index))


def set_group_days(
    config: BookingConfiguration,
    index: int,
    days: Iterable[Weekday],
) -> BookingConfiguration:
    """Replace a group's days; rejected unchanged if another group owns one."""
    return replace(config, groups=allocator.set_days(config.groups, index, days))


def toggle_group_day(config: BookingConfiguration, index: int, day: Weekday) -> BookingConfiguration:
    return replace(config, groups=allocator.toggle_day(config.groups, index, day))


def _with_slots(config: BookingConfiguration, index: int, slots) -> BookingConfiguration:
    if not 0 <= index < len(config.groups):
        logger.warning("No weekday group at index %s", index)
        return config

    group = config.groups[index]
    return replace(
        config,
        groups=allocator.replace_group(
            config.groups, index, WeekdayGroup(days=group.days, slots=tuple(slots))
        ),
    )


def add_slot(config: BookingConfiguration, index: int, interval: TimeInterval) -> BookingConfiguration:
    """Append a slot to a group as entered."""
    if not 0 <= index < len(config.groups):
        logger.warning("No weekday group at index %s", index)
        return config
    return _with_slots(config, index, config.groups[index].slots + (interval,))


def update_slot(
    config: BookingConfiguration,
    index: int,
    slot_index: int,
    interval: TimeInterval,
) -> BookingConfiguration:
    """
    Replace one slot wholesale.

    The new interval is stored even if it is momentarily invalid (the user
    may be half way through editing it); normalization drops it on save.
    """
    if not 0 <= index < len(config.groups):
        logger.warning("No weekday group at index %s", index)
        return config

    slots = list(config.groups[index].slots)
    if not 0 <= slot_index < len(slots):
        logger.warning("No slot at index %s in group %s", slot_index, index)
        return config

    slots[slot_index] = interval
    return _with_slots(config, index, slots)


def remove_slot(config: BookingConfiguration, index: int, slot_index: int) -> BookingConfiguration:
    if not 0 <= index < len(config.groups):
        logger.warning("No weekday group at index %s", index)
        return config

    slots = config.groups[index].slots
    if not 0 <= slot_index < len(slots):
        logger.warning("No slot at index %s in group %s", slot_index, index)
        return config

    return _with_slots(config, index, slots[:slot_index] + slots[slot_index + 1:])


def generate_group_slots(
    config: BookingConfiguration,
    index: int,
    start: str | None,
    end: str | None,
    length_minutes: int,
    gap_minutes: int = 0,
    max_count: int = 50,
    replace_existing: bool = False,
) -> BookingConfiguration:
    """
    Generate slots into a group.

    Generated slots are merged with the existing ones (unless
    ``replace_existing``) and the result is normalized.
    """
    if not 0 <= index < len(config.groups):
        logger.warning("No weekday group at index %s", index)
        return config

    generated = generate_slots(start, end, length_minutes, gap_minutes, max_count)
    existing = () if replace_existing else config.groups[index].slots
    return _with_slots(config, index, normalize_slots(existing + generated))


def normalize_configuration(config: BookingConfiguration) -> BookingConfiguration:
    """Normalize every group's slot list. Used before persisting."""
    return replace(
        config,
        groups=tuple(
            WeekdayGroup(days=group.days, slots=normalize_slots(group.slots))
            for group in config.groups
        ),
    )


# Exclusions

def toggle_excluded_date(config: BookingConfiguration, day: date) -> BookingConfiguration:
    """
    Toggle a calendar date.

    Ignored while date exclusion is disabled, since a disabled exclusion
    list is always empty.
    """
    if not config.excluded_dates_enabled:
        logger.debug("Date exclusion disabled, ignoring toggle of %s", day)
        return config
    return replace(
        config,
        excluded_dates=exclusions.toggle_excluded_date(config.excluded_dates, day),
    )


def toggle_excluded_weekday(config: BookingConfiguration, day: Weekday) -> BookingConfiguration:
    return replace(
        config,
        excluded_weekdays=exclusions.toggle_excluded_weekday(config.excluded_weekdays, day),
    )
