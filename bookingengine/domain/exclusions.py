"""
Excluded calendar dates and excluded weekdays.
"""

from dataclasses import replace
from datetime import date
from typing import FrozenSet, Iterable, List

from .models import BookingConfiguration, BookingKind, Weekday


def toggle_excluded_date(dates: Iterable[date], day: date) -> FrozenSet[date]:
    """Add ``day`` if absent, remove it if present."""
    dates = frozenset(dates)
    if day in dates:
        return dates - {day}
    return dates | {day}


def sorted_excluded_dates(dates: Iterable[date]) -> List[date]:
    """Excluded dates in calendar order, for stable display."""
    return sorted(dates)


def toggle_excluded_weekday(days: Iterable[Weekday], day: Weekday) -> FrozenSet[Weekday]:
    """Add ``day`` if absent, remove it if present."""
    days = frozenset(days)
    if day in days:
        return days - {day}
    return days | {day}


def set_excluded_dates_enabled(
    config: BookingConfiguration,
    enabled: bool,
) -> BookingConfiguration:
    """
    Switch date exclusion on or off.

    Switching it off clears the excluded dates so no hidden exclusions
    survive.
    """
    if enabled:
        return replace(config, excluded_dates_enabled=True)
    return replace(config, excluded_dates_enabled=False, excluded_dates=frozenset())


def is_date_listed(config: BookingConfiguration, day: date) -> bool:
    """True if ``day`` is an excluded date and date exclusion is enabled."""
    return config.excluded_dates_enabled and day in config.excluded_dates


def is_weekday_excluded(config: BookingConfiguration, day: date) -> bool:
    """True if the weekday of ``day`` is excluded. Whole-day bookings only."""
    return config.kind == BookingKind.DAYS and Weekday.from_date(day) in config.excluded_weekdays


def is_date_excluded(config: BookingConfiguration, day: date) -> bool:
    """
    Predicate for a calendar widget.

    Excluded dates apply when date exclusion is enabled. Excluded weekdays
    only apply to whole-day bookings.
    """
    return is_date_listed(config, day) or is_weekday_excluded(config, day)
