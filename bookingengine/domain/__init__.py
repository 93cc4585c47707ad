"""
Domain layer - Pure booking logic without external dependencies.
"""

from .availability import AvailabilityCalculator, EffectiveWindow, effective_window
from .models import (
    AvailabilityWindow,
    BookingConfiguration,
    BookingKind,
    BookingMode,
    BufferPeriod,
    BufferUnit,
    CountMode,
    DateRangePolicy,
    QuantityPolicy,
    TimeInterval,
    Weekday,
    WeekdayGroup,
)
from .slots import generate_slots, normalize_slots

__all__ = [
    "AvailabilityCalculator",
    "AvailabilityWindow",
    "BookingConfiguration",
    "BookingKind",
    "BookingMode",
    "BufferPeriod",
    "BufferUnit",
    "CountMode",
    "DateRangePolicy",
    "EffectiveWindow",
    "QuantityPolicy",
    "TimeInterval",
    "Weekday",
    "WeekdayGroup",
    "effective_window",
    "generate_slots",
    "normalize_slots",
]
