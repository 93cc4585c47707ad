"""
Adapters layer - Structural and YAML representations of booking configurations.
"""

from .schema import (
    BookingConfigSchema,
    dump_booking_document,
    load_booking_document,
    load_booking_yaml,
    save_booking_yaml,
)

__all__ = [
    "BookingConfigSchema",
    "dump_booking_document",
    "load_booking_document",
    "load_booking_yaml",
    "save_booking_yaml",
]
