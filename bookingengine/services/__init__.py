"""
Service layer helpers that combine configuration, clock and occupancy data.
"""

from .booking_acceptance import (
    AcceptanceResult,
    BookedCountsProvider,
    BookingAcceptanceService,
    RejectionReason,
)

__all__ = [
    "AcceptanceResult",
    "BookedCountsProvider",
    "BookingAcceptanceService",
    "RejectionReason",
]
