"""
Domain-specific exception hierarchy for the booking engine.
"""


class BookingEngineError(Exception):
    """Base class for all application-level errors."""


class ConfigurationError(BookingEngineError):
    """Raised when a configuration document cannot be read or parsed."""


class BookingRejectedError(BookingEngineError):
    """Raised when a proposed reservation is not acceptable."""

    def __init__(self, reason, detail: str = ""):
        self.reason = reason
        self.detail = detail
        message = f"Booking rejected: {reason.value}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
