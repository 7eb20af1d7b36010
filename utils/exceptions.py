"""
Custom exception classes for better error handling.
Provides specific error types instead of generic exceptions.
"""

from typing import Optional


class ValidationError(Exception):
    """Raised when input validation fails."""

    pass


class RoomNotFoundError(ValidationError):
    """Raised when a property or room type is not in the catalog."""

    pass


class BookingStateError(Exception):
    """Raised when a booking operation is invoked in the wrong state."""

    pass


class BookingApiError(Exception):
    """Base exception for booking API operations."""

    pass


class ApiConnectionError(BookingApiError):
    """Raised when the booking API cannot be reached or times out."""

    pass


class ApiResponseError(BookingApiError):
    """Raised when the booking API answers with a non-2xx status."""

    def __init__(
        self, status: int, message: str, details: Optional[str] = None
    ) -> None:
        self.status = status
        self.message = message
        self.details = details
        super().__init__(f"HTTP {status}: {message}")


class MalformedResponseError(BookingApiError):
    """Raised when a booking API response cannot be parsed."""

    pass
