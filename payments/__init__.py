"""Booking submission and payment status polling."""

from .checkout import BookingSubmitter, build_booking_request
from .poller import PaymentStatusPoller, PollerState

__all__ = [
    "BookingSubmitter",
    "PaymentStatusPoller",
    "PollerState",
    "build_booking_request",
]
