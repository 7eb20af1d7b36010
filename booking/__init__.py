"""Booking workflow: wizard, pricing, payment modal and session."""

from .modal import PaymentModal
from .pricing import PricingCalculator, count_nights
from .session import BookingSession
from .wizard import BookingWizard, adjust_guest_count, validate_step

__all__ = [
    "BookingSession",
    "BookingWizard",
    "PaymentModal",
    "PricingCalculator",
    "adjust_guest_count",
    "count_nights",
    "validate_step",
]
