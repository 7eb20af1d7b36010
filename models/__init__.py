"""Pydantic models for data validation and serialization."""

from .booking import BookingFormData, BookingRequest, CheckoutSession, GuestType
from .payment import (
    ModalStatus,
    PaymentDetails,
    PaymentModalState,
    PaymentStatus,
    PaymentStatusResponse,
    PollOutcome,
)
from .pricing import PricingBreakdown
from .room import Property, RoomCatalog, RoomType, load_room_catalog

__all__ = [
    "BookingFormData",
    "BookingRequest",
    "CheckoutSession",
    "GuestType",
    "ModalStatus",
    "PaymentDetails",
    "PaymentModalState",
    "PaymentStatus",
    "PaymentStatusResponse",
    "PollOutcome",
    "PricingBreakdown",
    "Property",
    "RoomCatalog",
    "RoomType",
    "load_room_catalog",
]
