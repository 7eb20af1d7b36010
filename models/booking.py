"""Booking models: the wizard's form draft and the booking API payloads."""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class GuestType(str, Enum):
    """Guest counters that can be adjusted in the stay step."""

    ADULTS = "adults"
    CHILDREN = "children"


class BookingFormData(BaseModel):
    """Mutable draft held by the booking wizard until submission."""

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    check_in_date: Optional[date] = None
    check_out_date: Optional[date] = None
    adults: int = 1
    children: int = 0
    special_requests: str = ""
    guest_notes: str = ""

    @property
    def total_guests(self) -> int:
        return self.adults + self.children

    @property
    def has_stay_dates(self) -> bool:
        return self.check_in_date is not None and self.check_out_date is not None


class BookingRequest(BaseModel):
    """Body of the booking creation request (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    first_name: str
    last_name: str
    email: str
    phone: str = ""
    check_in_date: str = Field(..., description="ISO-8601 UTC timestamp")
    check_out_date: str = Field(..., description="ISO-8601 UTC timestamp")
    adults: int = Field(..., ge=1)
    children: int = Field(..., ge=0)
    special_requests: str = ""
    guest_notes: str = ""
    business_unit_id: str
    room_type_id: str
    nights: int
    subtotal: float
    taxes: float
    service_fee: float
    total_amount: float


class CheckoutSession(BaseModel):
    """Response of the booking creation request."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    checkout_url: str = Field(..., min_length=1)
    payment_session_id: str = Field(..., min_length=1)
    reservation_id: Optional[str] = None
    confirmation_number: Optional[str] = None
