"""
Booking submission: turns the validated form into a reservation with a
payment checkout session.
"""

from api.client import BookingApiClient
from models.booking import BookingFormData, BookingRequest, CheckoutSession
from models.pricing import PricingBreakdown
from models.room import Property, RoomType
from utils.datetime_utils import to_iso_timestamp
from utils.exceptions import BookingStateError
from utils.logging_config import setup_logging

logger = setup_logging(
    name=__name__, log_level="INFO", log_file="payments.log", log_dir="logs"
)


def build_booking_request(
    form: BookingFormData,
    pricing: PricingBreakdown,
    property_: Property,
    room_type: RoomType,
) -> BookingRequest:
    """
    Serialize the form and pricing into a booking creation request.

    Raises:
        BookingStateError: If stay dates are missing
    """
    if form.check_in_date is None or form.check_out_date is None:
        raise BookingStateError("Stay dates are required to create a booking")

    return BookingRequest(
        first_name=form.first_name,
        last_name=form.last_name,
        email=form.email,
        phone=form.phone,
        check_in_date=to_iso_timestamp(form.check_in_date),
        check_out_date=to_iso_timestamp(form.check_out_date),
        adults=form.adults,
        children=form.children,
        special_requests=form.special_requests,
        guest_notes=form.guest_notes,
        business_unit_id=property_.id,
        room_type_id=room_type.id,
        nights=pricing.nights,
        subtotal=pricing.subtotal,
        taxes=pricing.taxes,
        service_fee=pricing.service_fee,
        total_amount=pricing.total_amount,
    )


class BookingSubmitter:
    """Sends booking requests for one property/room type."""

    def __init__(self, api: BookingApiClient, property_: Property, room_type: RoomType):
        self.api = api
        self.property = property_
        self.room_type = room_type

    async def submit(
        self, form: BookingFormData, pricing: PricingBreakdown
    ) -> CheckoutSession:
        """
        Create the booking and return its checkout session.

        Raises:
            BookingApiError: Network failure, non-2xx or malformed response
        """
        request = build_booking_request(form, pricing, self.property, self.room_type)
        logger.info(
            f"Submitting booking for {self.property.slug}/{self.room_type.id}: "
            f"{pricing.nights} nights, total {pricing.total_amount} "
            f"{self.property.primary_currency}"
        )
        return await self.api.create_booking_with_payment(request)
