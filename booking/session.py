"""
Booking session: one guest's attempt at booking one room type.

Ties together the wizard, the pricing calculator, the submitter, the payment
poller and the payment modal. The session owns the poller's task; leaving
the ``async with`` block (or calling ``aclose()``) cancels it.
"""

import logging
from datetime import date
from typing import Any, Awaitable, Callable, Optional

from api.client import BookingApiClient
from booking.modal import PaymentModal
from booking.pricing import PricingCalculator
from booking.wizard import BookingWizard
from config import settings
from models.booking import BookingFormData, CheckoutSession, GuestType
from models.payment import PaymentModalState, PollOutcome
from models.pricing import PricingBreakdown
from models.room import Property, RoomType
from payments.checkout import BookingSubmitter
from payments.poller import PaymentStatusPoller
from utils.datetime_utils import local_today
from utils.exceptions import BookingStateError

logger = logging.getLogger(__name__)

CheckoutOpener = Callable[[str], Awaitable[None]]
ModalChangeHandler = Callable[[PaymentModalState], Awaitable[None]]

_DATE_FIELDS = ("check_in_date", "check_out_date")


async def _ignore_checkout(url: str) -> None:
    logger.debug(f"No checkout opener configured, dropping {url}")


class BookingSession:
    """State and workflow of a single booking attempt."""

    def __init__(
        self,
        api: BookingApiClient,
        property_: Property,
        room_type: RoomType,
        open_checkout: Optional[CheckoutOpener] = None,
        on_modal_change: Optional[ModalChangeHandler] = None,
        poll_interval: float = 3.0,
        poll_max_attempts: Optional[int] = None,
        status_max_retries: int = 2,
        status_retry_delay: float = 1.0,
        status_retry_backoff: float = 2.0,
        today_provider: Optional[Callable[[], date]] = None,
    ):
        self.property = property_
        self.room_type = room_type
        self.open_checkout = open_checkout or _ignore_checkout
        self.on_modal_change = on_modal_change

        self.wizard = BookingWizard(room_type, today_provider=today_provider)
        self.pricing = PricingCalculator(api, property_, room_type)
        self.submitter = BookingSubmitter(api, property_, room_type)
        self.modal = PaymentModal()
        self.poller = PaymentStatusPoller(
            api,
            self._on_poll_outcome,
            interval=poll_interval,
            max_attempts=poll_max_attempts,
            max_retries=status_max_retries,
            retry_delay=status_retry_delay,
            retry_backoff=status_retry_backoff,
        )

        self.is_submitting = False
        self.closed = False

    @classmethod
    def from_settings(
        cls,
        api: BookingApiClient,
        property_: Property,
        room_type: RoomType,
        open_checkout: Optional[CheckoutOpener] = None,
        on_modal_change: Optional[ModalChangeHandler] = None,
    ) -> "BookingSession":
        """Create a session configured from application settings."""
        return cls(
            api,
            property_,
            room_type,
            open_checkout=open_checkout,
            on_modal_change=on_modal_change,
            poll_interval=settings.payment_poll_interval_seconds,
            poll_max_attempts=settings.payment_poll_max_attempts,
            status_max_retries=settings.payment_status_max_retries,
            status_retry_delay=settings.payment_status_retry_delay,
            status_retry_backoff=settings.payment_status_retry_backoff,
            today_provider=lambda: local_today(settings.timezone),
        )

    async def __aenter__(self) -> "BookingSession":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Tear the session down; no poll survives this call."""
        self.closed = True
        await self.poller.aclose()

    # ========== Wizard ==========

    @property
    def form(self) -> BookingFormData:
        return self.wizard.form

    @property
    def step(self) -> int:
        return self.wizard.step

    @property
    def errors(self):
        return self.wizard.errors

    @property
    def breakdown(self) -> PricingBreakdown:
        return self.pricing.breakdown

    async def update_field(self, field: str, value: Any) -> None:
        """Set a form field; stay date changes re-price the stay."""
        self.wizard.set_field(field, value)
        if field in _DATE_FIELDS:
            await self.refresh_pricing()

    async def set_stay_dates(
        self, check_in_date: Optional[date], check_out_date: Optional[date]
    ) -> PricingBreakdown:
        self.wizard.set_field("check_in_date", check_in_date)
        self.wizard.set_field("check_out_date", check_out_date)
        return await self.refresh_pricing()

    async def refresh_pricing(self) -> PricingBreakdown:
        if self.form.has_stay_dates:
            return await self.pricing.calculate(
                self.form.check_in_date, self.form.check_out_date
            )
        return self.pricing.reset()

    def change_guest_count(self, guest_type: GuestType, increment: bool) -> bool:
        return self.wizard.change_guest_count(guest_type, increment)

    def validate_step(self, step: Optional[int] = None) -> bool:
        return self.wizard.validate_step(step)

    def next_step(self) -> bool:
        return self.wizard.next_step()

    def previous_step(self) -> bool:
        return self.wizard.previous_step()

    # ========== Submission ==========

    @property
    def can_submit(self) -> bool:
        return (
            self.wizard.is_final_step
            and not self.closed
            and not self.is_submitting
            and not self.modal.is_open
            and not self.pricing.is_calculating
            and self.pricing.breakdown.is_resolved
        )

    async def submit(self) -> Optional[CheckoutSession]:
        """
        Create the booking, hand out the checkout link and start polling.

        Returns:
            The checkout session, or None if validation failed or submission
            raised (the modal then shows the failure)

        Raises:
            BookingStateError: If the session is not ready to submit
        """
        if self.closed:
            raise BookingStateError("Booking session is closed")
        if not self.wizard.is_final_step:
            raise BookingStateError("Booking can only be submitted from the final step")
        if not self.wizard.validate_step():
            return None
        if self.is_submitting or self.modal.is_open:
            raise BookingStateError("A booking submission is already in progress")
        if self.pricing.is_calculating or not self.pricing.breakdown.is_resolved:
            raise BookingStateError("Pricing has not been resolved yet")

        self.is_submitting = True
        try:
            checkout = await self.submitter.submit(self.form, self.pricing.breakdown)
            await self.open_checkout(checkout.checkout_url)
            self.modal.open_checking(checkout.payment_session_id)
            self.poller.start(checkout.payment_session_id)
            return checkout
        except Exception as e:
            # Covers checkout delivery too; the booking may already exist
            logger.error(f"Booking error: {e}", exc_info=True)
            self.poller.stop()
            if not self.modal.is_open:
                self.modal.open_failed()
            return None
        finally:
            self.is_submitting = False

    async def _on_poll_outcome(self, outcome: PollOutcome) -> None:
        if self.modal.resolve(outcome) and self.on_modal_change is not None:
            await self.on_modal_change(self.modal.state)

    def acknowledge(self) -> Optional[str]:
        """Acknowledge the payment outcome; returns the success path if paid."""
        return self.modal.acknowledge()
