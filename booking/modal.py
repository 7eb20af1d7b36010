"""
Payment modal state machine.

closed -> checking -> paid | failed | cancelled | pending -> closed

The modal cannot be dismissed while open; only acknowledging a terminal
state closes it.
"""

import logging
from typing import Optional
from urllib.parse import urlencode

from models.payment import ModalStatus, PaymentModalState, PollOutcome
from utils.constants import BOOKING_SUCCESS_PATH
from utils.exceptions import BookingStateError

logger = logging.getLogger(__name__)

TERMINAL_MODAL_STATUSES = frozenset(
    {ModalStatus.PAID, ModalStatus.FAILED, ModalStatus.CANCELLED, ModalStatus.PENDING}
)

# Guest-facing copy; raw error text is never shown
MODAL_COPY = {
    ModalStatus.CHECKING: (
        "Processing Payment",
        "Please wait while we verify your payment. This may take a few moments.",
    ),
    ModalStatus.PAID: ("Payment Successful!", "Your reservation has been confirmed!"),
    ModalStatus.PENDING: (
        "Awaiting Payment",
        "Your payment is still being processed. You can close this window "
        "and check your email for confirmation.",
    ),
    ModalStatus.FAILED: (
        "Payment Failed",
        "There was an issue processing your payment. Please try again or "
        "contact support.",
    ),
    ModalStatus.CANCELLED: (
        "Payment Cancelled",
        "Your payment was cancelled. You can try booking again.",
    ),
}


def success_path(confirmation_number: str) -> str:
    return f"{BOOKING_SUCCESS_PATH}?{urlencode({'confirmation': confirmation_number})}"


class PaymentModal:
    """Holds the modal view model and enforces its transitions."""

    def __init__(self):
        self.state = PaymentModalState()

    @property
    def is_open(self) -> bool:
        return self.state.is_open

    @property
    def status(self) -> Optional[ModalStatus]:
        return self.state.status if self.state.is_open else None

    @property
    def is_terminal(self) -> bool:
        return self.state.is_open and self.state.status in TERMINAL_MODAL_STATUSES

    def _set(self, state: PaymentModalState) -> None:
        logger.debug(
            f"Payment modal: {self.state.status} -> {state.status} "
            f"(open={state.is_open})"
        )
        self.state = state

    def open_checking(self, session_id: str) -> None:
        """Submission succeeded: wait for the payment outcome."""
        if self.state.is_open:
            raise BookingStateError("Payment modal is already open")
        self._set(
            PaymentModalState(
                is_open=True, status=ModalStatus.CHECKING, session_id=session_id
            )
        )

    def open_failed(self) -> None:
        """Submission failed before a payment session existed."""
        if self.state.is_open:
            raise BookingStateError("Payment modal is already open")
        self._set(PaymentModalState(is_open=True, status=ModalStatus.FAILED))

    def resolve(self, outcome: PollOutcome) -> bool:
        """
        Apply a poll outcome.

        Returns:
            True if the modal moved to the outcome's status. Outcomes that
            arrive outside the checking state are ignored.
        """
        if not self.state.is_open or self.state.status != ModalStatus.CHECKING:
            logger.warning(
                f"Ignoring payment outcome {outcome.status.value}: "
                f"modal is {self.state.status.value if self.state.status else 'closed'}"
            )
            return False
        if outcome.status not in TERMINAL_MODAL_STATUSES:
            return False

        confirmation = (
            outcome.confirmation_number if outcome.status == ModalStatus.PAID else None
        )
        self._set(
            PaymentModalState(
                is_open=True,
                status=outcome.status,
                confirmation_number=confirmation,
                session_id=self.state.session_id,
            )
        )
        return True

    def dismiss(self) -> bool:
        """Backdrop click / escape. Never closes an open modal."""
        return not self.state.is_open

    def acknowledge(self) -> Optional[str]:
        """
        Close a terminal modal.

        Returns:
            The success page path for a paid booking with a confirmation
            number, None otherwise (the guest stays on the booking form)

        Raises:
            BookingStateError: If the modal is closed or still checking
        """
        if not self.is_terminal:
            raise BookingStateError("Payment modal has no outcome to acknowledge")

        status = self.state.status
        confirmation = self.state.confirmation_number
        self._set(self.state.model_copy(update={"is_open": False}))

        if status == ModalStatus.PAID and confirmation:
            return success_path(confirmation)
        return None
