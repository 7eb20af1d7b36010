"""Payment status and payment modal models."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class PaymentStatus(str, Enum):
    """Status reported by the payment-status endpoint."""

    PAID = "paid"
    PENDING = "pending"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_PAYMENT_STATUSES


TERMINAL_PAYMENT_STATUSES = frozenset(
    {PaymentStatus.PAID, PaymentStatus.FAILED, PaymentStatus.CANCELLED}
)


class ModalStatus(str, Enum):
    """States the payment modal can show while open."""

    CHECKING = "checking"
    PAID = "paid"
    FAILED = "failed"
    CANCELLED = "cancelled"
    PENDING = "pending"


class PaymentDetails(BaseModel):
    """Processor details attached to a payment status."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    amount: float
    currency: str
    method: str
    provider: str
    processed_at: Optional[datetime] = None


class PaymentStatusResponse(BaseModel):
    """Response of the payment-status endpoint."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    status: PaymentStatus
    reservation_id: Optional[str] = None
    confirmation_number: Optional[str] = None
    message: Optional[str] = None
    payment_details: Optional[PaymentDetails] = None


class PollOutcome(BaseModel):
    """Final result of one payment status poll."""

    status: ModalStatus
    confirmation_number: Optional[str] = None
    response: Optional[PaymentStatusResponse] = None
    error: Optional[str] = None


class PaymentModalState(BaseModel):
    """View model of the payment modal."""

    is_open: bool = False
    status: Optional[ModalStatus] = None
    confirmation_number: Optional[str] = None
    session_id: Optional[str] = None
