"""
Three-step guest intake wizard and its validation rules.

Steps: guest details, stay dates and occupancy, review and pay.
"""

from datetime import date
from typing import Callable, Dict, Optional

from models.booking import BookingFormData, GuestType
from models.room import RoomType
from utils.constants import (
    MAX_NAME_LENGTH,
    MAX_NOTES_LENGTH,
    STEP_GUEST_DETAILS,
    STEP_REVIEW_AND_PAY,
    STEP_STAY_DATES,
)
from utils.datetime_utils import local_today
from utils.validation import is_blank, sanitize_text, validate_email

ErrorMap = Dict[str, str]

_TEXT_LIMITS = {
    "first_name": MAX_NAME_LENGTH,
    "last_name": MAX_NAME_LENGTH,
    "email": MAX_NAME_LENGTH,
    "phone": MAX_NAME_LENGTH,
    "special_requests": MAX_NOTES_LENGTH,
    "guest_notes": MAX_NOTES_LENGTH,
}


def validate_step(
    step: int, form: BookingFormData, room_type: RoomType, today: date
) -> ErrorMap:
    """
    Run the validation rules of one wizard step.

    Args:
        step: Wizard step index
        form: Current form draft
        room_type: Room being booked (occupancy caps)
        today: Caller's local date

    Returns:
        Field-keyed error messages; empty when the step is valid
    """
    errors: ErrorMap = {}

    if step == STEP_GUEST_DETAILS:
        if is_blank(form.first_name):
            errors["first_name"] = "First name is required"
        if is_blank(form.last_name):
            errors["last_name"] = "Last name is required"
        if is_blank(form.email):
            errors["email"] = "Email is required"
        elif not validate_email(form.email):
            errors["email"] = "Please enter a valid email"

    elif step == STEP_STAY_DATES:
        if form.check_in_date is None:
            errors["check_in_date"] = "Check-in date is required"
        elif form.check_in_date < today:
            errors["check_in_date"] = "Check-in date cannot be in the past"

        if form.check_out_date is None:
            errors["check_out_date"] = "Check-out date is required"
        elif form.check_in_date is not None and form.check_out_date <= form.check_in_date:
            errors["check_out_date"] = "Check-out date must be after check-in date"

        if form.total_guests > room_type.max_occupancy:
            errors["guests"] = f"Maximum {room_type.max_occupancy} guests allowed"

    # Review & pay has no field rules; it is gated on pricing by the session
    return errors


def adjust_guest_count(
    form: BookingFormData, room_type: RoomType, guest_type: GuestType, increment: bool
) -> bool:
    """
    Increment or decrement adults/children within the room's caps.

    Returns:
        True if the count changed, False if the change was declined
    """
    field = GuestType(guest_type).value
    current = getattr(form, field)
    minimum = 1 if field == GuestType.ADULTS.value else 0
    new_count = current + 1 if increment else max(minimum, current - 1)

    if field == GuestType.ADULTS.value and new_count > room_type.max_adults:
        return False
    if field == GuestType.CHILDREN.value and new_count > room_type.max_children:
        return False
    if increment and form.total_guests >= room_type.max_occupancy:
        return False
    if new_count == current:
        return False

    setattr(form, field, new_count)
    return True


class BookingWizard:
    """Form draft, current step, and error map of one booking attempt."""

    def __init__(
        self,
        room_type: RoomType,
        today_provider: Optional[Callable[[], date]] = None,
    ):
        self.room_type = room_type
        self.form = BookingFormData()
        self.step = STEP_GUEST_DETAILS
        self.errors: ErrorMap = {}
        self._today = today_provider or local_today

    @property
    def is_final_step(self) -> bool:
        return self.step == STEP_REVIEW_AND_PAY

    def set_field(self, field: str, value) -> None:
        """Update one form field and clear its error."""
        if field not in BookingFormData.model_fields:
            raise KeyError(f"Unknown booking field: {field}")
        if field in _TEXT_LIMITS:
            value = sanitize_text(value or "", _TEXT_LIMITS[field])
        setattr(self.form, field, value)
        self.errors.pop(field, None)

    def validate_step(self, step: Optional[int] = None) -> bool:
        """Validate a step (default: current), replacing the error map."""
        target = self.step if step is None else step
        self.errors = validate_step(target, self.form, self.room_type, self._today())
        return not self.errors

    def next_step(self) -> bool:
        """Advance if the current step validates."""
        if self.is_final_step or not self.validate_step():
            return False
        self.step += 1
        return True

    def previous_step(self) -> bool:
        if self.step == STEP_GUEST_DETAILS:
            return False
        self.step -= 1
        return True

    def change_guest_count(self, guest_type: GuestType, increment: bool) -> bool:
        return adjust_guest_count(self.form, self.room_type, guest_type, increment)
