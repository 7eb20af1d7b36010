"""
Message texts for the booking conversation (HTML parse mode).
"""

from html import escape
from typing import Dict

from booking.modal import MODAL_COPY
from booking.session import BookingSession
from models.payment import ModalStatus, PaymentModalState
from models.pricing import PricingBreakdown
from models.room import Property, RoomType
from utils.constants import WIZARD_STEPS
from utils.datetime_utils import format_stay_date

FIELD_PROMPTS = {
    "first_name": "What is your <b>first name</b>?",
    "last_name": "What is your <b>last name</b>?",
    "email": "What is your <b>email</b>? We will send the confirmation there.",
    "phone": "What is your <b>phone number</b>? (optional)",
    "check_in_date": "Send your <b>check-in date</b> (YYYY-MM-DD).",
    "check_out_date": "Send your <b>check-out date</b> (YYYY-MM-DD).",
    "special_requests": "Any <b>special requests</b>? (optional)",
}


def step_header(step: int) -> str:
    return f"<b>Step {step + 1}/{len(WIZARD_STEPS)}: {WIZARD_STEPS[step]}</b>"


def format_money(amount: float, currency: str) -> str:
    return f"{amount:,.2f} {escape(currency)}"


def format_errors(errors: Dict[str, str]) -> str:
    return "\n".join(f"⚠️ {escape(message)}" for message in errors.values())


def format_room(property_: Property, room_type: RoomType) -> str:
    lines = [
        f"🏨 <b>{escape(property_.display_name)}</b>",
        f"🛏 {escape(room_type.display_name)}",
    ]
    if property_.location:
        lines.append(f"📍 {escape(property_.location)}")
    if room_type.bed_configuration:
        lines.append(f"Beds: {escape(room_type.bed_configuration)}")
    lines.append(
        f"Up to {room_type.max_occupancy} guests "
        f"({room_type.max_adults} adults, {room_type.max_children} children)"
    )
    return "\n".join(lines)


def format_pricing(breakdown: PricingBreakdown, currency: str) -> str:
    if not breakdown.is_resolved:
        return "Price: select your dates to see the total."
    nights = f"{breakdown.nights} night{'s' if breakdown.nights != 1 else ''}"
    return (
        f"Subtotal ({nights}): {format_money(breakdown.subtotal, currency)}\n"
        f"Taxes: {format_money(breakdown.taxes, currency)}\n"
        f"Service fee: {format_money(breakdown.service_fee, currency)}\n"
        f"<b>Total: {format_money(breakdown.total_amount, currency)}</b>"
    )


def format_guests_prompt(session: BookingSession) -> str:
    form = session.form
    return (
        f"{step_header(session.step)}\n\n"
        f"Check-in: {format_stay_date(form.check_in_date)}\n"
        f"Check-out: {format_stay_date(form.check_out_date)}\n"
        f"Guests: {form.total_guests} (max {session.room_type.max_occupancy})\n\n"
        f"{format_pricing(session.breakdown, session.property.primary_currency)}"
    )


def format_review(session: BookingSession) -> str:
    form = session.form
    prop = session.property
    lines = [
        step_header(session.step),
        "",
        format_room(prop, session.room_type),
        "",
        f"Guest: {escape(form.first_name)} {escape(form.last_name)}",
        f"Email: {escape(form.email)}",
    ]
    if form.phone:
        lines.append(f"Phone: {escape(form.phone)}")
    lines.extend(
        [
            f"Check-in: {format_stay_date(form.check_in_date)} from {escape(prop.check_in_time)}",
            f"Check-out: {format_stay_date(form.check_out_date)} until {escape(prop.check_out_time)}",
            f"Guests: {form.adults} adults, {form.children} children",
        ]
    )
    if form.special_requests:
        lines.append(f"Requests: {escape(form.special_requests)}")
    lines.extend(
        [
            "",
            format_pricing(session.breakdown, prop.primary_currency),
            "",
            f"Free cancellation up to {prop.cancellation_hours} hours before check-in.",
        ]
    )
    return "\n".join(lines)


def format_modal(state: PaymentModalState) -> str:
    status = state.status or ModalStatus.CHECKING
    title, body = MODAL_COPY[status]
    text = f"<b>{title}</b>\n\n{body}"
    if status == ModalStatus.PAID and state.confirmation_number:
        text += f"\nConfirmation Number: <b>{escape(state.confirmation_number)}</b>"
    return text
