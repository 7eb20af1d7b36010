"""
Inline keyboards for bot interactions.
"""

from typing import Optional

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup
from aiogram.utils.keyboard import InlineKeyboardBuilder

from models.booking import BookingFormData
from models.payment import ModalStatus
from models.room import Property, RoomCatalog, RoomType
from utils.constants import ROOM_TYPES_DISPLAY_LIMIT


def get_properties_keyboard(catalog: RoomCatalog) -> InlineKeyboardMarkup:
    """Get property selection keyboard."""
    builder = InlineKeyboardBuilder()

    for prop in catalog.properties:
        builder.row(
            InlineKeyboardButton(
                text=f"🏨 {prop.display_name}",
                callback_data=f"property_{prop.slug}",
            )
        )

    return builder.as_markup()


def get_room_types_keyboard(property_: Property) -> InlineKeyboardMarkup:
    """Get room type selection keyboard for a property."""
    builder = InlineKeyboardBuilder()

    # Room ids can exceed the callback data limit, so refer to them by position
    for index, room_type in enumerate(property_.room_types[:ROOM_TYPES_DISPLAY_LIMIT]):
        builder.row(
            InlineKeyboardButton(
                text=(
                    f"{room_type.display_name} - "
                    f"{room_type.base_rate:,.2f} {property_.primary_currency}/night"
                ),
                callback_data=f"room_{index}",
            )
        )

    builder.row(InlineKeyboardButton(text="🔙 Back", callback_data="main_menu"))

    return builder.as_markup()


def get_skip_keyboard() -> InlineKeyboardMarkup:
    """Keyboard for optional fields."""
    builder = InlineKeyboardBuilder()

    builder.row(InlineKeyboardButton(text="⏭ Skip", callback_data="skip_field"))
    builder.row(InlineKeyboardButton(text="❌ Cancel", callback_data="cancel_booking"))

    return builder.as_markup()


def get_guests_keyboard(
    form: BookingFormData, room_type: RoomType
) -> InlineKeyboardMarkup:
    """Guest counters with +/- buttons."""
    builder = InlineKeyboardBuilder()

    builder.row(
        InlineKeyboardButton(text="➖", callback_data="guests_adults_dec"),
        InlineKeyboardButton(
            text=f"Adults: {form.adults}/{room_type.max_adults}",
            callback_data="guests_noop",
        ),
        InlineKeyboardButton(text="➕", callback_data="guests_adults_inc"),
    )
    builder.row(
        InlineKeyboardButton(text="➖", callback_data="guests_children_dec"),
        InlineKeyboardButton(
            text=f"Children: {form.children}/{room_type.max_children}",
            callback_data="guests_noop",
        ),
        InlineKeyboardButton(text="➕", callback_data="guests_children_inc"),
    )
    builder.row(InlineKeyboardButton(text="✅ Continue", callback_data="guests_done"))
    builder.row(
        InlineKeyboardButton(text="🔙 Back", callback_data="step_back"),
        InlineKeyboardButton(text="❌ Cancel", callback_data="cancel_booking"),
    )

    return builder.as_markup()


def get_review_keyboard() -> InlineKeyboardMarkup:
    """Review & pay keyboard."""
    builder = InlineKeyboardBuilder()

    builder.row(
        InlineKeyboardButton(text="💳 Proceed to Payment", callback_data="submit_booking")
    )
    builder.row(
        InlineKeyboardButton(text="🔙 Back", callback_data="step_back"),
        InlineKeyboardButton(text="❌ Cancel", callback_data="cancel_booking"),
    )

    return builder.as_markup()


def get_checkout_keyboard(checkout_url: str) -> InlineKeyboardMarkup:
    """Checkout link; opens in the browser, the chat stays where it is."""
    builder = InlineKeyboardBuilder()

    builder.row(InlineKeyboardButton(text="💳 Pay Now", url=checkout_url))

    return builder.as_markup()


def get_modal_keyboard(status: Optional[ModalStatus]) -> Optional[InlineKeyboardMarkup]:
    """Single acknowledgment button; none while the payment is being checked."""
    if status is None or status == ModalStatus.CHECKING:
        return None

    builder = InlineKeyboardBuilder()
    text = "📋 View Booking Details" if status == ModalStatus.PAID else "🔁 Try Again"
    builder.row(InlineKeyboardButton(text=text, callback_data="modal_ack"))

    return builder.as_markup()


def get_success_keyboard(success_url: str) -> InlineKeyboardMarkup:
    """Link to the booking success page."""
    builder = InlineKeyboardBuilder()

    builder.row(InlineKeyboardButton(text="📋 View Booking Details", url=success_url))
    builder.row(InlineKeyboardButton(text="🏨 New Booking", callback_data="main_menu"))

    return builder.as_markup()


def get_back_to_menu_keyboard() -> InlineKeyboardMarkup:
    """Get simple back to menu keyboard."""
    builder = InlineKeyboardBuilder()

    builder.row(InlineKeyboardButton(text="🔙 Main Menu", callback_data="main_menu"))

    return builder.as_markup()
