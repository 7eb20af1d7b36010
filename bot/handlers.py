"""
Bot handlers for the room booking conversation.
Drives the three-step wizard, submission, and the payment outcome message.
"""

import logging
from html import escape
from typing import Optional, Union

from aiogram import Bot, Router
from aiogram.filters import Command, StateFilter
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, Message

from api.client import get_api_client
from booking.session import BookingSession
from bot.keyboards import (
    get_back_to_menu_keyboard,
    get_checkout_keyboard,
    get_guests_keyboard,
    get_modal_keyboard,
    get_properties_keyboard,
    get_review_keyboard,
    get_room_types_keyboard,
    get_skip_keyboard,
    get_success_keyboard,
)
from bot.messages import (
    FIELD_PROMPTS,
    format_errors,
    format_guests_prompt,
    format_modal,
    format_review,
    format_room,
    step_header,
)
from bot.sessions import get_room_catalog, get_session_registry
from bot.states import BookingStates
from config import settings
from models.booking import GuestType
from models.payment import PaymentModalState
from utils.constants import STEP_GUEST_DETAILS, STEP_STAY_DATES
from utils.datetime_utils import parse_stay_date
from utils.exceptions import BookingStateError, RoomNotFoundError

logger = logging.getLogger(__name__)

router = Router()

GUEST_DETAIL_FIELDS = ("first_name", "last_name", "email", "phone")

FIELD_STATES = {
    "first_name": BookingStates.entering_first_name,
    "last_name": BookingStates.entering_last_name,
    "email": BookingStates.entering_email,
    "phone": BookingStates.entering_phone,
    "check_in_date": BookingStates.entering_check_in,
    "check_out_date": BookingStates.entering_check_out,
    "special_requests": BookingStates.entering_requests,
}

OPTIONAL_FIELDS = ("phone", "special_requests")

Target = Union[Message, CallbackQuery]


def _chat_id(target: Target) -> int:
    if isinstance(target, CallbackQuery):
        return target.message.chat.id
    return target.chat.id


def _message(target: Target) -> Message:
    return target.message if isinstance(target, CallbackQuery) else target


async def _get_session(target: Target) -> Optional[BookingSession]:
    """Return the chat's booking session, telling the guest if it expired."""
    session = get_session_registry().get(_chat_id(target))
    if session is None:
        if isinstance(target, CallbackQuery):
            await target.answer("Your booking session has expired", show_alert=True)
        await _message(target).answer(
            "Your booking session has expired. Use /start to book again.",
            reply_markup=get_back_to_menu_keyboard(),
        )
    return session


# ========== Start Command & Main Menu ==========


async def show_properties(target: Target, state: FSMContext) -> None:
    """Reset the chat and list the properties."""
    await get_session_registry().close(_chat_id(target))
    await state.clear()

    catalog = get_room_catalog()
    text = "👋 Welcome! Where would you like to stay?"

    if isinstance(target, CallbackQuery):
        await target.message.edit_text(text, reply_markup=get_properties_keyboard(catalog))
        await target.answer()
    else:
        await target.answer(text, reply_markup=get_properties_keyboard(catalog))


@router.message(Command("start"))
async def cmd_start(message: Message, state: FSMContext):
    """Handle /start command."""
    await show_properties(message, state)


@router.callback_query(lambda c: c.data == "main_menu")
async def show_main_menu(callback: CallbackQuery, state: FSMContext):
    """Show main menu."""
    await show_properties(callback, state)


@router.message(Command("cancel"))
async def cmd_cancel(message: Message, state: FSMContext):
    """Handle /cancel command."""
    await get_session_registry().close(message.chat.id)
    await state.clear()
    await message.answer(
        "❌ Booking cancelled.", reply_markup=get_back_to_menu_keyboard()
    )


@router.callback_query(lambda c: c.data == "cancel_booking")
async def cancel_booking(callback: CallbackQuery, state: FSMContext):
    """Cancel the booking in progress."""
    await get_session_registry().close(callback.message.chat.id)
    await state.clear()
    await callback.message.edit_text(
        "❌ Booking cancelled.", reply_markup=get_back_to_menu_keyboard()
    )
    await callback.answer()


# ========== Property & Room Selection ==========


@router.callback_query(lambda c: c.data.startswith("property_"))
async def select_property(callback: CallbackQuery, state: FSMContext):
    """Handle property selection."""
    slug = callback.data.split("_", 1)[1]
    try:
        prop = get_room_catalog().get_property(slug)
    except RoomNotFoundError:
        await callback.answer("This property is no longer available", show_alert=True)
        return

    if not prop.room_types:
        await callback.answer("No rooms available at this property", show_alert=True)
        return

    await state.update_data(property_slug=slug)
    await callback.message.edit_text(
        f"🏨 <b>{escape(prop.display_name)}</b>\n\nSelect a room type:",
        reply_markup=get_room_types_keyboard(prop),
    )
    await callback.answer()


def _make_session(
    bot: Bot, chat_id: int, prop, room_type
) -> BookingSession:
    """Create a booking session whose callbacks talk to this chat."""

    async def open_checkout(checkout_url: str) -> None:
        await bot.send_message(
            chat_id,
            "🔗 Complete your payment in the browser. "
            "This chat will update once the payment is confirmed.",
            reply_markup=get_checkout_keyboard(checkout_url),
        )

    async def on_modal_change(modal_state: PaymentModalState) -> None:
        try:
            await bot.send_message(
                chat_id,
                format_modal(modal_state),
                reply_markup=get_modal_keyboard(modal_state.status),
            )
        except Exception as e:
            logger.error(
                f"Failed to deliver payment outcome to chat {chat_id}: {e}",
                exc_info=True,
            )

    return BookingSession.from_settings(
        get_api_client(),
        prop,
        room_type,
        open_checkout=open_checkout,
        on_modal_change=on_modal_change,
    )


@router.callback_query(lambda c: c.data.startswith("room_"))
async def select_room(callback: CallbackQuery, state: FSMContext):
    """Handle room type selection and start the wizard."""
    data = await state.get_data()
    slug = data.get("property_slug")

    try:
        prop = get_room_catalog().get_property(slug or "")
        room_type = prop.room_types[int(callback.data.split("_", 1)[1])]
    except (RoomNotFoundError, ValueError, IndexError):
        await callback.answer("Invalid room selection", show_alert=True)
        return

    chat_id = callback.message.chat.id
    session = _make_session(callback.bot, chat_id, prop, room_type)
    await get_session_registry().open(chat_id, session)
    logger.info(f"Chat {chat_id} started booking {prop.slug}/{room_type.id}")

    await callback.message.edit_text(format_room(prop, room_type))
    await callback.answer()
    await _ask_field(callback.message, state, session, "first_name")


# ========== Step 0: Guest Details ==========


async def _ask_field(
    message: Message, state: FSMContext, session: BookingSession, field: str
) -> None:
    await state.set_state(FIELD_STATES[field])
    keyboard = get_skip_keyboard() if field in OPTIONAL_FIELDS else None
    await message.answer(
        f"{step_header(session.step)}\n\n{FIELD_PROMPTS[field]}",
        reply_markup=keyboard,
    )


async def _complete_guest_details(
    message: Message, state: FSMContext, session: BookingSession
) -> None:
    if session.next_step():
        await _ask_field(message, state, session, "check_in_date")
        return

    await message.answer(format_errors(session.errors))
    first_invalid = next(
        (field for field in GUEST_DETAIL_FIELDS if field in session.errors),
        GUEST_DETAIL_FIELDS[0],
    )
    await _ask_field(message, state, session, first_invalid)


@router.message(
    StateFilter(
        BookingStates.entering_first_name,
        BookingStates.entering_last_name,
        BookingStates.entering_email,
        BookingStates.entering_phone,
    )
)
async def handle_guest_detail(message: Message, state: FSMContext):
    """Store one guest detail and ask for the next."""
    session = await _get_session(message)
    if session is None:
        await state.clear()
        return

    if not message.text:
        await message.answer("Please send a text message.")
        return

    current = await state.get_state()
    field = next(f for f, s in FIELD_STATES.items() if s.state == current)
    await session.update_field(field, message.text)

    index = GUEST_DETAIL_FIELDS.index(field)
    if index + 1 < len(GUEST_DETAIL_FIELDS):
        await _ask_field(message, state, session, GUEST_DETAIL_FIELDS[index + 1])
    else:
        await _complete_guest_details(message, state, session)


# ========== Step 1: Stay Dates & Guests ==========


async def _show_guests(message: Message, state: FSMContext, session: BookingSession):
    await state.set_state(BookingStates.choosing_guests)
    await message.answer(
        format_guests_prompt(session),
        reply_markup=get_guests_keyboard(session.form, session.room_type),
    )


@router.message(
    StateFilter(BookingStates.entering_check_in, BookingStates.entering_check_out)
)
async def handle_stay_date(message: Message, state: FSMContext):
    """Store a stay date; pricing refreshes once both dates are known."""
    session = await _get_session(message)
    if session is None:
        await state.clear()
        return

    try:
        stay_date = parse_stay_date(message.text or "")
    except ValueError:
        await message.answer("Please send the date as YYYY-MM-DD, e.g. 2025-06-10.")
        return

    current = await state.get_state()
    if current == BookingStates.entering_check_in.state:
        await session.update_field("check_in_date", stay_date)
        await _ask_field(message, state, session, "check_out_date")
    else:
        await session.update_field("check_out_date", stay_date)
        await _show_guests(message, state, session)


@router.callback_query(
    lambda c: c.data.startswith("guests_") and c.data not in ("guests_done", "guests_noop")
)
async def change_guests(callback: CallbackQuery):
    """Adjust adults/children; changes beyond the room's caps are declined."""
    session = await _get_session(callback)
    if session is None:
        return

    _, kind, direction = callback.data.split("_", 2)
    changed = session.change_guest_count(GuestType(kind), direction == "inc")

    if changed:
        await callback.message.edit_text(
            format_guests_prompt(session),
            reply_markup=get_guests_keyboard(session.form, session.room_type),
        )
    await callback.answer()


@router.callback_query(lambda c: c.data == "guests_noop")
async def guests_noop(callback: CallbackQuery):
    await callback.answer()


@router.callback_query(lambda c: c.data == "guests_done")
async def complete_stay(callback: CallbackQuery, state: FSMContext):
    """Validate dates and occupancy, then move on to review."""
    session = await _get_session(callback)
    if session is None:
        return

    await callback.answer()
    if session.next_step():
        await _ask_field(callback.message, state, session, "special_requests")
        return

    await callback.message.answer(format_errors(session.errors))
    if "check_in_date" in session.errors:
        await _ask_field(callback.message, state, session, "check_in_date")
    elif "check_out_date" in session.errors:
        await _ask_field(callback.message, state, session, "check_out_date")
    else:
        await _show_guests(callback.message, state, session)


# ========== Step 2: Review & Pay ==========


async def _show_review(message: Message, state: FSMContext, session: BookingSession):
    await state.set_state(BookingStates.reviewing)
    await message.answer(format_review(session), reply_markup=get_review_keyboard())


@router.message(StateFilter(BookingStates.entering_requests))
async def handle_special_requests(message: Message, state: FSMContext):
    session = await _get_session(message)
    if session is None:
        await state.clear()
        return

    await session.update_field("special_requests", message.text or "")
    await _show_review(message, state, session)


@router.callback_query(lambda c: c.data == "skip_field")
async def skip_field(callback: CallbackQuery, state: FSMContext):
    """Skip an optional field."""
    session = await _get_session(callback)
    if session is None:
        return

    await callback.answer()
    current = await state.get_state()
    if current == BookingStates.entering_phone.state:
        await session.update_field("phone", "")
        await _complete_guest_details(callback.message, state, session)
    elif current == BookingStates.entering_requests.state:
        await session.update_field("special_requests", "")
        await _show_review(callback.message, state, session)


@router.callback_query(lambda c: c.data == "step_back")
async def step_back(callback: CallbackQuery, state: FSMContext):
    """Go back one wizard step."""
    session = await _get_session(callback)
    if session is None:
        return

    await callback.answer()
    session.previous_step()

    if session.step == STEP_GUEST_DETAILS:
        await _ask_field(callback.message, state, session, "first_name")
    elif session.step == STEP_STAY_DATES and session.form.has_stay_dates:
        await _show_guests(callback.message, state, session)
    else:
        await _ask_field(callback.message, state, session, "check_in_date")


@router.callback_query(lambda c: c.data == "submit_booking")
async def submit_booking(callback: CallbackQuery, state: FSMContext):
    """Create the booking and hand out the checkout link."""
    session = await _get_session(callback)
    if session is None:
        return

    if session.pricing.is_calculating:
        await callback.answer("The price is still being calculated", show_alert=True)
        return

    try:
        checkout = await session.submit()
    except BookingStateError as e:
        logger.warning(f"Submission refused for chat {callback.message.chat.id}: {e}")
        await callback.answer(
            "Your booking is not ready to submit yet", show_alert=True
        )
        return

    await callback.answer()

    if checkout is None and not session.modal.is_open:
        await callback.message.answer(format_errors(session.errors))
        return

    await state.set_state(BookingStates.awaiting_payment)
    await callback.message.answer(
        format_modal(session.modal.state),
        reply_markup=get_modal_keyboard(session.modal.state.status),
    )


@router.callback_query(lambda c: c.data == "modal_ack")
async def acknowledge_payment(callback: CallbackQuery, state: FSMContext):
    """Acknowledge the payment outcome."""
    session = await _get_session(callback)
    if session is None:
        return

    try:
        success_path = session.acknowledge()
    except BookingStateError:
        await callback.answer(
            "Please wait while we verify your payment", show_alert=True
        )
        return

    await callback.answer()
    await callback.message.edit_reply_markup(reply_markup=None)

    if success_path:
        chat_id = callback.message.chat.id
        await get_session_registry().close(chat_id)
        await state.clear()
        await callback.message.answer(
            "🎉 Thank you for booking with us!",
            reply_markup=get_success_keyboard(f"{settings.site_url.rstrip('/')}{success_path}"),
        )
        return

    # Form data is kept so the guest can retry without re-entering it
    await _show_review(callback.message, state, session)


def register_handlers(dp) -> None:
    """Register all handlers with dispatcher."""
    dp.include_router(router)
