"""
Unit tests for bot handlers.
"""

from datetime import date
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_asyncio
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, Message

from booking.session import BookingSession
from bot.handlers import (
    acknowledge_payment,
    change_guests,
    cmd_start,
    handle_guest_detail,
    handle_stay_date,
    register_handlers,
    router,
    select_room,
    submit_booking,
)
from bot.sessions import SessionRegistry
from bot.states import BookingStates
from models.payment import ModalStatus, PollOutcome

CHAT_ID = 123456789


def _message(text=None):
    message = MagicMock(spec=Message)
    message.chat = MagicMock()
    message.chat.id = CHAT_ID
    message.text = text
    message.answer = AsyncMock()
    return message


def _callback(data):
    callback = MagicMock(spec=CallbackQuery)
    callback.data = data
    callback.bot = MagicMock()
    callback.bot.send_message = AsyncMock()
    callback.message = _message()
    callback.message.edit_text = AsyncMock()
    callback.message.edit_reply_markup = AsyncMock()
    callback.answer = AsyncMock()
    return callback


def _state(current=None, data=None):
    state = MagicMock(spec=FSMContext)
    state.clear = AsyncMock()
    state.set_state = AsyncMock()
    state.update_data = AsyncMock()
    state.get_state = AsyncMock(return_value=current)
    state.get_data = AsyncMock(return_value=data or {})
    return state


@pytest.fixture
def registry():
    registry = SessionRegistry()
    with patch("bot.handlers.get_session_registry", return_value=registry):
        yield registry


@pytest_asyncio.fixture
async def session(registry, mock_api, property_, room_type):
    session = BookingSession(
        mock_api,
        property_,
        room_type,
        poll_interval=0.001,
        today_provider=lambda: date(2025, 6, 1),
    )
    await registry.open(CHAT_ID, session)
    yield session
    await registry.close_all()


class TestStart:
    @pytest.mark.asyncio
    async def test_cmd_start_lists_properties(self, registry, catalog):
        message = _message("/start")
        state = _state()

        with patch("bot.handlers.get_room_catalog", return_value=catalog):
            await cmd_start(message, state)

        state.clear.assert_awaited_once()
        message.answer.assert_awaited_once()
        assert "Welcome" in message.answer.call_args[0][0]

    @pytest.mark.asyncio
    async def test_start_closes_previous_session(self, registry, session, catalog):
        with patch("bot.handlers.get_room_catalog", return_value=catalog):
            await cmd_start(_message("/start"), _state())

        assert registry.get(CHAT_ID) is None
        assert session.closed


class TestRoomSelection:
    @pytest.mark.asyncio
    async def test_select_room_starts_wizard(
        self, registry, catalog, mock_api, mock_settings
    ):
        callback = _callback("room_0")
        state = _state(data={"property_slug": "seaside"})

        with patch("bot.handlers.get_room_catalog", return_value=catalog), patch(
            "bot.handlers.get_api_client", return_value=mock_api
        ):
            await select_room(callback, state)

        session = registry.get(CHAT_ID)
        assert isinstance(session, BookingSession)
        assert session.room_type.id == "room-deluxe"
        state.set_state.assert_awaited_with(BookingStates.entering_first_name)
        await registry.close_all()

    @pytest.mark.asyncio
    async def test_select_room_invalid_index(self, registry, catalog):
        callback = _callback("room_7")
        state = _state(data={"property_slug": "seaside"})

        with patch("bot.handlers.get_room_catalog", return_value=catalog):
            await select_room(callback, state)

        assert registry.get(CHAT_ID) is None
        callback.answer.assert_awaited_once()
        assert callback.answer.call_args.kwargs["show_alert"] is True


class TestWizardInput:
    @pytest.mark.asyncio
    async def test_email_moves_to_phone(self, session):
        message = _message("ana@example.com")
        state = _state(current=BookingStates.entering_email.state)

        await handle_guest_detail(message, state)

        assert session.form.email == "ana@example.com"
        state.set_state.assert_awaited_with(BookingStates.entering_phone)

    @pytest.mark.asyncio
    async def test_invalid_guest_details_reprompt_first_error(self, session):
        await session.update_field("first_name", "Ana")
        await session.update_field("email", "not-an-email")
        message = _message("+63 912 345 6789")
        state = _state(current=BookingStates.entering_phone.state)

        await handle_guest_detail(message, state)

        assert session.step == 0
        state.set_state.assert_awaited_with(BookingStates.entering_last_name)
        errors_text = message.answer.call_args_list[0][0][0]
        assert "Last name is required" in errors_text
        assert "Please enter a valid email" in errors_text

    @pytest.mark.asyncio
    async def test_unparseable_date(self, session):
        message = _message("tomorrow")
        state = _state(current=BookingStates.entering_check_in.state)

        await handle_stay_date(message, state)

        assert session.form.check_in_date is None
        state.set_state.assert_not_called()
        assert "YYYY-MM-DD" in message.answer.call_args[0][0]

    @pytest.mark.asyncio
    async def test_check_out_shows_guests(self, session, mock_api):
        await session.update_field("check_in_date", date(2025, 6, 10))
        message = _message("2025-06-13")
        state = _state(current=BookingStates.entering_check_out.state)

        await handle_stay_date(message, state)

        assert session.form.check_out_date == date(2025, 6, 13)
        mock_api.calculate_pricing.assert_awaited_once()
        state.set_state.assert_awaited_with(BookingStates.choosing_guests)

    @pytest.mark.asyncio
    async def test_no_session(self, registry):
        message = _message("Ana")
        state = _state(current=BookingStates.entering_first_name.state)

        await handle_guest_detail(message, state)

        state.clear.assert_awaited_once()
        assert "expired" in message.answer.call_args[0][0]


class TestGuestCounters:
    @pytest.mark.asyncio
    async def test_declined_increment_is_silent(self, session):
        session.form.adults = 2
        session.form.children = 1
        callback = _callback("guests_children_inc")

        await change_guests(callback)

        assert session.form.children == 1
        callback.message.edit_text.assert_not_called()
        callback.answer.assert_awaited_once_with()

    @pytest.mark.asyncio
    async def test_increment_updates_message(self, session):
        callback = _callback("guests_adults_inc")

        await change_guests(callback)

        assert session.form.adults == 2
        callback.message.edit_text.assert_awaited_once()


class TestSubmitAndAcknowledge:
    @pytest.mark.asyncio
    async def test_submit_refused_outside_review(self, session):
        callback = _callback("submit_booking")

        await submit_booking(callback, _state())

        callback.answer.assert_awaited_once()
        assert callback.answer.call_args.kwargs["show_alert"] is True

    @pytest.mark.asyncio
    async def test_acknowledge_while_checking(self, session):
        session.modal.open_checking("cs_123")
        callback = _callback("modal_ack")

        await acknowledge_payment(callback, _state())

        assert session.modal.is_open
        assert callback.answer.call_args.kwargs["show_alert"] is True

    @pytest.mark.asyncio
    async def test_acknowledge_paid_links_success_page(self, registry, session):
        session.modal.open_checking("cs_123")
        session.modal.resolve(
            PollOutcome(status=ModalStatus.PAID, confirmation_number="HTL-0001")
        )
        callback = _callback("modal_ack")
        state = _state()

        with patch("bot.handlers.settings") as mock_settings:
            mock_settings.site_url = "https://hotel.test/"
            await acknowledge_payment(callback, state)

        state.clear.assert_awaited_once()
        assert registry.get(CHAT_ID) is None
        markup = callback.message.answer.call_args.kwargs["reply_markup"]
        assert (
            markup.inline_keyboard[0][0].url
            == "https://hotel.test/booking/success?confirmation=HTL-0001"
        )

    @pytest.mark.asyncio
    async def test_acknowledge_failure_returns_to_review(self, registry, session):
        session.modal.open_failed()
        callback = _callback("modal_ack")
        state = _state()

        await acknowledge_payment(callback, state)

        assert registry.get(CHAT_ID) is session
        state.set_state.assert_awaited_with(BookingStates.reviewing)


def test_register_handlers():
    dp = MagicMock()

    register_handlers(dp)

    dp.include_router.assert_called_once_with(router)
