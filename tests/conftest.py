"""
Pytest configuration and shared fixtures.
"""

from datetime import date
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from api.client import BookingApiClient
from models.booking import CheckoutSession
from models.pricing import PricingBreakdown
from models.room import Property, RoomCatalog, RoomType

TODAY = date(2025, 6, 1)


@pytest.fixture
def mock_settings():
    """Mock settings used by the booking session and the bot."""
    with patch("booking.session.settings") as mock_settings:
        mock_settings.bot_token = "test_token"
        mock_settings.booking_api_base_url = "https://api.test"
        mock_settings.site_url = "https://hotel.test"
        mock_settings.payment_poll_interval_seconds = 0.01
        mock_settings.payment_poll_max_attempts = 5
        mock_settings.payment_status_max_retries = 0
        mock_settings.payment_status_retry_delay = 0.01
        mock_settings.payment_status_retry_backoff = 2.0
        mock_settings.timezone = "Asia/Manila"
        mock_settings.environment = "test"
        mock_settings.bot_webhook_url = None
        yield mock_settings


@pytest.fixture
def room_type():
    """Room for at most 3 guests: 2 adults and 1 child."""
    return RoomType(
        id="room-deluxe",
        display_name="Deluxe Ocean View",
        max_occupancy=3,
        max_adults=2,
        max_children=1,
        base_rate=5000,
    )


@pytest.fixture
def property_(room_type):
    return Property(
        id="bu-seaside",
        display_name="Seaside Resort",
        slug="seaside",
        location="Boracay",
        room_types=[room_type],
    )


@pytest.fixture
def catalog(property_):
    return RoomCatalog(properties=[property_])


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def mock_api():
    """Booking API client with every endpoint mocked."""
    api = MagicMock(spec=BookingApiClient)
    api.calculate_pricing = AsyncMock(
        return_value=PricingBreakdown(
            subtotal=15000, nights=3, taxes=1800, service_fee=750, total_amount=17550
        )
    )
    api.create_booking_with_payment = AsyncMock(
        return_value=CheckoutSession(
            checkout_url="https://pay.test/cs_123",
            payment_session_id="cs_123",
            reservation_id="res-1",
        )
    )
    api.get_payment_status = AsyncMock()
    return api
