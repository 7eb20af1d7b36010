"""
Unit tests for the per-chat session registry.
"""

from datetime import date

import pytest
import pytest_asyncio

from booking.session import BookingSession
from bot.sessions import SessionRegistry


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest_asyncio.fixture
async def registry(clock):
    registry = SessionRegistry(idle_timeout=60, clock=clock)
    yield registry
    await registry.close_all()


@pytest.fixture
def make_session(mock_api, property_, room_type):
    def _make():
        return BookingSession(
            mock_api,
            property_,
            room_type,
            poll_interval=10,
            today_provider=lambda: date(2025, 6, 1),
        )

    return _make


class TestIdleExpiry:
    @pytest.mark.asyncio
    async def test_idle_session_closed_when_another_chat_opens(
        self, registry, clock, make_session
    ):
        abandoned = await registry.open(1, make_session())
        clock.now = 61

        await registry.open(2, make_session())

        assert registry.get(1) is None
        assert abandoned.closed
        assert len(registry) == 1

    @pytest.mark.asyncio
    async def test_recent_use_keeps_session(self, registry, clock, make_session):
        session = await registry.open(1, make_session())
        clock.now = 50
        registry.get(1)
        clock.now = 100

        assert await registry.prune() == 0
        assert registry.get(1) is session
        assert not session.closed

    @pytest.mark.asyncio
    async def test_active_poll_is_kept(self, registry, clock, make_session):
        session = await registry.open(1, make_session())
        session.poller.start("cs_123")
        clock.now = 1000

        assert await registry.prune() == 0
        assert registry.get(1) is session
        assert session.poller.is_active

    @pytest.mark.asyncio
    async def test_no_timeout_keeps_sessions(self, clock, make_session):
        registry = SessionRegistry(clock=clock)
        session = await registry.open(1, make_session())
        clock.now = 10**9

        assert await registry.prune() == 0
        assert registry.get(1) is session
        await registry.close_all()
