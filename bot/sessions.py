"""
Per-chat booking sessions and the room catalog used by the handlers.

A chat has at most one live booking session. Replacing or closing it tears
down its payment poll. Sessions left idle longer than the idle timeout are
closed the next time any chat opens one, unless a payment poll is running.
"""

import logging
import time
from typing import Callable, Dict, Optional

from booking.session import BookingSession
from config import settings
from models.room import RoomCatalog, load_room_catalog

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Maps chat IDs to their live booking session."""

    def __init__(
        self,
        idle_timeout: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.idle_timeout = idle_timeout
        self._clock = clock
        self._sessions: Dict[int, BookingSession] = {}
        self._last_used: Dict[int, float] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, chat_id: int) -> Optional[BookingSession]:
        session = self._sessions.get(chat_id)
        if session is not None:
            self._last_used[chat_id] = self._clock()
        return session

    async def open(self, chat_id: int, session: BookingSession) -> BookingSession:
        """Register a new session, closing the chat's previous one."""
        await self.close(chat_id)
        await self.prune()
        self._sessions[chat_id] = session
        self._last_used[chat_id] = self._clock()
        return session

    async def close(self, chat_id: int) -> None:
        session = self._sessions.pop(chat_id, None)
        self._last_used.pop(chat_id, None)
        if session is not None:
            await session.aclose()
            logger.debug(f"Closed booking session for chat {chat_id}")

    async def prune(self) -> int:
        """
        Close sessions idle for longer than ``idle_timeout``.

        Sessions with an active payment poll are kept.

        Returns:
            Number of sessions closed
        """
        if self.idle_timeout is None:
            return 0

        now = self._clock()
        expired = [
            chat_id
            for chat_id, last_used in self._last_used.items()
            if now - last_used > self.idle_timeout
            and not self._sessions[chat_id].poller.is_active
        ]
        for chat_id in expired:
            await self.close(chat_id)

        if expired:
            logger.info(f"Closed {len(expired)} idle booking sessions")
        return len(expired)

    async def close_all(self) -> None:
        for chat_id in list(self._sessions):
            await self.close(chat_id)
        logger.info("All booking sessions closed")


_registry: Optional[SessionRegistry] = None
_catalog: Optional[RoomCatalog] = None


def get_session_registry() -> SessionRegistry:
    """Get or create the session registry."""
    global _registry
    if _registry is None:
        _registry = SessionRegistry(
            idle_timeout=settings.session_idle_timeout_seconds
        )
    return _registry


def get_room_catalog() -> RoomCatalog:
    """Load the room catalog once from ``settings.room_catalog_path``."""
    global _catalog
    if _catalog is None:
        _catalog = load_room_catalog(settings.room_catalog_path)
        logger.info(
            f"Loaded room catalog with {len(_catalog.properties)} properties"
        )
    return _catalog
