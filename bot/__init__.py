"""Telegram bot handlers and states."""

from .handlers import register_handlers
from .states import BookingStates

__all__ = [
    "register_handlers",
    "BookingStates",
]
