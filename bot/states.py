"""
FSM (Finite State Machine) states for bot conversation flow.
"""

from aiogram.fsm.state import State, StatesGroup


class BookingStates(StatesGroup):
    """States for the room booking flow."""

    # Step 0: guest details
    entering_first_name = State()
    entering_last_name = State()
    entering_email = State()
    entering_phone = State()

    # Step 1: stay dates and occupancy
    entering_check_in = State()
    entering_check_out = State()
    choosing_guests = State()

    # Step 2: review and pay
    entering_requests = State()
    reviewing = State()
    awaiting_payment = State()
