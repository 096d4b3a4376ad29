"""
Password Recovery States.

FSM states for the password recovery flow. Each state mirrors the
input the flow controller is waiting for.
"""

from aiogram.fsm.state import State, StatesGroup


class PasswordRecoveryStates(StatesGroup):
    """States for password recovery."""

    waiting_for_email = State()
    waiting_for_code = State()
    waiting_for_password = State()
    waiting_for_confirmation = State()  # Repeat of the new password
