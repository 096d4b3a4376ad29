"""
FSM States.

State groups for multi-step dialogs.
"""

from bot.states.password_recovery import PasswordRecoveryStates

__all__ = [
    "PasswordRecoveryStates",
]
