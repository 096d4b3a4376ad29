"""
Keyboards.

Telegram reply keyboards of the recovery dialog.
"""

from bot.keyboards.reply import entry_keyboard, recovery_keyboard

__all__ = [
    "entry_keyboard",
    "recovery_keyboard",
]
