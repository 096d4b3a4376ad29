"""
Reply keyboards.

Reply keyboard builders for the password recovery dialog.
"""

from aiogram.types import KeyboardButton, ReplyKeyboardMarkup
from aiogram.utils.keyboard import ReplyKeyboardBuilder

from bot.utils.constants import BUTTON_LABELS


def recovery_keyboard(can_retry: bool = False) -> ReplyKeyboardMarkup:
    """
    Password recovery keyboard.

    Args:
        can_retry: Whether to offer the retry button

    Returns:
        ReplyKeyboardMarkup with recovery options
    """
    builder = ReplyKeyboardBuilder()

    if can_retry:
        builder.row(
            KeyboardButton(text=BUTTON_LABELS["RETRY"]),
        )
    builder.row(
        KeyboardButton(text=BUTTON_LABELS["RESTART"]),
        KeyboardButton(text=BUTTON_LABELS["CANCEL"]),
    )

    return builder.as_markup(resize_keyboard=True)


def entry_keyboard() -> ReplyKeyboardMarkup:
    """
    Keyboard shown outside the flow.

    Returns:
        ReplyKeyboardMarkup with the recovery entry button
    """
    builder = ReplyKeyboardBuilder()
    builder.row(
        KeyboardButton(text=BUTTON_LABELS["RECOVER"]),
    )
    return builder.as_markup(resize_keyboard=True)
