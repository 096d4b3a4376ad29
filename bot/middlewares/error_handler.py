"""
Global Error Handler Middleware.

Catches unhandled exceptions and sends a friendly message to the user.
Never shows technical details.
"""

from typing import Any, Awaitable, Callable

from aiogram import BaseMiddleware
from aiogram.types import Message, TelegramObject, Update
from loguru import logger

FRIENDLY_ERROR = (
    "❌ A temporary error occurred.\n\n"
    "Please try again later."
)


class ErrorHandlerMiddleware(BaseMiddleware):
    """
    Global error handler middleware.

    - Logs all exceptions
    - Sends friendly message to user (no technical info!)
    """

    async def __call__(
        self,
        handler: Callable[[TelegramObject, dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: dict[str, Any],
    ) -> Any:
        """Execute middleware."""
        try:
            return await handler(event, data)
        except Exception as e:
            logger.exception(f"Unhandled exception: {e}")

            message = event.message if isinstance(event, Update) else event
            if isinstance(message, Message):
                try:
                    await message.answer(FRIENDLY_ERROR)
                except Exception as user_notify_error:
                    logger.warning(f"Failed to notify user: {user_notify_error}")

            # Return None to prevent crash
            return None
