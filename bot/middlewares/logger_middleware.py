"""Logger Middleware - Log all incoming updates."""

from collections.abc import Awaitable, Callable
from typing import Any

from aiogram import BaseMiddleware
from aiogram.types import TelegramObject, Update, User
from loguru import logger


class LoggerMiddleware(BaseMiddleware):
    """
    Logger middleware.

    Logs all incoming updates with request ID tracking. Message text is
    never logged: it may carry a password or a reset code.
    """

    async def __call__(
        self,
        handler: Callable[
            [TelegramObject, dict[str, Any]], Awaitable[Any]
        ],
        event: TelegramObject,
        data: dict[str, Any],
    ) -> Any:
        """Log update and process."""
        request_id = data.get("request_id", "unknown")

        user: User | None = data.get("event_from_user")
        user_id = user.id if user else None

        update: Update | None = data.get("event_update")
        update_type = "unknown"
        if update:
            if update.message:
                update_type = "message"
            elif update.callback_query:
                update_type = "callback_query"

        logger.info(f"[{request_id}] {update_type} from user {user_id}")

        try:
            result = await handler(event, data)
            logger.debug(f"[{request_id}] Handler completed successfully")
            return result

        except Exception as e:
            logger.error(f"[{request_id}] Handler error: {e}")
            raise
