"""
Request ID middleware.

Assigns unique request ID to every update for tracing.
MUST be the first middleware in the chain.
"""

import uuid
from collections.abc import Awaitable, Callable
from typing import Any

from aiogram import BaseMiddleware
from aiogram.types import TelegramObject, Update
from loguru import logger


class RequestIDMiddleware(BaseMiddleware):
    """
    Request ID middleware.

    Generates unique request_id for each update for tracing across logs.
    """

    async def __call__(
        self,
        handler: Callable[[TelegramObject, dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: dict[str, Any],
    ) -> Any:
        """
        Process update with request ID.

        Args:
            handler: Next handler
            event: Telegram event
            data: Handler data

        Returns:
            Handler result
        """
        request_id = uuid.uuid4().hex[:12]
        data["request_id"] = request_id

        # Store Update object for logger_middleware
        if isinstance(event, Update):
            data["event_update"] = event

        with logger.contextualize(request_id=request_id):
            return await handler(event, data)
