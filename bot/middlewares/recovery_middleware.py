"""
Recovery middleware.

Provides the recovery registry to handlers.
"""

from collections.abc import Awaitable, Callable
from typing import Any

from aiogram import BaseMiddleware
from aiogram.types import TelegramObject

from bot.utils.recovery_registry import RecoveryRegistry


class RecoveryMiddleware(BaseMiddleware):
    """Adds recovery_registry to handler data."""

    def __init__(self, registry: RecoveryRegistry) -> None:
        """
        Initialize recovery middleware.

        Args:
            registry: Per-user flow controller registry
        """
        super().__init__()
        self.registry = registry

    async def __call__(
        self,
        handler: Callable[[TelegramObject, dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: dict[str, Any],
    ) -> Any:
        """Drop abandoned flows, then provide registry to handler."""
        await self.registry.evict_idle()
        data["recovery_registry"] = self.registry
        return await handler(event, data)
