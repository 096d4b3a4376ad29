"""
Recovery registry.

Keeps one FlowController per Telegram user. Sessions live in memory
only and are dropped when the flow ends or sits idle too long.
"""

import time
from collections.abc import Callable

from loguru import logger

from app.config.settings import Settings, settings as default_settings
from app.services.flow_controller import FlowController
from app.services.recovery_backend import RecoveryBackend


class RecoveryRegistry:
    """In-memory map of telegram_id -> FlowController."""

    def __init__(
        self,
        backend: RecoveryBackend,
        config: Settings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize registry.

        Args:
            backend: Recovery backend shared by all controllers
            config: Settings passed to every controller
            clock: Monotonic time source for idle tracking
        """
        self.backend = backend
        self.config = config or default_settings
        self._clock = clock
        self._controllers: dict[int, FlowController] = {}
        self._last_seen: dict[int, float] = {}

    def get(self, telegram_id: int) -> FlowController | None:
        controller = self._controllers.get(telegram_id)
        if controller is not None:
            self._last_seen[telegram_id] = self._clock()
        return controller

    def get_or_create(self, telegram_id: int) -> FlowController:
        controller = self._controllers.get(telegram_id)
        if controller is None:
            controller = FlowController(self.backend, self.config)
            self._controllers[telegram_id] = controller
            logger.info(
                f"Created recovery flow {controller.flow_id}",
                extra={"telegram_id": telegram_id},
            )
        self._last_seen[telegram_id] = self._clock()
        return controller

    async def discard(self, telegram_id: int) -> None:
        self._last_seen.pop(telegram_id, None)
        controller = self._controllers.pop(telegram_id, None)
        if controller is not None:
            await controller.close()

    async def evict_idle(self) -> int:
        """
        Drop flows nobody touched within flow_idle_timeout.

        Flows with a request in flight are kept until it settles.

        Returns:
            Number of flows dropped
        """
        cutoff = self._clock() - self.config.flow_idle_timeout
        idle = [
            telegram_id
            for telegram_id, seen in self._last_seen.items()
            if seen < cutoff and not self._controllers[telegram_id].session.is_loading
        ]
        for telegram_id in idle:
            await self.discard(telegram_id)

        if idle:
            logger.info(f"Dropped {len(idle)} idle recovery flows")
        return len(idle)

    async def close(self) -> None:
        for telegram_id in list(self._controllers):
            await self.discard(telegram_id)

    def __len__(self) -> int:
        return len(self._controllers)
