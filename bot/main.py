"""
Bot main entry point.

Builds the Telegram front-end of the password recovery flow with aiogram 3.x.
The recovery backend is injected by the embedding application: this
package owns no network transport to it.
"""

import sys

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from aiogram.fsm.storage.memory import MemoryStorage
from aiogram.types import ErrorEvent
from loguru import logger

from app.config.settings import Settings, settings as default_settings
from app.services.recovery_backend import RecoveryBackend
from bot.handlers import password_recovery
from bot.middlewares.error_handler import ErrorHandlerMiddleware
from bot.middlewares.logger_middleware import LoggerMiddleware
from bot.middlewares.recovery_middleware import RecoveryMiddleware
from bot.middlewares.request_id import RequestIDMiddleware
from bot.utils.recovery_registry import RecoveryRegistry


def setup_logging(config: Settings) -> None:
    """Configure loguru sinks."""
    logger.remove()
    logger.add(sys.stderr, level=config.log_level)
    logger.add(
        config.log_file,
        rotation="1 day",
        retention="7 days",
        level=config.log_level,
    )


def create_dispatcher(
    backend: RecoveryBackend,
    config: Settings | None = None,
) -> tuple[Dispatcher, RecoveryRegistry]:
    """
    Build dispatcher with middlewares and the recovery router.

    Args:
        backend: Recovery backend collaborator
        config: Settings, defaults to the global settings

    Returns:
        Tuple of (dispatcher, registry)
    """
    registry = RecoveryRegistry(backend, config or default_settings)

    # Recovery sessions are in-memory by design, so is the FSM storage
    dp = Dispatcher(storage=MemoryStorage())

    # RequestID must be first
    dp.update.middleware(RequestIDMiddleware())
    dp.update.middleware(ErrorHandlerMiddleware())
    dp.update.middleware(LoggerMiddleware())
    dp.update.middleware(RecoveryMiddleware(registry))

    @dp.error()
    async def error_handler(event: ErrorEvent) -> bool:
        """Global error handler for unhandled exceptions."""
        logger.exception(
            f"Unhandled error in bot: {event.exception.__class__.__name__}: "
            f"{event.exception}",
        )
        return True  # Mark error as handled

    dp.include_router(password_recovery.router)
    return dp, registry


async def main(backend: RecoveryBackend, config: Settings | None = None) -> None:
    """Initialize and run the bot."""
    config = config or default_settings
    setup_logging(config)

    logger.info("Starting password recovery bot...")

    if not config.telegram_bot_token:
        raise ValueError("TELEGRAM_BOT_TOKEN is required to run the bot")

    bot = Bot(
        token=config.telegram_bot_token,
        default=DefaultBotProperties(
            parse_mode=ParseMode.MARKDOWN,
        ),
    )
    dp, registry = create_dispatcher(backend, config)

    try:
        bot_info = await bot.get_me()
        logger.info(f"Bot connected: @{bot_info.username} (ID: {bot_info.id})")
    except Exception as e:
        logger.error(f"Failed to connect to Telegram API: {e}")
        raise

    try:
        logger.info("Starting polling...")
        await dp.start_polling(
            bot, allowed_updates=dp.resolve_used_update_types()
        )
    finally:
        await registry.close()
        await bot.session.close()
        logger.info("Graceful shutdown complete")
