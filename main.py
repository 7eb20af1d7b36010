"""
Main entry point for the Telegram Room Booking Bot.
Supports both polling and webhook modes.
"""

import asyncio
import sys

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from aiogram.fsm.storage.memory import MemoryStorage
from aiogram.webhook.aiohttp_server import SimpleRequestHandler, setup_application
from aiohttp import web

from api.client import close_api_client
from bot import register_handlers
from bot.sessions import get_room_catalog, get_session_registry
from config import settings
from utils.exceptions import ValidationError
from utils.logging_config import configure_root_logging, setup_logging

WEBHOOK_PATH = "/webhook/telegram"

# Configure logging using centralized configuration
configure_root_logging(settings.log_level)
logger = setup_logging(
    name=__name__, log_level=settings.log_level, log_file="bot.log", log_dir="logs"
)

# Validate configuration
try:
    settings.validate_all_required()
    get_room_catalog()
except (ValueError, ValidationError) as e:
    logger.error(f"Configuration error: {e}")
    sys.exit(1)

# Initialize bot and dispatcher
bot = Bot(
    token=settings.bot_token,
    default=DefaultBotProperties(parse_mode=ParseMode.HTML),
)

dp = Dispatcher(storage=MemoryStorage())


async def on_startup(bot: Bot) -> None:
    """Configure webhook on startup."""
    if settings.bot_webhook_url:
        webhook_url = f"{settings.bot_webhook_url.rstrip('/')}{WEBHOOK_PATH}"

        await bot.set_webhook(
            url=webhook_url,
            allowed_updates=dp.resolve_used_update_types(),
        )
        logger.info(f"Webhook configured: {webhook_url}")
    else:
        logger.info("Webhook URL not configured, using polling mode")


async def on_shutdown(bot: Bot) -> None:
    """Cleanup on shutdown."""
    if settings.bot_webhook_url:
        await bot.delete_webhook()
        logger.info("Webhook removed")

    # Cancels every payment poll still running
    await get_session_registry().close_all()
    await close_api_client()
    logger.info("Booking API client closed")


async def main() -> None:
    """Main async function to run the bot."""
    try:
        logger.info("Starting Telegram Room Booking Bot...")

        register_handlers(dp)
        logger.info("Handlers registered")

        if settings.bot_webhook_url:
            # Webhook mode (production)
            app = web.Application()

            webhook_requests_handler = SimpleRequestHandler(
                dispatcher=dp,
                bot=bot,
            )
            webhook_requests_handler.register(app, path=WEBHOOK_PATH)

            setup_application(app, dp, bot=bot)

            await on_startup(bot)

            logger.info(
                f"Bot webhook server starting on {settings.host}:{settings.port}"
            )
            await web._run_app(
                app,
                host=settings.host,
                port=settings.port,
            )
        else:
            # Polling mode (development)
            logger.info("Bot is running in polling mode. Press Ctrl+C to stop.")
            await dp.start_polling(bot, allowed_updates=dp.resolve_used_update_types())

    except KeyboardInterrupt:
        logger.info("Bot stopped by user")
    except asyncio.CancelledError:
        logger.info("Bot cancelled")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        raise
    finally:
        logger.info("Shutting down...")
        await on_shutdown(bot)

        try:
            await bot.session.close()
            logger.info("Bot session closed")
        except Exception as e:
            logger.error(f"Error closing bot session: {e}", exc_info=True)

        logger.info("Bot shutdown complete")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(0)
