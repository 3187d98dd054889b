"""
Telegram transport for the dialogue engine (aiogram 3, long polling).

Only text messages reach the engine; the chat id is the user identity.
Everything else (stickers, photos, edits) is ignored.

Usage:
    asyncio.run(run_bot(settings))
"""

import asyncio
import logging

from aiogram import Bot, Dispatcher, F, Router
from aiogram.exceptions import TelegramAPIError
from aiogram.types import Message

from rental_bot.config import AppConfig, settings
from rental_bot.conversation.access import AccessGuard
from rental_bot.conversation.dialogue_engine import DialogueEngine
from rental_bot.conversation.session_store import SessionStore
from rental_bot.keyboards import build_keyboard
from rental_bot.notifications import LoggingNotifier, NotificationDispatcher, TelegramNotifier
from rental_bot.schemas.session_schema import ParseMode, Reply
from rental_bot.store.sql_repository import SqlRepository

logger = logging.getLogger(__name__)


async def send_reply(message: Message, reply: Reply) -> None:
    parse_mode = reply.parse_mode.value if reply.parse_mode == ParseMode.MARKDOWN_V2 else None
    try:
        await message.answer(
            reply.text,
            parse_mode=parse_mode,
            reply_markup=build_keyboard(reply.keyboard),
        )
    except TelegramAPIError:
        logger.exception("Failed to deliver reply to chat %s", message.chat.id)


def build_router(engine: DialogueEngine) -> Router:
    """Route every text message of every chat into ``engine``."""
    router = Router(name="rental-desk")

    @router.message(F.text)
    async def on_text(message: Message) -> None:
        reply = await engine.handle_message(message.chat.id, message.text)
        if reply is not None:
            await send_reply(message, reply)

    return router


async def run_bot(config: AppConfig = settings) -> None:
    """Wire store, notifier and engine together and poll until stopped."""
    if not config.telegram.bot_token:
        raise RuntimeError("TELEGRAM_BOT_TOKEN is not set")

    bot = Bot(token=config.telegram.bot_token)
    repository = SqlRepository.from_url(config.store.database_url, echo=config.store.echo)
    await repository.create_schema()

    admin_chat_id = config.telegram.admin_chat_id
    notifier = TelegramNotifier(bot, admin_chat_id) if admin_chat_id else LoggingNotifier()
    notifications = NotificationDispatcher(notifier)
    notifications.start()

    idle_timeout = config.session.idle_timeout_sec
    sessions = SessionStore(idle_timeout_sec=idle_timeout)
    sweeper = asyncio.create_task(sessions.sweep(idle_timeout)) if idle_timeout else None

    engine = DialogueEngine(
        repository,
        AccessGuard(admin_chat_id),
        sessions=sessions,
        notifications=notifications,
        email_attempts=config.commit.email_collision_attempts,
        recent_clients_limit=config.recent_clients_limit,
    )
    dispatcher = Dispatcher()
    dispatcher.include_router(build_router(engine))

    logger.info("Starting Telegram polling")
    try:
        await dispatcher.start_polling(bot)
    finally:
        if sweeper is not None:
            sweeper.cancel()
        await notifications.stop()
        await repository.dispose()
        await bot.session.close()
        logger.info("Telegram bot stopped")
