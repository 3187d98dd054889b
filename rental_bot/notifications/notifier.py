"""
Outbound "new booking" announcements.

A notifier is best-effort by contract: callers log its failures and never
let them reach the operator who created the booking.
"""

import logging
from typing import TYPE_CHECKING, Protocol, Union

from rental_bot.keyboards import build_keyboard
from rental_bot.prompts.message_templates import build_new_booking_notice
from rental_bot.schemas.booking_schema import BookingDetails
from rental_bot.schemas.session_schema import Keyboard

if TYPE_CHECKING:
    from aiogram import Bot

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    async def announce_booking(self, details: BookingDetails) -> None: ...


class LoggingNotifier:
    """Writes announcements to the log. Used when no chat transport is configured."""

    async def announce_booking(self, details: BookingDetails) -> None:
        logger.info(
            "New booking %s: %s on %s",
            details.booking.id,
            details.booking.service_name,
            details.booking.booking_date.date(),
        )


class TelegramNotifier:
    """Posts announcements into the operator's Telegram chat."""

    def __init__(self, bot: "Bot", admin_chat_id: Union[int, str]) -> None:
        self._bot = bot
        self._admin_chat_id = admin_chat_id

    async def announce_booking(self, details: BookingDetails) -> None:
        await self._bot.send_message(
            self._admin_chat_id,
            build_new_booking_notice(details),
            parse_mode="MarkdownV2",
            reply_markup=build_keyboard(Keyboard.MAIN_MENU),
        )
        logger.info("Telegram notification sent for booking %s", details.booking.id)
