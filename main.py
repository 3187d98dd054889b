"""
Rental desk bot entry point.

Starts the Telegram long-polling bot against the configured database, or
the offline console demo for development.

Usage:
    Telegram bot: python main.py
    Console mode: python main.py console
"""

import asyncio
import logging
import sys

from rental_bot.config import settings

logger = logging.getLogger(__name__)


def _run_bot_mode() -> None:
    """Start the Telegram bot (requires TELEGRAM_BOT_TOKEN)."""
    from rental_bot.telegram_bot import run_bot

    try:
        asyncio.run(run_bot(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted")


def _run_console_mode() -> None:
    """Start the offline console demo (no token or database required)."""
    from console_demo import ConsoleSession

    asyncio.run(ConsoleSession().run())


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "console":
        _run_console_mode()
    else:
        _run_bot_mode()
