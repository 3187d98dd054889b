"""
Offline console demo: drives the admin dialogue without Telegram.

Uses the real dialogue engine, session store and access guard over the
in-memory record store. New-booking announcements go to the log. No bot
token, no database, no network calls.

Usage:
    python console_demo.py
    python console_demo.py --scenario create
    python console_demo.py --scenario delete
"""

import argparse
import asyncio
import re
from typing import Optional

from rental_bot.conversation.access import AccessGuard
from rental_bot.conversation.dialogue_engine import DialogueEngine
from rental_bot.conversation.session_store import SessionStore
from rental_bot.keyboards import KEYBOARD_LAYOUTS
from rental_bot.notifications import LoggingNotifier, NotificationDispatcher
from rental_bot.schemas.session_schema import Reply
from rental_bot.store.repository import InMemoryRepository

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

OPERATOR_ID = "1001"

_ESCAPED = re.compile(r"\\(.)")


def unescape(text: str) -> str:
    """Strip MarkdownV2 escaping so replies read naturally in a terminal."""
    return _ESCAPED.sub(r"\1", text)


class ConsoleSession:
    """Plays the operator's side of the chat in the terminal."""

    SCENARIOS: dict[str, list[str]] = {
        "create": [
            "/start",
            "➕ Add booking",
            "vacuum",
            "31.4.2025",
            "5.3.2025",
            "Ivan",
            "+375291112233",
            "Minsk, Lenina 1",
            "✅ Confirm",
            "📋 All bookings",
            "📊 Statistics",
        ],
        "delete": [
            "/start",
            "🗑️ Delete booking",
            "42",
            "🗑️ Delete booking",
            "1",
            "✅ Yes",
            "📋 All bookings",
        ],
        "cancel": [
            "➕ Add booking",
            "💨 SC 4 steam cleaner",
            "❌ Cancel",
            "👥 Clients",
        ],
    }

    def __init__(self, user_id: str = OPERATOR_ID) -> None:
        self.user_id = user_id
        self.repository = InMemoryRepository()
        self.notifications = NotificationDispatcher(LoggingNotifier())
        self.engine = DialogueEngine(
            self.repository,
            AccessGuard(OPERATOR_ID),
            sessions=SessionStore(),
            notifications=self.notifications,
        )

    def bot_say(self, reply: Optional[Reply]) -> None:
        if reply is None:
            print(f"{DIM}  >> (ignored){RESET}")
            return
        print(f"{GREEN}{BOLD}[Bot]{RESET} {GREEN}{unescape(reply.text)}{RESET}")
        layout = KEYBOARD_LAYOUTS.get(reply.keyboard)
        if layout:
            buttons = " | ".join(label for row in layout for label in row)
            print(f"{DIM}  [{buttons}]{RESET}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    async def send(self, text: str) -> None:
        print(f"\n{BLUE}[Operator] {RESET}{text}")
        reply = await self.engine.handle_message(self.user_id, text)
        self.bot_say(reply)
        await self.notifications.join()
        self.system_log(f"Step: {self.engine.sessions.step_of(self.user_id).value}")

    async def run_scenario(self, scenario: str) -> None:
        """Auto-play a pre-scripted scenario."""
        steps = self.SCENARIOS.get(scenario)
        if not steps:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return

        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  RENTAL DESK BOT - Scenario: {scenario}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

        self.notifications.start()
        try:
            if scenario == "delete":
                await self._seed()
            for step in steps:
                await self.send(step)
        finally:
            await self.notifications.stop()

        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  Scenario '{scenario}' complete.{RESET}")
        print(f"{DIM}  Announcements delivered: {self.notifications.delivered}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

    async def run(self) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  RENTAL DESK BOT - Console Demo{RESET}")
        print(f"{BOLD}  Type 'quit' to exit{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

        self.notifications.start()
        try:
            await self.send("/start")
            while True:
                user_input = (await asyncio.to_thread(input, f"\n{BLUE}[Operator] {RESET}")).strip()
                if not user_input:
                    continue
                if user_input.lower() in ("quit", "exit", "q"):
                    print(f"\n{DIM}Session ended.{RESET}")
                    return
                reply = await self.engine.handle_message(self.user_id, user_input)
                self.bot_say(reply)
                await self.notifications.join()
        finally:
            await self.notifications.stop()

    async def _seed(self) -> None:
        for text in ("➕ Add booking", "washer", "1.6.2025", "Olga", "+375295554433",
                     "Grodno", "✅ Confirm"):
            await self.engine.handle_message(self.user_id, text)
        self.system_log(f"{YELLOW}Seeded booking #1 for the deletion walkthrough{RESET}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline console demo")
    parser.add_argument(
        "--scenario",
        choices=sorted(ConsoleSession.SCENARIOS),
        default=None,
        help="Auto-play a pre-scripted scenario instead of interactive mode",
    )
    args = parser.parse_args()

    session = ConsoleSession()
    if args.scenario:
        asyncio.run(session.run_scenario(args.scenario))
    else:
        asyncio.run(session.run())


if __name__ == "__main__":
    main()
