"""Shared test fixtures and helpers."""

from datetime import date, datetime
from typing import Optional

import pytest

from rental_bot.conversation.access import AccessGuard
from rental_bot.conversation.dialogue_engine import DialogueEngine
from rental_bot.conversation.session_store import SessionStore
from rental_bot.conversation.validators import MARKDOWN_SPECIAL_CHARS
from rental_bot.notifications.dispatcher import NotificationDispatcher
from rental_bot.schemas.booking_schema import BookingDetails, NewClient
from rental_bot.schemas.session_schema import Reply
from rental_bot.store.passwords import hash_password
from rental_bot.store.repository import InMemoryRepository

ADMIN_ID = "1001"
GUEST_ID = "2002"
TODAY = date(2025, 3, 5)

VACUUM = "Vacuum cleaner rental Karcher Puzzi 8/1 C"
STEAM = "Steam cleaner rental Karcher SC 4 Deluxe"
WASHER = "Pressure washer rental Karcher K 5 Full Control"

CREATE_FLOW = [
    "➕ Add booking",
    "vacuum",
    "5.3.2025",
    "Ivan",
    "+375291112233",
    "Minsk",
]


def fast_hash(plain: str) -> str:
    return hash_password(plain, rounds=4)


class RecordingNotifier:
    """Notifier double that remembers announcements, or fails on demand."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.announced: list[BookingDetails] = []

    async def announce_booking(self, details: BookingDetails) -> None:
        if self.fail:
            raise ConnectionError("chat transport unavailable")
        self.announced.append(details)


def make_new_client(
    first_name: str = "Ivan",
    phone_number: Optional[str] = "+375291112233",
    email: str = "client_000001abc@clients.test",
) -> NewClient:
    return NewClient(
        first_name=first_name,
        phone_number=phone_number,
        email=email,
        password_hash="$2b$04$notarealhashnotarealhashnotarealhashnotarealhashnot",
    )


def make_engine(repository, **kwargs) -> DialogueEngine:
    kwargs.setdefault("sessions", SessionStore())
    kwargs.setdefault("today", lambda: TODAY)
    kwargs.setdefault("password_hasher", fast_hash)
    kwargs.setdefault("email_attempts", 2)
    return DialogueEngine(repository, AccessGuard(ADMIN_ID), **kwargs)


async def drive(engine: DialogueEngine, user_id: str, *messages: str) -> list[Optional[Reply]]:
    """Send ``messages`` in order and collect the replies."""
    return [await engine.handle_message(user_id, text) for text in messages]


def assert_markdown_safe(text: str) -> None:
    """Every special character outside bold/italic markers must be escaped."""
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            assert i + 1 < len(text), f"dangling escape in {text!r}"
            assert text[i + 1] in MARKDOWN_SPECIAL_CHARS, f"needless escape at {i} in {text!r}"
            i += 2
            continue
        assert ch not in MARKDOWN_SPECIAL_CHARS or ch in "*_", f"unescaped {ch!r} at {i} in {text!r}"
        i += 1


@pytest.fixture
def repository():
    return InMemoryRepository()


@pytest.fixture
def sessions():
    return SessionStore()


@pytest.fixture
def guard():
    return AccessGuard(ADMIN_ID)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def dispatcher(notifier):
    return NotificationDispatcher(notifier)


@pytest.fixture
def engine(repository, sessions, dispatcher):
    return make_engine(repository, sessions=sessions, notifications=dispatcher)


@pytest.fixture
def booking_day():
    return datetime(2025, 3, 5)
