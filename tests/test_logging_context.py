"""Tests for the chat-user stamp on log lines."""

import asyncio
import io
import logging

import pytest

from rental_bot.logging_context import (
    NO_CHAT_USER,
    build_log_handler,
    chat_user_scope,
    get_chat_user,
)

from tests.conftest import ADMIN_ID


@pytest.fixture
def captured():
    """Route one logger through a stamping handler into a string buffer."""
    stream = io.StringIO()
    handler = build_log_handler(stream)
    attached = []

    def attach(name: str, level: int = logging.DEBUG) -> logging.Logger:
        logger = logging.getLogger(name)
        attached.append((logger, logger.level))
        logger.addHandler(handler)
        logger.setLevel(level)
        return logger

    yield attach, stream
    for logger, level in attached:
        logger.removeHandler(handler)
        logger.setLevel(level)


class TestChatUserScope:
    def test_scope_sets_and_restores(self):
        assert get_chat_user() == NO_CHAT_USER
        with chat_user_scope("1001"):
            assert get_chat_user() == "1001"
            with chat_user_scope("2002"):
                assert get_chat_user() == "2002"
            assert get_chat_user() == "1001"
        assert get_chat_user() == NO_CHAT_USER

    @pytest.mark.asyncio
    async def test_scope_is_per_task(self):
        async def serve(user_id: str) -> str:
            with chat_user_scope(user_id):
                await asyncio.sleep(0)
                return get_chat_user()

        assert await asyncio.gather(serve("1"), serve("2")) == ["1", "2"]


class TestRenderedLines:
    def test_line_shows_chat_user(self, captured):
        attach, stream = captured
        logger = attach("rental_bot.tests.render")
        with chat_user_scope("1001"):
            logger.info("Booking created")
        line = stream.getvalue()
        assert "[1001] [rental_bot.tests.render] INFO: Booking created" in line

    def test_line_outside_a_message(self, captured):
        attach, stream = captured
        attach("rental_bot.tests.startup").warning("starting")
        assert f"[{NO_CHAT_USER}] [rental_bot.tests.startup] WARNING: starting" in stream.getvalue()

    def test_foreign_logger_is_stamped(self, captured):
        attach, stream = captured
        with chat_user_scope("1001"):
            attach("aiogram.tests.event").info("update handled")
        assert "[1001] [aiogram.tests.event]" in stream.getvalue()

    @pytest.mark.asyncio
    async def test_engine_logs_carry_the_user(self, captured, engine):
        attach, stream = captured
        attach("rental_bot.conversation.dialogue_engine")
        await engine.handle_message(int(ADMIN_ID), "➕ Add booking")
        lines = [line for line in stream.getvalue().splitlines() if line]
        assert lines
        assert all(f"[{ADMIN_ID}]" in line for line in lines)
        assert get_chat_user() == NO_CHAT_USER
