"""Tests for import chains and module integrity.

Ensures all public modules can be imported without errors and
that re-exports from __init__.py files work correctly.
"""

import pytest


class TestSchemaImports:
    def test_import_booking_schema(self):
        from rental_bot.schemas.booking_schema import Booking, BookingDetails, Client, NewClient
        assert Booking is not None

    def test_import_session_schema(self):
        from rental_bot.schemas.session_schema import DialogueStep, Keyboard, Reply, Session
        session = Session(user_id="1", step=DialogueStep.AWAITING_SERVICE)
        assert session.draft.service_name is None
        assert session.delete_candidate is None
        assert Reply(text="x").keyboard == Keyboard.NONE


class TestConversationImports:
    def test_import_conversation_package(self):
        from rental_bot.conversation import (
            AccessGuard, Action, Intent, SessionStore, Transition, classify, resolve,
        )
        assert callable(classify)
        assert callable(resolve)

    def test_import_dialogue_engine(self):
        from rental_bot.conversation.dialogue_engine import DialogueEngine
        assert DialogueEngine is not None


class TestStoreImports:
    def test_import_repositories(self):
        from rental_bot.store.repository import InMemoryRepository, Repository
        from rental_bot.store.sql_repository import SqlRepository
        assert InMemoryRepository is not None
        assert SqlRepository is not None

    def test_import_models(self):
        from rental_bot.store.models import Base, BookingRow, ClientRow
        assert set(Base.metadata.tables) == {"clients", "bookings"}


class TestPromptImports:
    def test_import_prompts(self):
        from rental_bot.prompts import message_texts
        from rental_bot.prompts.message_templates import build_confirmation_prompt
        assert message_texts.MAIN_MENU
        assert callable(build_confirmation_prompt)


class TestNotificationImports:
    def test_import_notifications_package(self):
        from rental_bot.notifications import (
            LoggingNotifier, NotificationDispatcher, Notifier, TelegramNotifier,
        )
        assert NotificationDispatcher is not None


class TestConfigImport:
    def test_import_config(self):
        from rental_bot.config import settings
        assert settings.commit.email_collision_attempts >= 2
        assert settings.store.database_url


class TestEntryPoints:
    def test_console_session_imports(self):
        from console_demo import ConsoleSession
        session = ConsoleSession()
        assert session.user_id == "1001"
        assert session.engine.sessions.step_of(session.user_id).value == "idle"

    def test_telegram_module_imports(self):
        from rental_bot.telegram_bot import build_router, run_bot
        assert callable(run_bot)

    @pytest.mark.asyncio
    async def test_delete_scenario_runs_end_to_end(self, capsys):
        from console_demo import ConsoleSession
        session = ConsoleSession()
        await session.run_scenario("delete")
        assert await session.repository.list_bookings() == []
        assert "Booking deleted" in capsys.readouterr().out
