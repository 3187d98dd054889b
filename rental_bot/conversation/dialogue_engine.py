"""
Dialogue engine: the admin console's conversational state machine.

Each incoming message is classified into an intent, matched against the
transition table, gated by the access guard when the intent is privileged,
and dispatched to one handler. Handlers validate input, mutate the user's
session, and call the record store only at the two commit points
(confirming a new booking, confirming a deletion).

Usage:
    engine = DialogueEngine(repository, AccessGuard(admin_id))
    reply = await engine.handle_message(user_id, "➕ Add booking")
"""

import asyncio
import logging
from datetime import date, datetime
from typing import Awaitable, Callable, Optional

from rental_bot.config import settings
from rental_bot.conversation.access import AccessGuard
from rental_bot.conversation.intents import PRIVILEGED_INTENTS, classify
from rental_bot.conversation.session_store import SessionStore
from rental_bot.conversation.state_machine import Action, Transition, resolve
from rental_bot.conversation.validators import parse_booking_date, parse_identifier
from rental_bot.errors import (
    AccessDenied,
    CalendarDateError,
    ConstraintViolation,
    DateFormatError,
    IdentifierError,
    RepositoryError,
)
from rental_bot.logging_context import chat_user_scope
from rental_bot.notifications.dispatcher import NotificationDispatcher
from rental_bot.prompts import message_texts as texts
from rental_bot.prompts.message_templates import (
    build_all_bookings,
    build_booking_created,
    build_booking_deleted,
    build_booking_failed,
    build_booking_not_found,
    build_confirmation_prompt,
    build_delete_prompt,
    build_no_bookings_today,
    build_recent_clients,
    build_stats,
    build_today_bookings,
)
from rental_bot.schemas.booking_schema import Booking, BookingDetails, Client, NewClient
from rental_bot.schemas.session_schema import BookingDraft, DialogueStep, Keyboard, Reply, Session
from rental_bot.store.passwords import hash_password, placeholder_email, temporary_password
from rental_bot.store.repository import EMAIL_CONSTRAINT, Repository
from rental_bot.store.services import match_service_key, match_service_label

logger = logging.getLogger(__name__)

Handler = Callable[[str, str, Transition], Awaitable[Optional[Reply]]]


class DialogueEngine:
    """
    Per-user dialogue driver over an injected session store.

    Messages from one user are handled strictly in order under that user's
    lock; different users never block each other.
    """

    def __init__(
        self,
        repository: Repository,
        guard: AccessGuard,
        sessions: Optional[SessionStore] = None,
        notifications: Optional[NotificationDispatcher] = None,
        today: Callable[[], date] = date.today,
        email_factory: Callable[[], str] = placeholder_email,
        password_hasher: Callable[[str], str] = hash_password,
        email_attempts: int = settings.commit.email_collision_attempts,
        recent_clients_limit: int = settings.recent_clients_limit,
    ) -> None:
        self._repository = repository
        self._guard = guard
        self._sessions = sessions if sessions is not None else SessionStore(
            idle_timeout_sec=settings.session.idle_timeout_sec
        )
        self._notifications = notifications
        self._today = today
        self._email_factory = email_factory
        self._password_hasher = password_hasher
        self._email_attempts = email_attempts
        self._recent_clients_limit = recent_clients_limit
        self._handlers: dict[Action, Handler] = {
            Action.GREET: self._greet,
            Action.GO_BACK: self._go_back,
            Action.CANCEL: self._cancel,
            Action.LIST_ALL: self._list_all,
            Action.LIST_TODAY: self._list_today,
            Action.LIST_CLIENTS: self._list_clients,
            Action.SHOW_STATS: self._show_stats,
            Action.BEGIN_CREATE: self._begin_create,
            Action.SELECT_SERVICE: self._select_service,
            Action.SERVICE_OUT_OF_FLOW: self._service_out_of_flow,
            Action.REPROMPT_SERVICE: self._reprompt_service,
            Action.ENTER_DATE: self._enter_date,
            Action.ENTER_CLIENT_NAME: self._enter_client_name,
            Action.ENTER_CLIENT_PHONE: self._enter_client_phone,
            Action.ENTER_CLIENT_ADDRESS: self._enter_client_address,
            Action.COMMIT: self._commit,
            Action.REPROMPT_CONFIRMATION: self._reprompt_confirmation,
            Action.SESSION_EXPIRED: self._session_expired,
            Action.BEGIN_DELETE: self._begin_delete,
            Action.ENTER_DELETE_ID: self._enter_delete_id,
            Action.DELETE: self._delete,
            Action.KEEP: self._keep,
            Action.REPROMPT_DELETE_CONFIRMATION: self._reprompt_delete_confirmation,
        }
        missing = set(Action) - set(self._handlers)
        if missing:
            raise RuntimeError(f"No handler for actions: {sorted(a.value for a in missing)}")

    @property
    def sessions(self) -> SessionStore:
        return self._sessions

    # ------------------------------------------------------------------ #
    # Entry point
    # ------------------------------------------------------------------ #

    async def handle_message(self, user_id: object, text: str) -> Optional[Reply]:
        """Process one chat message. Returns None when the message is ignored."""
        user_id = str(user_id)
        with chat_user_scope(user_id):
            return await self._handle(user_id, text)

    async def _handle(self, user_id: str, text: str) -> Optional[Reply]:
        async with self._sessions.lock(user_id):
            step = self._sessions.step_of(user_id)
            intent = classify(step, text)
            transition = resolve(step, intent)
            if transition is None:
                return None

            if intent in PRIVILEGED_INTENTS:
                try:
                    self._guard.require(user_id)
                except AccessDenied:
                    return Reply(text=texts.ACCESS_DENIED, keyboard=Keyboard.BACK_ONLY)

            handler = self._handlers[transition.action]
            try:
                reply = await handler(user_id, text, transition)
            except Exception:
                logger.exception(
                    "Unhandled error at step %s on intent %s; session discarded",
                    step.value, intent.value,
                )
                self._sessions.discard(user_id)
                return Reply(text=texts.UNEXPECTED_FAILURE, keyboard=Keyboard.MAIN_MENU)

            logger.debug(
                "%s --%s/%s--> %s",
                step.value, intent.value, transition.action.value,
                self._sessions.step_of(user_id).value,
            )
            return reply

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _require_session(self, user_id: str, transition: Transition) -> Session:
        session = self._sessions.get(user_id)
        if session is None or (
            transition.from_step is not None and session.step != transition.from_step
        ):
            raise RuntimeError(f"No session at {transition.from_step} for action {transition.action.value}")
        return session

    def _advance(self, session: Session, transition: Transition) -> None:
        if transition.to_step is None:
            session.touch()
        elif transition.to_step == DialogueStep.IDLE:
            self._sessions.discard(session.user_id)
        else:
            session.advance(transition.to_step)

    def _fetch_failed(self, user_id: str, what: str, exc: Exception) -> Reply:
        logger.error("%s: %s", what, exc)
        self._sessions.discard(user_id)
        return Reply(text=texts.FETCH_FAILED, keyboard=Keyboard.BACK_ONLY)

    # ------------------------------------------------------------------ #
    # Navigation
    # ------------------------------------------------------------------ #

    async def _greet(self, user_id: str, text: str, transition: Transition) -> Reply:
        self._sessions.discard(user_id)
        if self._guard.is_privileged(user_id):
            return Reply(text=texts.GREETING_OPERATOR, keyboard=Keyboard.MAIN_MENU)
        return Reply(text=texts.GREETING_GUEST, keyboard=Keyboard.MAIN_MENU)

    async def _go_back(self, user_id: str, text: str, transition: Transition) -> Reply:
        self._sessions.discard(user_id)
        return Reply(text=texts.MAIN_MENU, keyboard=Keyboard.MAIN_MENU)

    async def _cancel(self, user_id: str, text: str, transition: Transition) -> Reply:
        if self._sessions.discard(user_id):
            logger.info("Dialogue cancelled by user")
        return Reply(text=texts.ACTION_CANCELLED, keyboard=Keyboard.MAIN_MENU)

    async def _session_expired(self, user_id: str, text: str, transition: Transition) -> Reply:
        session = self._sessions.get(user_id)
        if session is not None:
            self._advance(session, transition)
        return Reply(text=texts.SESSION_EXPIRED, keyboard=Keyboard.MAIN_MENU)

    # ------------------------------------------------------------------ #
    # Read-only operator commands
    # ------------------------------------------------------------------ #

    async def _list_all(self, user_id: str, text: str, transition: Transition) -> Reply:
        try:
            rows = await self._repository.list_bookings()
        except RepositoryError as exc:
            return self._fetch_failed(user_id, "Listing bookings failed", exc)
        if not rows:
            return Reply(text=texts.NO_BOOKINGS, keyboard=Keyboard.BACK_ONLY)
        return Reply(text=build_all_bookings(rows), keyboard=Keyboard.BACK_ONLY)

    async def _list_today(self, user_id: str, text: str, transition: Transition) -> Reply:
        today = self._today()
        try:
            rows = await self._repository.list_bookings_on(today)
        except RepositoryError as exc:
            return self._fetch_failed(user_id, "Listing today's bookings failed", exc)
        if not rows:
            return Reply(text=build_no_bookings_today(today), keyboard=Keyboard.BACK_ONLY)
        return Reply(text=build_today_bookings(today, rows), keyboard=Keyboard.BACK_ONLY)

    async def _list_clients(self, user_id: str, text: str, transition: Transition) -> Reply:
        try:
            rows = await self._repository.list_recent_clients(self._recent_clients_limit)
        except RepositoryError as exc:
            return self._fetch_failed(user_id, "Listing clients failed", exc)
        if not rows:
            return Reply(text=texts.NO_CLIENTS, keyboard=Keyboard.BACK_ONLY)
        return Reply(text=build_recent_clients(rows), keyboard=Keyboard.BACK_ONLY)

    async def _show_stats(self, user_id: str, text: str, transition: Transition) -> Reply:
        try:
            stats = await self._repository.get_stats(self._today())
        except RepositoryError as exc:
            return self._fetch_failed(user_id, "Collecting statistics failed", exc)
        return Reply(text=build_stats(stats), keyboard=Keyboard.BACK_ONLY)

    # ------------------------------------------------------------------ #
    # Creation flow
    # ------------------------------------------------------------------ #

    async def _begin_create(self, user_id: str, text: str, transition: Transition) -> Reply:
        self._sessions.start(user_id, transition.to_step)
        return Reply(text=texts.CHOOSE_SERVICE, keyboard=Keyboard.SERVICE_PICKER)

    async def _select_service(self, user_id: str, text: str, transition: Transition) -> Reply:
        session = self._require_session(user_id, transition)
        session.draft.service_name = match_service_label(text.strip()) or match_service_key(text)
        self._advance(session, transition)
        return Reply(text=texts.ASK_DATE, keyboard=Keyboard.NONE)

    async def _service_out_of_flow(self, user_id: str, text: str, transition: Transition) -> Reply:
        return Reply(text=texts.SERVICE_OUT_OF_FLOW, keyboard=Keyboard.BACK_ONLY)

    async def _reprompt_service(self, user_id: str, text: str, transition: Transition) -> Reply:
        return Reply(text=texts.CHOOSE_SERVICE_AGAIN, keyboard=Keyboard.SERVICE_PICKER)

    async def _enter_date(self, user_id: str, text: str, transition: Transition) -> Reply:
        session = self._require_session(user_id, transition)
        try:
            booking_day = parse_booking_date(text)
        except DateFormatError:
            logger.debug("Rejected date format: %r", text)
            return Reply(text=texts.BAD_DATE_FORMAT, keyboard=Keyboard.NONE)
        except CalendarDateError:
            logger.debug("Rejected calendar date: %r", text)
            return Reply(text=texts.BAD_CALENDAR_DATE, keyboard=Keyboard.NONE)
        session.draft.booking_date = datetime.combine(booking_day, datetime.min.time())
        self._advance(session, transition)
        return Reply(text=texts.ASK_CLIENT_NAME, keyboard=Keyboard.NONE)

    async def _enter_client_name(self, user_id: str, text: str, transition: Transition) -> Reply:
        session = self._require_session(user_id, transition)
        session.draft.client_name = text
        self._advance(session, transition)
        return Reply(text=texts.ASK_CLIENT_PHONE, keyboard=Keyboard.NONE)

    async def _enter_client_phone(self, user_id: str, text: str, transition: Transition) -> Reply:
        session = self._require_session(user_id, transition)
        session.draft.client_phone = text
        self._advance(session, transition)
        return Reply(text=texts.ASK_CLIENT_ADDRESS, keyboard=Keyboard.NONE)

    async def _enter_client_address(self, user_id: str, text: str, transition: Transition) -> Reply:
        session = self._require_session(user_id, transition)
        session.draft.client_address = text
        self._advance(session, transition)
        return Reply(text=build_confirmation_prompt(session.draft), keyboard=Keyboard.CONFIRM_CANCEL)

    async def _reprompt_confirmation(self, user_id: str, text: str, transition: Transition) -> Reply:
        return Reply(text=texts.CONFIRM_OR_CANCEL, keyboard=Keyboard.CONFIRM_CANCEL)

    async def _commit(self, user_id: str, text: str, transition: Transition) -> Reply:
        """Create client and booking; the session ends whatever happens."""
        session = self._require_session(user_id, transition)
        draft = session.draft
        try:
            if not draft.is_complete():
                logger.warning("Confirm pressed with an incomplete draft")
                return Reply(text=texts.SESSION_EXPIRED, keyboard=Keyboard.MAIN_MENU)
            try:
                client, booking = await self._create_records(draft)
            except RepositoryError as exc:
                logger.error("Booking creation failed: %s", exc)
                return Reply(text=build_booking_failed(str(exc)), keyboard=Keyboard.MAIN_MENU)
        finally:
            self._advance(session, transition)

        logger.info("Booking %s created for client %s via chat", booking.id, client.id)
        if self._notifications is not None:
            self._notifications.publish(BookingDetails(booking=booking, client=client))
        return Reply(text=build_booking_created(draft, booking), keyboard=Keyboard.MAIN_MENU)

    async def _create_records(self, draft: BookingDraft) -> tuple[Client, Booking]:
        """Insert client+booking atomically, regenerating a colliding placeholder email."""
        password_hash = await asyncio.to_thread(self._password_hasher, temporary_password())
        attempt = 1
        while True:
            new_client = NewClient(
                first_name=draft.client_name,
                phone_number=draft.client_phone,
                email=self._email_factory(),
                address=draft.client_address or None,
                password_hash=password_hash,
            )
            try:
                return await self._repository.create_client_with_booking(
                    new_client,
                    service_name=draft.service_name,
                    booking_date=draft.booking_date,
                    address=draft.client_address or None,
                )
            except ConstraintViolation as exc:
                if exc.constraint != EMAIL_CONSTRAINT or attempt >= self._email_attempts:
                    raise
                logger.warning(
                    "Placeholder email %s already taken (attempt %d); retrying",
                    new_client.email, attempt,
                )
                attempt += 1

    # ------------------------------------------------------------------ #
    # Deletion flow
    # ------------------------------------------------------------------ #

    async def _begin_delete(self, user_id: str, text: str, transition: Transition) -> Reply:
        self._sessions.start(user_id, transition.to_step)
        return Reply(text=texts.ASK_DELETE_ID, keyboard=Keyboard.BACK_ONLY)

    async def _enter_delete_id(self, user_id: str, text: str, transition: Transition) -> Reply:
        session = self._require_session(user_id, transition)
        try:
            booking_id = parse_identifier(text)
        except IdentifierError:
            self._sessions.discard(user_id)
            return Reply(text=texts.DELETE_ID_NOT_NUMERIC, keyboard=Keyboard.MAIN_MENU)

        try:
            booking = await self._repository.get_booking(booking_id)
            client = await self._repository.get_client(booking.client_id) if booking else None
        except RepositoryError as exc:
            logger.error("Looking up booking %s failed: %s", booking_id, exc)
            self._sessions.discard(user_id)
            return Reply(text=texts.LOOKUP_FAILED, keyboard=Keyboard.MAIN_MENU)

        if booking is None:
            self._sessions.discard(user_id)
            return Reply(text=build_booking_not_found(booking_id), keyboard=Keyboard.MAIN_MENU)

        session.delete_candidate = BookingDetails(booking=booking, client=client)
        self._advance(session, transition)
        return Reply(text=build_delete_prompt(session.delete_candidate), keyboard=Keyboard.YES_NO)

    async def _delete(self, user_id: str, text: str, transition: Transition) -> Reply:
        session = self._require_session(user_id, transition)
        candidate = session.delete_candidate
        try:
            affected = await self._repository.delete_booking(candidate.booking.id)
        except RepositoryError as exc:
            logger.error("Deleting booking %s failed: %s", candidate.booking.id, exc)
            return Reply(text=texts.DELETE_FAILED, keyboard=Keyboard.MAIN_MENU)
        finally:
            self._advance(session, transition)

        if affected == 0:
            return Reply(text=texts.NOT_FOUND_AT_DELETION, keyboard=Keyboard.MAIN_MENU)
        logger.info("Booking %s deleted via chat", candidate.booking.id)
        return Reply(text=build_booking_deleted(candidate), keyboard=Keyboard.MAIN_MENU)

    async def _keep(self, user_id: str, text: str, transition: Transition) -> Reply:
        self._sessions.discard(user_id)
        return Reply(text=texts.DELETE_KEPT, keyboard=Keyboard.MAIN_MENU)

    async def _reprompt_delete_confirmation(
        self, user_id: str, text: str, transition: Transition
    ) -> Reply:
        return Reply(text=texts.YES_OR_NO, keyboard=Keyboard.YES_NO)
