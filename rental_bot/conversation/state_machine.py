"""
Transition table for the admin dialogue.

Every (step, intent) pair the engine reacts to is listed explicitly with the
action to run and the step reached when that action succeeds. A pair with no
entry is ignored by the engine, so an unexpected message can never silently
advance a dialogue.

Usage:
    transition = resolve(DialogueStep.AWAITING_DATE, Intent.FREE_TEXT)
    assert transition.action == Action.ENTER_DATE
    assert transition.to_step == DialogueStep.AWAITING_CLIENT_NAME
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from rental_bot.conversation.intents import Intent
from rental_bot.schemas.session_schema import DialogueStep

logger = logging.getLogger(__name__)


class Action(str, Enum):
    """Engine handlers a transition can dispatch to."""
    GREET = "greet"
    GO_BACK = "go_back"
    LIST_ALL = "list_all"
    LIST_TODAY = "list_today"
    LIST_CLIENTS = "list_clients"
    SHOW_STATS = "show_stats"
    BEGIN_CREATE = "begin_create"
    SELECT_SERVICE = "select_service"
    SERVICE_OUT_OF_FLOW = "service_out_of_flow"
    REPROMPT_SERVICE = "reprompt_service"
    ENTER_DATE = "enter_date"
    ENTER_CLIENT_NAME = "enter_client_name"
    ENTER_CLIENT_PHONE = "enter_client_phone"
    ENTER_CLIENT_ADDRESS = "enter_client_address"
    COMMIT = "commit"
    REPROMPT_CONFIRMATION = "reprompt_confirmation"
    SESSION_EXPIRED = "session_expired"
    CANCEL = "cancel"
    BEGIN_DELETE = "begin_delete"
    ENTER_DELETE_ID = "enter_delete_id"
    DELETE = "delete"
    KEEP = "keep"
    REPROMPT_DELETE_CONFIRMATION = "reprompt_delete_confirmation"


@dataclass(frozen=True)
class Transition:
    """One reaction. ``from_step=None`` matches any step.

    ``to_step`` is where the dialogue stands after the action succeeds;
    IDLE means the session is destroyed and None leaves it untouched.
    """
    from_step: Optional[DialogueStep]
    intent: Intent
    action: Action
    to_step: Optional[DialogueStep]


S = DialogueStep

TRANSITIONS: list[Transition] = [
    # --- Navigation, valid from anywhere ---
    Transition(None, Intent.START, Action.GREET, S.IDLE),
    Transition(None, Intent.BACK, Action.GO_BACK, S.IDLE),
    Transition(None, Intent.CANCEL, Action.CANCEL, S.IDLE),

    # --- Operator menu, valid from anywhere ---
    Transition(None, Intent.LIST_ALL, Action.LIST_ALL, None),
    Transition(None, Intent.LIST_TODAY, Action.LIST_TODAY, None),
    Transition(None, Intent.LIST_CLIENTS, Action.LIST_CLIENTS, None),
    Transition(None, Intent.SHOW_STATS, Action.SHOW_STATS, None),
    Transition(None, Intent.START_CREATE, Action.BEGIN_CREATE, S.AWAITING_SERVICE),
    Transition(None, Intent.START_DELETE, Action.BEGIN_DELETE, S.AWAITING_DELETE_ID),

    # --- Creation flow ---
    Transition(S.AWAITING_SERVICE, Intent.SELECT_SERVICE, Action.SELECT_SERVICE, S.AWAITING_DATE),
    Transition(None, Intent.SELECT_SERVICE, Action.SERVICE_OUT_OF_FLOW, None),
    Transition(S.AWAITING_SERVICE, Intent.FREE_TEXT, Action.REPROMPT_SERVICE, S.AWAITING_SERVICE),
    Transition(S.AWAITING_DATE, Intent.FREE_TEXT, Action.ENTER_DATE, S.AWAITING_CLIENT_NAME),
    Transition(S.AWAITING_CLIENT_NAME, Intent.FREE_TEXT, Action.ENTER_CLIENT_NAME,
               S.AWAITING_CLIENT_PHONE),
    Transition(S.AWAITING_CLIENT_PHONE, Intent.FREE_TEXT, Action.ENTER_CLIENT_PHONE,
               S.AWAITING_CLIENT_ADDRESS),
    Transition(S.AWAITING_CLIENT_ADDRESS, Intent.FREE_TEXT, Action.ENTER_CLIENT_ADDRESS,
               S.AWAITING_CONFIRMATION),

    # --- Confirmation gate ---
    Transition(S.AWAITING_CONFIRMATION, Intent.CONFIRM, Action.COMMIT, S.IDLE),
    Transition(S.AWAITING_CONFIRMATION, Intent.FREE_TEXT, Action.REPROMPT_CONFIRMATION,
               S.AWAITING_CONFIRMATION),
    Transition(None, Intent.CONFIRM, Action.SESSION_EXPIRED, None),

    # --- Deletion flow ---
    Transition(S.AWAITING_DELETE_ID, Intent.FREE_TEXT, Action.ENTER_DELETE_ID,
               S.AWAITING_DELETE_CONFIRMATION),
    Transition(S.AWAITING_DELETE_CONFIRMATION, Intent.YES, Action.DELETE, S.IDLE),
    Transition(S.AWAITING_DELETE_CONFIRMATION, Intent.NO, Action.KEEP, S.IDLE),
    Transition(S.AWAITING_DELETE_CONFIRMATION, Intent.FREE_TEXT,
               Action.REPROMPT_DELETE_CONFIRMATION, S.AWAITING_DELETE_CONFIRMATION),
]

_EXACT: dict[tuple[DialogueStep, Intent], Transition] = {
    (t.from_step, t.intent): t for t in TRANSITIONS if t.from_step is not None
}
_ANY_STEP: dict[Intent, Transition] = {
    t.intent: t for t in TRANSITIONS if t.from_step is None
}


def _lookup(step: DialogueStep, intent: Intent) -> Optional[Transition]:
    return _EXACT.get((step, intent)) or _ANY_STEP.get(intent)


def resolve(step: DialogueStep, intent: Intent) -> Optional[Transition]:
    """Find the transition for ``intent`` at ``step``; None means ignore."""
    transition = _lookup(step, intent)
    if transition is None:
        logger.debug("No transition from %s on %s; message ignored", step.value, intent.value)
    return transition


def get_valid_intents(step: DialogueStep) -> list[Intent]:
    """Return every intent the engine reacts to at ``step``."""
    return [intent for intent in Intent if _lookup(step, intent) is not None]
