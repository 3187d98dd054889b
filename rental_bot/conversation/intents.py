"""
Pure classification of an incoming chat message into an intent.

Menu buttons and slash commands are recognized before any free-text
handling, so a button press is never mistaken for step input.
"""

from enum import Enum

from rental_bot.schemas.session_schema import DialogueStep
from rental_bot.store.services import match_service_key, match_service_label


class Intent(str, Enum):
    START = "start"
    BACK = "back"
    LIST_ALL = "list_all"
    LIST_TODAY = "list_today"
    START_CREATE = "start_create"
    START_DELETE = "start_delete"
    LIST_CLIENTS = "list_clients"
    SHOW_STATS = "show_stats"
    SELECT_SERVICE = "select_service"
    CONFIRM = "confirm"
    CANCEL = "cancel"
    YES = "yes"
    NO = "no"
    FREE_TEXT = "free_text"


# Button labels as shown on the reply keyboards.
BUTTON_ALL_BOOKINGS = "📋 All bookings"
BUTTON_TODAY = "📅 Today"
BUTTON_ADD_BOOKING = "➕ Add booking"
BUTTON_DELETE_BOOKING = "🗑️ Delete booking"
BUTTON_CLIENTS = "👥 Clients"
BUTTON_STATS = "📊 Statistics"
BUTTON_BACK = "↩️ Back"
BUTTON_CONFIRM = "✅ Confirm"
BUTTON_CANCEL = "❌ Cancel"
BUTTON_YES = "✅ Yes"
BUTTON_NO = "❌ No"

COMMANDS: dict[str, Intent] = {
    "/start": Intent.START,
    "/back": Intent.BACK,
    "/cancel": Intent.CANCEL,
    BUTTON_BACK: Intent.BACK,
    BUTTON_ALL_BOOKINGS: Intent.LIST_ALL,
    BUTTON_TODAY: Intent.LIST_TODAY,
    BUTTON_ADD_BOOKING: Intent.START_CREATE,
    BUTTON_DELETE_BOOKING: Intent.START_DELETE,
    BUTTON_CLIENTS: Intent.LIST_CLIENTS,
    BUTTON_STATS: Intent.SHOW_STATS,
    BUTTON_CONFIRM: Intent.CONFIRM,
    BUTTON_CANCEL: Intent.CANCEL,
    BUTTON_YES: Intent.YES,
    BUTTON_NO: Intent.NO,
}

PRIVILEGED_INTENTS: frozenset[Intent] = frozenset({
    Intent.LIST_ALL,
    Intent.LIST_TODAY,
    Intent.START_CREATE,
    Intent.START_DELETE,
    Intent.LIST_CLIENTS,
    Intent.SHOW_STATS,
})


def classify(step: DialogueStep, text: str) -> Intent:
    """Derive the intent of ``text`` given the user's current step.

    A bare catalog key ("vacuum") only counts as a service choice while the
    service picker is open; the picker buttons count anywhere so a stale
    press can be answered with a hint.
    """
    stripped = text.strip()
    if stripped.startswith("/"):
        # "/start@rental_bot payload" -> "/start"
        command = stripped.split()[0].split("@", 1)[0]
    else:
        command = stripped
    if command in COMMANDS:
        return COMMANDS[command]
    if match_service_label(stripped) is not None:
        return Intent.SELECT_SERVICE
    if step == DialogueStep.AWAITING_SERVICE and match_service_key(stripped) is not None:
        return Intent.SELECT_SERVICE
    return Intent.FREE_TEXT
