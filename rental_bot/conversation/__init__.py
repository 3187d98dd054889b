from rental_bot.conversation.access import AccessGuard
from rental_bot.conversation.intents import Intent, classify
from rental_bot.conversation.session_store import SessionStore
from rental_bot.conversation.state_machine import Action, Transition, resolve

__all__ = [
    "AccessGuard",
    "Intent",
    "classify",
    "SessionStore",
    "Action",
    "Transition",
    "resolve",
]
