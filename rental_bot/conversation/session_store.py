"""
Process-wide store of active dialogue sessions.

One ``Session`` per user id at most; absence means the user is idle. The
store also hands out a per-user ``asyncio.Lock`` so one user's messages are
handled strictly one at a time while different users proceed in parallel.

Usage:
    store = SessionStore()
    async with store.lock(user_id):
        session = store.get(user_id)
        ...
"""

import asyncio
import logging
import time
import weakref
from typing import Optional

from rental_bot.schemas.session_schema import DialogueStep, Session

logger = logging.getLogger(__name__)


class SessionStore:
    """In-memory map of user id to Session with optional idle expiry."""

    def __init__(self, idle_timeout_sec: float = 0) -> None:
        if idle_timeout_sec < 0:
            raise ValueError(f"idle_timeout_sec must be >= 0, got {idle_timeout_sec}")
        self._sessions: dict[str, Session] = {}
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()
        self._idle_timeout_sec = idle_timeout_sec

    def lock(self, user_id: str) -> asyncio.Lock:
        """Return the lock serializing this user's messages.

        Locks are held weakly: an idle user's lock disappears once no
        coroutine holds or awaits it.
        """
        lock = self._locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_id] = lock
        return lock

    def _expired(self, session: Session) -> bool:
        if not self._idle_timeout_sec:
            return False
        return time.monotonic() - session.updated_at > self._idle_timeout_sec

    def get(self, user_id: str) -> Optional[Session]:
        """Return the user's live session, discarding it first if expired."""
        session = self._sessions.get(user_id)
        if session is not None and self._expired(session):
            logger.info("Session expired at step %s", session.step.value)
            del self._sessions[user_id]
            return None
        return session

    def step_of(self, user_id: str) -> DialogueStep:
        session = self.get(user_id)
        return session.step if session else DialogueStep.IDLE

    def start(self, user_id: str, step: DialogueStep) -> Session:
        """Create a fresh session, replacing any existing one."""
        session = Session(user_id=user_id, step=step)
        self._sessions[user_id] = session
        logger.debug("Session started at step %s", step.value)
        return session

    def discard(self, user_id: str) -> bool:
        """Delete the user's session. Returns True if one existed."""
        return self._sessions.pop(user_id, None) is not None

    def purge_expired(self) -> int:
        """Drop every expired session. Returns how many were removed."""
        expired = [uid for uid, s in self._sessions.items() if self._expired(s)]
        for uid in expired:
            del self._sessions[uid]
        if expired:
            logger.info("Purged %d expired sessions", len(expired))
        return len(expired)

    async def sweep(self, interval_sec: float) -> None:
        """Purge expired sessions every ``interval_sec`` until cancelled."""
        while True:
            await asyncio.sleep(interval_sec)
            self.purge_expired()

    def clear(self) -> None:
        self._sessions.clear()

    def __contains__(self, user_id: object) -> bool:
        return isinstance(user_id, str) and self.get(user_id) is not None

    def __len__(self) -> int:
        return len(self._sessions)
