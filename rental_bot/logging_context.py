"""Chat-user stamp for log lines.

Every record that reaches a handler built here is prefixed with the chat
user whose message is being handled, so interleaved dialogues from several
operators can be told apart. Records emitted outside a message (startup,
dispatcher bookkeeping) carry ``-``.

Usage:
    from rental_bot.logging_context import chat_user_scope

    with chat_user_scope("123456789"):
        logger.info("Booking created")
    # 2025-03-05 10:00:00 [123456789] [rental_bot.x] INFO: Booking created
"""

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional, TextIO

NO_CHAT_USER = "-"
LOG_FORMAT = "%(asctime)s [%(chat_user)s] [%(name)s] %(levelname)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_chat_user: ContextVar[str] = ContextVar("chat_user", default=NO_CHAT_USER)


def get_chat_user() -> str:
    return _chat_user.get()


@contextmanager
def chat_user_scope(user_id: str) -> Iterator[None]:
    """Attribute log records inside the block to ``user_id``."""
    token = _chat_user.set(user_id)
    try:
        yield
    finally:
        _chat_user.reset(token)


class ChatUserFilter(logging.Filter):
    """Sets ``record.chat_user`` unless the caller passed one via ``extra``."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "chat_user"):
            record.chat_user = _chat_user.get()  # type: ignore[attr-defined]
        return True


def build_log_handler(stream: Optional[TextIO] = None) -> logging.Handler:
    """Stream handler that renders the chat user on every line.

    The filter sits on the handler, not on individual loggers, so records
    from every module (aiogram and SQLAlchemy included) get the stamp.
    """
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.addFilter(ChatUserFilter())
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler
