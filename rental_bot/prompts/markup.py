"""MarkdownV2 building blocks. Every piece of text passes through escaping."""

from datetime import datetime
from typing import Optional

from rental_bot.conversation.validators import escape_markdown as esc

MISSING = "-"


def bold(text: object) -> str:
    return f"*{esc(text)}*"


def italic(text: object) -> str:
    return f"_{esc(text)}_"


def field(label: str, value: object) -> str:
    """``*Label:* value`` with an escaped value, '-' when empty."""
    shown = value if value not in (None, "") else MISSING
    return f"*{esc(label)}:* {esc(shown)}"


def fmt_date(value: Optional[datetime]) -> str:
    return value.strftime("%d.%m.%Y") if value else MISSING


def fmt_time(value: Optional[datetime]) -> str:
    return value.strftime("%H:%M") if value else MISSING
