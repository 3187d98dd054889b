"""
Free-text field parsers and markup escaping.

Every parser either returns a typed value or raises a ``ValidationError``
subclass; none of them touch the record store.
"""

import re
from datetime import date

from rental_bot.errors import CalendarDateError, DateFormatError, IdentifierError

DATE_PATTERN = re.compile(r"^([0-9]{1,2})\.([0-9]{1,2})\.([0-9]{4})$")
IDENTIFIER_PATTERN = re.compile(r"^-?[0-9]+$")

DATE_FORMAT_HINT = "DD.MM.YYYY"
DATE_EXAMPLE = "25.12.2024"

# Characters with meaning in Telegram MarkdownV2, plus the escape itself.
MARKDOWN_SPECIAL_CHARS = frozenset("\\_*[]()~`>#+-=|{}.!")


def parse_booking_date(text: str) -> date:
    """Parse ``D.M.YYYY`` or ``DD.MM.YYYY`` into a calendar date.

    Raises:
        DateFormatError: the text does not match the pattern.
        CalendarDateError: the pattern matches but the day does not exist
            (31.4.2025, 29.2.2023, month 13, day 0).
    """
    match = DATE_PATTERN.match(text.strip())
    if not match:
        raise DateFormatError(f"Expected {DATE_FORMAT_HINT}, got {text!r}")
    day, month, year = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError as exc:
        raise CalendarDateError(f"{text.strip()!r} is not a real date: {exc}") from None


def parse_identifier(text: str) -> int:
    """Parse a base-10 integer identifier.

    Empty, float-like ("4.0") and non-numeric ("12a") input is rejected.
    """
    stripped = text.strip()
    if not IDENTIFIER_PATTERN.match(stripped):
        raise IdentifierError(f"Not a numeric identifier: {text!r}")
    return int(stripped)


def escape_markdown(text: object) -> str:
    """Backslash-escape every MarkdownV2 special character in ``text``.

    Works one character at a time, so an inserted backslash is never
    itself re-escaped.

    Examples:
        >>> escape_markdown("a_b")
        'a\\\\_b'
        >>> escape_markdown("+375 (29) 111-22-33")
        '\\\\+375 \\\\(29\\\\) 111\\\\-22\\\\-33'
    """
    if text is None:
        return ""
    return "".join("\\" + ch if ch in MARKDOWN_SPECIAL_CHARS else ch for ch in str(text))
