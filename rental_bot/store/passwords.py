"""Password hashing and placeholder credentials for bot-created clients."""

import secrets
import string
import time

import bcrypt

from rental_bot.config import settings

_ALPHABET = string.ascii_lowercase + string.digits


def hash_password(plain: str, rounds: int = settings.commit.password_hash_rounds) -> str:
    """Hash a plain-text password with bcrypt."""
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt(rounds=rounds)).decode()


def placeholder_email(domain: str = settings.commit.placeholder_email_domain) -> str:
    """Synthesize a unique-looking email for a client that never logs in.

    The suffix is the last six digits of the epoch milliseconds plus three
    random characters, e.g. ``client_482913k2x@clients.rental-desk.local``.
    """
    millis = str(int(time.time() * 1000))[-6:]
    tail = "".join(secrets.choice(_ALPHABET) for _ in range(3))
    return f"client_{millis}{tail}@{domain}"


def temporary_password() -> str:
    """Random throwaway password; only its hash is ever stored."""
    return "temp" + "".join(secrets.choice(_ALPHABET) for _ in range(8))
