"""
Centralized configuration with environment variable overrides.

Bot credentials, storage URL, commit-protocol knobs and session policy are
all configurable here. Nothing is hardcoded in engine or store logic.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from rental_bot.logging_context import build_log_handler

load_dotenv()

logger = logging.getLogger(__name__)


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_bool(env_var: str, default: str) -> bool:
    """Parse a boolean flag (1/true/yes/on) from an env var."""
    raw = os.getenv(env_var, default)
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class TelegramConfig:
    """Chat transport credentials and the privileged operator identity."""

    bot_token: str = os.getenv("TELEGRAM_BOT_TOKEN", "")
    admin_chat_id: str = os.getenv("TELEGRAM_ADMIN_CHAT_ID", "")


@dataclass(frozen=True)
class StoreConfig:
    """Relational store connection settings."""

    database_url: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./rental.db")
    echo: bool = _safe_bool("DATABASE_ECHO", "false")


@dataclass(frozen=True)
class CommitConfig:
    """Settings for creating bot-driven client records."""

    placeholder_email_domain: str = os.getenv("PLACEHOLDER_EMAIL_DOMAIN", "clients.rental-desk.local")
    email_collision_attempts: int = _safe_int("EMAIL_COLLISION_ATTEMPTS", "2")
    password_hash_rounds: int = _safe_int("PASSWORD_HASH_ROUNDS", "10")


@dataclass(frozen=True)
class SessionConfig:
    """Dialogue session policy."""

    idle_timeout_sec: int = _safe_int("SESSION_IDLE_TIMEOUT_SEC", "0")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    telegram: TelegramConfig = field(default_factory=TelegramConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    commit: CommitConfig = field(default_factory=CommitConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    recent_clients_limit: int = _safe_int("RECENT_CLIENTS_LIMIT", "10")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if config.commit.email_collision_attempts < 2:
        raise ValueError(
            "EMAIL_COLLISION_ATTEMPTS must be >= 2, "
            f"got {config.commit.email_collision_attempts}"
        )
    if not 4 <= config.commit.password_hash_rounds <= 16:
        raise ValueError(
            "PASSWORD_HASH_ROUNDS must be between 4 and 16, "
            f"got {config.commit.password_hash_rounds}"
        )
    if "@" in config.commit.placeholder_email_domain or not config.commit.placeholder_email_domain:
        raise ValueError(
            "PLACEHOLDER_EMAIL_DOMAIN must be a bare domain, "
            f"got {config.commit.placeholder_email_domain!r}"
        )
    if config.session.idle_timeout_sec < 0:
        raise ValueError(
            f"SESSION_IDLE_TIMEOUT_SEC must be >= 0, got {config.session.idle_timeout_sec}"
        )
    if config.recent_clients_limit < 1:
        raise ValueError(
            f"RECENT_CLIENTS_LIMIT must be >= 1, got {config.recent_clients_limit}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        handlers=[build_log_handler()],
    )
    if not config.telegram.admin_chat_id:
        logger.warning("TELEGRAM_ADMIN_CHAT_ID is not set; every user will be denied admin commands")
    logger.info("Configuration loaded (store: %s)", config.store.database_url.split("://")[0])
    return config


# Singleton instance
settings = load_config()
