"""Privileged-operator check for management commands."""

import logging

from rental_bot.errors import AccessDenied

logger = logging.getLogger(__name__)


class AccessGuard:
    """Distinguishes the single configured operator from everyone else.

    Ids are compared as strings so chat ids arriving as ints match an id
    read from the environment.
    """

    def __init__(self, admin_id: str) -> None:
        self._admin_id = str(admin_id).strip()

    def is_privileged(self, user_id: object) -> bool:
        return bool(self._admin_id) and str(user_id) == self._admin_id

    def require(self, user_id: object) -> None:
        """Raise AccessDenied unless ``user_id`` is the operator."""
        if not self.is_privileged(user_id):
            logger.warning("Access denied for user %s", user_id)
            raise AccessDenied(f"User {user_id} is not the operator")
