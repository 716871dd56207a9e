"""Persistence of the logged-in identity between runs."""
import json
import logging
import sqlite3

from setly.config import AppConfig
from setly.models import Identity

logger = logging.getLogger("setly.session")


class SessionStore:
    """Remembers who is logged in, under AppConfig.AUTH_KEY."""

    def __init__(self, kv, key=None):
        self.kv = kv
        self.key = key or AppConfig.AUTH_KEY

    @property
    def current(self):
        """The logged-in Identity, or None (also when the record is unreadable)."""
        try:
            raw = self.kv.get(self.key)
            if not raw:
                return None
            return Identity.model_validate_json(raw)
        except (sqlite3.Error, OSError, ValueError) as e:
            logger.warning(f"Discarding unreadable session: {e}")
            return None

    def login(self, identity):
        # Only the identity fields are kept, never credentials
        user = Identity(
            id=identity.id,
            name=identity.name,
            role=identity.role,
            player_id=identity.player_id,
        )
        try:
            self.kv.set(self.key, json.dumps(user.dump()))
        except (sqlite3.Error, OSError) as e:
            logger.error(f"Failed to persist session: {e}")
        logger.info(f"Logged in as {user.name} ({user.role})")
        return user

    def logout(self):
        try:
            self.kv.delete(self.key)
        except (sqlite3.Error, OSError) as e:
            logger.error(f"Failed to clear session: {e}")
