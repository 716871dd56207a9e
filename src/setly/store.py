"""
Persistent, team-scoped store.

TeamStore wraps the pure transition function in setly.state with a
key-value backend: the full state is written after every change, read back
(with legacy migration) at startup, and roster listeners are told whenever
the current team's roster changes.
"""
import json
import logging
import sqlite3

from pydantic import ValidationError

from setly import seed
from setly.actions import Load
from setly.config import AppConfig
from setly.state import apply, current_team

logger = logging.getLogger("setly.store")


class TeamStore:
    """
    The system of record for teams, rosters, schedules and messages.

    Args:
        kv: Key-value backend (get/set), e.g. SqliteKeyValueStore
        storage_key: Primary key for the multi-team state
        legacy_key: Key of the old single-team state, read once when the
                    primary key is empty
    """

    def __init__(self, kv, storage_key=None, legacy_key=None):
        self.kv = kv
        self.storage_key = storage_key or AppConfig.STORAGE_KEY
        self.legacy_key = legacy_key or AppConfig.LEGACY_STORAGE_KEY
        self._roster_listeners = []
        self.state = self.load() or seed.initial_state()

    # ---------- Persistence ----------

    def load(self):
        """
        Read the persisted state, migrating the legacy layout if needed.

        Returns:
            AppState, or None when nothing usable is stored
        """
        try:
            raw = self.kv.get(self.storage_key)
            from_legacy = False
            if not raw:
                raw = self.kv.get(self.legacy_key)
                from_legacy = bool(raw)
            if not raw:
                return None
            payload = json.loads(raw)
        except (sqlite3.Error, OSError, ValueError) as e:
            logger.warning(f"Could not read persisted state: {e}")
            return None

        fallback = seed.initial_state()
        state = apply(fallback, Load(payload=payload))
        if state is fallback:
            logger.warning("Persisted state not recognized, starting from defaults")
            return None

        if from_legacy:
            logger.info(f"Migrated legacy state from {self.legacy_key!r} to {self.storage_key!r}")
            self.save(state)
        return state

    def save(self, state):
        """Write the full state. Failures are logged, never raised."""
        try:
            self.kv.set(self.storage_key, json.dumps(state.dump()))
        except (sqlite3.Error, OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to persist state to {self.storage_key!r}: {e}")

    # ---------- Actions ----------

    def dispatch(self, action, now=None):
        """
        Apply an action, persist the result and notify roster listeners.

        Args:
            action: Typed action or {"type", "payload"} dict
            now: Optional epoch seconds for fresh ids/timestamps

        Returns:
            The new AppState
        """
        previous = self.state
        state = apply(previous, action, now=now)
        if state == previous:
            return previous

        self.state = state
        self.save(state)

        roster = self.roster
        if roster != current_team(previous).roster:
            self._notify_roster(roster)
        return state

    # ---------- Roster observation ----------

    def subscribe_roster(self, listener):
        """
        Register listener(roster); it is called now and on every roster change.

        Returns:
            A callable that unsubscribes the listener
        """
        self._roster_listeners.append(listener)
        listener(self.roster)

        def unsubscribe():
            if listener in self._roster_listeners:
                self._roster_listeners.remove(listener)

        return unsubscribe

    def _notify_roster(self, roster):
        for listener in list(self._roster_listeners):
            try:
                listener(roster)
            except (sqlite3.Error, OSError, ValueError, ValidationError) as e:
                logger.error(f"Roster listener {listener!r} failed: {e}")

    # ---------- Views ----------

    @property
    def current_team(self):
        return current_team(self.state)

    @property
    def roster(self):
        return self.current_team.roster

    @property
    def schedule(self):
        return self.current_team.schedule

    @property
    def messages(self):
        return self.current_team.messages
