"""
Credential directory derived from roster data.

Every coach, player and guardian email on the current roster maps to a login
identity. The directory caches password hashes: resync() refreshes the
identity fields from the roster but never touches an existing hash, so a
changed password survives later roster edits. Entries for emails that leave
the roster are kept.

Default passwords are fixed public onboarding strings. That is only
acceptable while all state is local; a networked deployment must replace them.
"""
import hashlib
import json
import logging
import sqlite3

from pydantic import ValidationError

from setly.config import AppConfig
from setly.models import CredentialEntry, DirectorCredential, Identity

logger = logging.getLogger("setly.credentials")

DIRECTOR_IDENTITY = {"role": "director", "id": "director", "name": "Director"}


def hash_password(password):
    """SHA-256 of the UTF-8 password, lowercase hex."""
    return hashlib.sha256((password or "").encode("utf-8")).hexdigest()


def normalize_email(email):
    return (email or "").lower().strip()


def parent_id(player_id):
    """Login id of the parent account attached to a player."""
    return f"parent-{player_id}"


class CredentialDirectory:
    """
    Email -> login identity directory, persisted in a key-value store.

    Args:
        kv: Key-value backend (get/set)
        config: Configuration class (defaults to AppConfig)
    """

    def __init__(self, kv, config=None):
        self.kv = kv
        self.config = config or AppConfig
        self._default_hash = None

    @property
    def default_hash(self):
        """Hash of the shared default password, computed on first use."""
        if self._default_hash is None:
            self._default_hash = hash_password(self.config.DEFAULT_PASSWORD)
        return self._default_hash

    # ---------- Persistence ----------

    def _raw_entries(self):
        """The persisted {email: record} mapping as stored; unreadable data counts as empty."""
        try:
            raw = self.kv.get(self.config.CREDENTIALS_KEY)
            data = json.loads(raw) if raw else {}
        except (sqlite3.Error, OSError, ValueError) as e:
            logger.warning(f"Could not read credential directory: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning("Credential directory is not a mapping, ignoring it")
            return {}
        return data

    def entries(self):
        """Load the persisted directory, skipping entries that do not validate."""
        entries = {}
        for email, record in self._raw_entries().items():
            try:
                entries[email] = CredentialEntry.model_validate(record)
            except ValidationError as e:
                logger.warning(f"Skipping unreadable credential entry for {email}: {e}")
        return entries

    def _save(self, entries):
        # Entries that failed validation are written back untouched
        payload = {
            email: record for email, record in self._raw_entries().items()
            if email not in entries
        }
        payload.update({email: entry.dump() for email, entry in entries.items()})
        try:
            self.kv.set(self.config.CREDENTIALS_KEY, json.dumps(payload))
        except (sqlite3.Error, OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to persist credential directory: {e}")

    # ---------- Resync ----------

    def resync(self, roster):
        """
        Merge login identities derived from ``roster`` into the directory.

        New emails get the default password hash; known emails keep their
        hash and have id/name/role/playerId overwritten. Nothing is removed.

        Returns:
            dict of normalized email -> CredentialEntry (the full directory)
        """
        entries = self.entries()
        added = 0

        def upsert(email, **identity):
            nonlocal added
            email = normalize_email(email)
            if not email:
                return
            existing = entries.get(email)
            password_hash = existing.password_hash if existing else self.default_hash
            if existing is None:
                added += 1
            entries[email] = CredentialEntry(password_hash=password_hash, **identity)

        for coach in roster.coaches:
            upsert(coach.email, role="coach", id=coach.id, name=coach.name)

        for player in roster.players:
            upsert(player.email, role="player", id=player.id, name=player.name)

        for player in roster.players:
            for guardian in player.guardians:
                upsert(guardian.email, role="parent", id=parent_id(player.id),
                       name=player.name, player_id=player.id)

        self._save(entries)
        logger.debug(f"Resynced credential directory: {len(entries)} entries, {added} new")
        return entries

    # ---------- Login ----------

    def verify(self, email, password):
        """
        Check an email/password pair.

        Returns:
            Identity on success, None for an unknown email or a wrong password
        """
        normalized = normalize_email(email)

        if normalized == normalize_email(self.config.DIRECTOR_EMAIL):
            director = self._director_credential()
            if director is not None and hash_password(password) == director.password_hash:
                return Identity(**DIRECTOR_IDENTITY)
            return None

        entry = self.entries().get(normalized)
        if entry is None:
            return None
        if hash_password(password) != entry.password_hash:
            return None
        return entry.identity()

    def _director_credential(self):
        """Load the director record, provisioning it with the default password."""
        try:
            raw = self.kv.get(self.config.DIRECTOR_KEY)
            if raw:
                return DirectorCredential.model_validate_json(raw)
            director = DirectorCredential(
                email=self.config.DIRECTOR_EMAIL,
                password_hash=hash_password(self.config.DEFAULT_DIRECTOR_PASSWORD),
            )
            self.kv.set(self.config.DIRECTOR_KEY, json.dumps(director.dump()))
            logger.info("Provisioned director credential with the default password")
            return director
        except (sqlite3.Error, OSError, ValueError, ValidationError) as e:
            logger.warning(f"Director credential unavailable: {e}")
            return None

    # ---------- Password change ----------

    def set_password(self, email, new_password):
        """
        Replace the password hash of an existing roster-derived entry.

        Returns:
            True if the email is in the directory, False otherwise
        """
        normalized = normalize_email(email)
        entries = self.entries()
        entry = entries.get(normalized)
        if entry is None:
            return False
        entries[normalized] = entry.model_copy(update={"password_hash": hash_password(new_password)})
        self._save(entries)
        logger.info(f"Password changed for {normalized}")
        return True
