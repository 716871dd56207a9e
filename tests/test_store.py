"""Tests for the persistent team store."""
import json
import os
import sqlite3
import tempfile

import pytest


@pytest.fixture
def kv():
    from setly.db import MemoryKeyValueStore

    return MemoryKeyValueStore()


@pytest.fixture
def temp_db():
    """Create a temporary database path for testing."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = f.name

    yield db_path

    # Cleanup
    os.unlink(db_path)


class FailingKeyValueStore:
    """Backend whose writes always fail."""

    def get(self, key):
        return None

    def set(self, key, value):
        raise sqlite3.OperationalError("database is locked")


def test_empty_storage_starts_from_seed(kv):
    """Test that an empty backend yields the seeded default team."""
    from setly.store import TeamStore

    store = TeamStore(kv)

    assert [t.id for t in store.state.teams] == ["t1"]
    assert store.current_team.name == "Varsity"
    assert len(store.schedule) == 6
    assert len(store.messages) == 2
    assert len(store.roster.coaches) == 2


def test_dispatch_persists_full_state(kv):
    """Test that every change is written under the primary key."""
    from setly.config import AppConfig
    from setly.store import TeamStore

    store = TeamStore(kv)
    store.dispatch({"type": "TEAM_ADD", "payload": {"name": "JV"}})

    saved = json.loads(kv.get(AppConfig.STORAGE_KEY))
    assert [t["name"] for t in saved["teams"]] == ["Varsity", "JV"]
    assert saved["currentTeamId"] == store.state.current_team_id


def test_save_load_round_trip(kv):
    """Test that a saved state loads back equal."""
    from setly.store import TeamStore

    store = TeamStore(kv)
    store.dispatch({"type": "TEAM_ADD", "payload": {"name": "JV"}})
    store.dispatch({"type": "ROSTER_UPDATE_TEAM", "payload": {"clubName": "Setly VC", "customField": 3}})
    store.dispatch({"type": "MESSAGE_MARK_READ", "payload": {"messageId": "m1", "userId": "p1"}})

    assert store.load() == store.state
    assert TeamStore(kv).state == store.state


def test_unchanged_dispatch_does_not_write(kv):
    """Test that no-op actions skip persistence."""
    from setly.config import AppConfig
    from setly.store import TeamStore

    store = TeamStore(kv)
    assert kv.get(AppConfig.STORAGE_KEY) is None

    before = store.state
    assert store.dispatch({"type": "SCHEDULE_REMOVE", "payload": "missing"}) is before
    assert kv.get(AppConfig.STORAGE_KEY) is None


def test_legacy_key_is_migrated_once(kv):
    """Test that the single-team legacy layout is migrated and copied forward."""
    from setly.config import AppConfig
    from setly.store import TeamStore

    legacy = {
        "roster": {"teamPhotoUrl": "https://old.jpg", "coaches": [], "players": []},
        "schedule": [{"id": "e7", "type": "practice", "title": "Old practice", "date": "2025-09-01"}],
        "messages": [],
    }
    kv.set(AppConfig.LEGACY_STORAGE_KEY, json.dumps(legacy))

    store = TeamStore(kv)

    assert len(store.state.teams) == 1
    assert store.state.current_team_id == "t1"
    assert store.roster.team_photo_url == "https://old.jpg"
    assert [e.id for e in store.schedule] == ["e7"]

    # Written forward under the primary key, legacy key left intact
    assert json.loads(kv.get(AppConfig.STORAGE_KEY))["currentTeamId"] == "t1"
    assert json.loads(kv.get(AppConfig.LEGACY_STORAGE_KEY)) == legacy


def test_primary_key_wins_over_legacy(kv):
    """Test that the legacy key is ignored once the primary key has data."""
    from setly.config import AppConfig
    from setly.store import TeamStore

    kv.set(AppConfig.STORAGE_KEY, json.dumps({
        "teams": [{"id": "a", "name": "Alpha"}], "currentTeamId": "a",
    }))
    kv.set(AppConfig.LEGACY_STORAGE_KEY, json.dumps({"roster": {"coaches": [], "players": []}}))

    store = TeamStore(kv)
    assert store.current_team.name == "Alpha"


@pytest.mark.parametrize("raw", ["{not json", "[]", json.dumps({"foo": 1}), json.dumps({"teams": []})])
def test_malformed_storage_falls_back_to_seed(kv, raw):
    """Test that unreadable persisted state is treated as absent."""
    from setly.config import AppConfig
    from setly.store import TeamStore

    kv.set(AppConfig.STORAGE_KEY, raw)

    store = TeamStore(kv)
    assert store.load() is None
    assert store.current_team.id == "t1"


def test_save_failure_does_not_raise():
    """Test that a failing backend never breaks dispatch."""
    from setly.store import TeamStore

    store = TeamStore(FailingKeyValueStore())
    state = store.dispatch({"type": "SCHEDULE_REMOVE", "payload": "e1"})

    assert state is store.state
    assert all(e.id != "e1" for e in store.schedule)


def test_roster_listener_notified_on_roster_changes(kv):
    """Test that roster listeners see the initial roster and later roster edits only."""
    from setly.store import TeamStore

    store = TeamStore(kv)
    seen = []
    store.subscribe_roster(seen.append)
    assert len(seen) == 1

    store.dispatch({"type": "SCHEDULE_REMOVE", "payload": "e1"})
    assert len(seen) == 1

    store.dispatch({"type": "ROSTER_UPDATE_PLAYER", "payload": {"id": "p2", "email": "jl@new.com"}})
    assert len(seen) == 2
    assert seen[-1].players[1].email == "jl@new.com"


def test_roster_listener_notified_on_team_switch(kv):
    """Test that switching to a team with a different roster notifies listeners."""
    from setly.actions import TeamAdd, TeamSwitch
    from setly.store import TeamStore

    store = TeamStore(kv)
    seen = []
    unsubscribe = store.subscribe_roster(seen.append)

    store.dispatch(TeamAdd(name="Empty", seed=False))
    assert seen[-1].players == []

    store.dispatch(TeamSwitch(team_id="t1"))
    assert len(seen[-1].players) == 6

    unsubscribe()
    store.dispatch({"type": "ROSTER_REMOVE_PLAYER", "payload": "p1"})
    assert len(seen) == 3


def test_sqlite_backed_store_round_trip(temp_db):
    """Test the store against the SQLite key-value backend."""
    from setly.db import SqliteKeyValueStore
    from setly.store import TeamStore

    store = TeamStore(SqliteKeyValueStore(temp_db))
    store.dispatch({"type": "SCHEDULE_ADD", "payload": {"type": "game", "title": "Finals", "date": "2026-05-01"}})

    reopened = TeamStore(SqliteKeyValueStore(temp_db))
    assert reopened.state == store.state
    assert any(e.title == "Finals" for e in reopened.schedule)
