"""Tests for session persistence and role capabilities."""
import pytest


@pytest.fixture
def kv():
    from setly.db import MemoryKeyValueStore

    return MemoryKeyValueStore()


def test_login_logout_round_trip(kv):
    """Test that the logged-in identity survives a new SessionStore."""
    from setly.models import Identity
    from setly.session import SessionStore

    session = SessionStore(kv)
    assert session.current is None

    session.login(Identity(id="parent-p1", name="Emma Johnson", role="parent", player_id="p1"))

    restored = SessionStore(kv).current
    assert restored.id == "parent-p1"
    assert restored.player_id == "p1"

    session.logout()
    assert SessionStore(kv).current is None


def test_login_keeps_identity_fields_only(kv):
    """Test that nothing beyond the identity is stored."""
    import json

    from setly.config import AppConfig
    from setly.models import CredentialEntry
    from setly.session import SessionStore

    entry = CredentialEntry(password_hash="abc", role="coach", id="c1", name="Sarah Chen")
    SessionStore(kv).login(entry.identity())

    assert json.loads(kv.get(AppConfig.AUTH_KEY)) == {"id": "c1", "name": "Sarah Chen", "role": "coach"}


@pytest.mark.parametrize("raw", ["{oops", '{"id": "x", "role": "admin"}', "[]"])
def test_unreadable_session_is_logged_out(kv, raw):
    """Test that corrupt session records read as no session."""
    from setly.config import AppConfig
    from setly.session import SessionStore

    kv.set(AppConfig.AUTH_KEY, raw)
    assert SessionStore(kv).current is None


def test_role_capabilities():
    """Test the role-derived capability flags."""
    from setly.models import Identity

    coach = Identity(id="c1", role="coach")
    director = Identity(id="director", role="director")
    player = Identity(id="p1", role="player")
    parent = Identity(id="parent-p1", role="parent", player_id="p1")

    assert coach.can_manage_team and director.can_manage_team
    assert not player.can_manage_team and not parent.can_manage_team

    assert player.can_edit_own_player("p1")
    assert not player.can_edit_own_player("p2")
    assert parent.can_edit_own_player("p1")
    assert not parent.can_edit_own_player("p2")
    assert not coach.can_edit_own_player("p1")

    assert parent.is_parent and not parent.is_player
    assert director.is_director and not director.is_coach
