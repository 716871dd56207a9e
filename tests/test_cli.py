"""Tests for the setly command line."""
import json
import os
import tempfile

import pytest


@pytest.fixture
def temp_db():
    """Create a temporary database path for testing."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = f.name

    yield db_path

    # Cleanup
    os.unlink(db_path)


@pytest.fixture
def run(temp_db, capsys):
    """Run the CLI against the temp database and return (code, stdout, stderr)."""
    from setly.cli import main

    def _run(*argv):
        code = main(["--db", temp_db, *argv])
        captured = capsys.readouterr()
        return code, captured.out, captured.err

    return _run


def test_teams_lists_seeded_team(run):
    """Test that a fresh database shows the seeded team."""
    code, out, _ = run("teams")

    assert code == 0
    assert "Varsity" in out
    assert "t1" in out


def test_team_add_switch_remove(run, temp_db):
    """Test team lifecycle commands."""
    from setly.db import SqliteKeyValueStore
    from setly.store import TeamStore

    assert run("team", "add", "JV", "--empty")[0] == 0
    state = TeamStore(SqliteKeyValueStore(temp_db)).state
    assert [t.name for t in state.teams] == ["Varsity", "JV"]
    new_id = state.current_team_id

    assert run("team", "switch", "t1")[0] == 0
    assert TeamStore(SqliteKeyValueStore(temp_db)).state.current_team_id == "t1"

    assert run("team", "switch", "nope")[0] == 1
    assert run("team", "rename", "nope", "X")[0] == 1

    assert run("team", "remove", new_id)[0] == 0
    assert run("team", "remove", "t1")[0] == 1


def test_login_whoami_logout(run):
    """Test the session commands."""
    assert run("whoami")[0] == 1

    code, out, _ = run("login", "sarah.chen@team.com", "volleyball")
    assert code == 0
    assert "coach" in out

    code, out, _ = run("whoami")
    assert code == 0
    assert "c1" in out

    assert run("logout")[0] == 0
    assert run("whoami")[0] == 1


def test_bad_login_fails(run):
    """Test that a wrong password is rejected."""
    code, _, err = run("login", "sarah.chen@team.com", "nope")

    assert code == 1
    assert "Invalid" in err


def test_director_login(run):
    """Test that the director can log in with the default password."""
    code, out, _ = run("login", "director@setly.app", "director")

    assert code == 0
    assert "director" in out


def test_passwd_changes_login(run):
    """Test that a changed password replaces the default."""
    assert run("passwd", "emma.johnson@email.com", "volleyball", "spikes")[0] == 0

    assert run("login", "emma.johnson@email.com", "volleyball")[0] == 1
    assert run("login", "emma.johnson@email.com", "spikes")[0] == 0


def test_send_and_read_messages(run, temp_db):
    """Test that a coach broadcast lands in a player's inbox."""
    from setly.db import SqliteKeyValueStore
    from setly.store import TeamStore

    run("login", "sarah.chen@team.com", "volleyball")
    assert run("send", "--to", "all", "--subject", "Moved", "--body", "5pm")[0] == 0
    assert run("send", "--to", "p99", "--subject", "x")[0] == 1

    messages = TeamStore(SqliteKeyValueStore(temp_db)).messages
    sent = messages[-1]
    assert sent.subject == "Moved"
    assert sent.sender == "c1"
    assert sent.to_name == "All Parents & Players"

    run("login", "emma.johnson@email.com", "volleyball")
    code, out, _ = run("inbox")
    assert code == 0
    assert "3 unread" in out

    assert run("read", sent.id)[0] == 0
    assert "2 unread" in run("inbox")[1]

    assert run("read", "all")[0] == 0
    assert "0 unread" in run("inbox")[1]

    assert run("unread", "m2")[0] == 0
    assert "1 unread" in run("inbox")[1]


def test_read_requires_receiver(run):
    """Test that messages outside the inbox cannot be opened."""
    run("login", "mike.t@team.com", "volleyball")

    assert run("read", "m2")[0] == 1


def test_dispatch_raw_action(run, temp_db):
    """Test applying a raw action from JSON."""
    from setly.db import SqliteKeyValueStore
    from setly.store import TeamStore

    action = json.dumps({"type": "SCHEDULE_REMOVE", "payload": "e1"})
    code, out, _ = run("dispatch", action)
    assert code == 0
    assert "changed" in out
    assert all(e.id != "e1" for e in TeamStore(SqliteKeyValueStore(temp_db)).schedule)

    assert "unchanged" in run("dispatch", action)[1]
    assert run("dispatch", "{bad")[0] == 1
    assert run("dispatch", json.dumps({"type": "NOPE"}))[0] == 1


def test_schedule_views(run):
    """Test the list and month views."""
    code, out, _ = run("schedule")
    assert code == 0
    assert "e4" in out

    code, out, _ = run("schedule", "--month", "2026-02")
    assert code == 0
    assert "Sun" in out

    assert run("schedule", "--month", "Feb")[0] == 1


def test_roster_and_config(run):
    """Test the read-only listing commands."""
    code, out, _ = run("roster")
    assert code == 0
    assert "p1" in out

    code, out, _ = run("config")
    assert code == 0
    assert "STORAGE_KEY" in out
    assert "**********" in out
