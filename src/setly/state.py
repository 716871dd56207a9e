"""
Team store state transitions.

apply() is the pure transition function over AppState: it never mutates its
input, never raises, and hands back the input itself when an action is
refused or not recognized. replay_actions() folds an action log through it.
"""
import itertools
import logging
import time
from datetime import datetime, timezone

from pydantic import ValidationError

from setly import actions as act
from setly import seed
from setly.models import AppState, Coach, Message, Player, ScheduleEvent, Team

logger = logging.getLogger("setly.state")

_id_counter = itertools.count(1)


def new_id(prefix, now=None):
    """
    Mint an id unique within this process: prefix + epoch millis + counter.

    Args:
        prefix: "t", "c", "p", "e" or "m"
        now: Optional epoch seconds (defaults to time.time())
    """
    millis = int((now if now is not None else time.time()) * 1000)
    return f"{prefix}{millis}-{next(_id_counter)}"


def current_team(state):
    """Return the current team, falling back to the first team."""
    for team in state.teams:
        if team.id == state.current_team_id:
            return team
    return state.teams[0] if state.teams else None


def _update_current_team(state, updater):
    """Replace the current team with updater(team); no-op if it is missing."""
    for idx, team in enumerate(state.teams):
        if team.id == state.current_team_id:
            teams = list(state.teams)
            teams[idx] = updater(team)
            return state.model_copy(update={"teams": teams})
    logger.debug(f"No team matches current id {state.current_team_id!r}, ignoring")
    return state


def _update_roster(state, **changes):
    return _update_current_team(
        state,
        lambda team: team.model_copy(update={"roster": team.roster.model_copy(update=changes)}),
    )


def _merge_by_id(items, item_id, changes):
    return [item.merged(changes) if item.id == item_id else item for item in items]


def _without_id(items, item_id):
    return [item for item in items if item.id != item_id]


def _add_reader(message, user_id):
    if message.is_read_by(user_id):
        return message
    return message.model_copy(update={"read_by": [*message.read_by, user_id]})


def _remove_reader(message, user_id):
    return message.model_copy(update={"read_by": [u for u in message.read_by if u != user_id]})


def migrate_state(saved):
    """
    Bring a persisted payload into the multi-team shape.

    Returns:
        AppState, or None when the payload is not recognized
    """
    if not isinstance(saved, dict):
        return None
    if isinstance(saved.get("teams"), list) and saved.get("currentTeamId"):
        state = AppState.model_validate(saved)
        if current_team(state).id != state.current_team_id:
            logger.warning(f"Current team {state.current_team_id!r} not found, using first team")
            state = state.model_copy(update={"current_team_id": state.teams[0].id})
        return state
    if saved.get("roster") or saved.get("schedule") or saved.get("messages"):
        logger.info("Migrating single-team state to multi-team layout")
        team = Team.model_validate({
            "id": seed.DEFAULT_TEAM_ID,
            "name": seed.DEFAULT_TEAM_NAME,
            "roster": saved.get("roster") or seed.SAMPLE_ROSTER,
            "schedule": saved.get("schedule") or seed.SAMPLE_SCHEDULE,
            "messages": saved.get("messages") or seed.SAMPLE_MESSAGES,
        })
        return AppState(teams=[team], current_team_id=seed.DEFAULT_TEAM_ID)
    return None


def apply(state, action, now=None):
    """
    Apply one action to the state.

    Args:
        state: Current AppState
        action: A typed action from setly.actions, or a {"type", "payload"} dict
        now: Optional epoch seconds used for fresh ids and sentAt

    Returns:
        The next AppState
    """
    if isinstance(action, dict):
        action = act.parse_action(action)
    if action is None:
        return state

    try:
        return _transition(state, action, now)
    except (ValidationError, TypeError, ValueError) as e:
        logger.warning(f"Rejected {action.type}: {e}")
        return state


def _transition(state, action, now):
    if now is None:
        now = time.time()

    # ---------- Team actions ----------
    if isinstance(action, act.Load):
        migrated = migrate_state(action.payload)
        if migrated is None:
            logger.warning("LOAD payload not recognized, keeping current state")
            return state
        return migrated

    elif isinstance(action, act.TeamAdd):
        team_id = new_id("t", now)
        team = seed.make_team(team_id, action.name, empty=not action.seed)
        logger.debug(f"Added team {team_id} ({team.name})")
        return state.model_copy(update={"teams": [*state.teams, team], "current_team_id": team_id})

    elif isinstance(action, act.TeamSwitch):
        if not any(t.id == action.team_id for t in state.teams):
            logger.debug(f"Ignoring switch to unknown team {action.team_id!r}")
            return state
        return state.model_copy(update={"current_team_id": action.team_id})

    elif isinstance(action, act.TeamUpdate):
        if not any(t.id == action.team_id for t in state.teams):
            return state
        teams = [
            t.model_copy(update={"name": action.name if action.name is not None else t.name})
            if t.id == action.team_id else t
            for t in state.teams
        ]
        return state.model_copy(update={"teams": teams})

    elif isinstance(action, act.TeamRemove):
        if len(state.teams) <= 1:
            logger.info("Refusing to remove the last team")
            return state
        teams = _without_id(state.teams, action.team_id)
        if len(teams) == len(state.teams):
            return state
        current_id = state.current_team_id
        if current_id == action.team_id:
            current_id = teams[0].id
        return state.model_copy(update={"teams": teams, "current_team_id": current_id})

    # ---------- Roster actions ----------
    elif isinstance(action, act.RosterAddCoach):
        coach = Coach.model_validate({**action.fields, "id": new_id("c", now)})
        return _update_roster_list(state, "coaches", lambda coaches: [*coaches, coach])

    elif isinstance(action, act.RosterAddPlayer):
        player = Player.model_validate({**action.fields, "id": new_id("p", now)})
        return _update_roster_list(state, "players", lambda players: [*players, player])

    elif isinstance(action, act.RosterUpdateCoach):
        return _update_roster_list(
            state, "coaches", lambda coaches: _merge_by_id(coaches, action.coach_id, action.changes))

    elif isinstance(action, act.RosterUpdatePlayer):
        return _update_roster_list(
            state, "players", lambda players: _merge_by_id(players, action.player_id, action.changes))

    elif isinstance(action, act.RosterRemoveCoach):
        return _update_roster_list(state, "coaches", lambda coaches: _without_id(coaches, action.coach_id))

    elif isinstance(action, act.RosterRemovePlayer):
        return _update_roster_list(state, "players", lambda players: _without_id(players, action.player_id))

    elif isinstance(action, act.RosterSetTeamPhoto):
        return _update_roster(state, team_photo_url=action.url or "")

    elif isinstance(action, act.RosterUpdateTeam):
        return _update_current_team(
            state, lambda team: team.model_copy(update={"roster": team.roster.merged(action.changes)}))

    # ---------- Schedule actions ----------
    elif isinstance(action, act.ScheduleAdd):
        event = ScheduleEvent.model_validate({**action.fields, "id": new_id("e", now)})
        return _update_team_list(state, "schedule", lambda events: [*events, event])

    elif isinstance(action, act.ScheduleUpdate):
        return _update_team_list(
            state, "schedule", lambda events: _merge_by_id(events, action.event_id, action.changes))

    elif isinstance(action, act.ScheduleRemove):
        return _update_team_list(state, "schedule", lambda events: _without_id(events, action.event_id))

    # ---------- Message actions ----------
    elif isinstance(action, act.MessageSend):
        fields = dict(action.fields)
        sender = fields.pop("sender", None)
        sender_name = fields.pop("from_name", None)
        fields.setdefault("from", sender)
        fields.setdefault("fromName", sender_name)
        message = Message.model_validate({
            **fields,
            "id": new_id("m", now),
            "sentAt": datetime.fromtimestamp(now, timezone.utc).isoformat(),
            "from": seed.DEFAULT_SENDER_ID if fields["from"] is None else fields["from"],
            "fromName": seed.DEFAULT_SENDER_NAME if fields["fromName"] is None else fields["fromName"],
            "readBy": [],
        })
        return _update_team_list(state, "messages", lambda messages: [*messages, message])

    elif isinstance(action, act.MessageMarkRead):
        return _update_team_list(state, "messages", lambda messages: [
            _add_reader(m, action.user_id) if m.id == action.message_id else m for m in messages
        ])

    elif isinstance(action, act.MessageMarkAllRead):
        return _update_team_list(state, "messages", lambda messages: [
            _add_reader(m, action.user_id) for m in messages
        ])

    elif isinstance(action, act.MessageMarkUnread):
        return _update_team_list(state, "messages", lambda messages: [
            _remove_reader(m, action.user_id) if m.id == action.message_id else m for m in messages
        ])

    elif isinstance(action, act.MessageRemove):
        return _update_team_list(state, "messages", lambda messages: _without_id(messages, action.message_id))

    return state


def _update_roster_list(state, key, updater):
    return _update_current_team(
        state,
        lambda team: team.model_copy(update={
            "roster": team.roster.model_copy(update={key: updater(getattr(team.roster, key))}),
        }),
    )


def _update_team_list(state, key, updater):
    return _update_current_team(
        state, lambda team: team.model_copy(update={key: updater(getattr(team, key))}))


def replay_actions(actions, state=None, current_time=None):
    """
    Replay a list of actions to reconstruct the store state.

    Args:
        actions: Typed actions or {"type", "payload"} dicts, oldest first
        state: Starting state (defaults to the seeded initial state)
        current_time: Epoch seconds used for every fresh id/timestamp

    Returns:
        The resulting AppState
    """
    if state is None:
        state = seed.initial_state()
    for action in actions:
        state = apply(state, action, now=current_time)
    return state
