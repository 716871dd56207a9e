"""
Action vocabulary for the team store.

Each action is a frozen model with a literal ``type`` tag; ``Action`` is the
closed union of all of them. UI collaborators that speak the
``{"type": ..., "payload": ...}`` shape go through parse_action().
"""
import logging
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

logger = logging.getLogger("setly.actions")


class BaseAction(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


# ---------- Team Actions ----------

class Load(BaseAction):
    type: Literal["LOAD"] = "LOAD"
    payload: Any = None


class TeamAdd(BaseAction):
    type: Literal["TEAM_ADD"] = "TEAM_ADD"
    name: Optional[str] = None
    seed: bool = True  # False creates an empty roster/schedule/messages


class TeamSwitch(BaseAction):
    type: Literal["TEAM_SWITCH"] = "TEAM_SWITCH"
    team_id: str


class TeamUpdate(BaseAction):
    type: Literal["TEAM_UPDATE"] = "TEAM_UPDATE"
    team_id: str = Field(alias="id")
    name: Optional[str] = None


class TeamRemove(BaseAction):
    type: Literal["TEAM_REMOVE"] = "TEAM_REMOVE"
    team_id: str


# ---------- Roster Actions ----------

class RosterAddCoach(BaseAction):
    type: Literal["ROSTER_ADD_COACH"] = "ROSTER_ADD_COACH"
    fields: dict = Field(default_factory=dict)


class RosterAddPlayer(BaseAction):
    type: Literal["ROSTER_ADD_PLAYER"] = "ROSTER_ADD_PLAYER"
    fields: dict = Field(default_factory=dict)


class RosterUpdateCoach(BaseAction):
    type: Literal["ROSTER_UPDATE_COACH"] = "ROSTER_UPDATE_COACH"
    coach_id: str
    changes: dict = Field(default_factory=dict)


class RosterUpdatePlayer(BaseAction):
    type: Literal["ROSTER_UPDATE_PLAYER"] = "ROSTER_UPDATE_PLAYER"
    player_id: str
    changes: dict = Field(default_factory=dict)


class RosterRemoveCoach(BaseAction):
    type: Literal["ROSTER_REMOVE_COACH"] = "ROSTER_REMOVE_COACH"
    coach_id: str


class RosterRemovePlayer(BaseAction):
    type: Literal["ROSTER_REMOVE_PLAYER"] = "ROSTER_REMOVE_PLAYER"
    player_id: str


class RosterSetTeamPhoto(BaseAction):
    type: Literal["ROSTER_SET_TEAM_PHOTO"] = "ROSTER_SET_TEAM_PHOTO"
    url: Optional[str] = None


class RosterUpdateTeam(BaseAction):
    type: Literal["ROSTER_UPDATE_TEAM"] = "ROSTER_UPDATE_TEAM"
    changes: dict = Field(default_factory=dict)


# ---------- Schedule Actions ----------

class ScheduleAdd(BaseAction):
    type: Literal["SCHEDULE_ADD"] = "SCHEDULE_ADD"
    fields: dict = Field(default_factory=dict)


class ScheduleUpdate(BaseAction):
    type: Literal["SCHEDULE_UPDATE"] = "SCHEDULE_UPDATE"
    event_id: str
    changes: dict = Field(default_factory=dict)


class ScheduleRemove(BaseAction):
    type: Literal["SCHEDULE_REMOVE"] = "SCHEDULE_REMOVE"
    event_id: str


# ---------- Message Actions ----------

class MessageSend(BaseAction):
    type: Literal["MESSAGE_SEND"] = "MESSAGE_SEND"
    fields: dict = Field(default_factory=dict)


class MessageMarkRead(BaseAction):
    type: Literal["MESSAGE_MARK_READ"] = "MESSAGE_MARK_READ"
    message_id: str = Field(alias="messageId")
    user_id: str = Field(alias="userId")


class MessageMarkAllRead(BaseAction):
    type: Literal["MESSAGE_MARK_ALL_READ"] = "MESSAGE_MARK_ALL_READ"
    user_id: str = Field(alias="userId")


class MessageMarkUnread(BaseAction):
    type: Literal["MESSAGE_MARK_UNREAD"] = "MESSAGE_MARK_UNREAD"
    message_id: str = Field(alias="messageId")
    user_id: str = Field(alias="userId")


class MessageRemove(BaseAction):
    type: Literal["MESSAGE_REMOVE"] = "MESSAGE_REMOVE"
    message_id: str


Action = Annotated[
    Union[
        Load, TeamAdd, TeamSwitch, TeamUpdate, TeamRemove,
        RosterAddCoach, RosterAddPlayer, RosterUpdateCoach, RosterUpdatePlayer,
        RosterRemoveCoach, RosterRemovePlayer, RosterSetTeamPhoto, RosterUpdateTeam,
        ScheduleAdd, ScheduleUpdate, ScheduleRemove,
        MessageSend, MessageMarkRead, MessageMarkAllRead, MessageMarkUnread, MessageRemove,
    ],
    Field(discriminator="type"),
]

_action_adapter = TypeAdapter(Action)

ACTION_TYPES = frozenset(
    cls.model_fields["type"].default for cls in BaseAction.__subclasses__()
)

# Actions whose payload is a bare value, mapped to the field it fills
_SCALAR_PAYLOADS = {
    "TEAM_SWITCH": "team_id",
    "TEAM_REMOVE": "team_id",
    "ROSTER_REMOVE_COACH": "coach_id",
    "ROSTER_REMOVE_PLAYER": "player_id",
    "ROSTER_SET_TEAM_PHOTO": "url",
    "SCHEDULE_REMOVE": "event_id",
    "MESSAGE_REMOVE": "message_id",
}

# Actions whose payload is a record to append
_FIELD_PAYLOADS = {"ROSTER_ADD_COACH", "ROSTER_ADD_PLAYER", "SCHEDULE_ADD", "MESSAGE_SEND"}

# Actions whose payload is {id, ...changes}, mapped to the id field
_MERGE_PAYLOADS = {
    "ROSTER_UPDATE_COACH": "coach_id",
    "ROSTER_UPDATE_PLAYER": "player_id",
    "SCHEDULE_UPDATE": "event_id",
}


def _flatten(action_type, payload):
    """Turn a {type, payload} pair into the keyword fields of its action."""
    if action_type == "LOAD":
        return {"payload": payload}
    if action_type in _SCALAR_PAYLOADS:
        return {_SCALAR_PAYLOADS[action_type]: payload}
    if action_type in _FIELD_PAYLOADS:
        return {"fields": payload or {}}
    if action_type in _MERGE_PAYLOADS:
        changes = dict(payload)
        return {_MERGE_PAYLOADS[action_type]: changes.get("id"), "changes": changes}
    if action_type == "ROSTER_UPDATE_TEAM":
        return {"changes": payload or {}}
    return dict(payload or {})


def parse_action(raw):
    """
    Convert a ``{"type": ..., "payload": ...}`` dict into a typed action.

    Returns:
        The action, or None when the type is unknown or the payload does
        not fit the action's fields.
    """
    if not isinstance(raw, dict):
        return None
    action_type = raw.get("type")
    if action_type not in ACTION_TYPES:
        logger.debug(f"Ignoring unknown action type: {action_type!r}")
        return None
    try:
        data = _flatten(action_type, raw.get("payload"))
        data["type"] = action_type
        return _action_adapter.validate_python(data)
    except (TypeError, ValueError, ValidationError) as e:
        logger.debug(f"Ignoring malformed {action_type} payload: {e}")
        return None
