"""Pydantic models for teams, rosters, schedules, messages and identities.

Every model validates from either snake_case or the camelCase names of the
persisted layout, and ``dump()`` always produces the camelCase layout.
Unknown fields are kept so persisted state round-trips unchanged.
"""

from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# Broadcast addresses for Message.to
TO_ALL = "all"
TO_COACHES = "coaches"


class Record(BaseModel):
    """Base model using the camelCase persisted layout."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def dump(self) -> dict:
        """Serialize to the persisted (camelCase) layout."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")

    def merged(self, changes: dict):
        """Return a copy with ``changes`` shallow-merged over this record."""
        return type(self).model_validate({**self.dump(), **to_aliases(type(self), changes)})


def to_aliases(model_cls, data: dict) -> dict:
    """Rename snake_case field names in ``data`` to their persisted aliases."""
    out = {}
    for key, value in data.items():
        field = model_cls.model_fields.get(key)
        out[field.alias if field is not None and field.alias else key] = value
    return out


# ---------- Roster Models ----------

class Guardian(Record):
    """Parent/guardian contact attached to a player (position-addressed)."""
    name: Optional[str] = None
    relationship: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class Coach(Record):
    id: str
    name: str = ""
    role: str = ""  # "Head Coach", "Assistant Coach", ...
    email: Optional[str] = None
    phone: Optional[str] = None
    photo_url: Optional[str] = None
    description: Optional[str] = None


class Player(Record):
    id: str
    name: str = ""
    number: Optional[Union[int, str]] = None
    position: str = ""
    grade: str = ""
    email: Optional[str] = None
    parent_contact: Optional[str] = None  # Legacy, consulted only when guardians is empty
    photo_url: Optional[str] = None
    guardians: list[Guardian] = Field(default_factory=list)

    def contact_emails(self) -> list[str]:
        """Guardian emails, falling back to the legacy parent contact."""
        if self.guardians:
            return [g.email for g in self.guardians if g.email]
        return [self.parent_contact] if self.parent_contact else []


class Roster(Record):
    team_photo_url: Optional[str] = None
    club_name: Optional[str] = None
    about_club: Optional[str] = None
    coaches: list[Coach] = Field(default_factory=list)
    players: list[Player] = Field(default_factory=list)


# ---------- Schedule Models ----------

class ScheduleEvent(Record):
    """A calendar entry. Dates are plain YYYY-MM-DD strings without a time zone."""
    id: str
    type: str = "practice"  # "game" | "practice" | "tournament"
    title: str = ""
    date: str = ""
    time: Optional[str] = None  # "HH:MM", 24-hour
    all_day: Optional[bool] = None  # game/tournament only
    end_date: Optional[str] = None  # tournament only, inclusive
    location: Optional[str] = None
    opponent: Optional[str] = None
    notes: Optional[str] = None


# ---------- Message Models ----------

class Message(Record):
    id: str
    sender: str = Field(default="", alias="from")
    from_name: str = ""
    to: str = ""  # "all" | "coaches" | player id; empty reaches nobody
    to_name: str = ""
    subject: str = ""
    body: str = ""
    sent_at: str = ""  # ISO 8601
    read_by: list[str] = Field(default_factory=list)  # Set semantics

    def is_read_by(self, user_id: str) -> bool:
        return user_id in self.read_by


# ---------- Team / State Models ----------

class Team(Record):
    id: str
    name: str = "New Team"
    roster: Roster = Field(default_factory=Roster)
    schedule: list[ScheduleEvent] = Field(default_factory=list)
    messages: list[Message] = Field(default_factory=list)


class AppState(Record):
    """The whole persisted state: every team plus the current team pointer."""
    teams: list[Team] = Field(min_length=1)
    current_team_id: str


# ---------- Identity / Credential Models ----------

class Identity(Record):
    """The logged-in user, as returned by a successful login."""
    id: str
    name: str = ""
    role: Literal["coach", "player", "parent", "director"]
    player_id: Optional[str] = None  # Parents only: the player they guard

    @property
    def is_coach(self) -> bool:
        return self.role == "coach"

    @property
    def is_player(self) -> bool:
        return self.role == "player"

    @property
    def is_parent(self) -> bool:
        return self.role == "parent"

    @property
    def is_director(self) -> bool:
        return self.role == "director"

    @property
    def can_manage_team(self) -> bool:
        return self.is_coach or self.is_director

    def can_edit_own_player(self, player_id: str) -> bool:
        """True for the player themself or that player's parent."""
        return (self.is_player and self.id == player_id) or (
            self.is_parent and self.player_id == player_id
        )


class CredentialEntry(Record):
    """Derived login identity for one normalized email."""
    password_hash: str
    role: Literal["coach", "player", "parent"]
    id: str
    name: str = ""
    player_id: Optional[str] = None

    def identity(self) -> Identity:
        return Identity(id=self.id, name=self.name, role=self.role, player_id=self.player_id)


class DirectorCredential(Record):
    email: str
    password_hash: str
