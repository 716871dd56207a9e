"""
Seed data for new teams.

Every team created through TEAM_ADD, and the state used when nothing is
persisted yet, starts from these samples so a fresh install has something
to show. Deployments that prefer empty teams can call make_team(..., empty=True).
"""

import copy

from setly.models import AppState, Message, Roster, ScheduleEvent, Team

DEFAULT_TEAM_ID = "t1"
DEFAULT_TEAM_NAME = "Varsity"
NEW_TEAM_NAME = "New Team"

# MESSAGE_SEND falls back to the head coach when the sender is not given
DEFAULT_SENDER_ID = "c1"
DEFAULT_SENDER_NAME = "Coach Sarah"

# ---------- Sample Data ----------

SAMPLE_ROSTER = {
    "teamPhotoUrl": "",
    "clubName": "",
    "aboutClub": "",
    "coaches": [
        {"id": "c1", "name": "Sarah Chen", "role": "Head Coach", "email": "sarah.chen@team.com",
         "phone": "(555) 101-2020", "photoUrl": "", "description": ""},
        {"id": "c2", "name": "Mike Torres", "role": "Assistant Coach", "email": "mike.t@team.com",
         "phone": "(555) 102-2021", "photoUrl": "", "description": ""},
    ],
    "players": [
        {"id": "p1", "name": "Emma Johnson", "number": 7, "position": "Setter", "grade": "11",
         "email": "emma.johnson@email.com", "parentContact": "johnson@email.com", "photoUrl": "",
         "guardians": [{"name": "Jane Johnson", "relationship": "Mother", "email": "johnson@email.com", "phone": ""}]},
        {"id": "p2", "name": "Jordan Lee", "number": 12, "position": "Outside Hitter", "grade": "10",
         "email": "jordan.lee@email.com", "parentContact": "lee.family@email.com", "photoUrl": "", "guardians": []},
        {"id": "p3", "name": "Alex Rivera", "number": 3, "position": "Libero", "grade": "11",
         "email": "alex.rivera@email.com", "parentContact": "rivera.a@email.com", "photoUrl": "", "guardians": []},
        {"id": "p4", "name": "Taylor Kim", "number": 9, "position": "Middle Blocker", "grade": "12",
         "email": "taylor.kim@email.com", "parentContact": "tkim@email.com", "photoUrl": "", "guardians": []},
        {"id": "p5", "name": "Morgan Davis", "number": 5, "position": "Opposite", "grade": "10",
         "email": "morgan.davis@email.com", "parentContact": "mdavis@email.com", "photoUrl": "", "guardians": []},
        {"id": "p6", "name": "Casey Williams", "number": 14, "position": "Outside Hitter", "grade": "11",
         "email": "casey.williams@email.com", "parentContact": "cwilliams@email.com", "photoUrl": "", "guardians": []},
    ],
}

SAMPLE_SCHEDULE = [
    {"id": "e1", "type": "practice", "title": "Evening Practice", "date": "2026-02-11", "time": "16:00",
     "location": "Main Gym", "notes": "Focus on serving and receive."},
    {"id": "e2", "type": "game", "title": "vs. Westside Eagles", "date": "2026-02-14", "time": "17:30",
     "location": "Home, Main Gym", "opponent": "Westside Eagles", "notes": "Wear home jerseys."},
    {"id": "e3", "type": "practice", "title": "Morning Practice", "date": "2026-02-15", "time": "08:00",
     "location": "Main Gym", "notes": "Film review + drills."},
    {"id": "e4", "type": "tournament", "title": "Spring Invitational", "date": "2026-02-21", "time": "08:00",
     "endDate": "2026-02-22", "location": "Regional Sports Complex", "notes": "All-day Saturday; bracket Sunday."},
    {"id": "e5", "type": "game", "title": "vs. Northview Hawks", "date": "2026-02-18", "time": "18:00",
     "location": "Away, Northview HS", "opponent": "Northview Hawks", "notes": "Bus departs 16:30."},
    {"id": "e6", "type": "practice", "title": "Scrimmage Prep", "date": "2026-02-20", "time": "16:00",
     "location": "Main Gym", "notes": "6v6 scrimmage."},
]

SAMPLE_MESSAGES = [
    {"id": "m1", "from": "c1", "fromName": "Coach Sarah", "to": "all", "toName": "All Parents & Players",
     "subject": "Week of Feb 10: schedule reminder",
     "body": "Please check the updated schedule. We have a game Tuesday and tournament next weekend. "
             "Confirm availability in Messages.",
     "sentAt": "2026-02-09T14:00:00", "readBy": []},
    {"id": "m2", "from": "c1", "fromName": "Coach Sarah", "to": "p1", "toName": "Emma Johnson",
     "subject": "Setter clinic this Saturday",
     "body": "Emma, there's an optional setter clinic Saturday 9-11am at the rec center. "
             "Let me know if you can make it!",
     "sentAt": "2026-02-08T09:30:00", "readBy": []},
]


def sample_roster():
    return Roster.model_validate(copy.deepcopy(SAMPLE_ROSTER))


def sample_schedule():
    return [ScheduleEvent.model_validate(e) for e in copy.deepcopy(SAMPLE_SCHEDULE)]


def sample_messages():
    return [Message.model_validate(m) for m in copy.deepcopy(SAMPLE_MESSAGES)]


def make_team(team_id, name=None, empty=False):
    """Build a team seeded with the sample roster, schedule and messages."""
    if empty:
        return Team(id=team_id, name=name or NEW_TEAM_NAME)
    return Team(
        id=team_id,
        name=name or NEW_TEAM_NAME,
        roster=sample_roster(),
        schedule=sample_schedule(),
        messages=sample_messages(),
    )


def initial_state():
    """State used when nothing valid is persisted: one seeded team, current."""
    return AppState(
        teams=[make_team(DEFAULT_TEAM_ID, DEFAULT_TEAM_NAME)],
        current_team_id=DEFAULT_TEAM_ID,
    )
