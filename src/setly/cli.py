"""
Command line for the setly team store.

Drives the same store, credential directory and message rules a UI would:

    setly teams
    setly team add "JV"
    setly login sarah.chen@team.com volleyball
    setly send --to all --subject "Practice moved" --body "Now at 5pm"
    setly inbox
"""
import argparse
import json
import sys

from rich.console import Console
from rich.table import Table

from setly import actions as act
from setly import messages as policy
from setly.config import AppConfig, config_items, get_app_config
from setly.credentials import CredentialDirectory
from setly.db import SqliteKeyValueStore
from setly.log import init_logging
from setly.models import TO_ALL, TO_COACHES
from setly.schedule import calendar_days, event_time_label, events_on_date, format_date, sort_by_date
from setly.session import SessionStore
from setly.store import TeamStore

console = Console()
err_console = Console(stderr=True)


class App:
    """Store, credential directory and session wired over one database."""

    def __init__(self, db_path):
        kv = SqliteKeyValueStore(db_path)
        self.store = TeamStore(kv)
        self.directory = CredentialDirectory(kv)
        self.session = SessionStore(kv)
        # Keep login identities in step with the current roster
        self.store.subscribe_roster(self.directory.resync)


def _fail(message):
    err_console.print(f"[red]{message}[/red]")
    return 1


def _require_user(app):
    user = app.session.current
    if user is None:
        _fail("Not logged in. Run: setly login EMAIL PASSWORD")
    return user


# ---------- Teams ----------

def cmd_teams(app, args):
    table = Table(title="Teams")
    table.add_column("")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Players", justify="right")
    table.add_column("Events", justify="right")
    for team in app.store.state.teams:
        marker = "*" if team.id == app.store.current_team.id else ""
        table.add_row(marker, team.id, team.name, str(len(team.roster.players)), str(len(team.schedule)))
    console.print(table)
    return 0


def cmd_team(app, args):
    store = app.store
    if args.team_command == "add":
        store.dispatch(act.TeamAdd(name=args.name, seed=not args.empty))
        console.print(f"Added team [bold]{store.current_team.name}[/bold] ({store.current_team.id})")
    elif args.team_command == "switch":
        store.dispatch(act.TeamSwitch(team_id=args.team_id))
        if store.state.current_team_id != args.team_id:
            return _fail(f"No team with id {args.team_id}")
        console.print(f"Switched to {store.current_team.name}")
    elif args.team_command == "rename":
        if not any(team.id == args.team_id for team in store.state.teams):
            return _fail(f"No team with id {args.team_id}")
        store.dispatch(act.TeamUpdate(team_id=args.team_id, name=args.name))
        console.print(f"Renamed {args.team_id} to {args.name}")
    elif args.team_command == "remove":
        count = len(store.state.teams)
        store.dispatch(act.TeamRemove(team_id=args.team_id))
        if len(store.state.teams) == count:
            return _fail(f"Cannot remove {args.team_id} (unknown id or last team)")
        console.print(f"Removed {args.team_id}; current team is {store.current_team.name}")
    return 0


# ---------- Roster / Schedule ----------

def cmd_roster(app, args):
    roster = app.store.roster
    coaches = Table(title=f"{app.store.current_team.name}: coaches")
    for column in ("ID", "Name", "Role", "Email"):
        coaches.add_column(column)
    for coach in roster.coaches:
        coaches.add_row(coach.id, coach.name, coach.role, coach.email or "")
    console.print(coaches)

    players = Table(title=f"{app.store.current_team.name}: players")
    for column in ("ID", "#", "Name", "Position", "Grade", "Parent contact"):
        players.add_column(column)
    for player in roster.players:
        players.add_row(
            player.id, str(player.number if player.number is not None else ""), player.name,
            player.position, player.grade, ", ".join(player.contact_emails()),
        )
    console.print(players)
    return 0


def cmd_schedule(app, args):
    events = app.store.schedule
    if args.month:
        try:
            year, month = (int(part) for part in args.month.split("-"))
        except ValueError:
            return _fail("--month must look like YYYY-MM")
        table = Table(title=args.month)
        for day_name in ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"):
            table.add_column(day_name)
        days = calendar_days(year, month - 1)
        for week_start in range(0, len(days), 7):
            row = []
            for day in days[week_start:week_start + 7]:
                label = str(day.date.day) if day.is_current_month else f"[dim]{day.date.day}[/dim]"
                if day.is_today:
                    label = f"[reverse]{label}[/reverse]"
                titles = [e.title for e in events_on_date(events, day.date_str)]
                row.append("\n".join([label, *titles]))
            table.add_row(*row)
        console.print(table)
        return 0

    table = Table(title=f"{app.store.current_team.name}: schedule")
    for column in ("ID", "Type", "Date", "Time", "Title", "Location"):
        table.add_column(column)
    for event in sort_by_date(events):
        when = format_date(event.date)
        if event.end_date:
            when += f" - {format_date(event.end_date)}"
        table.add_row(event.id, event.type, when, event_time_label(event), event.title, event.location or "")
    console.print(table)
    return 0


# ---------- Login ----------

def cmd_login(app, args):
    identity = app.directory.verify(args.email, args.password)
    if identity is None:
        return _fail("Invalid email or password")
    user = app.session.login(identity)
    console.print(f"Logged in as [bold]{user.name}[/bold] ({user.role})")
    return 0


def cmd_logout(app, args):
    app.session.logout()
    console.print("Logged out")
    return 0


def cmd_whoami(app, args):
    user = _require_user(app)
    if user is None:
        return 1
    extra = f", guardian of {user.player_id}" if user.player_id else ""
    console.print(f"{user.name} ({user.role}{extra}), id {user.id}")
    return 0


def cmd_passwd(app, args):
    if app.directory.verify(args.email, args.old_password) is None:
        return _fail("Invalid email or password")
    if not app.directory.set_password(args.email, args.new_password):
        return _fail(f"Password for {args.email} cannot be changed here")
    console.print("Password changed")
    return 0


# ---------- Messages ----------

def _print_messages(title, items, user):
    table = Table(title=title)
    for column in ("", "ID", "From", "To", "Subject", "Sent"):
        table.add_column(column)
    for message in sorted(items, key=lambda m: m.sent_at, reverse=True):
        marker = "*" if policy.is_unread(message, user) else ""
        table.add_row(marker, message.id, message.from_name, message.to_name, message.subject, message.sent_at)
    console.print(table)


def cmd_inbox(app, args):
    user = _require_user(app)
    if user is None:
        return 1
    messages = app.store.messages
    _print_messages("Inbox", policy.inbox(messages, user), user)
    console.print(f"{policy.unread_count(messages, user)} unread")
    return 0


def cmd_sent(app, args):
    user = _require_user(app)
    if user is None:
        return 1
    _print_messages("Sent", policy.sent(app.store.messages, user), user)
    return 0


def _recipient_name(app, to):
    if to == TO_ALL:
        return "All Parents & Players"
    if to == TO_COACHES:
        return "Coaches"
    for player in app.store.roster.players:
        if player.id == to:
            return player.name
    return None


def cmd_send(app, args):
    user = _require_user(app)
    if user is None:
        return 1
    to_name = args.to_name or _recipient_name(app, args.to)
    if to_name is None:
        return _fail(f"Unknown recipient {args.to}; use all, coaches or a player id")
    app.store.dispatch(act.MessageSend(fields={
        "from": user.id,
        "fromName": user.name,
        "to": args.to,
        "toName": to_name,
        "subject": args.subject,
        "body": args.body,
    }))
    console.print(f"Sent to {to_name}")
    return 0


def cmd_read(app, args, unread=False):
    user = _require_user(app)
    if user is None:
        return 1
    if args.message_id == "all" and not unread:
        app.store.dispatch(act.MessageMarkAllRead(user_id=user.id))
        console.print("Marked all messages read")
        return 0
    message = next((m for m in app.store.messages if m.id == args.message_id), None)
    if message is None or not policy.is_receiver(message, user):
        return _fail(f"No message {args.message_id} in your inbox")
    if unread:
        app.store.dispatch(act.MessageMarkUnread(message_id=message.id, user_id=user.id))
        console.print(f"Marked {message.id} unread")
    else:
        app.store.dispatch(act.MessageMarkRead(message_id=message.id, user_id=user.id))
        console.print(f"[bold]{message.subject}[/bold]\n{message.body}")
    return 0


def cmd_unread(app, args):
    return cmd_read(app, args, unread=True)


# ---------- Raw actions ----------

def cmd_dispatch(app, args):
    try:
        raw = json.loads(args.action)
    except ValueError as e:
        return _fail(f"Action is not valid JSON: {e}")
    if act.parse_action(raw) is None:
        return _fail(f"Unrecognized action: {args.action}")
    before = app.store.state
    after = app.store.dispatch(raw)
    console.print("State changed" if after is not before else "State unchanged")
    return 0


def cmd_config(app, args):
    config = get_app_config()
    table = Table(title=f"{config.__name__} Configuration")
    table.add_column("Setting")
    table.add_column("Value")
    for name, value in config_items(config):
        table.add_row(name, value)
    console.print(table)
    return 0


def build_parser():
    parser = argparse.ArgumentParser(prog="setly", description="Team schedule, roster and messages")
    parser.add_argument("--db", default=AppConfig.DB_PATH, help="SQLite database path")
    parser.add_argument("--log-level", default=AppConfig.LOG_LEVEL, help="Logging level")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("config", help="Show configuration").set_defaults(func=cmd_config)
    sub.add_parser("teams", help="List teams").set_defaults(func=cmd_teams)

    team = sub.add_parser("team", help="Manage teams")
    team.set_defaults(func=cmd_team)
    team_sub = team.add_subparsers(dest="team_command", required=True)
    add = team_sub.add_parser("add")
    add.add_argument("name")
    add.add_argument("--empty", action="store_true", help="Start without sample data")
    team_sub.add_parser("switch").add_argument("team_id")
    rename = team_sub.add_parser("rename")
    rename.add_argument("team_id")
    rename.add_argument("name")
    team_sub.add_parser("remove").add_argument("team_id")

    sub.add_parser("roster", help="Show the current roster").set_defaults(func=cmd_roster)

    schedule = sub.add_parser("schedule", help="Show the current schedule")
    schedule.add_argument("--month", help="Show a calendar for YYYY-MM")
    schedule.set_defaults(func=cmd_schedule)

    login = sub.add_parser("login", help="Log in")
    login.add_argument("email")
    login.add_argument("password")
    login.set_defaults(func=cmd_login)
    sub.add_parser("logout").set_defaults(func=cmd_logout)
    sub.add_parser("whoami").set_defaults(func=cmd_whoami)

    passwd = sub.add_parser("passwd", help="Change a password")
    passwd.add_argument("email")
    passwd.add_argument("old_password")
    passwd.add_argument("new_password")
    passwd.set_defaults(func=cmd_passwd)

    sub.add_parser("inbox").set_defaults(func=cmd_inbox)
    sub.add_parser("sent").set_defaults(func=cmd_sent)

    send = sub.add_parser("send", help="Send a message")
    send.add_argument("--to", required=True, help="all, coaches or a player id")
    send.add_argument("--to-name")
    send.add_argument("--subject", required=True)
    send.add_argument("--body", default="")
    send.set_defaults(func=cmd_send)

    read = sub.add_parser("read", help="Read a message (or 'all' to mark everything read)")
    read.add_argument("message_id")
    read.set_defaults(func=cmd_read)
    unread = sub.add_parser("unread", help="Mark a message unread")
    unread.add_argument("message_id")
    unread.set_defaults(func=cmd_unread)

    dispatch = sub.add_parser("dispatch", help='Apply a raw {"type", "payload"} action')
    dispatch.add_argument("action")
    dispatch.set_defaults(func=cmd_dispatch)

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    init_logging("cli", level=args.log_level)
    app = App(args.db)
    return args.func(app, args)


if __name__ == "__main__":
    sys.exit(main())
