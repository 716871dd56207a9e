"""
Calendar and date-ordering helpers for team schedules.

Event dates are plain "YYYY-MM-DD" strings and times "HH:MM"; ordering and
span tests compare their digit-only forms as strings, which matches
chronological order as long as dates are zero-padded.
"""
import calendar
import re
from dataclasses import dataclass
from datetime import date, timedelta

_NON_DIGITS = re.compile(r"\D")


def _digits(value):
    return _NON_DIGITS.sub("", value or "")


def sort_by_date(events):
    """Return events ordered by date, then time (missing time sorts as 00:00)."""
    return sorted(events, key=lambda e: _digits(e.date) + _digits(e.time or "00:00"))


def events_on_date(events, date_str):
    """Events whose [date, endDate or date] span includes ``date_str``."""
    day = _digits(date_str)
    return [
        e for e in events
        if _digits(e.date) <= day <= _digits(e.end_date or e.date)
    ]


@dataclass
class CalendarDay:
    """One cell of a month grid."""
    date_str: str
    date: date
    is_current_month: bool
    is_today: bool


def calendar_days(year, month, today=None):
    """
    Build the Sunday-first grid for a month.

    Args:
        year: Four-digit year
        month: Zero-based month (0 = January); values outside 0-11 roll
               into the previous/next years
        today: Date to flag as today (defaults to date.today())

    Returns:
        list[CalendarDay], a multiple of 7 long, padded with the trailing
        days of the previous month and the leading days of the next one
    """
    year += month // 12
    month = month % 12 + 1
    if today is None:
        today = date.today()

    first = date(year, month, 1)
    days_in_month = calendar.monthrange(year, month)[1]
    start_pad = (first.weekday() + 1) % 7  # Monday=0 -> Sunday=0
    total_cells = -(-(start_pad + days_in_month) // 7) * 7

    cells = []
    for offset in range(total_cells):
        day = first + timedelta(days=offset - start_pad)
        cells.append(CalendarDay(
            date_str=day.isoformat(),
            date=day,
            is_current_month=day.month == month and day.year == year,
            is_today=day == today,
        ))
    return cells


def format_time(value):
    """Format "16:00" as "4:00 PM"; unparseable input is returned as given."""
    if not value:
        return ""
    try:
        hours, minutes = (int(part) for part in value.split(":")[:2])
    except ValueError:
        return value
    period = "PM" if hours >= 12 else "AM"
    return f"{hours % 12 or 12}:{minutes:02d} {period}"


def format_date(value):
    """Format "2026-02-11" as "Wed, Feb 11, 2026"."""
    if not value:
        return ""
    try:
        day = date.fromisoformat(value)
    except ValueError:
        return value
    return f"{day:%a, %b} {day.day}, {day.year}"


def event_time_label(event):
    """Return "All day" for all-day or untimed events, otherwise a 12-hour time."""
    if event.all_day or not event.time:
        return "All day"
    return format_time(event.time)
