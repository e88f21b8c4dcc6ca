"""
Due date text handling.

Due dates are persisted as display text ("June 9, 2025"). Everything that
compares dates goes through parse_due_date(); a value that does not parse
is treated as having no calendar day at all.
"""
from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import Optional

# English month names regardless of the process locale
MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)
WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

_MONTHS = {name.casefold(): number for number, name in enumerate(MONTH_NAMES, start=1)}
_DUE_DATE_RE = re.compile(r"([A-Za-z]+)\s+(\d{1,2}),\s*(\d{4})")


def parse_due_date(text: Optional[str]) -> Optional[date]:
    """Return the calendar day for a due date string, or None if it does not parse."""
    if not text:
        return None
    match = _DUE_DATE_RE.fullmatch(text.strip())
    if match is None:
        return None
    month = _MONTHS.get(match.group(1).casefold())
    if month is None:
        return None
    try:
        return date(int(match.group(3)), month, int(match.group(2)))
    except ValueError:
        return None


def format_due_date(day: date) -> str:
    # no zero padding on the day: "June 9, 2025"
    return f"{MONTH_NAMES[day.month - 1]} {day.day}, {day.year}"


def end_of_week(today: date) -> date:
    """Sunday of the ISO week containing today."""
    return today + timedelta(days=7 - today.isoweekday())


def parse_user_date(text: str, today: date) -> Optional[date]:
    """
    Parse a due date typed by the user.

    Accepts "today", "tomorrow", ISO dates (2025-06-09), d.m.yyyy and the
    display format itself.
    """
    raw = (text or "").strip()
    if not raw:
        return None
    lowered = raw.casefold()
    if lowered == "today":
        return today
    if lowered == "tomorrow":
        return today + timedelta(days=1)

    for fmt in ("%Y-%m-%d", "%d.%m.%Y"):
        try:
            return datetime.strptime(raw, fmt).date()
        except ValueError:
            continue
    return parse_due_date(raw)
