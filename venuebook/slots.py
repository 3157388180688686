"""
Time slot labels.

Slots are identified by 12-hour labels such as ``"09:00 AM"``.  Booking
``time`` values are free text (they are not validated against a venue's
template), so parsing here is lenient: ``"9:00 AM"`` and ``"13:00"`` are
understood too, anything else parses to ``None``.
"""

from __future__ import annotations

import re
from datetime import datetime, time, timedelta

_LABEL_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*([AaPp][Mm])?\s*$")


def format_label(value: time) -> str:
    """Render a time as a slot label, e.g. ``time(13, 0)`` → ``"01:00 PM"``."""
    return value.strftime("%I:%M %p")


def parse_label(label: str | None) -> time | None:
    """Parse a slot label (12- or 24-hour) into a time, or None if unparseable."""
    if not label:
        return None
    match = _LABEL_RE.match(label)
    if match is None:
        return None

    hours, minutes, period = int(match.group(1)), int(match.group(2)), match.group(3)
    if minutes > 59:
        return None
    if period:
        if not 1 <= hours <= 12:
            return None
        hours %= 12
        if period.upper() == "PM":
            hours += 12
    elif hours > 23:
        return None
    return time(hours, minutes)


def hourly_slots(first_hour: int, last_hour: int) -> list[str]:
    """Hourly labels from ``first_hour`` to ``last_hour`` inclusive (24h clock)."""
    return [format_label(time(hour, 0)) for hour in range(first_hour, last_hour + 1)]


def add_hours_to_label(label: str | None, hours: int) -> str | None:
    """End label of a booking starting at ``label`` lasting ``hours``."""
    start = parse_label(label)
    if start is None:
        return None
    end = datetime.combine(datetime.min.date(), start) + timedelta(hours=hours)
    return format_label(end.time())


def normalise_label(label: str) -> str:
    """Canonical form of a label (``"9:00 am"`` → ``"09:00 AM"``); unparseable text is only trimmed."""
    parsed = parse_label(label)
    return format_label(parsed) if parsed is not None else label.strip()
