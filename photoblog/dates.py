"""Helpers for the blog's free-form photo dates.

Photos carry either a display date such as ``"15/May/2024"`` or an ISO date.
These helpers turn either form into the display form and derive the weekday
label the admin form fills in automatically.
"""

from __future__ import annotations

import re
from datetime import date, datetime

MONTHS = (
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

WEEKDAYS = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

_DISPLAY_RE = re.compile(
    r"^(\d{1,2})/(" + "|".join(MONTHS) + r")/(\d{4})$", re.IGNORECASE
)


def is_display_date(value: str) -> bool:
    return _DISPLAY_RE.fullmatch((value or "").strip()) is not None


def parse_date(value: str) -> date | None:
    """Parse a display date or an ISO date/datetime. Returns None if neither."""
    raw = (value or "").strip()
    if not raw:
        return None

    m = _DISPLAY_RE.fullmatch(raw)
    if m is not None:
        month = [n.lower() for n in MONTHS].index(m.group(2).lower()) + 1
        try:
            return date(int(m.group(3)), month, int(m.group(1)))
        except ValueError:
            return None

    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def weekday_for(value: str) -> str:
    d = parse_date(value)
    return WEEKDAYS[d.weekday()] if d is not None else ""


def to_display_date(value: str) -> str:
    """``"2024-05-15"`` -> ``"15/May/2024"``; display dates pass through."""
    raw = (value or "").strip()
    d = parse_date(raw)
    if d is None:
        return ""
    if is_display_date(raw):
        return raw
    return f"{d.day}/{MONTHS[d.month - 1]}/{d.year}"
