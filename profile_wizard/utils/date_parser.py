"""Parse experience start/end dates returned by CV analysis (absolute dates and "present")."""

import re
from datetime import date, datetime
from typing import Optional, Union

from utils.errors import InvalidDateError

PRESENT = "present"
_PRESENT_WORDS = {"present", "current", "now", "today", "ongoing"}

# Parsed role date: a calendar date, "present", or None when unknown
RoleDate = Union[date, str, None]


def parse_role_date(value: object) -> Optional[date]:
    """
    Attempt to parse one experience date.
    Handles: "2020-01-15", "2020-01", "01/2020", "Jan 2020", "January 2020", "2020",
    plus date/datetime objects. Returns None if the value cannot be understood.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value is None:
        return None
    text = str(value).strip().lower()
    if not text:
        return None

    # ---- ISO: 2020-01-15 / 2020-01-15T00:00:00Z / 2020-01 ----
    m = re.match(r"^(\d{4})-(\d{1,2})(?:-(\d{1,2}))?", text)
    if m:
        try:
            return date(int(m.group(1)), int(m.group(2)), int(m.group(3) or 1))
        except ValueError:
            return None

    # ---- Numeric month/year: 01/2020 or 1.2020 ----
    m = re.match(r"^(\d{1,2})[/.](\d{4})$", text)
    if m:
        try:
            return date(int(m.group(2)), int(m.group(1)), 1)
        except ValueError:
            return None

    # ---- Month name: Jan 2020, January 2020, 12 Jan 2020, Jan 12, 2020 ----
    months_abbr = r"(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)"
    m = re.match(rf"^(?:(\d{{1,2}})\s+)?({months_abbr}[a-z]*)\.?\s*(?:(\d{{1,2}})\s*,?\s*)?(\d{{4}})$", text)
    if m:
        day = int(m.group(1) or m.group(3) or 1)
        try:
            return date(int(m.group(4)), _month_num(m.group(2)), day)
        except (ValueError, KeyError):
            return None

    # ---- Year only ----
    m = re.match(r"^(\d{4})$", text)
    if m:
        return date(int(m.group(1)), 1, 1)

    return None


def is_present(value: object) -> bool:
    return isinstance(value, str) and value.strip().lower() in _PRESENT_WORDS


def parse_end_date(value: object) -> Union[date, str]:
    """End date of a role: "present" for ongoing roles, otherwise a date. Raises InvalidDateError."""
    if is_present(value):
        return PRESENT
    parsed = parse_role_date(value)
    if parsed is None:
        raise InvalidDateError(value, field="endDate")
    return parsed


def format_role_date(value: RoleDate) -> Optional[str]:
    """Serialise a parsed role date for the API (ISO date, "present" or None)."""
    if isinstance(value, date):
        return value.isoformat()
    return value


def _month_num(mon_str: str) -> int:
    s = mon_str.lower()[:3]
    months = [
        "jan", "feb", "mar", "apr", "may", "jun",
        "jul", "aug", "sep", "oct", "nov", "dec",
    ]
    for i, m in enumerate(months, 1):
        if s == m:
            return i
    raise KeyError(mon_str)
