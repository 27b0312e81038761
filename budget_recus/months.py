"""
Month Token Arithmetic

Budgets and rollover work at month granularity. A month is identified by
a canonical "YYYY-MM" token; tokens of that form sort chronologically as
plain strings, which the rollover relies on for its start-month floor.

Any off-by-one here corrupts every rollover chain downstream, so the year
boundary is handled explicitly rather than through date arithmetic.
"""

import re
from datetime import date, datetime, timezone
from typing import Optional

MONTH_TOKEN_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"

_MONTH_TOKEN_RE = re.compile(MONTH_TOKEN_PATTERN)


def is_month_token(value: object) -> bool:
    """True if value is a canonical YYYY-MM token."""
    return isinstance(value, str) and _MONTH_TOKEN_RE.match(value) is not None


def format_month(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def split_month(token: str) -> tuple[int, int]:
    """Split a token into (year, month), rejecting malformed input."""
    if not is_month_token(token):
        raise ValueError(f"Invalid month token: {token!r} (expected YYYY-MM)")
    year, month = token.split("-")
    return int(year), int(month)


def prev_month(token: str) -> str:
    """Previous month; January rolls back to December of the previous year."""
    year, month = split_month(token)
    if month == 1:
        return format_month(year - 1, 12)
    return format_month(year, month - 1)


def next_month(token: str) -> str:
    year, month = split_month(token)
    if month == 12:
        return format_month(year + 1, 1)
    return format_month(year, month + 1)


def month_of(moment: date) -> str:
    """
    Month token of a date or timestamp.

    Aware timestamps are read in UTC; naive ones are taken as-is.
    """
    if isinstance(moment, datetime) and moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return format_month(moment.year, moment.month)


def current_month(today: Optional[date] = None) -> str:
    """Month token for today (or the given day)."""
    return month_of(today or date.today())
