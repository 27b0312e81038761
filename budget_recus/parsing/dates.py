"""
Receipt date extraction.

Day-first dates (05/03/2024, 5.3.24, 05-03-2024) are tried before
year-first ones (2024-03-05). Nothing checks that the day or month is in
range: 31/02/2024 comes back as "2024-02-31", and normalize_date() rolls
it over to a real day when the expense is committed.
"""

import re
from datetime import date, timedelta
from typing import Optional

_DAY_FIRST_RE = re.compile(
    r"(?<!\d)(\d{1,2})[/.-](\d{1,2})[/.-](\d{4}|\d{2})(?!\d)"
)
_YEAR_FIRST_RE = re.compile(
    r"(?<!\d)(\d{4})[/.-](\d{1,2})[/.-](\d{1,2})(?!\d)"
)
_ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})")


def _iso(year: str, month: str, day: str) -> str:
    return f"{year}-{month.zfill(2)}-{day.zfill(2)}"


def parse_date(text: str, today: Optional[date] = None) -> str:
    """
    Find the receipt date as a YYYY-MM-DD string.

    Two-digit years are taken as 20xx. Falls back to today when the text
    holds no date.
    """
    match = _DAY_FIRST_RE.search(text)
    if match:
        day, month, year = match.groups()
        if len(year) == 2:
            year = "20" + year
        return _iso(year, month, day)

    match = _YEAR_FIRST_RE.search(text)
    if match:
        year, month, day = match.groups()
        return _iso(year, month, day)

    return (today or date.today()).isoformat()


def normalize_date(value: str) -> date:
    """
    Turn a YYYY-MM-DD string into a real date, rolling overflow forward.

    Out-of-range parts carry like a lenient calendar would:
    2024-02-30 -> 2024-03-01, 2024-13-05 -> 2025-01-05,
    2024-03-00 -> 2024-02-29.

    Raises:
        ValueError: If value is not shaped like YYYY-MM-DD
    """
    match = _ISO_DATE_RE.match(value.strip())
    if not match:
        raise ValueError(f"Invalid date: {value!r}")
    year, month, day = (int(part) for part in match.groups())

    carry_year, month_index = divmod(year * 12 + month - 1, 12)
    first = date(carry_year, month_index + 1, 1)
    return first + timedelta(days=day - 1)
