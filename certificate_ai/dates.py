"""
Date helpers: academic year, durations, ISO normalization
"""

import re
from datetime import date, datetime
from typing import Optional, Union

from dateutil import parser

ACADEMIC_YEAR_START_MONTH = 7

DateLike = Union[date, datetime, str]


def parse_date(value: Optional[DateLike]) -> Optional[date]:
    """
    Parse a certificate date

    ISO dates are read as-is; anything else goes through dateutil with
    day-first ordering (10/07/2024 is 10 July).
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass
    # Without a four-digit year dateutil would fill in the current one
    if not re.search(r"\d{4}", text):
        return None
    try:
        return parser.parse(text, dayfirst=True).date()
    except (ValueError, OverflowError, TypeError):
        return None


def academic_year(value: DateLike) -> Optional[str]:
    """
    Academic year label with a 1 July cutover

    2024-07-01 -> "2024-25", 2024-06-30 -> "2023-24".
    """
    d = parse_date(value)
    if d is None:
        return None
    start = d.year if d.month >= ACADEMIC_YEAR_START_MONTH else d.year - 1
    return f"{start}-{(start + 1) % 100:02d}"


def to_iso(value: Optional[DateLike]) -> Optional[str]:
    d = parse_date(value)
    return d.isoformat() if d else None


def duration_days(start: DateLike, end: DateLike) -> Optional[int]:
    """Inclusive day count between two dates"""
    s, e = parse_date(start), parse_date(end)
    if s is None or e is None or e < s:
        return None
    return (e - s).days + 1


def weeks_to_days(weeks: Union[int, float, str]) -> Optional[int]:
    try:
        return int(round(float(weeks) * 7))
    except (TypeError, ValueError):
        return None
