"""Time helpers shared by the timetable and ledger code."""

import re
from datetime import datetime, timezone
from typing import Optional

from app.core.exceptions import InvalidTimeFormat

HHMM_PATTERN = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")


def to_minutes(hhmm: str) -> int:
    """Parse a 24-hour "HH:MM" string into minutes since midnight (0..1439)."""
    if not isinstance(hhmm, str) or not HHMM_PATTERN.match(hhmm):
        raise InvalidTimeFormat(hhmm)
    hours, minutes = hhmm.split(":")
    return int(hours) * 60 + int(minutes)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive datetimes (e.g. read back from SQLite) are treated as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
