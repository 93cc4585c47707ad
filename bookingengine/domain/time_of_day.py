"""
Conversion between "HH:MM" strings and minutes since midnight.
"""

import re
from datetime import time
from typing import Any

MINUTES_PER_DAY = 24 * 60

_TIME_PATTERN = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::\d{2})?\s*$")


def to_minutes(value: str) -> int:
    """Return minutes since midnight for a well-formed "HH:MM" string."""
    hours, minutes = value.split(":")[:2]
    return int(hours) * 60 + int(minutes)


def from_minutes(minutes: int) -> str:
    """Format minutes since midnight as "HH:MM", wrapping at 24h."""
    minutes = minutes % MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def parse_time_of_day(value: Any) -> str | None:
    """
    Canonicalize user input to "HH:MM".

    Accepts "H:MM", "HH:MM", "HH:MM:SS" and ``datetime.time``. Returns None
    for empty or unparsable input so callers can treat it as unset.
    """
    if isinstance(value, time):
        return f"{value.hour:02d}:{value.minute:02d}"

    if not isinstance(value, str):
        return None

    match = _TIME_PATTERN.match(value)
    if not match:
        return None

    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        return None

    return f"{hours:02d}:{minutes:02d}"
