"""
Slot list normalization and evenly spaced slot generation.

Pure domain logic: no I/O, nothing raised for malformed input.
"""

import logging
from typing import Iterable, List, Tuple

from .models import TimeInterval
from .time_of_day import from_minutes, parse_time_of_day, to_minutes

logger = logging.getLogger(__name__)


def normalize_slots(slots: Iterable[TimeInterval]) -> Tuple[TimeInterval, ...]:
    """
    Bring a slot list into canonical form.

    1. Drop intervals whose end is not after their start
    2. Drop exact duplicates
    3. Sort by start time (then end time)

    The result is idempotent under a second call.
    """
    seen: set[Tuple[str, str]] = set()
    valid: List[TimeInterval] = []

    for slot in slots:
        if not slot.is_valid:
            logger.debug("Dropping invalid slot %s-%s", slot.start, slot.end)
            continue

        # Canonical padding so "9:00" and "09:00" compare equal
        canonical = TimeInterval(
            start=parse_time_of_day(slot.start),
            end=parse_time_of_day(slot.end),
        )
        identity = (canonical.start, canonical.end)
        if identity in seen:
            continue

        seen.add(identity)
        valid.append(canonical)

    return tuple(
        sorted(valid, key=lambda s: (to_minutes(s.start), to_minutes(s.end)))
    )


def generate_slots(
    start: str | None,
    end: str | None,
    length_minutes: int,
    gap_minutes: int = 0,
    max_count: int = 50,
) -> Tuple[TimeInterval, ...]:
    """
    Tile a time range with back-to-back slots.

    Greedy and non-overlapping: a slot is emitted while it fits completely
    before ``end``; no partial slot is fitted at the tail. Each slot is
    followed by ``gap_minutes`` of idle time.

    Example:
    09:00 - 12:00, length 90, gap 15
    Result: [09:00-10:30]  (10:45-12:15 would run past 12:00)

    Returns an empty tuple when either bound is unset/unparsable, the length
    is below one minute or ``max_count`` is below one. Generated slots are
    not deduplicated against an existing list; normalize after merging.
    """
    start = parse_time_of_day(start)
    end = parse_time_of_day(end)

    if start is None or end is None or length_minutes < 1 or max_count < 1:
        return ()

    gap_minutes = max(0, gap_minutes)
    limit = to_minutes(end)
    cursor = to_minutes(start)
    generated: List[TimeInterval] = []

    while cursor + length_minutes <= limit and len(generated) < max_count:
        generated.append(
            TimeInterval(
                start=from_minutes(cursor),
                end=from_minutes(cursor + length_minutes),
            )
        )
        cursor += length_minutes + gap_minutes

    return tuple(generated)
