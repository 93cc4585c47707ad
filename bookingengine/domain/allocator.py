"""
Weekday group allocation.

Each weekday belongs to at most one group. Every operation takes the current
group tuple and returns a new one; nothing is mutated in place.
"""

import logging
from typing import FrozenSet, Iterable, Sequence, Tuple

from .models import ALL_WEEKDAYS, Weekday, WeekdayGroup, sort_weekdays

logger = logging.getLogger(__name__)

Groups = Tuple[WeekdayGroup, ...]


def _in_range(groups: Sequence[WeekdayGroup], index: int) -> bool:
    if 0 <= index < len(groups):
        return True
    logger.warning("No weekday group at index %s (have %s)", index, len(groups))
    return False


def add_group(groups: Sequence[WeekdayGroup]) -> Groups:
    """Append an empty group. Days must be assigned before it is useful."""
    return tuple(groups) + (WeekdayGroup(),)


def remove_group(groups: Sequence[WeekdayGroup], index: int) -> Groups:
    """Remove the group at ``index``. Other groups are left as they are."""
    if not _in_range(groups, index):
        return tuple(groups)
    return tuple(g for i, g in enumerate(groups) if i != index)


def replace_group(
    groups: Sequence[WeekdayGroup],
    index: int,
    group: WeekdayGroup,
) -> Groups:
    """Swap in a new version of one group."""
    if not _in_range(groups, index):
        return tuple(groups)
    return tuple(group if i == index else g for i, g in enumerate(groups))


def assigned_days(groups: Iterable[WeekdayGroup]) -> FrozenSet[Weekday]:
    """Union of all days claimed by any group."""
    claimed: set[Weekday] = set()
    for group in groups:
        claimed |= group.days
    return frozenset(claimed)


def unassigned_days(groups: Iterable[WeekdayGroup]) -> FrozenSet[Weekday]:
    """The weekdays no group has claimed yet."""
    return ALL_WEEKDAYS - assigned_days(groups)


def can_add_group(groups: Iterable[WeekdayGroup]) -> bool:
    """A new group is only useful while some weekday is still free."""
    return bool(unassigned_days(groups))


def group_for_day(groups: Sequence[WeekdayGroup], day: Weekday) -> int | None:
    """Index of the group owning ``day``, or None."""
    for index, group in enumerate(groups):
        if day in group.days:
            return index
    return None


def is_day_available(
    day: Weekday,
    target_index: int,
    groups: Sequence[WeekdayGroup],
) -> bool:
    """
    Check whether ``day`` may be selected for the group at ``target_index``.

    True if the target group already owns the day, or no other group does.
    """
    owner = group_for_day(groups, day)
    return owner is None or owner == target_index


def find_conflicts(
    groups: Sequence[WeekdayGroup],
    index: int,
    days: Iterable[Weekday],
) -> list[Weekday]:
    """Days from ``days`` that another group already owns."""
    return sort_weekdays(
        day for day in set(days) if not is_day_available(day, index, groups)
    )


def set_days(
    groups: Sequence[WeekdayGroup],
    index: int,
    days: Iterable[Weekday],
) -> Groups:
    """
    Replace the day set of one group.

    A write that would claim a day owned by another group is rejected as a
    whole: the groups are returned unchanged.
    """
    if not _in_range(groups, index):
        return tuple(groups)

    days = frozenset(days)
    conflicts = find_conflicts(groups, index, days)
    if conflicts:
        logger.warning(
            "Rejected day assignment for group %s: %s already claimed",
            index,
            ", ".join(day.value for day in conflicts),
        )
        return tuple(groups)

    group = groups[index]
    return replace_group(groups, index, WeekdayGroup(days=days, slots=group.slots))


def toggle_day(
    groups: Sequence[WeekdayGroup],
    index: int,
    day: Weekday,
) -> Groups:
    """Day-picker helper: deselect an owned day, or select a free one."""
    if not _in_range(groups, index):
        return tuple(groups)

    current = groups[index].days
    if day in current:
        return set_days(groups, index, current - {day})
    return set_days(groups, index, current | {day})


def repair_exclusivity(groups: Sequence[WeekdayGroup]) -> Groups:
    """
    Make day sets disjoint by keeping the first claimant of each day.

    Used when loading documents that were written outside the engine.
    """
    claimed: set[Weekday] = set()
    repaired = []

    for index, group in enumerate(groups):
        duplicate = group.days & claimed
        if duplicate:
            logger.warning(
                "Group %s loses days already claimed by an earlier group: %s",
                index,
                ", ".join(day.value for day in sort_weekdays(duplicate)),
            )
        repaired.append(WeekdayGroup(days=group.days - claimed, slots=group.slots))
        claimed |= group.days

    return tuple(repaired)
