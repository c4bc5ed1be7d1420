"""
Break relocation: move a break column to another period index.

For every day the break at `source` and the content at `target` trade
places while each index keeps its own start and end time:

    before   source: break (tea)       target: Maths / Mr A / 101
    after    source: Maths / Mr A / 101   target: break (tea)

Content is per day, so Monday's and Tuesday's target content each move to
their own day's source slot.
"""

from __future__ import annotations

import logging

from .data.models import Period, Timetable, Weekday
from .errors import ValidationError

logger = logging.getLogger(__name__)


def relocate_break(timetable: Timetable, source_index: int, target_index: int) -> Timetable:
    """
    Move the break column at `source_index` to `target_index` for the whole week.

    Args:
        timetable: Timetable to transform (left unchanged)
        source_index: Index of a break column
        target_index: Index of a teaching column

    Returns:
        New Timetable, or `timetable` itself when the indices are equal

    Raises:
        ValidationError: If an index is out of range, the source is not a
            break column on every day, or the target is already a break column
    """
    timetable.check_index(source_index)
    timetable.check_index(target_index)

    if source_index == target_index:
        return timetable

    not_break = [d.label for d in Weekday if not timetable.days[d].periods[source_index].is_break]
    if not_break:
        raise ValidationError(
            f"Period {source_index} is not a break column (no break on {', '.join(not_break)})"
        )
    if timetable.days[Weekday.MONDAY].periods[target_index].is_break:
        raise ValidationError(
            f"Period {target_index} is already a break column; breaks can only move onto teaching periods"
        )

    days = []
    for schedule in timetable.days:
        source = schedule.periods[source_index]
        target = schedule.periods[target_index]
        moved_content = Period(
            start_time=source.start_time,
            end_time=source.end_time,
            subject=target.subject,
            teacher=target.teacher,
            room=target.room,
        )
        moved_break = Period.break_slot(target.start_time, target.end_time, source.break_type)
        days.append(schedule.replace(source_index, moved_content).replace(target_index, moved_break))

    logger.debug(
        "Moved %s break from period %d to %d",
        timetable.days[Weekday.MONDAY].periods[source_index].break_type.value,
        source_index, target_index,
    )
    return timetable.with_days(days)
