"""
Read-only view over a timetable for display.

The grid never mutates the timetable it wraps. With no timetable loaded it
is simply empty, which callers render as a "create timetable" prompt.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from .data.models import (
    BreakType,
    Period,
    Subject,
    Teacher,
    Timetable,
    Weekday,
    format_time_12h,
)
from .errors import ValidationError


BREAK_LABELS = {
    BreakType.TEA: "Tea Break",
    BreakType.LUNCH: "Lunch",
}


@dataclass(frozen=True)
class GridRow:
    """One period index across the week."""
    index: int
    start_time: str
    end_time: str
    is_break: bool
    break_type: Optional[BreakType]
    cells: tuple[Period, ...]  # Weekday order

    def cell(self, day: Weekday | int | str) -> Period:
        return self.cells[Weekday.parse(day)]


class NameResolver:
    """Resolves subject and teacher ids to display names."""

    def __init__(self, subjects: Iterable[Subject] = (), teachers: Iterable[Teacher] = ()):
        self._subjects = {s.id: s for s in subjects}
        self._teachers = {t.id: t for t in teachers}

    def subject_name(self, subject_id: Optional[str]) -> str:
        if subject_id is None:
            return ""
        subject = self._subjects.get(subject_id)
        return subject.name if subject and subject.name else subject_id

    def teacher_name(self, teacher_id: Optional[str]) -> str:
        if teacher_id is None:
            return ""
        teacher = self._teachers.get(teacher_id)
        return teacher.full_name if teacher and teacher.full_name else teacher_id


class ScheduleGrid:
    """Day x period-index lookups over an optional timetable."""

    def __init__(self, timetable: Optional[Timetable], resolver: NameResolver | None = None):
        self._timetable = timetable
        self.resolver = resolver or NameResolver()

    @property
    def timetable(self) -> Optional[Timetable]:
        return self._timetable

    @property
    def is_empty(self) -> bool:
        return self._timetable is None

    @property
    def slot_count(self) -> int:
        return 0 if self._timetable is None else self._timetable.slot_count

    def _require(self) -> Timetable:
        if self._timetable is None:
            raise ValidationError("No timetable loaded")
        return self._timetable

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def slot_times(self, index: int) -> tuple[str, str]:
        """Start and end time of a period index, shared by every day."""
        period = self._require().period(Weekday.MONDAY, index)
        return period.start_time, period.end_time

    def cell(self, day: Weekday | int | str, index: int) -> Period:
        return self._require().period(day, index)

    def is_break(self, index: int) -> bool:
        return self._require().period(Weekday.MONDAY, index).is_break

    def break_indices(self) -> list[int]:
        return [] if self._timetable is None else self._timetable.break_indices

    def rows(self) -> list[GridRow]:
        """All period indices in order, each with its six cells."""
        if self._timetable is None:
            return []
        days = self._timetable.days
        rows = []
        for index, first in enumerate(days[Weekday.MONDAY].periods):
            rows.append(GridRow(
                index=index,
                start_time=first.start_time,
                end_time=first.end_time,
                is_break=first.is_break,
                break_type=first.break_type,
                cells=tuple(day.periods[index] for day in days),
            ))
        return rows

    # -------------------------------------------------------------------------
    # Display
    # -------------------------------------------------------------------------

    def time_label(self, index: int, twelve_hour: bool = True) -> str:
        start, end = self.slot_times(index)
        if twelve_hour:
            return f"{format_time_12h(start)} - {format_time_12h(end)}"
        return f"{start}-{end}"

    def cell_lines(self, day: Weekday | int | str, index: int) -> list[str]:
        """Display lines for a cell: subject, teacher and room, or the break label."""
        period = self.cell(day, index)
        if period.is_break:
            return [BREAK_LABELS[period.break_type]]
        lines = []
        if period.subject is not None:
            lines.append(self.resolver.subject_name(period.subject))
        if period.teacher is not None:
            lines.append(self.resolver.teacher_name(period.teacher))
        if period.room:
            lines.append(f"Room: {period.room}")
        return lines
