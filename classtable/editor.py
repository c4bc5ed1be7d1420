"""
Single-cell editing.

Each operation is a pure function from a Timetable to a new Timetable; only
the addressed (day, index) cell changes. Break cells are not editable here:
breaks move as whole columns through `classtable.relocate`.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .data.models import Period, Timetable, Weekday
from .errors import ValidationError


class PeriodForm(BaseModel):
    """Editable content of a teaching period."""
    model_config = ConfigDict(extra="forbid")

    subject: Optional[str] = None
    teacher: Optional[str] = None
    room: str = ""

    @field_validator("subject", "teacher", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        return None if value == "" else value

    @field_validator("room", mode="before")
    @classmethod
    def none_to_blank(cls, value):
        return "" if value is None else value


def _editable(timetable: Timetable, day: Weekday | int | str, index: int) -> tuple[Weekday, Period]:
    weekday = Weekday.parse(day)
    period = timetable.period(weekday, index)
    if period.is_break:
        raise ValidationError(
            f"{weekday.label} period {index} is a {period.break_type.value} break; "
            f"move the break column instead of editing it"
        )
    return weekday, period


def _replace(timetable: Timetable, day: Weekday, index: int, period: Period) -> Timetable:
    days = list(timetable.days)
    days[day] = days[day].replace(index, period)
    return timetable.with_days(days)


def open_period(timetable: Timetable, day: Weekday | int | str, index: int) -> PeriodForm:
    """Load the current content of a teaching period for editing."""
    _, period = _editable(timetable, day, index)
    return PeriodForm(subject=period.subject, teacher=period.teacher, room=period.room)


def save_period(
    timetable: Timetable,
    day: Weekday | int | str,
    index: int,
    subject: Optional[str] = None,
    teacher: Optional[str] = None,
    room: Optional[str] = "",
) -> Timetable:
    """
    Assign subject, teacher and room to one teaching period.

    Returns:
        New Timetable differing from `timetable` only at (day, index)

    Raises:
        ValidationError: If the position is out of range or is a break
    """
    weekday, period = _editable(timetable, day, index)
    form = PeriodForm(subject=subject, teacher=teacher, room=room)
    updated = period.model_copy(update=form.model_dump())
    return _replace(timetable, weekday, index, updated)


def save_form(timetable: Timetable, day: Weekday | int | str, index: int, form: PeriodForm) -> Timetable:
    return save_period(timetable, day, index, form.subject, form.teacher, form.room)


def clear_period(timetable: Timetable, day: Weekday | int | str, index: int) -> Timetable:
    """Remove subject, teacher and room from one teaching period."""
    weekday, period = _editable(timetable, day, index)
    cleared = Period.slot(period.start_time, period.end_time)
    return _replace(timetable, weekday, index, cleared)
