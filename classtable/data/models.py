"""
Pydantic models for the class timetable.

A timetable is a day x period-index matrix. The period index is the
time-slot identity shared by all six school days, so the start/end time and
the break flag of index i are the same on every day; only subject, teacher
and room differ per day.

Time conventions:
- Times are 'HH:MM' strings on a 24-hour clock
- Days are 0-5 (Monday-Saturday)

Field names are snake_case in Python and camelCase on the wire, where the
timetable document looks like:

    {"_id": ..., "class": ..., "section": ..., "academicYear": ...,
     "periodsPerDay": 8, "periodDuration": 45, "dayStartTime": "08:00",
     "schedule": [{"day": "monday", "periods": [{"startTime": ..., ...}]}, ...]}
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Optional, Sequence

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError as PydanticValidationError,
    field_validator,
    model_validator,
)

from ..errors import ValidationError


# =============================================================================
# Constants and Enums
# =============================================================================

class Weekday(int, Enum):
    """School day: 0=Monday through 5=Saturday."""
    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5

    @property
    def label(self) -> str:
        """Wire label, e.g. 'monday'."""
        return self.name.lower()

    @property
    def short_name(self) -> str:
        return self.name[:3].title()

    @classmethod
    def parse(cls, value: Any) -> "Weekday":
        """Accept a Weekday, a day index, or a full/abbreviated day name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                raise ValidationError(f"Day index out of range: {value}") from None
        if isinstance(value, str):
            key = value.strip().lower()
            for day in cls:
                if key in (day.label, day.label[:3]):
                    return day
            if key.isdigit():
                return cls.parse(int(key))
        raise ValidationError(f"Unknown day: {value!r}")


class BreakType(str, Enum):
    """Kind of break occupying a break column."""
    TEA = "tea"
    LUNCH = "lunch"


DAYS_PER_WEEK = len(Weekday)
DEFAULT_ACADEMIC_YEAR = "2025-2026"

TimeString = Annotated[
    str,
    Field(pattern=r"^([01]\d|2[0-3]):[0-5]\d$", description="Time as HH:MM (24h)"),
]


# =============================================================================
# Helper Functions
# =============================================================================

def minutes_to_time(minutes: int) -> str:
    """Convert minutes from midnight to HH:MM format."""
    h, m = divmod(minutes, 60)
    return f"{h:02d}:{m:02d}"


def time_to_minutes(time_str: str) -> int:
    """Convert HH:MM format to minutes from midnight."""
    h, m = map(int, time_str.split(":"))
    return h * 60 + m


def format_time_12h(time_str: Optional[str]) -> str:
    """Convert HH:MM to a 12-hour label such as '1:05 PM'."""
    if not time_str:
        return ""
    hours, minutes = time_str.split(":")
    hour = int(hours)
    suffix = "PM" if hour >= 12 else "AM"
    return f"{hour % 12 or 12}:{minutes} {suffix}"


def _ref_id(value: Any) -> Any:
    """Reduce a populated reference ({'_id': ..., ...}) to its id."""
    if isinstance(value, dict):
        value = value.get("_id", value.get("id"))
    if value == "":
        return None
    return value


# =============================================================================
# Reference Data (read-only lookups)
# =============================================================================

class Subject(BaseModel):
    """Subject that can be assigned to a period."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(alias="_id", min_length=1)
    name: str = Field(default="")

    def __str__(self) -> str:
        return self.name or self.id


class Teacher(BaseModel):
    """Teacher that can be assigned to a period."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(alias="_id", min_length=1)
    first_name: str = Field(default="", alias="firstName")
    last_name: str = Field(default="", alias="lastName")

    @model_validator(mode="before")
    @classmethod
    def flatten_profile(cls, data: Any) -> Any:
        """User documents keep names under 'profile'."""
        if isinstance(data, dict) and isinstance(data.get("profile"), dict):
            data = {**data, **data["profile"]}
        return data

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)

    def __str__(self) -> str:
        return self.full_name or self.id


class Section(BaseModel):
    """Section of a class, e.g. 'A'."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(alias="_id", min_length=1)
    name: str = Field(default="")


class SchoolClass(BaseModel):
    """Class that owns timetables, one per section."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(alias="_id", min_length=1)
    name: str = Field(default="")
    sections: list[Section] = Field(default_factory=list)
    academic_year: Optional[str] = Field(default=None, alias="academicYear")

    def get_section(self, section_id: str) -> Optional[Section]:
        for section in self.sections:
            if section.id == section_id:
                return section
        return None


# =============================================================================
# Timetable Models
# =============================================================================

class Period(BaseModel):
    """
    One cell of the timetable.

    A period has no identity of its own: its position in the day's sequence
    is the time-slot key. Break periods carry a break type and no content.
    """
    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    start_time: TimeString = Field(alias="startTime")
    end_time: TimeString = Field(alias="endTime")
    is_break: bool = Field(default=False, alias="isBreak")
    break_type: Optional[BreakType] = Field(default=None, alias="breakType")
    subject: Optional[str] = Field(default=None, description="Subject ID")
    teacher: Optional[str] = Field(default=None, description="Teacher ID")
    room: str = Field(default="")

    @field_validator("subject", "teacher", mode="before")
    @classmethod
    def normalise_reference(cls, value: Any) -> Any:
        return _ref_id(value)

    @field_validator("room", mode="before")
    @classmethod
    def normalise_room(cls, value: Any) -> Any:
        return "" if value is None else value

    @model_validator(mode="after")
    def validate_period(self) -> "Period":
        """Ensure the time range is ordered and break cells hold no content."""
        if time_to_minutes(self.start_time) >= time_to_minutes(self.end_time):
            raise ValueError(
                f"start_time ({self.start_time}) must be before end_time ({self.end_time})"
            )
        if self.is_break:
            if self.break_type is None:
                raise ValueError("break period requires a break_type")
            if self.subject is not None or self.teacher is not None or self.room:
                raise ValueError("break period cannot have a subject, teacher or room")
        elif self.break_type is not None:
            raise ValueError("break_type is only allowed on break periods")
        return self

    @classmethod
    def slot(cls, start_time: str, end_time: str) -> "Period":
        """Empty teaching period."""
        return cls(start_time=start_time, end_time=end_time)

    @classmethod
    def break_slot(cls, start_time: str, end_time: str, break_type: BreakType) -> "Period":
        return cls(start_time=start_time, end_time=end_time, is_break=True, break_type=break_type)

    @property
    def is_empty(self) -> bool:
        """Teaching period with nothing assigned."""
        return not self.is_break and self.subject is None and self.teacher is None and not self.room

    def to_wire(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "startTime": self.start_time,
            "endTime": self.end_time,
            "isBreak": self.is_break,
        }
        if self.is_break:
            data["breakType"] = self.break_type.value
        else:
            data["subject"] = self.subject
            data["teacher"] = self.teacher
            data["room"] = self.room
        return data

    def __str__(self) -> str:
        label = f"{self.break_type.value} break" if self.is_break else (self.subject or "free")
        return f"{self.start_time}-{self.end_time} {label}"


class DaySchedule(BaseModel):
    """Ordered periods for one weekday. The weekday is the position in Timetable.days."""
    model_config = ConfigDict(extra="ignore", frozen=True)

    periods: tuple[Period, ...] = Field(default=())

    @model_validator(mode="before")
    @classmethod
    def accept_period_list(cls, data: Any) -> Any:
        if isinstance(data, (list, tuple)):
            return {"periods": data}
        return data

    def __len__(self) -> int:
        return len(self.periods)

    @property
    def break_indices(self) -> frozenset[int]:
        return frozenset(i for i, p in enumerate(self.periods) if p.is_break)

    def replace(self, index: int, period: Period) -> "DaySchedule":
        """Copy of this day with the period at `index` replaced."""
        periods = list(self.periods)
        periods[index] = period
        return DaySchedule(periods=tuple(periods))


def schedule_from_wire(entries: Any) -> tuple[DaySchedule, ...]:
    """
    Convert the wire `schedule` array to day schedules in Weekday order.

    Raises:
        ValueError: If a day is unknown, duplicated or missing
    """
    if not isinstance(entries, (list, tuple)):
        raise ValueError("schedule must be a list of day entries")

    by_day: dict[Weekday, Any] = {}
    for entry in entries:
        if not isinstance(entry, dict) or "day" not in entry:
            raise ValueError(f"schedule entry is missing 'day': {entry!r}")
        try:
            day = Weekday.parse(entry["day"])
        except ValidationError as e:
            raise ValueError(str(e)) from None
        if day in by_day:
            raise ValueError(f"duplicate schedule entry for {day.label}")
        by_day[day] = entry.get("periods", [])

    missing = [day.label for day in Weekday if day not in by_day]
    if missing:
        raise ValueError(f"schedule is missing days: {', '.join(missing)}")

    return tuple(DaySchedule(periods=by_day[day]) for day in Weekday)


def schedule_to_wire(days: Sequence[DaySchedule]) -> list[dict[str, Any]]:
    """Convert day schedules to the wire `schedule` array, labelling each day."""
    return [
        {"day": day.label, "periods": [p.to_wire() for p in days[day].periods]}
        for day in Weekday
    ]


class Timetable(BaseModel):
    """
    Weekly timetable for a class (and optionally one of its sections).

    Immutable: every edit produces a new Timetable via `with_days`, which
    re-checks the cross-day invariants.
    """
    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    id: Optional[str] = Field(default=None, alias="_id")
    class_id: str = Field(alias="class", min_length=1)
    section: Optional[str] = Field(default=None)
    academic_year: str = Field(default=DEFAULT_ACADEMIC_YEAR, alias="academicYear")
    periods_per_day: int = Field(ge=1, alias="periodsPerDay")
    period_duration: int = Field(ge=1, alias="periodDuration", description="Minutes")
    day_start_time: TimeString = Field(alias="dayStartTime")
    days: tuple[DaySchedule, ...]

    @model_validator(mode="before")
    @classmethod
    def accept_wire_schedule(cls, data: Any) -> Any:
        """Decode the wire `schedule` array and populated references."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if "schedule" in data and "days" not in data:
            data["days"] = schedule_from_wire(data.pop("schedule"))
        for key in ("class", "class_id", "section"):
            if key in data:
                data[key] = _ref_id(data[key])
        return data

    @model_validator(mode="after")
    def validate_grid(self) -> "Timetable":
        """Check the cross-day invariants of the day x period matrix."""
        if len(self.days) != DAYS_PER_WEEK:
            raise ValueError(f"expected {DAYS_PER_WEEK} day schedules, got {len(self.days)}")

        reference = self.days[Weekday.MONDAY]
        if len(reference) == 0:
            raise ValueError("timetable has no periods; each day needs at least one slot")
        errors: list[str] = []
        for day in Weekday:
            schedule = self.days[day]
            if len(schedule) != len(reference):
                errors.append(
                    f"{day.label} has {len(schedule)} periods, monday has {len(reference)}"
                )
                continue
            for index, (period, ref) in enumerate(zip(schedule.periods, reference.periods)):
                if (period.start_time, period.end_time) != (ref.start_time, ref.end_time):
                    errors.append(
                        f"{day.label} period {index} is {period.start_time}-{period.end_time}, "
                        f"monday is {ref.start_time}-{ref.end_time}"
                    )
                if period.is_break != ref.is_break:
                    errors.append(f"break at period {index} is not shared by {day.label}")

        if errors:
            raise ValueError("Timetable grid validation failed:\n" + "\n".join(f"  - {e}" for e in errors))
        return self

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> "Timetable":
        """
        Decode a timetable document.

        Raises:
            ValidationError: If the document is malformed or breaks an invariant
        """
        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid timetable document: {e}") from e

    def with_days(self, days: Sequence[DaySchedule]) -> "Timetable":
        """Copy with a new schedule, re-validating the grid invariants."""
        data = {name: getattr(self, name) for name in type(self).model_fields}
        data["days"] = tuple(days)
        return type(self).model_validate(data)

    def to_wire(self) -> dict[str, Any]:
        """Encode as a timetable document. The whole schedule is always included."""
        data: dict[str, Any] = {}
        if self.id is not None:
            data["_id"] = self.id
        data["class"] = self.class_id
        if self.section is not None:
            data["section"] = self.section
        data.update({
            "academicYear": self.academic_year,
            "periodsPerDay": self.periods_per_day,
            "periodDuration": self.period_duration,
            "dayStartTime": self.day_start_time,
            "schedule": schedule_to_wire(self.days),
        })
        return data

    # -------------------------------------------------------------------------
    # Lookup Methods
    # -------------------------------------------------------------------------

    @property
    def slot_count(self) -> int:
        """Number of period indices (the same for every day)."""
        return len(self.days[Weekday.MONDAY])

    @property
    def break_indices(self) -> list[int]:
        return sorted(self.days[Weekday.MONDAY].break_indices)

    def day(self, day: Weekday | int | str) -> DaySchedule:
        return self.days[Weekday.parse(day)]

    def check_index(self, index: int) -> int:
        """Return `index` if it is a valid period index, else raise ValidationError."""
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < self.slot_count:
            raise ValidationError(
                f"Period index {index!r} out of range [0, {self.slot_count})"
            )
        return index

    def period(self, day: Weekday | int | str, index: int) -> Period:
        return self.day(day).periods[self.check_index(index)]

    def summary(self) -> dict[str, Any]:
        """Get a summary of the timetable."""
        teaching = [p for d in self.days for p in d.periods if not p.is_break]
        return {
            "id": self.id,
            "class": self.class_id,
            "section": self.section,
            "academic_year": self.academic_year,
            "slots_per_day": self.slot_count,
            "breaks": {i: self.days[0].periods[i].break_type.value for i in self.break_indices},
            "assigned_periods": sum(1 for p in teaching if p.subject is not None),
            "teaching_periods": len(teaching),
        }


# =============================================================================
# Creation Settings
# =============================================================================

class TimetableSettings(BaseModel):
    """Parameters for generating a new timetable."""
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    periods_per_day: int = Field(default=8, ge=4, le=12, alias="periodsPerDay")
    day_start_time: TimeString = Field(default="08:00", alias="dayStartTime")
    period_duration: int = Field(default=45, ge=30, le=60, alias="periodDuration")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
