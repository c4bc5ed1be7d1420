"""Timetable data model, file loading and schedule generation."""

from .models import (
    Weekday,
    BreakType,
    Period,
    DaySchedule,
    Timetable,
    TimetableSettings,
    Subject,
    Teacher,
    Section,
    SchoolClass,
    minutes_to_time,
    time_to_minutes,
    format_time_12h,
    schedule_from_wire,
    schedule_to_wire,
)
from .loader import load_timetable, save_timetable
from .generator import (
    GeneratorConfig,
    LocalScheduleGenerator,
    ScheduleGenerator,
    build_timetable,
    generate_timetable,
)

__all__ = [
    # Models
    "Weekday",
    "BreakType",
    "Period",
    "DaySchedule",
    "Timetable",
    "TimetableSettings",
    "Subject",
    "Teacher",
    "Section",
    "SchoolClass",
    "minutes_to_time",
    "time_to_minutes",
    "format_time_12h",
    "schedule_from_wire",
    "schedule_to_wire",
    # Loader
    "load_timetable",
    "save_timetable",
    # Generator
    "GeneratorConfig",
    "LocalScheduleGenerator",
    "ScheduleGenerator",
    "build_timetable",
    "generate_timetable",
]
