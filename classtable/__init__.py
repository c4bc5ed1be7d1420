"""Class timetable grid: weekly schedules, period editing and break relocation."""

from .data.models import Timetable, Period, DaySchedule, Weekday, BreakType, TimetableSettings
from .editor import open_period, save_period, clear_period, PeriodForm
from .relocate import relocate_break
from .grid import ScheduleGrid, NameResolver
from .session import TimetableSession
from .errors import TimetableError, ValidationError, NetworkError, NotFoundError

__all__ = [
    # Model
    "Timetable",
    "Period",
    "DaySchedule",
    "Weekday",
    "BreakType",
    "TimetableSettings",
    # Operations
    "open_period",
    "save_period",
    "clear_period",
    "PeriodForm",
    "relocate_break",
    "ScheduleGrid",
    "NameResolver",
    "TimetableSession",
    # Errors
    "TimetableError",
    "ValidationError",
    "NetworkError",
    "NotFoundError",
]
