"""
Schedule generation for new timetables.

A generator turns TimetableSettings into six identical day schedules: the
same slot times and the same break columns on every day, with every teaching
period left empty for manual assignment.

Usage:
    from classtable.data.generator import LocalScheduleGenerator, build_timetable

    schedule = LocalScheduleGenerator().generate(TimetableSettings(periods_per_day=6))
    timetable = build_timetable("class-10", TimetableSettings(), schedule)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

from ..errors import ValidationError
from .models import (
    DEFAULT_ACADEMIC_YEAR,
    BreakType,
    DaySchedule,
    Period,
    Timetable,
    TimetableSettings,
    Weekday,
    minutes_to_time,
    time_to_minutes,
)

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 1440


class ScheduleGenerator(Protocol):
    """Anything that can produce an initial schedule from settings."""

    def generate(self, settings: TimetableSettings) -> tuple[DaySchedule, ...]:
        ...


# =============================================================================
# Generator Configuration
# =============================================================================

@dataclass
class GeneratorConfig:
    """Break placement for the local generator.

    Indices are 0-based slot positions. When left as None the tea break sits
    a third of the way through the day and lunch two thirds of the way.
    Durations default to the period duration.
    """
    include_breaks: bool = True
    tea_index: Optional[int] = None
    lunch_index: Optional[int] = None
    tea_duration: Optional[int] = None
    lunch_duration: Optional[int] = None

    def break_positions(self, periods_per_day: int) -> dict[int, BreakType]:
        """Map slot index to break type for a day of `periods_per_day` slots."""
        if not self.include_breaks:
            return {}

        tea = periods_per_day // 3 if self.tea_index is None else self.tea_index
        lunch = (2 * periods_per_day) // 3 if self.lunch_index is None else self.lunch_index

        for name, index in (("tea_index", tea), ("lunch_index", lunch)):
            if not 0 <= index < periods_per_day:
                raise ValidationError(f"{name} {index} out of range [0, {periods_per_day})")
        if tea == lunch:
            raise ValidationError(f"tea and lunch breaks cannot share slot {tea}")

        return {tea: BreakType.TEA, lunch: BreakType.LUNCH}


# =============================================================================
# Generators
# =============================================================================

class LocalScheduleGenerator:
    """Builds consecutive slots from the day start with fixed break columns."""

    def __init__(self, config: GeneratorConfig | None = None):
        self.config = config or GeneratorConfig()

    def generate(self, settings: TimetableSettings) -> tuple[DaySchedule, ...]:
        """
        Generate a schedule for all six days.

        Args:
            settings: Slot count, day start and period length

        Returns:
            Six day schedules in Weekday order

        Raises:
            ValidationError: If the break layout is invalid or the day runs past midnight
        """
        breaks = self.config.break_positions(settings.periods_per_day)
        periods = _generate_periods(settings, breaks, self.config)

        logger.info(
            "Generated %d slots per day starting %s (breaks at %s)",
            len(periods), settings.day_start_time, sorted(breaks) or "none",
        )
        day = DaySchedule(periods=tuple(periods))
        return tuple(day for _ in Weekday)


def _generate_periods(
    settings: TimetableSettings,
    breaks: dict[int, BreakType],
    config: GeneratorConfig,
) -> list[Period]:
    """Generate the slot sequence for one day."""
    periods = []
    current = time_to_minutes(settings.day_start_time)

    for index in range(settings.periods_per_day):
        break_type = breaks.get(index)
        if break_type is BreakType.TEA:
            duration = config.tea_duration or settings.period_duration
        elif break_type is BreakType.LUNCH:
            duration = config.lunch_duration or settings.period_duration
        else:
            duration = settings.period_duration

        end = current + duration
        if end >= MINUTES_PER_DAY:
            raise ValidationError(
                f"Slot {index} would end after midnight; "
                f"reduce periods_per_day or period_duration"
            )

        start_time, end_time = minutes_to_time(current), minutes_to_time(end)
        if break_type is None:
            periods.append(Period.slot(start_time, end_time))
        else:
            periods.append(Period.break_slot(start_time, end_time, break_type))
        current = end

    return periods


# =============================================================================
# Convenience Functions
# =============================================================================

def build_timetable(
    class_id: str,
    settings: TimetableSettings,
    schedule: Sequence[DaySchedule],
    section: str | None = None,
    academic_year: str | None = None,
) -> Timetable:
    """Assemble an unsaved Timetable (no id yet) from generated days."""
    return Timetable(
        class_id=class_id,
        section=section or None,
        academic_year=academic_year or DEFAULT_ACADEMIC_YEAR,
        periods_per_day=settings.periods_per_day,
        period_duration=settings.period_duration,
        day_start_time=settings.day_start_time,
        days=tuple(schedule),
    )


def generate_timetable(
    class_id: str,
    settings: TimetableSettings | None = None,
    section: str | None = None,
    academic_year: str | None = None,
    generator: ScheduleGenerator | None = None,
) -> Timetable:
    """Generate and assemble a timetable in one call."""
    settings = settings or TimetableSettings()
    generator = generator or LocalScheduleGenerator()
    return build_timetable(class_id, settings, generator.generate(settings), section, academic_year)
