"""Timetable output formatting."""

from .formatters import (
    EMPTY_MESSAGE,
    JSONFormatter,
    WeekGridFormatter,
    format_json,
    format_week_grid,
)

__all__ = [
    "EMPTY_MESSAGE",
    "JSONFormatter",
    "WeekGridFormatter",
    "format_json",
    "format_week_grid",
]
