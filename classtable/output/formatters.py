"""
Output formatters for timetables.

This module provides formatters for different output formats:
- JSON: The timetable document as sent to the API
- Week grid: Period rows x weekday columns, as plain text or a rich table
"""

from __future__ import annotations

import json
from io import StringIO

from rich.console import Console
from rich.table import Table
from rich.text import Text

from ..data.models import Timetable, Weekday
from ..grid import ScheduleGrid


EMPTY_MESSAGE = "No timetable found. Create a timetable for this class."


# =============================================================================
# JSON Formatter
# =============================================================================

class JSONFormatter:
    """Formats a timetable as its JSON document."""

    def __init__(self, indent: int = 2, ensure_ascii: bool = False):
        self.indent = indent
        self.ensure_ascii = ensure_ascii

    def format(self, timetable: Timetable) -> str:
        return json.dumps(timetable.to_wire(), indent=self.indent, ensure_ascii=self.ensure_ascii)

    def format_compact(self, timetable: Timetable) -> str:
        """Format as compact single-line JSON."""
        return json.dumps(timetable.to_wire(), ensure_ascii=self.ensure_ascii, separators=(',', ':'))


def format_json(timetable: Timetable, indent: int = 2) -> str:
    """Convenience function for JSON formatting."""
    return JSONFormatter(indent=indent).format(timetable)


# =============================================================================
# Week Grid Formatter
# =============================================================================

class WeekGridFormatter:
    """Formats a timetable as a week grid, one row per period index."""

    def __init__(
        self,
        use_colors: bool = True,
        twelve_hour: bool = True,
        cell_width: int = 18,
        show_index: bool = True,
    ):
        """
        Initialize week grid formatter.

        Args:
            use_colors: Render through rich instead of plain text
            twelve_hour: Show times as '8:00 AM' rather than '08:00'
            cell_width: Width of each day column in plain output
            show_index: Prefix each row with its period index
        """
        self.use_colors = use_colors
        self.twelve_hour = twelve_hour
        self.cell_width = cell_width
        self.show_index = show_index

    def format(self, grid: ScheduleGrid) -> str:
        if grid.is_empty:
            return EMPTY_MESSAGE
        if self.use_colors:
            return self._format_rich(grid)
        return self._format_plain(grid)

    def _time_cell(self, grid: ScheduleGrid, index: int) -> str:
        label = grid.time_label(index, twelve_hour=self.twelve_hour)
        return f"{index}  {label}" if self.show_index else label

    def _format_plain(self, grid: ScheduleGrid) -> str:
        """Format as plain text grid."""
        lines = []
        time_width = max(len(self._time_cell(grid, i)) for i in range(grid.slot_count)) + 2

        header = "Time".ljust(time_width)
        for day in Weekday:
            header += day.short_name.center(self.cell_width)
        lines.append(header)
        lines.append("-" * (time_width + len(Weekday) * self.cell_width))

        for row in grid.rows():
            line = self._time_cell(grid, row.index).ljust(time_width)
            for day in Weekday:
                text = " / ".join(grid.cell_lines(day, row.index)) or "-"
                line += text[:self.cell_width - 2].center(self.cell_width)
            lines.append(line.rstrip())

        return '\n'.join(lines)

    def build_table(self, grid: ScheduleGrid) -> Table:
        """Build a rich table for the grid (the grid must not be empty)."""
        timetable = grid.timetable
        title = f"Class {timetable.class_id}"
        if timetable.section:
            title += f" / Section {timetable.section}"

        table = Table(
            title=title,
            caption=(
                f"{timetable.periods_per_day} periods/day, {timetable.period_duration} min each, "
                f"starts at {timetable.day_start_time}"
            ),
            show_header=True,
            header_style="bold cyan",
            show_lines=True,
        )
        table.add_column("Time", style="dim", no_wrap=True)
        for day in Weekday:
            table.add_column(day.short_name, justify="center")

        for row in grid.rows():
            cells = []
            for day in Weekday:
                lines = grid.cell_lines(day, row.index)
                if row.is_break:
                    cells.append(Text(lines[0], style="bold yellow"))
                elif lines:
                    cell = Text(lines[0], style="bold")
                    for extra in lines[1:]:
                        cell.append("\n" + extra, style="dim")
                    cells.append(cell)
                else:
                    cells.append(Text("+", style="dim"))
            table.add_row(self._time_cell(grid, row.index), *cells)

        return table

    def _format_rich(self, grid: ScheduleGrid) -> str:
        """Format with rich table."""
        console = Console(record=True, width=140, file=StringIO())
        console.print(self.build_table(grid))
        return console.export_text()


def format_week_grid(grid: ScheduleGrid, use_colors: bool = False, twelve_hour: bool = True) -> str:
    """Convenience function for week grid formatting."""
    return WeekGridFormatter(use_colors=use_colors, twelve_hour=twelve_hour).format(grid)
