"""
Command-line interface for class timetables.

Commands work on timetable JSON files, or with --remote on the timetable of
a class held by the REST API (configured through CLASSTABLE_* variables or
the global options).

Usage:
    python -m classtable generate --class C10 -o timetable.json
    python -m classtable show timetable.json
    python -m classtable edit timetable.json --day monday --index 0 --subject MATH --teacher T1
    python -m classtable clear timetable.json --day monday --index 0
    python -m classtable move-break timetable.json --from 2 --to 0
    python -m classtable --api-url http://host/api/v1 move-break C10 --remote --from 2 --to 0
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import editor
from .api import RemoteScheduleGenerator, TimetableApiClient
from .config import ClientConfig
from .data.generator import GeneratorConfig, LocalScheduleGenerator, generate_timetable
from .data.loader import load_timetable, save_timetable
from .data.models import Subject, Teacher, Timetable, TimetableSettings, Weekday
from .errors import TimetableError
from .grid import NameResolver, ScheduleGrid
from .output.formatters import EMPTY_MESSAGE, WeekGridFormatter
from .relocate import relocate_break
from .session import TimetableSession
from .util import configure_logging

# Create Typer app
app = typer.Typer(
    name="classtable",
    help="View and edit weekly class timetables.",
    add_completion=False,
)

# Rich console for pretty output
console = Console()


# =============================================================================
# Helper Functions
# =============================================================================

@app.callback()
def main_options(
    ctx: typer.Context,
    api_url: Optional[str] = typer.Option(None, "--api-url", help="REST API base URL"),
    token: Optional[str] = typer.Option(None, "--token", help="Bearer token"),
    institution: Optional[str] = typer.Option(None, "--institution", help="Institution id"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """View and edit weekly class timetables."""
    configure_logging(verbose)
    ctx.obj = {"api_url": api_url, "token": token, "institution": institution}


def _client(ctx: typer.Context) -> TimetableApiClient:
    try:
        config = ClientConfig.from_env(**(ctx.obj or {}))
    except ValueError as e:
        _fail(f"Invalid client configuration: {e}")
    return TimetableApiClient(config)


def _fail(message: str) -> None:
    console.print(f"[red]Error:[/red] {escape(message)}")
    raise typer.Exit(code=1)


def load_file(path: Path) -> Timetable:
    """Load and validate a timetable file."""
    if not path.exists():
        _fail(f"File not found: {path}")
    try:
        return load_timetable(path)
    except TimetableError as e:
        _fail(str(e))


def load_names(path: Path) -> NameResolver:
    """Load subject and teacher display names from a JSON file."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError("expected an object with 'subjects' and 'teachers' lists")
        return NameResolver(
            subjects=[Subject.model_validate(s) for s in data.get("subjects", [])],
            teachers=[Teacher.model_validate(t) for t in data.get("teachers", [])],
        )
    except (OSError, TypeError, ValueError) as e:
        _fail(f"Cannot read names file {path}: {e}")


def print_grid(timetable: Optional[Timetable], resolver: NameResolver | None = None, plain: bool = False,
               twelve_hour: bool = True) -> None:
    grid = ScheduleGrid(timetable, resolver)
    if grid.is_empty:
        console.print(f"[yellow]{EMPTY_MESSAGE}[/yellow]")
        return
    formatter = WeekGridFormatter(use_colors=not plain, twelve_hour=twelve_hour)
    if plain:
        console.print(formatter.format(grid), markup=False, highlight=False, soft_wrap=True)
    else:
        console.print(formatter.build_table(grid))


def _mutate(
    ctx: typer.Context,
    target: str,
    change: Callable[[Timetable], Timetable],
    description: str,
    remote: bool,
    section: Optional[str],
    output: Optional[Path],
) -> None:
    """Apply a change to a timetable file or, with --remote, to a class timetable on the API."""
    try:
        if remote:
            session = TimetableSession(_client(ctx))
            if session.load(target, section) is None:
                _fail(f"No timetable for class {target}")
            timetable = session.apply(change, description)
            console.print(f"[green]Saved {description} to timetable {timetable.id}[/green]")
        else:
            path = Path(target)
            timetable = change(load_file(path))
            destination = save_timetable(timetable, output or path)
            console.print(f"[green]Saved {description} to {destination}[/green]")
    except TimetableError as e:
        _fail(str(e))
    print_grid(timetable, plain=True)


# =============================================================================
# Commands
# =============================================================================

@app.command()
def generate(
    ctx: typer.Context,
    class_id: str = typer.Option(..., "--class", "-c", help="Class id"),
    output: Path = typer.Option(Path("timetable.json"), "--output", "-o", help="Path to write the timetable"),
    section: Optional[str] = typer.Option(None, "--section", "-s", help="Section id"),
    academic_year: Optional[str] = typer.Option(None, "--academic-year", help="e.g. 2025-2026"),
    periods_per_day: int = typer.Option(8, "--periods-per-day", "-p", min=4, max=12),
    day_start: str = typer.Option("08:00", "--day-start", help="Day start time (HH:MM)"),
    period_duration: int = typer.Option(45, "--period-duration", "-d", min=30, max=60, help="Minutes"),
    tea_index: Optional[int] = typer.Option(None, "--tea-index", help="Slot of the tea break"),
    lunch_index: Optional[int] = typer.Option(None, "--lunch-index", help="Slot of the lunch break"),
    remote: bool = typer.Option(False, "--remote", help="Use the API's schedule generator"),
) -> None:
    """
    Generate a new timetable with empty teaching periods.

    Example:
        python -m classtable generate --class C10 --periods-per-day 6 -o c10.json
    """
    try:
        settings = TimetableSettings(
            periods_per_day=periods_per_day,
            day_start_time=day_start,
            period_duration=period_duration,
        )
    except ValueError as e:
        _fail(f"Invalid settings: {e}")

    if remote:
        generator = RemoteScheduleGenerator(_client(ctx))
    else:
        generator = LocalScheduleGenerator(GeneratorConfig(tea_index=tea_index, lunch_index=lunch_index))

    try:
        timetable = generate_timetable(class_id, settings, section, academic_year, generator)
    except TimetableError as e:
        _fail(str(e))

    save_timetable(timetable, output)
    console.print(f"[green]Timetable written to:[/green] {output}")
    print_grid(timetable, plain=True)


@app.command()
def show(
    input_file: Path = typer.Argument(..., help="Timetable JSON file"),
    plain: bool = typer.Option(False, "--plain", help="Plain text instead of a rich table"),
    twenty_four: bool = typer.Option(False, "--24h", help="Show 24-hour times"),
    names: Optional[Path] = typer.Option(
        None, "--names", help="JSON file with 'subjects' and 'teachers' lists for display names",
    ),
) -> None:
    """Display a timetable as a week grid."""
    timetable = load_file(input_file)
    resolver = load_names(names) if names else None
    print_grid(timetable, resolver, plain=plain, twelve_hour=not twenty_four)


@app.command()
def validate(
    input_file: Path = typer.Argument(..., help="Timetable JSON file to validate"),
) -> None:
    """
    Validate a timetable file.

    Checks that there are six days of equal length, that every period index
    has the same times on every day, and that break columns line up.
    """
    console.print(f"\n[bold]Validating:[/bold] {input_file}\n")
    timetable = load_file(input_file)
    console.print("[green]Timetable is valid[/green]\n")

    table = Table(show_header=False, box=None)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="white")
    for key, value in timetable.summary().items():
        table.add_row(key, str(value))
    console.print(table)


@app.command()
def edit(
    ctx: typer.Context,
    target: str = typer.Argument(..., help="Timetable file, or class id with --remote"),
    day: str = typer.Option(..., "--day", help="monday..saturday"),
    index: int = typer.Option(..., "--index", "-i", help="Period index (0-based)"),
    subject: Optional[str] = typer.Option(None, "--subject", help="Subject id"),
    teacher: Optional[str] = typer.Option(None, "--teacher", help="Teacher id"),
    room: str = typer.Option("", "--room", help="Room"),
    remote: bool = typer.Option(False, "--remote", help="Edit the class timetable on the API"),
    section: Optional[str] = typer.Option(None, "--section", "-s", help="Section id (with --remote)"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to this file instead"),
) -> None:
    """Assign subject, teacher and room to one period."""
    _mutate(
        ctx, target,
        lambda tt: editor.save_period(tt, day, index, subject, teacher, room),
        f"{_day_label(day)} period {index}", remote, section, output,
    )


@app.command()
def clear(
    ctx: typer.Context,
    target: str = typer.Argument(..., help="Timetable file, or class id with --remote"),
    day: str = typer.Option(..., "--day", help="monday..saturday"),
    index: int = typer.Option(..., "--index", "-i", help="Period index (0-based)"),
    remote: bool = typer.Option(False, "--remote", help="Edit the class timetable on the API"),
    section: Optional[str] = typer.Option(None, "--section", "-s", help="Section id (with --remote)"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to this file instead"),
) -> None:
    """Clear subject, teacher and room from one period."""
    _mutate(
        ctx, target,
        lambda tt: editor.clear_period(tt, day, index),
        f"cleared {_day_label(day)} period {index}", remote, section, output,
    )


@app.command("move-break")
def move_break(
    ctx: typer.Context,
    target: str = typer.Argument(..., help="Timetable file, or class id with --remote"),
    source_index: int = typer.Option(..., "--from", help="Index of the break column"),
    target_index: int = typer.Option(..., "--to", help="Index to move the break to"),
    remote: bool = typer.Option(False, "--remote", help="Edit the class timetable on the API"),
    section: Optional[str] = typer.Option(None, "--section", "-s", help="Section id (with --remote)"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to this file instead"),
) -> None:
    """Move a break column to another period index for the whole week."""
    _mutate(
        ctx, target,
        lambda tt: relocate_break(tt, source_index, target_index),
        f"break move {source_index} -> {target_index}", remote, section, output,
    )


@app.command()
def fetch(
    ctx: typer.Context,
    class_id: str = typer.Argument(..., help="Class id"),
    section: Optional[str] = typer.Option(None, "--section", "-s", help="Section id"),
    output: Path = typer.Option(Path("timetable.json"), "--output", "-o", help="Path to write the timetable"),
) -> None:
    """Download the timetable of a class from the API."""
    session = TimetableSession(_client(ctx))
    try:
        timetable = session.load(class_id, section)
    except TimetableError as e:
        _fail(str(e))
    if timetable is None:
        console.print(f"[yellow]{EMPTY_MESSAGE}[/yellow]")
        raise typer.Exit(code=1)
    save_timetable(timetable, output)
    console.print(f"[green]Timetable {timetable.id} written to:[/green] {output}")


@app.command()
def push(
    ctx: typer.Context,
    input_file: Path = typer.Argument(..., help="Timetable JSON file"),
) -> None:
    """Upload a timetable file: update it if it has an id, otherwise create it."""
    timetable = load_file(input_file)
    client = _client(ctx)
    try:
        if timetable.id:
            saved = client.update(timetable.id, timetable)
        else:
            saved = client.create(timetable)
    except TimetableError as e:
        _fail(str(e))
    save_timetable(saved, input_file)
    console.print(f"[green]Saved timetable {saved.id}[/green]")


@app.command()
def delete(
    ctx: typer.Context,
    timetable_id: str = typer.Argument(..., help="Timetable id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Delete a timetable on the API. This cannot be undone."""
    if not yes:
        typer.confirm(f"Delete timetable {timetable_id}?", abort=True)
    try:
        _client(ctx).delete(timetable_id)
    except TimetableError as e:
        _fail(str(e))
    console.print(f"[green]Deleted timetable {timetable_id}[/green]")


def _day_label(day: str) -> str:
    try:
        return Weekday.parse(day).label
    except TimetableError:
        return day


# =============================================================================
# Main Entry Point
# =============================================================================

def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
