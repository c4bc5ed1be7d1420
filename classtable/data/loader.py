"""Load and save timetable documents as JSON files."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Union

from ..errors import ValidationError
from .models import Timetable

logger = logging.getLogger(__name__)


def load_timetable(path: Union[str, Path]) -> Timetable:
    """
    Load a timetable document from a JSON file.

    Accepts either the bare document or an API response envelope
    ({"success": true, "data": {...}}).

    Args:
        path: Path to the JSON file

    Returns:
        Validated Timetable

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValidationError: If the file isn't valid JSON or fails validation
    """
    path = Path(path)

    with open(path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"{path}: invalid JSON: {e}") from e

    if isinstance(data, dict) and "schedule" not in data and isinstance(data.get("data"), dict):
        data = data["data"]
    if not isinstance(data, dict):
        raise ValidationError(f"{path}: expected a timetable object")

    timetable = Timetable.from_wire(data)
    logger.debug("Loaded timetable %s from %s", timetable.id, path)
    return timetable


def save_timetable(timetable: Timetable, path: Union[str, Path], indent: int = 2) -> Path:
    """Write a timetable document to `path`, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(timetable.to_wire(), f, indent=indent)
        f.write("\n")
    logger.debug("Saved timetable %s to %s", timetable.id, path)
    return path
